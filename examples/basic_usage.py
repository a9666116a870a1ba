#!/usr/bin/env python3
"""Programmatic usage example.

This demonstrates using the workflow components directly:

* load settings from `.env`
* create (or reuse) a small document-publishing definition
* start an instance and walk it to its final state
* persist everything under WORKFLOW_DATA_PATH

Which actions to run is passed as arguments.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from workflow_engine.config import EngineSettings
from workflow_engine.core import Action, State, TransitionError
from workflow_engine.logging import configure_logging
from workflow_engine.service import DuplicateDefinitionName, WorkflowService
from workflow_engine.storage import DefinitionStore, InstanceStore

STATES = [
    State(id="draft", name="Draft", is_initial=True),
    State(id="review", name="In Review"),
    State(id="published", name="Published", is_final=True),
]

ACTIONS = [
    Action(id="submit", name="Submit", from_states=["draft"], to_state="review"),
    Action(id="approve", name="Approve", from_states=["review"], to_state="published"),
    Action(id="reject", name="Reject", from_states=["review"], to_state="draft", enabled=False),
]


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Drive a publishing workflow instance.")
    parser.add_argument("--name", default="Publishing", help="Definition name to create or reuse")
    parser.add_argument(
        "actions",
        nargs="*",
        default=["submit", "approve"],
        help="Action names to execute in order",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = EngineSettings()
    configure_logging(settings.log_level)

    service = WorkflowService(
        definitions=DefinitionStore(settings.definitions_file),
        instances=InstanceStore(settings.instances_file),
    )

    try:
        definition = service.create_definition(name=args.name, states=STATES, actions=ACTIONS)
    except DuplicateDefinitionName:
        wanted = args.name.casefold()
        definition = next(d for d in service.list_definitions() if d.name.casefold() == wanted)

    instance = service.start_instance(definition.id)
    print(f"Started instance {instance.id} at '{instance.current_state_id}'")

    for action_name in args.actions:
        try:
            instance = service.execute_action(instance.id, action_name)
        except TransitionError as exc:
            print(f"Rejected '{action_name}': {exc}")
            continue
        print(f"{action_name}: now at '{instance.current_state_id}'")

    print(f"History: {[h.action_name for h in instance.history]}")
    print(f"Persisted to: {settings.instances_file}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

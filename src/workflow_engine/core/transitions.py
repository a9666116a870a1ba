"""The instance transition engine.

Pure functions: no I/O, no locking. Inputs are never mutated; a successful
call returns a new instance and a rejected call raises a
:class:`~workflow_engine.core.errors.TransitionError` subclass.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from .errors import (
    ActionDisabled,
    ActionNotFound,
    DefinitionInvalid,
    IllegalTransition,
    TerminalState,
    UnknownTargetState,
)
from .models import ActionHistory, WorkflowDefinition, WorkflowInstance, utc_now


def start_instance(
    definition: WorkflowDefinition,
    *,
    instance_id: str | None = None,
    now: datetime | None = None,
) -> WorkflowInstance:
    """Create a new instance parked on the definition's initial state."""

    initial = definition.initial_state()
    if initial is None:
        # Stored definitions are not re-validated, so this is checked here too.
        raise DefinitionInvalid(definition_id=definition.id)

    ts = now or utc_now()
    return WorkflowInstance(
        id=instance_id or str(uuid.uuid4()),
        definition_id=definition.id,
        current_state_id=initial.id,
        history=[],
        created_at=ts,
        last_updated=ts,
    )


def execute_action(
    instance: WorkflowInstance,
    definition: WorkflowDefinition,
    action_name: str,
    *,
    now: datetime | None = None,
) -> WorkflowInstance:
    """Execute the action named `action_name` (case-insensitive) on `instance`.

    Checks, first failure wins:

    1. the action exists (:class:`ActionNotFound`)
    2. the action is enabled (:class:`ActionDisabled`)
    3. the current state is one of the action's `from_states`
       (:class:`IllegalTransition`)
    4. the current state is not final (:class:`TerminalState`)
    5. the target state exists (:class:`UnknownTargetState`)

    An instance on a final state usually fails at (2) or (3); (4) only fires
    for an action that lists the final state in its `from_states`.
    """

    action = definition.find_action_by_name(action_name)
    if action is None:
        raise ActionNotFound(action=action_name)

    if not action.enabled:
        raise ActionDisabled(action=action_name)

    if instance.current_state_id not in action.from_states:
        raise IllegalTransition(action=action_name, current_state_id=instance.current_state_id)

    current = definition.find_state(instance.current_state_id)
    if current is not None and current.is_final:
        raise TerminalState(action=action_name, current_state_id=instance.current_state_id)

    if definition.find_state(action.to_state) is None:
        raise UnknownTargetState(action=action_name, target_state_id=action.to_state)

    ts = now or utc_now()
    entry = ActionHistory(
        action_id=action.id,
        action_name=action.name,
        from_state_id=instance.current_state_id,
        to_state_id=action.to_state,
        executed_at=ts,
    )
    return instance.model_copy(
        update={
            "current_state_id": action.to_state,
            "last_updated": ts,
            "history": [*instance.history, entry],
        }
    )

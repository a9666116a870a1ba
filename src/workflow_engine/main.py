"""CLI entrypoint for the workflow engine.

Operates directly on the JSON stores under WORKFLOW_DATA_PATH, so it can be
used with or without the REST server running.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, ValidationError

from workflow_engine import __version__
from workflow_engine.config import EngineSettings
from workflow_engine.core import TransitionError, WorkflowDefinition, validate_definition
from workflow_engine.logging import configure_logging
from workflow_engine.server.models import CreateDefinitionRequest
from workflow_engine.service import (
    DefinitionRejected,
    WorkflowService,
    WorkflowServiceError,
)
from workflow_engine.storage import DefinitionStore, InstanceStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_INPUT = 2
EXIT_REJECTED = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-engine",
        description="Define workflows and drive their instances from the command line",
    )
    parser.add_argument(
        "--version", action="version", version=f"workflow-engine {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser(
        "validate", help="Validate a definition file without storing it"
    )
    validate.add_argument("file", type=Path, help="JSON file with name, states and actions")

    create = subparsers.add_parser("create-definition", help="Validate and store a definition")
    create.add_argument("file", type=Path, help="JSON file with name, states and actions")

    subparsers.add_parser("list-definitions", help="List stored definitions")

    start = subparsers.add_parser("start-instance", help="Start an instance of a definition")
    start.add_argument("--definition-id", required=True)

    execute = subparsers.add_parser("execute", help="Execute an action on an instance")
    execute.add_argument("--instance-id", required=True)
    execute.add_argument("--action", required=True, help="Action name (case-insensitive)")

    check = subparsers.add_parser(
        "check", help="List every reason an action could not run on an instance right now"
    )
    check.add_argument("--instance-id", required=True)
    check.add_argument("--action-id", required=True)

    show = subparsers.add_parser("show-instance", help="Print one instance with its history")
    show.add_argument("instance_id")

    list_instances = subparsers.add_parser("list-instances", help="List stored instances")
    list_instances.add_argument(
        "--definition-id", default=None, help="Only instances of this definition"
    )

    return parser


def _load_request(path: Path) -> CreateDefinitionRequest:
    raw = json.loads(path.read_text(encoding="utf-8"))
    return CreateDefinitionRequest.model_validate(raw)


def _emit(value: BaseModel | list[BaseModel]) -> None:
    if isinstance(value, list):
        print(json.dumps([v.model_dump(mode="json") for v in value], indent=2))
    else:
        print(value.model_dump_json(indent=2))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EngineSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_BAD_INPUT

    configure_logging(settings.log_level)

    service = WorkflowService(
        definitions=DefinitionStore(settings.definitions_file),
        instances=InstanceStore(settings.instances_file),
    )

    try:
        if args.command == "validate":
            req = _load_request(args.file)
            result = validate_definition(
                WorkflowDefinition(
                    id="",
                    name=req.name,
                    states=req.states,
                    actions=req.actions,
                    description=req.description,
                )
            )
            _emit(result)
            return EXIT_OK if result.is_valid else EXIT_REJECTED

        if args.command == "create-definition":
            req = _load_request(args.file)
            definition = service.create_definition(
                name=req.name,
                states=req.states,
                actions=req.actions,
                description=req.description,
            )
            _emit(definition)
            return EXIT_OK

        if args.command == "list-definitions":
            _emit(service.list_definitions())
            return EXIT_OK

        if args.command == "start-instance":
            _emit(service.start_instance(args.definition_id))
            return EXIT_OK

        if args.command == "execute":
            _emit(service.execute_action(args.instance_id, args.action))
            return EXIT_OK

        if args.command == "check":
            result = service.check_action(args.instance_id, args.action_id)
            _emit(result)
            return EXIT_OK if result.is_valid else EXIT_REJECTED

        if args.command == "show-instance":
            _emit(service.get_instance(args.instance_id))
            return EXIT_OK

        if args.command == "list-instances":
            if args.definition_id:
                _emit(service.list_instances_by_definition(args.definition_id))
            else:
                _emit(service.list_instances())
            return EXIT_OK

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_BAD_INPUT

    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("Could not read definition file", extra={"error": str(e)})
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    except DefinitionRejected as e:
        print(str(e), file=sys.stderr)
        for message in e.errors:
            print(f"  - {message}", file=sys.stderr)
        return EXIT_REJECTED

    except (TransitionError, WorkflowServiceError) as e:
        print(str(e), file=sys.stderr)
        return EXIT_REJECTED

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())

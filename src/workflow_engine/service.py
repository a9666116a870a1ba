"""Workflow orchestration over the core and the stores.

The service owns the load -> decide -> persist cycle:
- definitions are checked for name clashes, validated, then saved
- instances are started and advanced by the transition engine, then saved

Rules live in :mod:`workflow_engine.core`; this module only wires them to
storage and logs what happened.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from workflow_engine.core import (
    Action,
    State,
    TransitionError,
    ValidationResult,
    WorkflowDefinition,
    WorkflowInstance,
    execute_action,
    start_instance,
    validate_action_execution,
    validate_definition,
)
from workflow_engine.core.models import utc_now
from workflow_engine.storage import DefinitionStore, InstanceStore

logger = logging.getLogger(__name__)


class WorkflowServiceError(Exception):
    """Base class for orchestration failures outside the core rules."""


@dataclass(eq=False)
class DefinitionNotFound(WorkflowServiceError):
    definition_id: str

    def __str__(self) -> str:
        return "Workflow definition not found"


@dataclass(eq=False)
class InstanceNotFound(WorkflowServiceError):
    instance_id: str

    def __str__(self) -> str:
        return "Workflow instance not found"


@dataclass(eq=False)
class DuplicateDefinitionName(WorkflowServiceError):
    """Raised when a definition with the same name (any casing) already exists."""

    name: str

    def __str__(self) -> str:
        return f"Workflow definition with name '{self.name}' already exists"


@dataclass(eq=False)
class DefinitionRejected(WorkflowServiceError):
    """Raised when a proposed definition fails validation."""

    errors: tuple[str, ...]

    def __str__(self) -> str:
        return "Validation failed"


class WorkflowService:
    """High-level, testable workflow orchestration."""

    def __init__(self, *, definitions: DefinitionStore, instances: InstanceStore) -> None:
        self._definitions = definitions
        self._instances = instances

    # Definitions

    def create_definition(
        self,
        *,
        name: str,
        states: list[State],
        actions: list[Action],
        description: str | None = None,
    ) -> WorkflowDefinition:
        # Held across check-then-save so two clients can't both claim one name.
        with self._definitions.locked(f"name:{name.casefold()}"):
            if self._definitions.name_exists(name):
                raise DuplicateDefinitionName(name)

            definition = WorkflowDefinition(
                id=str(uuid.uuid4()),
                name=name,
                states=states,
                actions=actions,
                description=description,
                created_at=utc_now(),
            )

            result = validate_definition(definition)
            if not result.is_valid:
                logger.info(
                    "Definition rejected",
                    extra={"definition_name": name, "errors": result.errors},
                )
                raise DefinitionRejected(tuple(result.errors))

            self._definitions.save(definition)

        logger.info(
            "Definition created",
            extra={
                "definition_id": definition.id,
                "definition_name": definition.name,
                "states": len(definition.states),
                "actions": len(definition.actions),
            },
        )
        return definition

    def get_definition(self, definition_id: str) -> WorkflowDefinition:
        definition = self._definitions.get(definition_id)
        if definition is None:
            raise DefinitionNotFound(definition_id)
        return definition

    def list_definitions(self) -> list[WorkflowDefinition]:
        return self._definitions.list()

    # Instances

    def start_instance(self, definition_id: str) -> WorkflowInstance:
        definition = self.get_definition(definition_id)
        instance = start_instance(definition)
        self._instances.save(instance)

        logger.info(
            "Instance started",
            extra={
                "instance_id": instance.id,
                "definition_id": definition.id,
                "state_id": instance.current_state_id,
            },
        )
        return instance

    def get_instance(self, instance_id: str) -> WorkflowInstance:
        instance = self._instances.get(instance_id)
        if instance is None:
            raise InstanceNotFound(instance_id)
        return instance

    def list_instances(self) -> list[WorkflowInstance]:
        return self._instances.list()

    def list_instances_by_definition(self, definition_id: str) -> list[WorkflowInstance]:
        return self._instances.list_by_definition(definition_id)

    def execute_action(self, instance_id: str, action_name: str) -> WorkflowInstance:
        with self._instances.locked(instance_id):
            instance = self.get_instance(instance_id)
            definition = self.get_definition(instance.definition_id)

            try:
                updated = execute_action(instance, definition, action_name)
            except TransitionError as e:
                logger.info(
                    "Action rejected",
                    extra={
                        "instance_id": instance_id,
                        "action_name": action_name,
                        "state_id": instance.current_state_id,
                        "reason": e.code,
                    },
                )
                raise

            self._instances.save(updated)

        entry = updated.history[-1]
        logger.info(
            "Action executed",
            extra={
                "instance_id": instance_id,
                "action_id": entry.action_id,
                "from_state_id": entry.from_state_id,
                "to_state_id": entry.to_state_id,
            },
        )
        return updated

    def check_action(self, instance_id: str, action_id: str) -> ValidationResult:
        """Report every reason `action_id` could not run right now, without running it."""

        instance = self.get_instance(instance_id)
        definition = self.get_definition(instance.definition_id)
        return validate_action_execution(instance, definition, action_id)

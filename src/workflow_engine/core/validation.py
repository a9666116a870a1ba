"""Structural validation for definitions and action requests.

Both validators accumulate every violated rule instead of stopping at the
first one, so a client can fix all problems from a single response. They
never raise for an invalid input; the result says whether it is acceptable.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, Field

from .models import WorkflowDefinition, WorkflowInstance


class ValidationResult(BaseModel):
    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False


def _duplicates(ids: Iterable[str]) -> list[str]:
    # First-seen order keeps messages stable across runs.
    counts = Counter(ids)
    return [value for value, count in counts.items() if count > 1]


def validate_definition(definition: WorkflowDefinition) -> ValidationResult:
    result = ValidationResult()

    if not definition.states:
        result.add_error("Workflow definition must have at least one state")

    state_ids = [state.id for state in definition.states]
    duplicate_states = _duplicates(state_ids)
    if duplicate_states:
        result.add_error(f"Duplicate state IDs found: {', '.join(duplicate_states)}")

    initial_count = sum(1 for state in definition.states if state.is_initial)
    if initial_count == 0:
        result.add_error("Workflow definition must have exactly one initial state")
    elif initial_count > 1:
        result.add_error("Workflow definition cannot have more than one initial state")

    duplicate_actions = _duplicates(action.id for action in definition.actions)
    if duplicate_actions:
        result.add_error(f"Duplicate action IDs found: {', '.join(duplicate_actions)}")

    known_states = set(state_ids)
    for action in definition.actions:
        for from_state in action.from_states:
            if from_state not in known_states:
                result.add_error(
                    f"Action '{action.id}' references unknown fromState '{from_state}'"
                )

        if action.to_state not in known_states:
            result.add_error(f"Action '{action.id}' references unknown toState '{action.to_state}'")

        if not action.from_states:
            result.add_error(f"Action '{action.id}' must have at least one fromState")

    return result


def validate_action_execution(
    instance: WorkflowInstance, definition: WorkflowDefinition, action_id: str
) -> ValidationResult:
    """Report every precondition that would block executing `action_id` now.

    Unlike :func:`workflow_engine.core.transitions.execute_action` this selects
    the action by id and does not stop at the first failure (except for a
    missing action, where nothing else can be checked).
    """

    result = ValidationResult()

    action = definition.find_action(action_id)
    if action is None:
        result.add_error(f"Action '{action_id}' not found in workflow definition")
        return result

    if not action.enabled:
        result.add_error(f"Action '{action_id}' is disabled")

    if instance.current_state_id not in action.from_states:
        result.add_error(
            f"Action '{action_id}' cannot be executed from current state "
            f"'{instance.current_state_id}'"
        )

    current = definition.find_state(instance.current_state_id)
    if current is not None and current.is_final:
        result.add_error(f"Cannot execute actions on final state '{instance.current_state_id}'")

    return result

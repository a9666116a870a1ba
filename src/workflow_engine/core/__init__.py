"""Storage-agnostic workflow core.

This package holds the two pieces every other layer delegates to:
- the definition validator (aggregate, never raises)
- the transition engine (fail-fast, raises on illegal requests)

Nothing here performs I/O or locking.
"""

from .errors import (
    ActionDisabled,
    ActionNotFound,
    DefinitionInvalid,
    IllegalTransition,
    TerminalState,
    TransitionError,
    UnknownTargetState,
)
from .models import Action, ActionHistory, State, WorkflowDefinition, WorkflowInstance
from .transitions import execute_action, start_instance
from .validation import ValidationResult, validate_action_execution, validate_definition

__all__ = [
    "Action",
    "ActionDisabled",
    "ActionHistory",
    "ActionNotFound",
    "DefinitionInvalid",
    "IllegalTransition",
    "State",
    "TerminalState",
    "TransitionError",
    "UnknownTargetState",
    "ValidationResult",
    "WorkflowDefinition",
    "WorkflowInstance",
    "execute_action",
    "start_instance",
    "validate_action_execution",
    "validate_definition",
]

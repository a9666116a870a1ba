"""Fail-fast rejections raised by the transition engine.

Each error carries the identifiers involved so callers can rebuild the
message (or a structured response) without re-deriving context. None of them
are transient: retrying the same request against the same data fails the
same way.
"""

from __future__ import annotations

from dataclasses import dataclass


class TransitionError(ValueError):
    """Base class for every rejected start/execute request."""

    code: str = "transition_error"


@dataclass(eq=False)
class DefinitionInvalid(TransitionError):
    """The definition cannot be started (no initial state)."""

    definition_id: str
    code = "definition_invalid"

    def __str__(self) -> str:
        return "No initial state found in workflow definition"


@dataclass(eq=False)
class ActionNotFound(TransitionError):
    action: str
    code = "action_not_found"

    def __str__(self) -> str:
        return f"Action '{self.action}' not found in workflow definition"


@dataclass(eq=False)
class ActionDisabled(TransitionError):
    action: str
    code = "action_disabled"

    def __str__(self) -> str:
        return f"Action '{self.action}' is currently disabled"


@dataclass(eq=False)
class IllegalTransition(TransitionError):
    action: str
    current_state_id: str
    code = "illegal_transition"

    def __str__(self) -> str:
        return (
            f"Action '{self.action}' cannot be executed from current state "
            f"'{self.current_state_id}'"
        )


@dataclass(eq=False)
class TerminalState(TransitionError):
    action: str
    current_state_id: str
    code = "terminal_state"

    def __str__(self) -> str:
        return f"Cannot execute actions on final state '{self.current_state_id}'"


@dataclass(eq=False)
class UnknownTargetState(TransitionError):
    action: str
    target_state_id: str
    code = "unknown_target_state"

    def __str__(self) -> str:
        return f"Action '{self.action}' references unknown target state '{self.target_state_id}'"

"""Value objects for workflow definitions and running instances.

Records are persisted with snake_case keys. Inputs additionally accept the
camelCase names used by existing API clients (`isInitial`, `fromStates`, ...).
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class State(BaseModel):
    """A node of a workflow definition."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(default="")
    is_initial: bool = Field(
        default=False, validation_alias=AliasChoices("is_initial", "isInitial")
    )
    is_final: bool = Field(default=False, validation_alias=AliasChoices("is_final", "isFinal"))
    description: str | None = Field(default=None)


class Action(BaseModel):
    """A guarded transition from any of `from_states` into `to_state`."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(default="")
    from_states: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("from_states", "fromStates")
    )
    to_state: str = Field(default="", validation_alias=AliasChoices("to_state", "toState"))
    enabled: bool = Field(default=True)
    description: str | None = Field(default=None)


class WorkflowDefinition(BaseModel):
    """The static description of a workflow.

    Definitions are immutable once accepted; nothing in this package updates
    or deletes one.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    states: list[State] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    description: str | None = Field(default=None)
    created_at: datetime = Field(
        default_factory=utc_now, validation_alias=AliasChoices("created_at", "createdAt")
    )

    def find_state(self, state_id: str) -> State | None:
        for state in self.states:
            if state.id == state_id:
                return state
        return None

    def initial_state(self) -> State | None:
        for state in self.states:
            if state.is_initial:
                return state
        return None

    def find_action(self, action_id: str) -> Action | None:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    def find_action_by_name(self, action_name: str) -> Action | None:
        """Case-insensitive lookup; the first matching action wins."""

        wanted = action_name.casefold()
        for action in self.actions:
            if action.name.casefold() == wanted:
                return action
        return None


class ActionHistory(BaseModel):
    """One executed transition. `action_name` is a snapshot, not a reference."""

    model_config = ConfigDict(populate_by_name=True)

    action_id: str = Field(validation_alias=AliasChoices("action_id", "actionId"))
    action_name: str = Field(validation_alias=AliasChoices("action_name", "actionName"))
    from_state_id: str = Field(validation_alias=AliasChoices("from_state_id", "fromStateId"))
    to_state_id: str = Field(validation_alias=AliasChoices("to_state_id", "toStateId"))
    executed_at: datetime = Field(
        default_factory=utc_now, validation_alias=AliasChoices("executed_at", "executedAt")
    )


class WorkflowInstance(BaseModel):
    """A single running execution of a definition.

    The definition is referenced by id only and must be looked up through the
    definition store when needed.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    definition_id: str = Field(validation_alias=AliasChoices("definition_id", "definitionId"))
    current_state_id: str = Field(
        validation_alias=AliasChoices("current_state_id", "currentStateId")
    )
    history: list[ActionHistory] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=utc_now, validation_alias=AliasChoices("created_at", "createdAt")
    )
    last_updated: datetime = Field(
        default_factory=utc_now, validation_alias=AliasChoices("last_updated", "lastUpdated")
    )

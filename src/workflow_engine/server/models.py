"""Pydantic models for the REST server."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import AliasChoices, BaseModel, Field

from workflow_engine.core.models import Action, State

T = TypeVar("T")


class CreateDefinitionRequest(BaseModel):
    name: str = Field(min_length=1)
    states: list[State] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    description: str | None = None


class ExecuteActionRequest(BaseModel):
    action_name: str = Field(validation_alias=AliasChoices("action_name", "actionName"))


class CheckActionRequest(BaseModel):
    action_id: str = Field(validation_alias=AliasChoices("action_id", "actionId"))


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every `/api` endpoint."""

    success: bool
    data: T | None = None
    error: str | None = None
    errors: list[str] | None = None

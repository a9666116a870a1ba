"""Test configuration and fixtures."""

import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from workflow_engine.core import Action, State, WorkflowDefinition
from workflow_engine.service import WorkflowService
from workflow_engine.storage import DefinitionStore, InstanceStore


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """configure_logging() swaps root handlers; undo it after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Provide a temporary data directory."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def publishing_states() -> list[State]:
    """draft (initial) -> review -> published (final)."""
    return [
        State(id="draft", name="Draft", is_initial=True),
        State(id="review", name="In Review"),
        State(id="published", name="Published", is_final=True),
    ]


@pytest.fixture
def publishing_actions() -> list[Action]:
    """submit and approve are enabled; reject is disabled."""
    return [
        Action(id="submit", name="Submit", from_states=["draft"], to_state="review"),
        Action(id="approve", name="Approve", from_states=["review"], to_state="published"),
        Action(
            id="reject",
            name="Reject",
            from_states=["review"],
            to_state="draft",
            enabled=False,
        ),
    ]


@pytest.fixture
def publishing_definition(
    publishing_states: list[State], publishing_actions: list[Action]
) -> WorkflowDefinition:
    """Provide the document publishing workflow used across tests."""
    return WorkflowDefinition(
        id="def-publishing",
        name="Publishing",
        states=publishing_states,
        actions=publishing_actions,
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def definition_store(data_dir: Path) -> DefinitionStore:
    return DefinitionStore(data_dir / "definitions.json")


@pytest.fixture
def instance_store(data_dir: Path) -> InstanceStore:
    return InstanceStore(data_dir / "instances.json")


@pytest.fixture
def service(definition_store: DefinitionStore, instance_store: InstanceStore) -> WorkflowService:
    """Provide a service backed by temporary JSON stores."""
    return WorkflowService(definitions=definition_store, instances=instance_store)

"""Unit tests for the JSON-file definition and instance stores."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import pytest

from workflow_engine.core import WorkflowDefinition, start_instance
from workflow_engine.storage import DefinitionStore, InstanceStore, KeyedLocks


def test_definition_store_roundtrip(
    data_dir: Path, publishing_definition: WorkflowDefinition
) -> None:
    path = data_dir / "definitions.json"
    store = DefinitionStore(path)
    assert store.list() == []

    store.save(publishing_definition)

    reloaded = DefinitionStore(path)
    loaded = reloaded.get("def-publishing")
    assert loaded == publishing_definition
    assert [s.id for s in loaded.states] == ["draft", "review", "published"]
    assert loaded.actions[2].enabled is False


def test_definition_store_writes_snake_case_json(
    definition_store: DefinitionStore, publishing_definition: WorkflowDefinition
) -> None:
    definition_store.save(publishing_definition)

    raw = json.loads(definition_store.path.read_text(encoding="utf-8"))
    assert raw[0]["id"] == "def-publishing"
    assert raw[0]["created_at"] == "2025-01-01T00:00:00Z"
    assert raw[0]["states"][0] == {
        "id": "draft",
        "name": "Draft",
        "is_initial": True,
        "is_final": False,
        "description": None,
    }
    assert raw[0]["actions"][0]["from_states"] == ["draft"]
    assert raw[0]["actions"][0]["to_state"] == "review"


def test_definition_name_exists_is_case_insensitive(
    definition_store: DefinitionStore, publishing_definition: WorkflowDefinition
) -> None:
    definition_store.save(publishing_definition)

    assert definition_store.name_exists("Publishing")
    assert definition_store.name_exists("PUBLISHING")
    assert not definition_store.name_exists("Onboarding")


def test_save_replaces_record_with_same_id(
    instance_store: InstanceStore, publishing_definition: WorkflowDefinition
) -> None:
    instance = start_instance(publishing_definition, instance_id="i-1")
    instance_store.save(instance)

    moved = instance.model_copy(update={"current_state_id": "review"})
    instance_store.save(moved)

    stored = instance_store.list()
    assert len(stored) == 1
    assert stored[0].current_state_id == "review"


def test_instances_by_definition(
    instance_store: InstanceStore, publishing_definition: WorkflowDefinition
) -> None:
    other = publishing_definition.model_copy(update={"id": "def-other", "name": "Other"})
    instance_store.save(start_instance(publishing_definition, instance_id="a"))
    instance_store.save(start_instance(other, instance_id="b"))
    instance_store.save(start_instance(publishing_definition, instance_id="c"))

    assert [i.id for i in instance_store.list_by_definition("def-publishing")] == ["a", "c"]
    assert [i.id for i in instance_store.list_by_definition("def-other")] == ["b"]
    assert instance_store.list_by_definition("nope") == []


def test_missing_record_returns_none(instance_store: InstanceStore) -> None:
    assert instance_store.get("missing") is None


def test_corrupt_store_file_reads_as_empty(data_dir: Path) -> None:
    path = data_dir / "instances.json"
    path.write_text("{not json", encoding="utf-8")

    assert InstanceStore(path).list() == []


def test_unexpected_shape_reads_as_empty(data_dir: Path) -> None:
    path = data_dir / "definitions.json"
    path.write_text(json.dumps({"id": "x"}), encoding="utf-8")

    assert DefinitionStore(path).list() == []


def test_malformed_records_read_as_empty(
    data_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = data_dir / "definitions.json"
    path.write_text(json.dumps([{"name": "no id"}]), encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="workflow_engine.storage.json_store"):
        store = DefinitionStore(path)
        assert store.list() == []
        assert store.get("no id") is None
        assert store.name_exists("no id") is False

    assert "malformed records" in caplog.text


def test_store_accepts_camel_case_records(data_dir: Path) -> None:
    path = data_dir / "instances.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "i-1",
                    "definitionId": "d-1",
                    "currentStateId": "review",
                    "history": [
                        {
                            "actionId": "submit",
                            "actionName": "Submit",
                            "fromStateId": "draft",
                            "toStateId": "review",
                            "executedAt": "2025-01-01T10:00:00Z",
                        }
                    ],
                    "createdAt": "2025-01-01T09:00:00Z",
                    "lastUpdated": "2025-01-01T10:00:00Z",
                }
            ]
        ),
        encoding="utf-8",
    )

    instance = InstanceStore(path).get("i-1")

    assert instance is not None
    assert instance.definition_id == "d-1"
    assert instance.history[0].to_state_id == "review"


def test_keyed_locks_serialize_same_key() -> None:
    locks = KeyedLocks()
    inside = 0
    max_inside = 0
    counter_guard = threading.Lock()

    def worker() -> None:
        nonlocal inside, max_inside
        for _ in range(50):
            with locks.hold("same"):
                with counter_guard:
                    inside += 1
                    max_inside = max(max_inside, inside)
                with counter_guard:
                    inside -= 1

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert max_inside == 1


def test_keyed_locks_are_released_after_use() -> None:
    locks = KeyedLocks()

    for key in ("a", "b", "c"):
        with locks.hold(key):
            assert len(locks) == 1

    assert len(locks) == 0


def test_keyed_locks_survive_while_a_waiter_remains() -> None:
    locks = KeyedLocks()
    entered = threading.Event()
    release = threading.Event()
    waiter_done = threading.Event()

    def holder() -> None:
        with locks.hold("k"):
            entered.set()
            release.wait(timeout=5)

    def waiter() -> None:
        with locks.hold("k"):
            pass
        waiter_done.set()

    first = threading.Thread(target=holder)
    first.start()
    assert entered.wait(timeout=5)
    second = threading.Thread(target=waiter)
    second.start()

    assert not waiter_done.wait(timeout=0.1)
    release.set()
    first.join()
    second.join()

    assert waiter_done.is_set()
    assert len(locks) == 0


def test_lock_released_when_body_raises() -> None:
    locks = KeyedLocks()

    with pytest.raises(RuntimeError):
        with locks.hold("k"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    with locks.hold("k"):
        pass

"""JSON-file backed stores for workflow definitions and instances.

Each store keeps one JSON list per file and rewrites the whole file on save.
That is fine for the local, single-process deployments this targets; a
database would replace it if that ever changes.

Locking is two-level:
- a store-wide lock serializes every file read/write
- `locked(key)` hands out one lock per entity key, so callers can hold it
  across a load-modify-save cycle and never lose a concurrent update
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from workflow_engine.core.models import WorkflowDefinition, WorkflowInstance

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass
class KeyedLocks:
    """One lock per key, kept only while some caller holds or waits on it."""

    _locks: dict[str, threading.Lock] = field(default_factory=dict)
    _holders: dict[str, int] = field(default_factory=dict)
    _guard: threading.Lock = field(default_factory=threading.Lock)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._holders[key] = self._holders.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._holders[key] -= 1
                if self._holders[key] == 0:
                    del self._holders[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class _JsonRecordStore(Generic[RecordT]):
    model: type[RecordT]
    kind: str

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._entity_locks = KeyedLocks()

    @contextmanager
    def locked(self, key: str) -> Iterator[None]:
        with self._entity_locks.hold(key):
            yield

    def _load_unlocked(self) -> list[RecordT]:
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(
                "Store file is not valid JSON; treating as empty",
                extra={"path": str(self.path), "kind": self.kind},
            )
            return []

        if raw is None:
            return []

        if not isinstance(raw, list):
            logger.warning(
                "Store file has unexpected shape; treating as empty",
                extra={"path": str(self.path), "kind": self.kind},
            )
            return []

        try:
            return [self.model.model_validate(item) for item in raw]
        except ValidationError as e:
            logger.warning(
                "Store file has malformed records; treating as empty",
                extra={"path": str(self.path), "kind": self.kind, "error": str(e)},
            )
            return []

    def _save_unlocked(self, records: list[RecordT]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(mode="json") for r in records]
        self.path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )

    def list(self) -> list[RecordT]:
        with self._lock:
            return self._load_unlocked()

    def get(self, record_id: str) -> RecordT | None:
        with self._lock:
            for record in self._load_unlocked():
                if getattr(record, "id") == record_id:
                    return record
            return None

    def save(self, record: RecordT) -> None:
        """Insert `record`, or replace the stored record with the same id."""

        record_id = getattr(record, "id")
        with self._lock:
            records = self._load_unlocked()
            for idx, existing in enumerate(records):
                if getattr(existing, "id") == record_id:
                    records[idx] = record
                    break
            else:
                records.append(record)
            self._save_unlocked(records)


class DefinitionStore(_JsonRecordStore[WorkflowDefinition]):
    model = WorkflowDefinition
    kind = "definition"

    def name_exists(self, name: str) -> bool:
        wanted = name.casefold()
        return any(d.name.casefold() == wanted for d in self.list())


class InstanceStore(_JsonRecordStore[WorkflowInstance]):
    model = WorkflowInstance
    kind = "instance"

    def list_by_definition(self, definition_id: str) -> list[WorkflowInstance]:
        return [i for i in self.list() if i.definition_id == definition_id]

"""Persistence collaborators for definitions and instances."""

from workflow_engine.storage.json_store import DefinitionStore, InstanceStore, KeyedLocks

__all__ = ["DefinitionStore", "InstanceStore", "KeyedLocks"]

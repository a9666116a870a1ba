"""Configurable Workflow Engine.

Clients define workflows as states plus guarded actions, start instances of
them, and drive each instance forward one action at a time:
- definitions are validated before they are accepted
- transitions are checked against the definition on every execute
- every executed action is recorded in the instance history
"""

__version__ = "1.0.0"

from workflow_engine.config import EngineSettings

__all__ = ["__version__", "EngineSettings"]

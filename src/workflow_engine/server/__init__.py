"""FastAPI server adapter for the workflow engine.

Design intent:
- Keep workflow rules in `workflow_engine.core` and orchestration in
  `workflow_engine.service`
- Keep server-specific concerns (routing, CORS, response envelopes) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from workflow_engine.server.app import create_app

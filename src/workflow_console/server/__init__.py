"""FastAPI adapter exposing the workflow console services over REST.

Design intent:
- Keep graph, lifecycle and analytics logic in the core packages
- Keep server-specific concerns (routing, CORS, error notifications) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from workflow_console.server.app import create_app

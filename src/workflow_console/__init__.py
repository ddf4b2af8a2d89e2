"""Workflow console.

Authoring, publication and monitoring of workflows held by a remote workflow
store:
- a workflow graph model with a persisted payload format
- definition and instance lifecycles as explicit state machines
- dashboard analytics over instance snapshots
- a CLI and a REST API over the same services
"""

__version__ = "0.1.0"

from workflow_console.config import ConsoleSettings

__all__ = ["__version__", "ConsoleSettings"]

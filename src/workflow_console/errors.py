"""Error taxonomy shared by the graph model, lifecycles, services and surfaces.

Local errors (`InvalidReference`, `MalformedPayload`, `IllegalTransitionError`,
`DefinitionNotActive`) are raised before any remote call is made.
`RemoteOperationFailed` wraps every failure of the remote workflow store.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workflow_console.graph.model import GraphViolation


class WorkflowConsoleError(Exception):
    """Base class for all errors raised by this package."""

    code = "WORKFLOW_CONSOLE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidReference(WorkflowConsoleError):
    """An edge endpoint (or another node reference) does not exist in the graph."""

    code = "INVALID_REFERENCE"

    def __init__(
        self,
        message: str,
        *,
        node_ids: Sequence[str] = (),
        violations: Sequence[GraphViolation] = (),
    ) -> None:
        super().__init__(message)
        self.node_ids = list(node_ids)
        self.violations = list(violations)


class MalformedPayload(WorkflowConsoleError):
    """A persisted graph payload (or an opaque JSON blob) could not be decoded."""

    code = "MALFORMED_PAYLOAD"


class IllegalTransitionError(WorkflowConsoleError, ValueError):
    """A lifecycle operation is not defined from the current status."""

    code = "ILLEGAL_TRANSITION"

    def __init__(self, message: str, *, status: str, action: str) -> None:
        super().__init__(message)
        self.status = status
        self.action = action


class TerminalStateViolation(IllegalTransitionError):
    """A lifecycle operation was attempted from a terminal status."""

    code = "TERMINAL_STATE"


class DefinitionNotActive(WorkflowConsoleError):
    """An instance start was attempted against a definition that is not ACTIVE."""

    code = "DEFINITION_NOT_ACTIVE"

    def __init__(self, definition_id: str, status: str) -> None:
        super().__init__(
            f"Workflow definition {definition_id} is {status}; only ACTIVE definitions "
            "can start instances"
        )
        self.definition_id = definition_id
        self.status = status


class RemoteOperationFailed(WorkflowConsoleError):
    """A call to the remote workflow store failed (network, HTTP status or body shape)."""

    code = "REMOTE_OPERATION_FAILED"

    def __init__(self, operation: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

"""Remote workflow store: record models, the store protocol and its REST client."""

from workflow_console.store.client import WorkflowStoreClient
from workflow_console.store.models import (
    DefinitionDraft,
    Page,
    WorkflowDefinition,
    WorkflowInstance,
)
from workflow_console.store.protocol import WorkflowStore

__all__ = [
    "DefinitionDraft",
    "Page",
    "WorkflowDefinition",
    "WorkflowInstance",
    "WorkflowStore",
    "WorkflowStoreClient",
]

"""The remote workflow store as seen by the services.

Services receive a `WorkflowStore` explicitly instead of reaching for a shared
client, so tests and alternative transports can substitute their own.
"""

from __future__ import annotations

from typing import Protocol

from workflow_console.lifecycle.definition import DefinitionStatus
from workflow_console.lifecycle.instance import InstanceStatus
from workflow_console.store.models import (
    DefinitionDraft,
    Page,
    WorkflowDefinition,
    WorkflowInstance,
)


class WorkflowStore(Protocol):
    # Definitions

    def list_definitions(self, *, page: int = 0, size: int = 20) -> Page[WorkflowDefinition]: ...

    def get_definition(self, definition_id: str) -> WorkflowDefinition: ...

    def get_definition_by_name_and_version(self, name: str, version: int) -> WorkflowDefinition: ...

    def get_latest_definition(self, name: str) -> WorkflowDefinition: ...

    def list_definitions_by_name(self, name: str) -> list[WorkflowDefinition]: ...

    def list_definitions_by_status(self, status: DefinitionStatus) -> list[WorkflowDefinition]: ...

    def create_definition(self, draft: DefinitionDraft) -> WorkflowDefinition: ...

    def update_definition(
        self, definition_id: str, draft: DefinitionDraft
    ) -> WorkflowDefinition: ...

    def delete_definition(self, definition_id: str) -> None: ...

    def activate_definition(self, definition_id: str) -> WorkflowDefinition: ...

    def deactivate_definition(self, definition_id: str) -> WorkflowDefinition: ...

    # Instances

    def list_instances(self, *, page: int = 0, size: int = 20) -> Page[WorkflowInstance]: ...

    def get_instance(self, instance_id: str) -> WorkflowInstance: ...

    def list_instances_by_definition(self, definition_id: str) -> list[WorkflowInstance]: ...

    def list_instances_by_status(self, status: InstanceStatus) -> list[WorkflowInstance]: ...

    def list_running_instances(self) -> list[WorkflowInstance]: ...

    def create_instance(self, instance: dict[str, object]) -> WorkflowInstance: ...

    def start_instance(
        self, definition_id: str, instance_name: str, context: str | None = None
    ) -> WorkflowInstance: ...

    def update_instance_status(
        self, instance_id: str, status: InstanceStatus
    ) -> WorkflowInstance: ...

    def complete_instance(self, instance_id: str) -> WorkflowInstance: ...

    def cancel_instance(self, instance_id: str) -> WorkflowInstance: ...

    def suspend_instance(self, instance_id: str) -> WorkflowInstance: ...

    def resume_instance(self, instance_id: str) -> WorkflowInstance: ...

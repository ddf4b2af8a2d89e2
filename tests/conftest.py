"""Test configuration and fixtures."""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from workflow_console.errors import RemoteOperationFailed
from workflow_console.graph.model import NodeKind, Position, WorkflowGraph
from workflow_console.graph.serializer import encode_definition
from workflow_console.lifecycle.definition import DefinitionStatus
from workflow_console.lifecycle.instance import InstanceStatus
from workflow_console.store.models import (
    DefinitionDraft,
    Page,
    WorkflowDefinition,
    WorkflowInstance,
)

T0 = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)


class FakeStore:
    """In-memory stand-in for the remote workflow store.

    Mirrors the store's behaviour closely enough for service and API tests:
    missing records raise a 404 `RemoteOperationFailed`, and transition
    endpoints apply whatever they are asked to without checking lifecycles.
    """

    def __init__(self) -> None:
        self.definitions: dict[str, WorkflowDefinition] = {}
        self.instances: dict[str, WorkflowInstance] = {}
        self.calls: list[str] = []
        self.failures: dict[str, RemoteOperationFailed] = {}
        self._next_id = 1

    # Seeding helpers

    def _new_id(self, prefix: str) -> str:
        value = f"{prefix}-{self._next_id}"
        self._next_id += 1
        return value

    def add_definition(
        self,
        name: str = "Expense approval",
        *,
        status: DefinitionStatus = DefinitionStatus.DRAFT,
        version: int = 1,
        graph: WorkflowGraph | None = None,
        description: str | None = None,
    ) -> WorkflowDefinition:
        definition = WorkflowDefinition(
            id=self._new_id("def"),
            name=name,
            description=description,
            version=version,
            status=status,
            definition=encode_definition(graph) if graph is not None else "{}",
            created_at=T0,
            updated_at=T0,
        )
        self.definitions[definition.id] = definition
        return definition

    def add_instance(
        self,
        definition_id: str,
        *,
        status: InstanceStatus = InstanceStatus.RUNNING,
        name: str = "run",
        hours: float | None = None,
    ) -> WorkflowInstance:
        completed_at = T0 + timedelta(hours=hours) if hours is not None else None
        instance = WorkflowInstance(
            id=self._new_id("inst"),
            name=name,
            definition_ref=definition_id,
            status=status,
            context="{}",
            started_at=T0,
            completed_at=completed_at,
        )
        self.instances[instance.id] = instance
        return instance

    def fail(self, method: str, status_code: int | None = 500) -> None:
        """Make the next calls to `method` raise `RemoteOperationFailed`."""

        self.failures[method] = RemoteOperationFailed(
            method.replace("_", " "), f"HTTP {status_code} boom", status_code=status_code
        )

    def _record(self, method: str) -> None:
        self.calls.append(method)
        failure = self.failures.get(method)
        if failure is not None:
            raise failure

    @staticmethod
    def _not_found(operation: str) -> RemoteOperationFailed:
        return RemoteOperationFailed(operation, "HTTP 404 Not Found", status_code=404)

    @staticmethod
    def _page(items: list[Any], page: int, size: int) -> Page[Any]:
        start = page * size
        total_pages = max(1, math.ceil(len(items) / size))
        return Page(
            content=items[start : start + size],
            total_elements=len(items),
            total_pages=total_pages,
            number=page,
            size=size,
            last=page + 1 >= total_pages,
        )

    # Definitions

    def list_definitions(self, *, page: int = 0, size: int = 20) -> Page[WorkflowDefinition]:
        self._record("list_definitions")
        return self._page(list(self.definitions.values()), page, size)

    def get_definition(self, definition_id: str) -> WorkflowDefinition:
        self._record("get_definition")
        if definition_id not in self.definitions:
            raise self._not_found("get definition")
        return self.definitions[definition_id]

    def get_definition_by_name_and_version(self, name: str, version: int) -> WorkflowDefinition:
        self._record("get_definition_by_name_and_version")
        for definition in self.definitions.values():
            if definition.name == name and definition.version == version:
                return definition
        raise self._not_found("get definition by name and version")

    def get_latest_definition(self, name: str) -> WorkflowDefinition:
        self._record("get_latest_definition")
        matching = [d for d in self.definitions.values() if d.name == name]
        if not matching:
            raise self._not_found("get latest definition")
        return max(matching, key=lambda d: d.version)

    def list_definitions_by_name(self, name: str) -> list[WorkflowDefinition]:
        self._record("list_definitions_by_name")
        return [d for d in self.definitions.values() if d.name == name]

    def list_definitions_by_status(self, status: DefinitionStatus) -> list[WorkflowDefinition]:
        self._record("list_definitions_by_status")
        return [d for d in self.definitions.values() if d.status == status]

    def create_definition(self, draft: DefinitionDraft) -> WorkflowDefinition:
        self._record("create_definition")
        definition = WorkflowDefinition(
            id=self._new_id("def"),
            name=draft.name,
            description=draft.description,
            version=draft.version or 1,
            status=draft.status,
            definition=draft.definition,
            created_at=T0,
            updated_at=T0,
            created_by=draft.created_by,
            updated_by=draft.updated_by,
        )
        self.definitions[definition.id] = definition
        return definition

    def update_definition(
        self, definition_id: str, draft: DefinitionDraft
    ) -> WorkflowDefinition:
        self._record("update_definition")
        current = self.definitions.get(definition_id)
        if current is None:
            raise self._not_found("update definition")
        updated = current.model_copy(
            update={
                "name": draft.name,
                "description": draft.description,
                "status": draft.status,
                "definition": draft.definition,
                "updated_by": draft.updated_by,
            }
        )
        self.definitions[definition_id] = updated
        return updated

    def delete_definition(self, definition_id: str) -> None:
        self._record("delete_definition")
        if self.definitions.pop(definition_id, None) is None:
            raise self._not_found("delete definition")

    def _set_definition_status(
        self, definition_id: str, status: DefinitionStatus
    ) -> WorkflowDefinition:
        current = self.definitions.get(definition_id)
        if current is None:
            raise self._not_found("transition definition")
        updated = current.model_copy(update={"status": status})
        self.definitions[definition_id] = updated
        return updated

    def activate_definition(self, definition_id: str) -> WorkflowDefinition:
        self._record("activate_definition")
        return self._set_definition_status(definition_id, DefinitionStatus.ACTIVE)

    def deactivate_definition(self, definition_id: str) -> WorkflowDefinition:
        self._record("deactivate_definition")
        return self._set_definition_status(definition_id, DefinitionStatus.INACTIVE)

    # Instances

    def list_instances(self, *, page: int = 0, size: int = 20) -> Page[WorkflowInstance]:
        self._record("list_instances")
        return self._page(list(self.instances.values()), page, size)

    def get_instance(self, instance_id: str) -> WorkflowInstance:
        self._record("get_instance")
        if instance_id not in self.instances:
            raise self._not_found("get instance")
        return self.instances[instance_id]

    def list_instances_by_definition(self, definition_id: str) -> list[WorkflowInstance]:
        self._record("list_instances_by_definition")
        return [i for i in self.instances.values() if i.definition_ref == definition_id]

    def list_instances_by_status(self, status: InstanceStatus) -> list[WorkflowInstance]:
        self._record("list_instances_by_status")
        return [i for i in self.instances.values() if i.status == status]

    def list_running_instances(self) -> list[WorkflowInstance]:
        self._record("list_running_instances")
        return [i for i in self.instances.values() if i.status == InstanceStatus.RUNNING]

    def create_instance(self, instance: dict[str, object]) -> WorkflowInstance:
        self._record("create_instance")
        created = WorkflowInstance.model_validate({**instance, "id": self._new_id("inst")})
        self.instances[created.id] = created
        return created

    def start_instance(
        self, definition_id: str, instance_name: str, context: str | None = None
    ) -> WorkflowInstance:
        self._record("start_instance")
        instance = WorkflowInstance(
            id=self._new_id("inst"),
            name=instance_name,
            definition_ref=definition_id,
            status=InstanceStatus.RUNNING,
            current_step="start",
            context=context,
            started_at=T0,
        )
        self.instances[instance.id] = instance
        return instance

    def _set_instance_status(self, instance_id: str, status: InstanceStatus) -> WorkflowInstance:
        current = self.instances.get(instance_id)
        if current is None:
            raise self._not_found("transition instance")
        changes: dict[str, object] = {"status": status}
        if status in {InstanceStatus.COMPLETED, InstanceStatus.CANCELLED}:
            changes["completed_at"] = T0 + timedelta(hours=1)
        updated = current.model_copy(update=changes)
        self.instances[instance_id] = updated
        return updated

    def update_instance_status(
        self, instance_id: str, status: InstanceStatus
    ) -> WorkflowInstance:
        self._record("update_instance_status")
        return self._set_instance_status(instance_id, status)

    def complete_instance(self, instance_id: str) -> WorkflowInstance:
        self._record("complete_instance")
        return self._set_instance_status(instance_id, InstanceStatus.COMPLETED)

    def cancel_instance(self, instance_id: str) -> WorkflowInstance:
        self._record("cancel_instance")
        return self._set_instance_status(instance_id, InstanceStatus.CANCELLED)

    def suspend_instance(self, instance_id: str) -> WorkflowInstance:
        self._record("suspend_instance")
        return self._set_instance_status(instance_id, InstanceStatus.SUSPENDED)

    def resume_instance(self, instance_id: str) -> WorkflowInstance:
        self._record("resume_instance")
        return self._set_instance_status(instance_id, InstanceStatus.RUNNING)


@pytest.fixture
def store() -> FakeStore:
    """Provide an empty in-memory workflow store."""
    return FakeStore()


@pytest.fixture
def graph_factory() -> Callable[[], WorkflowGraph]:
    """Provide a builder for a small, valid three-node graph."""

    def build() -> WorkflowGraph:
        graph = WorkflowGraph()
        start = graph.add_node(NodeKind.HUMAN_TASK, "Start", position=Position(0, 0))
        check = graph.add_node(
            NodeKind.AUTOMATED, "Check", {"service": "checker"}, position=Position(200, 0)
        )
        route = graph.add_node(NodeKind.GATEWAY, "Route", position=Position(400, 0))
        graph.connect(start.id, check.id)
        graph.connect(check.id, route.id, edge_type="default")
        return graph

    return build


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Run with no console variables set and no `.env` in the working directory."""
    for name in (
        "WORKFLOW_STORE_URL",
        "WORKFLOW_STORE_TIMEOUT_SECONDS",
        "WORKFLOW_STORE_PAGE_SIZE",
        "WORKFLOW_STORE_MAX_PAGES",
        "LOG_LEVEL",
        "WORKFLOW_CONSOLE_CORS_ORIGINS",
        "WORKFLOW_CONSOLE_HOST",
        "WORKFLOW_CONSOLE_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

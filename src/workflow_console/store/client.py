"""REST client for the remote workflow store.

Every failure (transport, non-2xx status, unreadable body) is raised as
`RemoteOperationFailed`. Nothing is retried here; callers surface the error
once and reload.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError

from workflow_console.errors import RemoteOperationFailed
from workflow_console.lifecycle.definition import DefinitionStatus
from workflow_console.lifecycle.instance import InstanceStatus
from workflow_console.store.models import (
    DefinitionDraft,
    Page,
    WorkflowDefinition,
    WorkflowInstance,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFINITIONS = "workflow-definitions"
INSTANCES = "workflow-instances"


def _segment(value: str | int) -> str:
    return quote(str(value), safe="")


class WorkflowStoreClient:
    """Small wrapper around a `requests.Session` for the store's REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url.strip():
            raise ValueError("Workflow store base URL is required")

        self._base_url = base_url.strip().rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": "workflow-console",
            }
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> WorkflowStoreClient:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _url(self, *segments: str | int) -> str:
        path = "/".join(_segment(s) for s in segments)
        return f"{self._base_url}/{path}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        params: dict[str, object] | None = None,
        json_body: object | None = None,
        data: str | None = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if data is not None:
            headers["Content-Type"] = "application/json"

        logger.debug(
            "Store request", extra={"operation": operation, "method": method, "url": url}
        )
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                data=data.encode("utf-8") if data is not None else None,
                headers=headers or None,
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.warning(
                "Store request failed",
                extra={"operation": operation, "url": url, "status_code": status_code},
            )
            raise RemoteOperationFailed(
                operation, _describe_failure(e), status_code=status_code
            ) from e

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteOperationFailed(
                operation, "response body is not JSON", status_code=resp.status_code
            ) from e

    def _one(self, model: type[M], payload: Any, *, operation: str) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise RemoteOperationFailed(operation, f"unexpected response shape: {e}") from e

    def _many(self, model: type[M], payload: Any, *, operation: str) -> list[M]:
        if isinstance(payload, dict) and isinstance(payload.get("content"), list):
            payload = payload["content"]
        if not isinstance(payload, list):
            raise RemoteOperationFailed(operation, "expected a JSON array")
        return [self._one(model, item, operation=operation) for item in payload]

    def _call(self, method: str, model: type[M], *segments: str | int, operation: str) -> M:
        payload = self._request(method, self._url(*segments), operation=operation)
        return self._one(model, payload, operation=operation)

    def _call_many(self, model: type[M], *segments: str | int, operation: str) -> list[M]:
        payload = self._request("GET", self._url(*segments), operation=operation)
        return self._many(model, payload, operation=operation)

    # Definitions

    def list_definitions(self, *, page: int = 0, size: int = 20) -> Page[WorkflowDefinition]:
        op = "list definitions"
        payload = self._request(
            "GET", self._url(DEFINITIONS), operation=op, params={"page": page, "size": size}
        )
        return self._one(Page[WorkflowDefinition], payload, operation=op)

    def get_definition(self, definition_id: str) -> WorkflowDefinition:
        return self._call(
            "GET", WorkflowDefinition, DEFINITIONS, definition_id, operation="get definition"
        )

    def get_definition_by_name_and_version(self, name: str, version: int) -> WorkflowDefinition:
        return self._call(
            "GET",
            WorkflowDefinition,
            DEFINITIONS,
            "name",
            name,
            "version",
            version,
            operation="get definition by name and version",
        )

    def get_latest_definition(self, name: str) -> WorkflowDefinition:
        return self._call(
            "GET",
            WorkflowDefinition,
            DEFINITIONS,
            "name",
            name,
            "latest",
            operation="get latest definition",
        )

    def list_definitions_by_name(self, name: str) -> list[WorkflowDefinition]:
        return self._call_many(
            WorkflowDefinition, DEFINITIONS, "name", name, operation="list definitions by name"
        )

    def list_definitions_by_status(self, status: DefinitionStatus) -> list[WorkflowDefinition]:
        return self._call_many(
            WorkflowDefinition,
            DEFINITIONS,
            "status",
            DefinitionStatus(status).value,
            operation="list definitions by status",
        )

    def create_definition(self, draft: DefinitionDraft) -> WorkflowDefinition:
        op = "create definition"
        payload = self._request(
            "POST", self._url(DEFINITIONS), operation=op, json_body=draft.to_wire()
        )
        created = self._one(WorkflowDefinition, payload, operation=op)
        logger.info(
            "Workflow definition created",
            extra={
                "definition_id": created.id,
                "definition_name": created.name,
                "version": created.version,
            },
        )
        return created

    def update_definition(self, definition_id: str, draft: DefinitionDraft) -> WorkflowDefinition:
        op = "update definition"
        payload = self._request(
            "PUT",
            self._url(DEFINITIONS, definition_id),
            operation=op,
            json_body=draft.to_wire(),
        )
        return self._one(WorkflowDefinition, payload, operation=op)

    def delete_definition(self, definition_id: str) -> None:
        self._request(
            "DELETE", self._url(DEFINITIONS, definition_id), operation="delete definition"
        )

    def activate_definition(self, definition_id: str) -> WorkflowDefinition:
        return self._call(
            "POST",
            WorkflowDefinition,
            DEFINITIONS,
            definition_id,
            "activate",
            operation="activate definition",
        )

    def deactivate_definition(self, definition_id: str) -> WorkflowDefinition:
        return self._call(
            "POST",
            WorkflowDefinition,
            DEFINITIONS,
            definition_id,
            "deactivate",
            operation="deactivate definition",
        )

    # Instances

    def list_instances(self, *, page: int = 0, size: int = 20) -> Page[WorkflowInstance]:
        op = "list instances"
        payload = self._request(
            "GET", self._url(INSTANCES), operation=op, params={"page": page, "size": size}
        )
        return self._one(Page[WorkflowInstance], payload, operation=op)

    def get_instance(self, instance_id: str) -> WorkflowInstance:
        return self._call("GET", WorkflowInstance, INSTANCES, instance_id, operation="get instance")

    def list_instances_by_definition(self, definition_id: str) -> list[WorkflowInstance]:
        return self._call_many(
            WorkflowInstance,
            INSTANCES,
            "definition",
            definition_id,
            operation="list instances by definition",
        )

    def list_instances_by_status(self, status: InstanceStatus) -> list[WorkflowInstance]:
        return self._call_many(
            WorkflowInstance,
            INSTANCES,
            "status",
            InstanceStatus(status).value,
            operation="list instances by status",
        )

    def list_running_instances(self) -> list[WorkflowInstance]:
        return self._call_many(
            WorkflowInstance, INSTANCES, "running", operation="list running instances"
        )

    def create_instance(self, instance: dict[str, object]) -> WorkflowInstance:
        op = "create instance"
        payload = self._request("POST", self._url(INSTANCES), operation=op, json_body=instance)
        return self._one(WorkflowInstance, payload, operation=op)

    def start_instance(
        self, definition_id: str, instance_name: str, context: str | None = None
    ) -> WorkflowInstance:
        """Start a new RUNNING instance; `context` is sent verbatim as the body."""

        op = "start instance"
        payload = self._request(
            "POST",
            self._url(INSTANCES, "start", definition_id),
            operation=op,
            params={"instanceName": instance_name},
            data=context,
        )
        started = self._one(WorkflowInstance, payload, operation=op)
        logger.info(
            "Workflow instance started",
            extra={"instance_id": started.id, "definition_id": definition_id},
        )
        return started

    def update_instance_status(self, instance_id: str, status: InstanceStatus) -> WorkflowInstance:
        op = "update instance status"
        payload = self._request(
            "PUT",
            self._url(INSTANCES, instance_id, "status"),
            operation=op,
            params={"status": InstanceStatus(status).value},
        )
        return self._one(WorkflowInstance, payload, operation=op)

    def _instance_action(self, instance_id: str, action: str) -> WorkflowInstance:
        return self._call(
            "POST", WorkflowInstance, INSTANCES, instance_id, action, operation=f"{action} instance"
        )

    def complete_instance(self, instance_id: str) -> WorkflowInstance:
        return self._instance_action(instance_id, "complete")

    def cancel_instance(self, instance_id: str) -> WorkflowInstance:
        return self._instance_action(instance_id, "cancel")

    def suspend_instance(self, instance_id: str) -> WorkflowInstance:
        return self._instance_action(instance_id, "suspend")

    def resume_instance(self, instance_id: str) -> WorkflowInstance:
        return self._instance_action(instance_id, "resume")


def _describe_failure(error: requests.RequestException) -> str:
    response = error.response
    if response is None:
        return str(error) or type(error).__name__

    detail: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                detail = value.strip()
                break
    if detail is None:
        text = (response.text or "").strip()
        detail = text[:200] if text else (response.reason or "")
    return f"HTTP {response.status_code} {detail}".strip()

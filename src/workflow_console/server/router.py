"""Console REST API.

Thin handlers over the services held in `app.state`. Errors are not handled
here: `WorkflowConsoleError` propagates to the notification handlers
registered by `create_app`.

All routes are mounted under `/api`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, Response

from workflow_console.graph.samples import (
    SAMPLE_DESCRIPTION,
    SAMPLE_NAME,
    sample_approval_workflow,
)
from workflow_console.graph.serializer import deserialize, serialize
from workflow_console.lifecycle.definition import DefinitionStatus
from workflow_console.lifecycle.instance import InstanceAction, InstanceStatus
from workflow_console.server.models import (
    DefinitionCreate,
    DefinitionUpdate,
    DefinitionVersionCreate,
    GraphValidation,
    InstanceStart,
    InstanceStatusUpdate,
)
from workflow_console.services import DashboardService, DefinitionService, InstanceService

router = APIRouter()


def _state(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        # This should never happen for an app built by create_app.
        raise HTTPException(status_code=500, detail=f"{name} service not configured")
    return service


def _definitions(request: Request) -> DefinitionService:
    return _state(request, "definitions")


def _instances(request: Request) -> InstanceService:
    return _state(request, "instances")


def _dashboard(request: Request) -> DashboardService:
    return _state(request, "dashboard")


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# Monitoring


@router.get("/dashboard")
def dashboard(request: Request) -> dict[str, object]:
    return _dashboard(request).summary().to_json()


@router.get("/analytics")
def analytics(request: Request) -> dict[str, object]:
    return _dashboard(request).analytics().to_json()


# Definitions


@router.get("/definitions")
def list_definitions(
    request: Request,
    status: DefinitionStatus | None = Query(default=None),
    name: str | None = Query(default=None),
) -> list[dict[str, Any]]:
    service = _definitions(request)
    if status is not None:
        records = service.by_status(status)
    elif name:
        records = service.versions(name)
    else:
        records = service.reload()
    return [r.to_wire() for r in records]


@router.post("/definitions", status_code=201)
def create_definition(request: Request, body: DefinitionCreate) -> dict[str, Any]:
    service = _definitions(request)
    graph = deserialize(body.graph)
    if body.activate:
        record = service.create_and_activate(
            name=body.name, graph=graph, description=body.description, author=body.author
        )
    else:
        record = service.save_graph(
            name=body.name, graph=graph, description=body.description, author=body.author
        )
    return record.to_wire()


@router.post("/definitions/versions", status_code=201)
def create_definition_version(request: Request, body: DefinitionVersionCreate) -> dict[str, Any]:
    record = _definitions(request).new_version(
        name=body.name,
        graph=deserialize(body.graph),
        description=body.description,
        author=body.author,
    )
    return record.to_wire()


@router.get("/definitions/{definition_id}")
def get_definition(request: Request, definition_id: str) -> dict[str, Any]:
    return _definitions(request).get(definition_id).to_wire()


@router.get("/definitions/{definition_id}/graph")
def get_definition_graph(request: Request, definition_id: str) -> dict[str, object]:
    return serialize(_definitions(request).get(definition_id).graph())


@router.put("/definitions/{definition_id}")
def update_definition(
    request: Request, definition_id: str, body: DefinitionUpdate
) -> dict[str, Any]:
    record = _definitions(request).update(
        definition_id,
        name=body.name,
        description=body.description,
        graph=deserialize(body.graph) if body.graph is not None else None,
        status=body.status,
        author=body.author,
    )
    return record.to_wire()


@router.delete("/definitions/{definition_id}", status_code=204, response_class=Response)
def delete_definition(request: Request, definition_id: str) -> Response:
    _definitions(request).delete(definition_id)
    return Response(status_code=204)


@router.post("/definitions/{definition_id}/activate")
def activate_definition(request: Request, definition_id: str) -> dict[str, Any]:
    return _definitions(request).activate(definition_id).to_wire()


@router.post("/definitions/{definition_id}/deactivate")
def deactivate_definition(request: Request, definition_id: str) -> dict[str, Any]:
    return _definitions(request).deactivate(definition_id).to_wire()


# Graphs


@router.post("/graph/validate")
def validate_graph(payload: dict[str, Any]) -> GraphValidation:
    # Structural problems are reported as violations, not rejected.
    graph = deserialize(payload, strict=False)
    violations = graph.validate()
    return GraphValidation(
        valid=not violations,
        nodes=len(graph.nodes),
        edges=len(graph.edges),
        violations=[v.to_json() for v in violations],
    )


@router.get("/graph/sample")
def sample_graph() -> dict[str, object]:
    return {
        "name": SAMPLE_NAME,
        "description": SAMPLE_DESCRIPTION,
        "graph": serialize(sample_approval_workflow()),
    }


# Instances


@router.get("/instances")
def list_instances(
    request: Request,
    status: InstanceStatus | None = Query(default=None),
    definition_id: str | None = Query(default=None, alias="definitionId"),
) -> list[dict[str, Any]]:
    service = _instances(request)
    if status is not None:
        records = service.by_status(status)
    elif definition_id:
        records = service.for_definition(definition_id)
    else:
        records = service.reload()
    return [r.to_wire() for r in records]


@router.post("/instances/start", status_code=201)
def start_instance(request: Request, body: InstanceStart) -> dict[str, Any]:
    record = _instances(request).start(body.definition_id, body.instance_name, body.context)
    return record.to_wire()


@router.get("/instances/{instance_id}")
def get_instance(request: Request, instance_id: str) -> dict[str, Any]:
    return _instances(request).get(instance_id).to_wire()


@router.post("/instances/{instance_id}/{action}")
def apply_instance_action(
    request: Request, instance_id: str, action: InstanceAction
) -> dict[str, Any]:
    service = _instances(request)
    return getattr(service, action.value)(instance_id).to_wire()


@router.put("/instances/{instance_id}/status")
def update_instance_status(
    request: Request, instance_id: str, body: InstanceStatusUpdate
) -> dict[str, Any]:
    return _instances(request).update_status(instance_id, body.status).to_wire()

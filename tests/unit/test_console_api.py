"""API tests for the console REST server (in-memory store)."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from workflow_console.graph.samples import sample_approval_workflow
from workflow_console.graph.serializer import serialize
from workflow_console.lifecycle.definition import DefinitionStatus
from workflow_console.lifecycle.instance import InstanceStatus
from workflow_console.server.app import create_app
from workflow_console.server.config import ServerSettings


@pytest.fixture
def api(store, clean_env) -> TestClient:
    return TestClient(create_app(store=store, settings=ServerSettings()))


def test_health_and_docs(api: TestClient) -> None:
    assert api.get("/api/health").json() == {"status": "ok"}
    assert api.get("/api/openapi.json").status_code == 200


def test_create_definition_from_graph(api: TestClient, store) -> None:
    resp = api.post(
        "/api/definitions",
        json={"name": "Approval", "graph": serialize(sample_approval_workflow())},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "DRAFT"
    assert body["version"] == 1
    assert "createdAt" in body

    graph = api.get(f"/api/definitions/{body['id']}/graph").json()
    assert [n["id"] for n in graph["nodes"]] == ["start", "review", "approve", "end"]


def test_create_and_activate(api: TestClient) -> None:
    resp = api.post("/api/definitions", json={"name": "Approval", "activate": True})

    assert resp.status_code == 201
    assert resp.json()["status"] == "ACTIVE"


def test_malformed_graph_is_a_422_notification(api: TestClient, store) -> None:
    graph = serialize(sample_approval_workflow())
    graph["edges"][0]["target"] = "ghost"

    resp = api.post("/api/definitions", json={"name": "Broken", "graph": graph})

    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "MALFORMED_PAYLOAD"
    assert error["dismissible"] is True
    assert "ghost" in error["message"]
    assert store.calls == []


def test_new_version(api: TestClient, store) -> None:
    store.add_definition("Approval", version=2)

    resp = api.post(
        "/api/definitions/versions",
        json={"name": "Approval", "graph": {"nodes": [], "edges": []}},
    )

    assert resp.status_code == 201
    assert resp.json()["version"] == 3


def test_list_filter_get_update_delete(api: TestClient, store) -> None:
    draft = store.add_definition("A")
    store.add_definition("B", status=DefinitionStatus.ACTIVE)

    assert [d["name"] for d in api.get("/api/definitions").json()] == ["A", "B"]
    assert [d["name"] for d in api.get("/api/definitions?status=ACTIVE").json()] == ["B"]
    assert api.get(f"/api/definitions/{draft.id}").json()["name"] == "A"

    updated = api.put(f"/api/definitions/{draft.id}", json={"description": "new"}).json()
    assert updated["description"] == "new"
    assert updated["name"] == "A"

    assert api.delete(f"/api/definitions/{draft.id}").status_code == 204
    assert [d["name"] for d in api.get("/api/definitions").json()] == ["B"]


def test_missing_definition_is_a_502_with_upstream_status(api: TestClient) -> None:
    resp = api.get("/api/definitions/def-404")

    assert resp.status_code == 502
    error = resp.json()["error"]
    assert error["code"] == "REMOTE_OPERATION_FAILED"
    assert error["details"]["upstreamStatus"] == 404


def test_activate_deactivate_and_terminal_conflict(api: TestClient, store) -> None:
    draft = store.add_definition("A")
    archived = store.add_definition("B", status=DefinitionStatus.ARCHIVED)

    conflict = api.post(f"/api/definitions/{archived.id}/activate")
    assert conflict.status_code == 409
    error = conflict.json()["error"]
    assert error["code"] == "TERMINAL_STATE"
    assert error["details"] == {"status": "ARCHIVED", "action": "activate"}

    shelved = api.post(f"/api/definitions/{draft.id}/deactivate").json()
    assert shelved["status"] == "INACTIVE"

    assert api.post(f"/api/definitions/{draft.id}/activate").json()["status"] == "ACTIVE"


def test_start_requires_active_definition(api: TestClient, store) -> None:
    draft = store.add_definition("A")

    resp = api.post(
        "/api/instances/start", json={"definitionId": draft.id, "instanceName": "run"}
    )

    assert resp.status_code == 409
    error = resp.json()["error"]
    assert error["code"] == "DEFINITION_NOT_ACTIVE"
    assert error["details"] == {"definitionId": draft.id, "status": "DRAFT"}


def test_instance_lifecycle_over_http(api: TestClient, store) -> None:
    active = store.add_definition("A", status=DefinitionStatus.ACTIVE)

    started = api.post(
        "/api/instances/start",
        json={"definitionId": active.id, "instanceName": "run", "context": {"k": 1}},
    )
    assert started.status_code == 201
    instance_id = started.json()["id"]
    assert started.json()["workflowDefinitionId"] == active.id

    assert api.post(f"/api/instances/{instance_id}/suspend").json()["status"] == "SUSPENDED"
    resumed = api.put(f"/api/instances/{instance_id}/status", json={"status": "RUNNING"})
    assert resumed.json()["status"] == "RUNNING"
    assert api.post(f"/api/instances/{instance_id}/complete").json()["status"] == "COMPLETED"

    terminal = api.post(f"/api/instances/{instance_id}/cancel")
    assert terminal.status_code == 409
    assert terminal.json()["error"]["code"] == "TERMINAL_STATE"


def test_unknown_instance_action_is_rejected(api: TestClient, store) -> None:
    active = store.add_definition("A", status=DefinitionStatus.ACTIVE)
    instance = store.add_instance(active.id)

    assert api.post(f"/api/instances/{instance.id}/explode").status_code == 422


def test_list_instances_filters(api: TestClient, store) -> None:
    a = store.add_definition("A", status=DefinitionStatus.ACTIVE)
    b = store.add_definition("B", status=DefinitionStatus.ACTIVE)
    store.add_instance(a.id)
    store.add_instance(b.id, status=InstanceStatus.FAILED)

    assert len(api.get("/api/instances").json()) == 2
    failed = api.get("/api/instances?status=FAILED").json()
    assert [i["workflowDefinitionId"] for i in failed] == [b.id]
    by_definition = api.get("/api/instances", params={"definitionId": a.id}).json()
    assert [i["status"] for i in by_definition] == ["RUNNING"]


def test_graph_validate_and_sample(api: TestClient) -> None:
    sample = api.get("/api/graph/sample").json()
    assert sample["name"] == "Sample Approval Workflow"

    result = api.post("/api/graph/validate", json=sample["graph"]).json()
    assert result == {"valid": True, "nodes": 4, "edges": 3, "violations": []}

    unknown_kind = json.loads(json.dumps(sample["graph"]))
    unknown_kind["nodes"][0]["type"] = "SUBPROCESS"
    resp = api.post("/api/graph/validate", json=unknown_kind)
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "MALFORMED_PAYLOAD"


def test_graph_validate_reports_violations(api: TestClient) -> None:
    node = {
        "id": "a",
        "type": "HUMAN_TASK",
        "position": {"x": 0, "y": 0},
        "data": {"label": "A", "configuration": "{}"},
    }
    payload = {"nodes": [node, node], "edges": [{"id": "e1", "source": "a", "target": "ghost"}]}

    resp = api.post("/api/graph/validate", json=payload)

    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is False
    assert (body["nodes"], body["edges"]) == (2, 1)
    assert [v["code"] for v in body["violations"]] == [
        "duplicate_node_id",
        "dangling_edge_target",
    ]
    assert body["violations"][1] == {
        "code": "dangling_edge_target",
        "message": "Edge 'e1' target 'ghost' is not a node",
        "nodeId": "ghost",
        "edgeId": "e1",
    }


def test_dashboard_and_analytics(api: TestClient, store) -> None:
    active = store.add_definition("A", status=DefinitionStatus.ACTIVE)
    store.add_instance(active.id, status=InstanceStatus.COMPLETED, hours=2)
    store.add_instance(active.id, status=InstanceStatus.COMPLETED, hours=4)
    store.add_instance(active.id)

    dashboard = api.get("/api/dashboard").json()
    assert dashboard["totalDefinitions"] == 1
    assert dashboard["completedInstances"] == 2
    assert len(dashboard["recentInstances"]) == 3
    assert dashboard["trend"] == []

    analytics = api.get("/api/analytics").json()
    assert analytics["performance"]["averageCompletionTimeHours"] == 3
    assert analytics["completionRates"][0]["completionRate"] == 67

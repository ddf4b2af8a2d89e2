"""Mapping between `WorkflowGraph` and the persisted definition payload.

Payload shape::

    {
      "nodes": [{"id": str, "type": "HUMAN_TASK" | "AUTOMATED" | "GATEWAY",
                 "position": {"x": number, "y": number},
                 "data": {"label": str, "configuration": str}}],
      "edges": [{"id": str, "source": str, "target": str, "type": str?}]
    }

A workflow definition record carries this payload JSON-encoded as a string in
its ``definition`` field, so the record body is double-encoded JSON.
"""

from __future__ import annotations

import json
from collections.abc import Mapping

from workflow_console.errors import MalformedPayload
from workflow_console.graph.model import Edge, Node, NodeKind, Position, WorkflowGraph
from workflow_console.payload import OpaqueJson


def serialize(graph: WorkflowGraph) -> dict[str, object]:
    nodes: list[dict[str, object]] = []
    for node in graph.nodes:
        nodes.append(
            {
                "id": node.id,
                "type": node.kind.value,
                "position": {"x": node.position.x, "y": node.position.y},
                "data": {"label": node.label, "configuration": node.configuration.raw},
            }
        )

    edges: list[dict[str, object]] = []
    for edge in graph.edges:
        entry: dict[str, object] = {"id": edge.id, "source": edge.source, "target": edge.target}
        if edge.type is not None:
            entry["type"] = edge.type
        edges.append(entry)

    return {"nodes": nodes, "edges": edges}


def _require(obj: Mapping[str, object], key: str, where: str) -> object:
    if key not in obj or obj[key] is None:
        raise MalformedPayload(f"{where}: missing required field {key!r}")
    return obj[key]


def _require_str(obj: Mapping[str, object], key: str, where: str) -> str:
    value = _require(obj, key, where)
    if not isinstance(value, str):
        raise MalformedPayload(f"{where}: field {key!r} must be a string")
    return value


def _require_number(obj: Mapping[str, object], key: str, where: str) -> float:
    value = _require(obj, key, where)
    # bool is an int subclass; a true/false coordinate is never valid.
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedPayload(f"{where}: field {key!r} must be a number")
    return float(value)


def _require_mapping(obj: Mapping[str, object], key: str, where: str) -> Mapping[str, object]:
    value = _require(obj, key, where)
    if not isinstance(value, Mapping):
        raise MalformedPayload(f"{where}: field {key!r} must be an object")
    return value


def _require_list(obj: Mapping[str, object], key: str, where: str) -> list[object]:
    value = _require(obj, key, where)
    if not isinstance(value, list):
        raise MalformedPayload(f"{where}: field {key!r} must be an array")
    return value


def _node_from_json(raw: object, index: int) -> Node:
    where = f"nodes[{index}]"
    if not isinstance(raw, Mapping):
        raise MalformedPayload(f"{where}: must be an object")

    node_id = _require_str(raw, "id", where)
    type_raw = _require_str(raw, "type", where)
    try:
        kind = NodeKind(type_raw)
    except ValueError as e:
        raise MalformedPayload(f"{where}: unknown node type {type_raw!r}") from e

    position = _require_mapping(raw, "position", where)
    data = _require_mapping(raw, "data", where)

    configuration = data.get("configuration")
    if configuration is None:
        configuration = OpaqueJson()
    elif isinstance(configuration, str):
        configuration = OpaqueJson(raw=configuration)
    elif isinstance(configuration, Mapping):
        # Tolerate stores that hand the configuration back as an object.
        configuration = OpaqueJson.of(configuration)
    else:
        raise MalformedPayload(f"{where}: field 'configuration' must be a string")

    return Node(
        id=node_id,
        kind=kind,
        label=_require_str(data, "label", f"{where}.data"),
        position=Position(
            x=_require_number(position, "x", f"{where}.position"),
            y=_require_number(position, "y", f"{where}.position"),
        ),
        configuration=configuration,
    )


def _edge_from_json(raw: object, index: int) -> Edge:
    where = f"edges[{index}]"
    if not isinstance(raw, Mapping):
        raise MalformedPayload(f"{where}: must be an object")

    edge_type = raw.get("type")
    if edge_type is not None and not isinstance(edge_type, str):
        raise MalformedPayload(f"{where}: field 'type' must be a string")

    return Edge(
        id=_require_str(raw, "id", where),
        source=_require_str(raw, "source", where),
        target=_require_str(raw, "target", where),
        type=edge_type,
    )


def deserialize(payload: object, *, strict: bool = True) -> WorkflowGraph:
    """Rebuild a graph from a payload, re-checking the graph invariants.

    Payloads can come back from the remote store, so nothing is trusted:
    duplicate node ids and edges pointing at unknown nodes are rejected here.
    With ``strict=False`` only the field-level shape is checked and the graph
    is returned as-is, so callers can report its violations through
    `WorkflowGraph.validate`.
    """

    if not isinstance(payload, Mapping):
        raise MalformedPayload("Graph payload must be an object")

    raw_nodes = _require_list(payload, "nodes", "graph")
    raw_edges = _require_list(payload, "edges", "graph")
    nodes = [_node_from_json(raw, i) for i, raw in enumerate(raw_nodes)]
    edges = [_edge_from_json(raw, i) for i, raw in enumerate(raw_edges)]
    if not strict:
        return WorkflowGraph(nodes=nodes, edges=edges)

    node_ids: set[str] = set()
    for node in nodes:
        if node.id in node_ids:
            raise MalformedPayload(f"Duplicate node id {node.id!r}")
        node_ids.add(node.id)

    for edge in edges:
        for end, node_id in (("source", edge.source), ("target", edge.target)):
            if node_id not in node_ids:
                raise MalformedPayload(
                    f"Edge {edge.id!r} {end} {node_id!r} is not present in nodes"
                )

    return WorkflowGraph(nodes=nodes, edges=edges)


def encode_definition(graph: WorkflowGraph) -> str:
    """Encode a graph as the string stored in a definition's ``definition`` field."""

    return json.dumps(serialize(graph), ensure_ascii=False)


def decode_definition(text: str | None, *, strict: bool = True) -> WorkflowGraph:
    """Decode a definition's ``definition`` field back into a graph.

    Definitions created outside the designer carry ``"{}"`` (or nothing);
    those decode to an empty graph.
    """

    if text is None or not text.strip():
        return WorkflowGraph()
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"Definition is not valid JSON: {e.msg}") from e
    if isinstance(payload, Mapping) and not payload:
        return WorkflowGraph()
    return deserialize(payload, strict=strict)

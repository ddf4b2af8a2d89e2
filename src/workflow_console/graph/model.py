"""In-memory workflow graph authored in the designer.

Nodes and edges only exist inside the graph being edited. Removing a node
always removes the edges that reference it, so a graph mutated through this
API never holds a dangling edge. Graphs loaded from elsewhere may, which is
what `WorkflowGraph.validate` is for.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from enum import Enum

from workflow_console.errors import InvalidReference
from workflow_console.payload import OpaqueJson

logger = logging.getLogger(__name__)

# Random placement area used when the caller does not position a new node.
CANVAS_WIDTH = 400.0
CANVAS_HEIGHT = 400.0


class NodeKind(str, Enum):
    HUMAN_TASK = "HUMAN_TASK"
    AUTOMATED = "AUTOMATED"
    GATEWAY = "GATEWAY"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: dict[NodeKind, str] = {
    NodeKind.HUMAN_TASK: "Human Task",
    NodeKind.AUTOMATED: "Automated",
    NodeKind.GATEWAY: "Gateway",
}


@dataclass(frozen=True, slots=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Node:
    id: str
    kind: NodeKind
    label: str
    position: Position
    configuration: OpaqueJson = OpaqueJson()


@dataclass(frozen=True, slots=True)
class Edge:
    id: str
    source: str
    target: str
    type: str | None = None

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


@dataclass(frozen=True, slots=True)
class GraphViolation:
    """A single structural problem found by `WorkflowGraph.validate`."""

    code: str
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"code": self.code, "message": self.message}
        if self.node_id is not None:
            out["nodeId"] = self.node_id
        if self.edge_id is not None:
            out["edgeId"] = self.edge_id
        return out


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class WorkflowGraph:
    """Mutable node/edge collection with designer gestures as methods."""

    def __init__(
        self,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
        *,
        rng: random.Random | None = None,
        id_factory: Callable[[str], str] = _new_id,
    ) -> None:
        self._nodes: list[Node] = list(nodes)
        self._edges: list[Edge] = list(edges)
        self._rng = rng or random.Random()
        self._id_factory = id_factory

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes)

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkflowGraph):
            return NotImplemented
        return _by_id(self._nodes) == _by_id(other._nodes) and _by_id(self._edges) == _by_id(
            other._edges
        )

    def __repr__(self) -> str:
        return f"WorkflowGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    def node(self, node_id: str) -> Node | None:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.node(node_id) is not None

    def edges_of(self, node_id: str) -> list[Edge]:
        return [e for e in self._edges if e.touches(node_id)]

    def _fresh_id(self, prefix: str, taken: set[str]) -> str:
        while True:
            candidate = self._id_factory(prefix)
            if candidate not in taken:
                return candidate

    def add_node(
        self,
        kind: NodeKind | str,
        label: str,
        configuration: OpaqueJson | Mapping[str, object] | str | None = None,
        *,
        position: Position | None = None,
    ) -> Node:
        if position is None:
            position = Position(
                x=self._rng.uniform(0.0, CANVAS_WIDTH),
                y=self._rng.uniform(0.0, CANVAS_HEIGHT),
            )
        node = Node(
            id=self._fresh_id("node", {n.id for n in self._nodes}),
            kind=NodeKind(kind),
            label=label,
            position=position,
            configuration=OpaqueJson.of(configuration),
        )
        self._nodes.append(node)
        logger.debug("Node added", extra={"node_id": node.id, "kind": node.kind.value})
        return node

    def remove_node(self, node_id: str) -> None:
        if not self.has_node(node_id):
            return
        self._nodes = [n for n in self._nodes if n.id != node_id]
        before = len(self._edges)
        self._edges = [e for e in self._edges if not e.touches(node_id)]
        logger.debug(
            "Node removed",
            extra={"node_id": node_id, "edges_removed": before - len(self._edges)},
        )

    def move_node(self, node_id: str, x: float, y: float) -> Node:
        return self._replace_node(node_id, position=Position(x=float(x), y=float(y)))

    def update_node(
        self,
        node_id: str,
        *,
        label: str | None = None,
        configuration: OpaqueJson | Mapping[str, object] | str | None = None,
    ) -> Node:
        changes: dict[str, object] = {}
        if label is not None:
            changes["label"] = label
        if configuration is not None:
            changes["configuration"] = OpaqueJson.of(configuration)
        return self._replace_node(node_id, **changes)

    def _replace_node(self, node_id: str, **changes: object) -> Node:
        for idx, node in enumerate(self._nodes):
            if node.id == node_id:
                updated = replace(node, **changes)
                self._nodes[idx] = updated
                return updated
        raise InvalidReference(f"Node not found: {node_id}", node_ids=[node_id])

    def connect(self, source_id: str, target_id: str, edge_type: str | None = None) -> Edge:
        missing = [nid for nid in (source_id, target_id) if not self.has_node(nid)]
        if missing:
            raise InvalidReference(
                f"Cannot connect {source_id} -> {target_id}: unknown node(s) "
                + ", ".join(sorted(set(missing))),
                node_ids=missing,
            )
        edge = Edge(
            id=self._fresh_id("edge", {e.id for e in self._edges}),
            source=source_id,
            target=target_id,
            type=edge_type,
        )
        self._edges.append(edge)
        return edge

    def disconnect(self, edge_id: str) -> None:
        self._edges = [e for e in self._edges if e.id != edge_id]

    def validate(self) -> list[GraphViolation]:
        violations: list[GraphViolation] = []

        seen: set[str] = set()
        for node in self._nodes:
            if node.id in seen:
                violations.append(
                    GraphViolation(
                        code="duplicate_node_id",
                        message=f"Node id {node.id!r} is used more than once",
                        node_id=node.id,
                    )
                )
            seen.add(node.id)

        for edge in self._edges:
            for end, node_id in (("source", edge.source), ("target", edge.target)):
                if node_id not in seen:
                    violations.append(
                        GraphViolation(
                            code=f"dangling_edge_{end}",
                            message=f"Edge {edge.id!r} {end} {node_id!r} is not a node",
                            node_id=node_id,
                            edge_id=edge.id,
                        )
                    )
        return violations

    def ensure_valid(self) -> None:
        violations = self.validate()
        if violations:
            raise InvalidReference(
                f"Graph has {len(violations)} violation(s): "
                + "; ".join(v.message for v in violations),
                node_ids=[v.node_id for v in violations if v.node_id is not None],
                violations=violations,
            )


def _by_id(items: Iterable[Node] | Iterable[Edge]) -> dict[str, object]:
    return {item.id: item for item in items}

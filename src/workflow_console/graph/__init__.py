"""Workflow graph authoring: model, payload serialization and samples."""

from workflow_console.graph.model import (
    Edge,
    GraphViolation,
    Node,
    NodeKind,
    Position,
    WorkflowGraph,
)
from workflow_console.graph.serializer import (
    decode_definition,
    deserialize,
    encode_definition,
    serialize,
)

__all__ = [
    "Edge",
    "GraphViolation",
    "Node",
    "NodeKind",
    "Position",
    "WorkflowGraph",
    "decode_definition",
    "deserialize",
    "encode_definition",
    "serialize",
]

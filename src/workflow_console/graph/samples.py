"""Ready-made graphs for the designer and for demos."""

from __future__ import annotations

from workflow_console.graph.model import Edge, Node, NodeKind, Position, WorkflowGraph
from workflow_console.payload import OpaqueJson

SAMPLE_NAME = "Sample Approval Workflow"
SAMPLE_DESCRIPTION = "A simple approval workflow for demonstration"


def sample_approval_workflow() -> WorkflowGraph:
    """Linear four-step approval: start, manager review, automated approval, done."""

    nodes = [
        Node("start", NodeKind.HUMAN_TASK, "Start Process", Position(100.0, 100.0)),
        Node(
            "review",
            NodeKind.HUMAN_TASK,
            "Review Request",
            Position(300.0, 100.0),
            OpaqueJson('{"assignee": "manager@company.com"}'),
        ),
        Node(
            "approve",
            NodeKind.AUTOMATED,
            "Auto Approve",
            Position(500.0, 100.0),
            OpaqueJson('{"service": "approval-service"}'),
        ),
        Node("end", NodeKind.HUMAN_TASK, "Complete", Position(700.0, 100.0)),
    ]
    edges = [
        Edge("e1-2", "start", "review"),
        Edge("e2-3", "review", "approve"),
        Edge("e3-4", "approve", "end"),
    ]
    return WorkflowGraph(nodes=nodes, edges=edges)

#!/usr/bin/env python3
"""Programmatic authoring example.

This demonstrates using the console components directly:

* load settings from `.env`
* build a small approval graph in memory
* save it as a DRAFT definition, activate it, and start one instance

The workflow store URL comes from `WORKFLOW_STORE_URL` (see `.env`).
"""

from __future__ import annotations

import argparse
from typing import Sequence

from workflow_console.config import ConsoleSettings
from workflow_console.errors import RemoteOperationFailed
from workflow_console.graph.model import NodeKind, Position, WorkflowGraph
from workflow_console.logging import configure_logging
from workflow_console.services import DefinitionService, InstanceService
from workflow_console.store.client import WorkflowStoreClient


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Save, activate and start a small workflow.")
    parser.add_argument("--name", required=True, help="Definition name")
    parser.add_argument(
        "--instance-name", default="example run", help="Name of the started instance"
    )
    parser.add_argument(
        "--assignee",
        default="manager@company.com",
        help="Reviewer stored in the review node's configuration",
    )
    return parser.parse_args(argv)


def _build_graph(assignee: str) -> WorkflowGraph:
    graph = WorkflowGraph()
    submit = graph.add_node(NodeKind.HUMAN_TASK, "Submit", position=Position(100, 100))
    review = graph.add_node(
        NodeKind.HUMAN_TASK, "Review", {"assignee": assignee}, position=Position(300, 100)
    )
    route = graph.add_node(NodeKind.GATEWAY, "Approved?", position=Position(500, 100))
    notify = graph.add_node(
        NodeKind.AUTOMATED, "Notify", {"service": "mailer"}, position=Position(700, 100)
    )
    graph.connect(submit.id, review.id)
    graph.connect(review.id, route.id)
    graph.connect(route.id, notify.id, edge_type="approved")
    graph.connect(route.id, submit.id, edge_type="rejected")
    return graph


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ConsoleSettings()
    configure_logging(settings.log_level)

    with WorkflowStoreClient(
        base_url=settings.store_base_url, timeout_seconds=settings.store_timeout_seconds
    ) as client:
        definitions = DefinitionService(client, page_size=settings.page_size)
        instances = InstanceService(client, page_size=settings.page_size)

        try:
            definition = definitions.create_and_activate(
                name=args.name, graph=_build_graph(args.assignee)
            )
            instance = instances.start(
                definition.id, args.instance_name, {"requestedBy": "basic_usage"}
            )
        except RemoteOperationFailed as exc:
            print(str(exc))
            return 1

    print(f"Definition {definition.id} v{definition.version} is {definition.status.value}")
    print(f"Instance {instance.id} is {instance.status.value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

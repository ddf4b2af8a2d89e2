"""CLI entrypoint for the workflow console.

Every command talks to the remote workflow store configured through
`ConsoleSettings`, except `validate-graph` and `sample-graph`, which are local.

Exit codes:
- 0 success
- 1 unexpected failure
- 2 configuration error
- 3 the workflow store call failed
- 4 rejected locally (invalid graph, illegal transition, inactive definition)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from workflow_console import __version__
from workflow_console.config import ConsoleSettings
from workflow_console.errors import RemoteOperationFailed, WorkflowConsoleError
from workflow_console.graph.model import WorkflowGraph
from workflow_console.graph.samples import sample_approval_workflow
from workflow_console.graph.serializer import decode_definition, serialize
from workflow_console.lifecycle.definition import DefinitionStatus
from workflow_console.lifecycle.instance import InstanceStatus
from workflow_console.logging import configure_logging
from workflow_console.services import DashboardService, DefinitionService, InstanceService
from workflow_console.store.client import WorkflowStoreClient
from workflow_console.store.models import WorkflowDefinition, WorkflowInstance

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIG = 2
EXIT_REMOTE = 3
EXIT_REJECTED = 4

_LOCAL_COMMANDS = {"validate-graph", "sample-graph"}
_INSTANCE_ACTIONS = ("complete", "suspend", "resume", "cancel")


def _print_json(value: object) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def _read_graph(path: str, *, strict: bool = True) -> WorkflowGraph:
    return decode_definition(Path(path).read_text(encoding="utf-8"), strict=strict)


def _definition_line(definition: WorkflowDefinition) -> str:
    return f"{definition.id}\t{definition.name}\tv{definition.version}\t{definition.status.value}"


def _instance_line(instance: WorkflowInstance) -> str:
    step = instance.current_step or "-"
    return (
        f"{instance.id}\t{instance.name}\t{instance.status.value}\t"
        f"definition={instance.definition_ref or '-'}\tstep={step}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-console",
        description="Author, publish and monitor workflows held by a remote workflow store",
    )
    parser.add_argument("--version", action="version", version=f"workflow-console {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Definitions

    list_definitions = subparsers.add_parser("list-definitions", help="List workflow definitions")
    filters = list_definitions.add_mutually_exclusive_group()
    filters.add_argument(
        "--status",
        choices=[s.value for s in DefinitionStatus],
        default=None,
        help="Only definitions with this status",
    )
    filters.add_argument("--name", default=None, help="Only versions of this definition name")

    show_definition = subparsers.add_parser("show-definition", help="Print one definition")
    show_definition.add_argument("definition_id")
    show_definition.add_argument(
        "--graph",
        action="store_true",
        help="Print the decoded graph payload instead of the stored record",
    )

    save_definition = subparsers.add_parser(
        "save-definition", help="Create a DRAFT definition from a graph payload file"
    )
    save_definition.add_argument("--name", required=True, help="Definition name")
    save_definition.add_argument(
        "--file", required=True, help="JSON file holding the graph payload (nodes/edges)"
    )
    save_definition.add_argument("--description", default=None)
    save_definition.add_argument("--author", default=None)
    save_definition.add_argument(
        "--activate",
        action="store_true",
        help="Activate the definition right after creating it (no rollback if this fails)",
    )

    new_version = subparsers.add_parser(
        "new-version", help="Save a graph as the next version of an existing definition name"
    )
    new_version.add_argument("--name", required=True)
    new_version.add_argument("--file", required=True)
    new_version.add_argument("--description", default=None)
    new_version.add_argument("--author", default=None)

    update_definition = subparsers.add_parser(
        "update-definition", help="Replace a definition record, keeping omitted fields"
    )
    update_definition.add_argument("definition_id")
    update_definition.add_argument("--name", default=None)
    update_definition.add_argument("--description", default=None)
    update_definition.add_argument("--file", default=None, help="New graph payload file")
    update_definition.add_argument(
        "--status", choices=[s.value for s in DefinitionStatus], default=None
    )
    update_definition.add_argument("--author", default=None)

    delete_definition = subparsers.add_parser("delete-definition", help="Delete a definition")
    delete_definition.add_argument("definition_id")

    for command in ("activate", "deactivate"):
        transition = subparsers.add_parser(command, help=f"{command.capitalize()} a definition")
        transition.add_argument("definition_id")

    # Instances

    list_instances = subparsers.add_parser("list-instances", help="List workflow instances")
    instance_filters = list_instances.add_mutually_exclusive_group()
    instance_filters.add_argument(
        "--status", choices=[s.value for s in InstanceStatus], default=None
    )
    instance_filters.add_argument("--definition-id", default=None)
    instance_filters.add_argument("--running", action="store_true")

    start_instance = subparsers.add_parser(
        "start-instance", help="Start a RUNNING instance of an ACTIVE definition"
    )
    start_instance.add_argument("definition_id")
    start_instance.add_argument("--name", required=True, help="Instance name")
    start_instance.add_argument(
        "--context", default=None, help="Instance context as a JSON document (default: {})"
    )

    for command in _INSTANCE_ACTIONS:
        action = subparsers.add_parser(command, help=f"{command.capitalize()} an instance")
        action.add_argument("instance_id")

    set_status = subparsers.add_parser(
        "set-status", help="Move an instance to a status reachable by one of its actions"
    )
    set_status.add_argument("instance_id")
    set_status.add_argument("status", choices=[s.value for s in InstanceStatus])

    # Graphs

    validate_graph = subparsers.add_parser(
        "validate-graph", help="Check a graph payload file for structural errors"
    )
    validate_graph.add_argument("file")

    sample_graph = subparsers.add_parser(
        "sample-graph", help="Print the sample approval workflow graph payload"
    )
    sample_graph.add_argument("--output", default=None, help="Write to this file instead")

    # Monitoring

    subparsers.add_parser("dashboard", help="Print the dashboard summary as JSON")
    subparsers.add_parser("analytics", help="Print the analytics report as JSON")

    serve = subparsers.add_parser("serve", help="Run the console REST API")
    serve.add_argument("--host", default=None, help="Bind address (default: WORKFLOW_CONSOLE_HOST)")
    serve.add_argument(
        "--port", type=int, default=None, help="Bind port (default: WORKFLOW_CONSOLE_PORT)"
    )

    return parser


def _run_local(args: argparse.Namespace) -> int:
    if args.command == "validate-graph":
        graph = _read_graph(args.file, strict=False)
        graph.ensure_valid()
        print(f"Graph is valid: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
        return EXIT_OK

    payload = json.dumps(serialize(sample_approval_workflow()), indent=2)
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote sample graph to {args.output}")
    else:
        print(payload)
    return EXIT_OK


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from workflow_console.server.app import create_app
    from workflow_console.server.config import ServerSettings

    try:
        settings = ServerSettings()
    except ValidationError as e:
        print("Configuration error (check your environment or .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG

    app = create_app(settings=settings)
    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )
    return EXIT_OK


def _run_definitions(args: argparse.Namespace, definitions: DefinitionService) -> int | None:
    if args.command == "list-definitions":
        if args.status:
            records = definitions.by_status(DefinitionStatus(args.status))
        elif args.name:
            records = definitions.versions(args.name)
        else:
            records = definitions.reload()
        for record in records:
            print(_definition_line(record))
        return EXIT_OK

    if args.command == "show-definition":
        record = definitions.get(args.definition_id)
        _print_json(serialize(record.graph()) if args.graph else record.to_wire())
        return EXIT_OK

    if args.command == "save-definition":
        graph = _read_graph(args.file)
        if args.activate:
            record = definitions.create_and_activate(
                name=args.name, graph=graph, description=args.description, author=args.author
            )
        else:
            record = definitions.save_graph(
                name=args.name, graph=graph, description=args.description, author=args.author
            )
        print(f"Saved definition {_definition_line(record)}")
        return EXIT_OK

    if args.command == "new-version":
        record = definitions.new_version(
            name=args.name,
            graph=_read_graph(args.file),
            description=args.description,
            author=args.author,
        )
        print(f"Saved definition {_definition_line(record)}")
        return EXIT_OK

    if args.command == "update-definition":
        record = definitions.update(
            args.definition_id,
            name=args.name,
            description=args.description,
            graph=_read_graph(args.file) if args.file else None,
            status=DefinitionStatus(args.status) if args.status else None,
            author=args.author,
        )
        print(f"Updated definition {_definition_line(record)}")
        return EXIT_OK

    if args.command == "delete-definition":
        definitions.delete(args.definition_id)
        print(f"Deleted definition {args.definition_id}")
        return EXIT_OK

    if args.command in {"activate", "deactivate"}:
        transition = getattr(definitions, args.command)
        record = transition(args.definition_id)
        print(f"Definition {record.id} is {record.status.value}")
        return EXIT_OK

    return None


def _run_instances(args: argparse.Namespace, instances: InstanceService) -> int | None:
    if args.command == "list-instances":
        if args.status:
            records = instances.by_status(InstanceStatus(args.status))
        elif args.definition_id:
            records = instances.for_definition(args.definition_id)
        elif args.running:
            records = instances.running()
        else:
            records = instances.reload()
        for record in records:
            print(_instance_line(record))
        return EXIT_OK

    if args.command == "start-instance":
        record = instances.start(args.definition_id, args.name, args.context)
        print(f"Started instance {_instance_line(record)}")
        return EXIT_OK

    if args.command in _INSTANCE_ACTIONS:
        record = getattr(instances, args.command)(args.instance_id)
        print(f"Instance {record.id} is {record.status.value}")
        return EXIT_OK

    if args.command == "set-status":
        record = instances.update_status(args.instance_id, InstanceStatus(args.status))
        print(f"Instance {record.id} is {record.status.value}")
        return EXIT_OK

    return None


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ConsoleSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your environment or .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG

    configure_logging(settings.log_level)

    try:
        if args.command in _LOCAL_COMMANDS:
            return _run_local(args)
        if args.command == "serve":
            return _serve(args)

        with WorkflowStoreClient(
            base_url=settings.store_base_url, timeout_seconds=settings.store_timeout_seconds
        ) as client:
            paging = {"page_size": settings.page_size, "max_pages": settings.max_reload_pages}
            definitions = DefinitionService(client, **paging)
            instances = InstanceService(client, **paging)

            if args.command == "dashboard":
                _print_json(DashboardService(definitions, instances).summary().to_json())
                return EXIT_OK
            if args.command == "analytics":
                _print_json(DashboardService(definitions, instances).analytics().to_json())
                return EXIT_OK

            code = _run_definitions(args, definitions)
            if code is None:
                code = _run_instances(args, instances)
            if code is not None:
                return code

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_CONFIG

    except RemoteOperationFailed as e:
        logger.warning(str(e), extra={"operation": e.operation, "status_code": e.status_code})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_REMOTE

    except WorkflowConsoleError as e:
        logger.warning(str(e), extra={"code": e.code})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_REJECTED

    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNEXPECTED

    except Exception:
        logger.exception("Command failed")
        return EXIT_UNEXPECTED


if __name__ == "__main__":
    raise SystemExit(main())

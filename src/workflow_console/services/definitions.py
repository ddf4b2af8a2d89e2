"""Authoring and publication of workflow definitions."""

from __future__ import annotations

import logging

from workflow_console.errors import RemoteOperationFailed
from workflow_console.graph.model import WorkflowGraph
from workflow_console.graph.serializer import encode_definition
from workflow_console.lifecycle.definition import (
    DefinitionAction,
    DefinitionStatus,
    plan_definition_transition,
)
from workflow_console.services.paging import collect_pages
from workflow_console.store.models import DefinitionDraft, WorkflowDefinition
from workflow_console.store.protocol import WorkflowStore

logger = logging.getLogger(__name__)


class DefinitionService:
    """Definition operations against the remote store.

    The store is the source of truth. `definitions` is only the view from the
    last `reload()`, and every successful mutation reloads it in full. Nothing
    guards against a concurrent edit from another session: whichever write the
    store applies last is what the next reload shows.
    """

    def __init__(self, store: WorkflowStore, *, page_size: int = 20, max_pages: int = 50) -> None:
        self._store = store
        self._page_size = page_size
        self._max_pages = max_pages
        self._definitions: list[WorkflowDefinition] = []

    @property
    def definitions(self) -> list[WorkflowDefinition]:
        return list(self._definitions)

    def reload(self) -> list[WorkflowDefinition]:
        self._definitions = collect_pages(
            lambda page, size: self._store.list_definitions(page=page, size=size),
            page_size=self._page_size,
            max_pages=self._max_pages,
            listing="definitions",
        )
        logger.debug("Definitions reloaded", extra={"count": len(self._definitions)})
        return self.definitions

    # Reads

    def get(self, definition_id: str) -> WorkflowDefinition:
        return self._store.get_definition(definition_id)

    def find(self, name: str, version: int) -> WorkflowDefinition:
        return self._store.get_definition_by_name_and_version(name, version)

    def latest(self, name: str) -> WorkflowDefinition | None:
        """Highest version of `name`, or None when no definition has that name."""

        try:
            return self._store.get_latest_definition(name)
        except RemoteOperationFailed as e:
            if e.is_not_found:
                return None
            raise

    def versions(self, name: str) -> list[WorkflowDefinition]:
        return sorted(self._store.list_definitions_by_name(name), key=lambda d: d.version)

    def by_status(self, status: DefinitionStatus) -> list[WorkflowDefinition]:
        return self._store.list_definitions_by_status(DefinitionStatus(status))

    # Mutations

    def save_graph(
        self,
        *,
        name: str,
        graph: WorkflowGraph,
        description: str | None = None,
        version: int | None = None,
        author: str | None = None,
    ) -> WorkflowDefinition:
        """Validate `graph` and submit it as a new DRAFT definition."""

        graph.ensure_valid()
        draft = DefinitionDraft.from_graph(
            name=name,
            graph=graph,
            description=description,
            version=version,
            author=author,
        )
        created = self._store.create_definition(draft)
        self.reload()
        return created

    def new_version(
        self,
        *,
        name: str,
        graph: WorkflowGraph,
        description: str | None = None,
        author: str | None = None,
    ) -> WorkflowDefinition:
        """Save `graph` as the next version of `name` (version 1 if the name is new)."""

        graph.ensure_valid()
        latest = self.latest(name)
        version = latest.version + 1 if latest is not None else 1
        if description is None and latest is not None:
            description = latest.description
        logger.info(
            "Creating definition version", extra={"definition_name": name, "version": version}
        )
        return self.save_graph(
            name=name, graph=graph, description=description, version=version, author=author
        )

    def update(
        self,
        definition_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        graph: WorkflowGraph | None = None,
        status: DefinitionStatus | None = None,
        author: str | None = None,
    ) -> WorkflowDefinition:
        """Replace the stored record, keeping any field the caller leaves out.

        The store receives the complete record, never a patch.
        """

        if graph is not None:
            graph.ensure_valid()
        current = self._store.get_definition(definition_id)
        draft = DefinitionDraft(
            name=name if name is not None else current.name,
            description=description if description is not None else current.description,
            version=current.version,
            status=DefinitionStatus(status) if status is not None else current.status,
            definition=encode_definition(graph) if graph is not None else current.definition,
            created_by=current.created_by,
            updated_by=author if author is not None else current.updated_by,
        )
        updated = self._store.update_definition(definition_id, draft)
        logger.info(
            "Workflow definition updated",
            extra={"definition_id": definition_id, "status": updated.status.value},
        )
        self.reload()
        return updated

    def delete(self, definition_id: str) -> None:
        self._store.delete_definition(definition_id)
        logger.info("Workflow definition deleted", extra={"definition_id": definition_id})
        self.reload()

    def activate(self, definition_id: str) -> WorkflowDefinition:
        return self._transition(definition_id, DefinitionAction.ACTIVATE)

    def deactivate(self, definition_id: str) -> WorkflowDefinition:
        return self._transition(definition_id, DefinitionAction.DEACTIVATE)

    def create_and_activate(
        self,
        *,
        name: str,
        graph: WorkflowGraph,
        description: str | None = None,
        author: str | None = None,
    ) -> WorkflowDefinition:
        """Create a draft then activate it.

        The two steps are independent remote calls. If activation fails the
        draft stays in the store and the error propagates.
        """

        created = self.save_graph(name=name, graph=graph, description=description, author=author)
        return self.activate(created.id)

    def _transition(self, definition_id: str, action: DefinitionAction) -> WorkflowDefinition:
        current = self._store.get_definition(definition_id)
        plan = plan_definition_transition(current.status, action)
        if plan.is_noop:
            logger.info(
                "Definition transition is a no-op",
                extra={
                    "definition_id": definition_id,
                    "action": action.value,
                    "status": current.status.value,
                },
            )
            return current

        if action == DefinitionAction.ACTIVATE:
            updated = self._store.activate_definition(definition_id)
        else:
            updated = self._store.deactivate_definition(definition_id)
        logger.info(
            "Workflow definition transitioned",
            extra={
                "definition_id": definition_id,
                "action": action.value,
                "from_status": plan.source.value,
                "to_status": updated.status.value,
            },
        )
        self.reload()
        return updated

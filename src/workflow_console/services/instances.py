"""Launching and steering workflow instances."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from workflow_console.lifecycle.definition import ensure_startable
from workflow_console.lifecycle.instance import (
    InstanceAction,
    InstanceStatus,
    action_for_target,
    instance_transition,
)
from workflow_console.payload import OpaqueJson
from workflow_console.services.paging import collect_pages
from workflow_console.store.models import WorkflowInstance
from workflow_console.store.protocol import WorkflowStore

logger = logging.getLogger(__name__)


class InstanceService:
    """Instance operations against the remote store.

    The remote executor may change an instance's status at any time, so every
    transition is checked against a fresh read, never against `instances`.
    """

    def __init__(self, store: WorkflowStore, *, page_size: int = 20, max_pages: int = 50) -> None:
        self._store = store
        self._page_size = page_size
        self._max_pages = max_pages
        self._instances: list[WorkflowInstance] = []

    @property
    def instances(self) -> list[WorkflowInstance]:
        return list(self._instances)

    def reload(self) -> list[WorkflowInstance]:
        self._instances = collect_pages(
            lambda page, size: self._store.list_instances(page=page, size=size),
            page_size=self._page_size,
            max_pages=self._max_pages,
            listing="instances",
        )
        logger.debug("Instances reloaded", extra={"count": len(self._instances)})
        return self.instances

    def get(self, instance_id: str) -> WorkflowInstance:
        return self._store.get_instance(instance_id)

    def for_definition(self, definition_id: str) -> list[WorkflowInstance]:
        return self._store.list_instances_by_definition(definition_id)

    def by_status(self, status: InstanceStatus) -> list[WorkflowInstance]:
        return self._store.list_instances_by_status(InstanceStatus(status))

    def running(self) -> list[WorkflowInstance]:
        return self._store.list_running_instances()

    def start(
        self,
        definition_id: str,
        instance_name: str,
        context: OpaqueJson | Mapping[str, object] | str | None = None,
    ) -> WorkflowInstance:
        """Start a RUNNING instance of an ACTIVE definition.

        Raises:
            DefinitionNotActive: the definition's current status is not ACTIVE.
            MalformedPayload: `context` is not valid JSON.
        """

        definition = self._store.get_definition(definition_id)
        ensure_startable(definition)

        payload = OpaqueJson.of(context)
        payload.parse()

        started = self._store.start_instance(definition_id, instance_name, payload.raw)
        self.reload()
        return started

    def complete(self, instance_id: str) -> WorkflowInstance:
        return self._apply(instance_id, InstanceAction.COMPLETE)

    def suspend(self, instance_id: str) -> WorkflowInstance:
        return self._apply(instance_id, InstanceAction.SUSPEND)

    def cancel(self, instance_id: str) -> WorkflowInstance:
        return self._apply(instance_id, InstanceAction.CANCEL)

    def resume(self, instance_id: str) -> WorkflowInstance:
        return self._apply(instance_id, InstanceAction.RESUME)

    def update_status(self, instance_id: str, status: InstanceStatus) -> WorkflowInstance:
        """Generic status change, accepted only where a named action would be."""

        target = InstanceStatus(status)
        current = self._store.get_instance(instance_id)
        action = action_for_target(current.status, target)
        updated = self._store.update_instance_status(instance_id, target)
        self._log_transition(instance_id, action, current.status, updated.status)
        self.reload()
        return updated

    def _apply(self, instance_id: str, action: InstanceAction) -> WorkflowInstance:
        current = self._store.get_instance(instance_id)
        instance_transition(current.status, action)
        updated = self._remote_action(action)(instance_id)
        self._log_transition(instance_id, action, current.status, updated.status)
        self.reload()
        return updated

    def _remote_action(self, action: InstanceAction) -> Callable[[str], WorkflowInstance]:
        return {
            InstanceAction.COMPLETE: self._store.complete_instance,
            InstanceAction.SUSPEND: self._store.suspend_instance,
            InstanceAction.CANCEL: self._store.cancel_instance,
            InstanceAction.RESUME: self._store.resume_instance,
        }[action]

    @staticmethod
    def _log_transition(
        instance_id: str,
        action: InstanceAction,
        source: InstanceStatus,
        target: InstanceStatus,
    ) -> None:
        logger.info(
            "Workflow instance transitioned",
            extra={
                "instance_id": instance_id,
                "action": action.value,
                "from_status": source.value,
                "to_status": target.value,
            },
        )

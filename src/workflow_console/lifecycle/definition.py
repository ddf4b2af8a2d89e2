"""Publication lifecycle of a workflow definition.

DRAFT -> ACTIVE -> INACTIVE -> (ACTIVE | ARCHIVED)

A DRAFT may also be deactivated straight to INACTIVE (shelved unpublished).

Only `activate` and `deactivate` are user operations. ARCHIVED is imposed by
the store and is terminal from this surface's point of view.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from workflow_console.errors import (
    DefinitionNotActive,
    IllegalTransitionError,
    TerminalStateViolation,
)


class DefinitionStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


class DefinitionAction(str, Enum):
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


ALLOWED_TRANSITIONS: dict[DefinitionStatus, dict[DefinitionAction, DefinitionStatus]] = {
    DefinitionStatus.DRAFT: {
        DefinitionAction.ACTIVATE: DefinitionStatus.ACTIVE,
        DefinitionAction.DEACTIVATE: DefinitionStatus.INACTIVE,
    },
    DefinitionStatus.ACTIVE: {
        DefinitionAction.ACTIVATE: DefinitionStatus.ACTIVE,
        DefinitionAction.DEACTIVATE: DefinitionStatus.INACTIVE,
    },
    DefinitionStatus.INACTIVE: {
        DefinitionAction.ACTIVATE: DefinitionStatus.ACTIVE,
        DefinitionAction.DEACTIVATE: DefinitionStatus.INACTIVE,
    },
    DefinitionStatus.ARCHIVED: {},
}

TERMINAL_STATUSES: frozenset[DefinitionStatus] = frozenset({DefinitionStatus.ARCHIVED})


@dataclass(frozen=True, slots=True)
class DefinitionTransition:
    action: DefinitionAction
    source: DefinitionStatus
    target: DefinitionStatus

    @property
    def is_noop(self) -> bool:
        return self.source == self.target


def plan_definition_transition(
    current: DefinitionStatus, action: DefinitionAction
) -> DefinitionTransition:
    if current in TERMINAL_STATUSES:
        raise TerminalStateViolation(
            f"Cannot {action.value} a definition in terminal status {current.value}",
            status=current.value,
            action=action.value,
        )
    target = ALLOWED_TRANSITIONS.get(current, {}).get(action)
    if target is None:
        raise IllegalTransitionError(
            f"Illegal definition transition: {action.value} from {current.value}",
            status=current.value,
            action=action.value,
        )
    return DefinitionTransition(action=action, source=current, target=target)


def can_start_instances(status: DefinitionStatus) -> bool:
    return status == DefinitionStatus.ACTIVE


class _HasStatus(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def status(self) -> DefinitionStatus: ...


def ensure_startable(definition: _HasStatus) -> None:
    if not can_start_instances(definition.status):
        raise DefinitionNotActive(definition.id, definition.status.value)

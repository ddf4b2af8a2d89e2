"""Execution lifecycle of a workflow instance.

RUNNING is the only entry state (reached through `start`). The remote
executor may move an instance to FAILED, or anywhere else, between two reads,
so callers must validate against a freshly loaded status.
"""

from __future__ import annotations

from enum import Enum

from workflow_console.errors import IllegalTransitionError, TerminalStateViolation


class InstanceStatus(str, Enum):
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"


class InstanceAction(str, Enum):
    COMPLETE = "complete"
    SUSPEND = "suspend"
    CANCEL = "cancel"
    RESUME = "resume"


# action -> (legal source statuses, resulting status)
ALLOWED_TRANSITIONS: dict[InstanceAction, tuple[frozenset[InstanceStatus], InstanceStatus]] = {
    InstanceAction.COMPLETE: (frozenset({InstanceStatus.RUNNING}), InstanceStatus.COMPLETED),
    InstanceAction.SUSPEND: (frozenset({InstanceStatus.RUNNING}), InstanceStatus.SUSPENDED),
    InstanceAction.CANCEL: (
        frozenset({InstanceStatus.RUNNING, InstanceStatus.SUSPENDED}),
        InstanceStatus.CANCELLED,
    ),
    InstanceAction.RESUME: (frozenset({InstanceStatus.SUSPENDED}), InstanceStatus.RUNNING),
}

TERMINAL_STATUSES: frozenset[InstanceStatus] = frozenset(
    {InstanceStatus.COMPLETED, InstanceStatus.FAILED, InstanceStatus.CANCELLED}
)


def is_terminal(status: InstanceStatus) -> bool:
    return status in TERMINAL_STATUSES


def instance_transition(current: InstanceStatus, action: InstanceAction) -> InstanceStatus:
    if is_terminal(current):
        raise TerminalStateViolation(
            f"Cannot {action.value} an instance in terminal status {current.value}",
            status=current.value,
            action=action.value,
        )
    sources, target = ALLOWED_TRANSITIONS[action]
    if current not in sources:
        raise IllegalTransitionError(
            f"Illegal instance transition: {action.value} from {current.value}",
            status=current.value,
            action=action.value,
        )
    return target


def allowed_actions(current: InstanceStatus) -> list[InstanceAction]:
    """Actions a user may trigger from `current`, in declaration order."""

    return [
        action for action, (sources, _target) in ALLOWED_TRANSITIONS.items() if current in sources
    ]


def action_for_target(current: InstanceStatus, target: InstanceStatus) -> InstanceAction:
    """Resolve a generic "set status" request to the action producing `target`.

    FAILED is never a user-requested target; it is only ever reported by the
    executor.
    """

    if is_terminal(current):
        raise TerminalStateViolation(
            f"Cannot move an instance in terminal status {current.value} to {target.value}",
            status=current.value,
            action=f"set-status:{target.value}",
        )
    for action in allowed_actions(current):
        if ALLOWED_TRANSITIONS[action][1] == target:
            return action
    raise IllegalTransitionError(
        f"Illegal instance transition: {current.value} -> {target.value}",
        status=current.value,
        action=f"set-status:{target.value}",
    )

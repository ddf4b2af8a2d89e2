"""Unit tests for the instance execution lifecycle.

Illegal transitions must fail loudly, and terminal statuses must reject
every operation.
"""

from __future__ import annotations

import pytest

from workflow_console.errors import IllegalTransitionError, TerminalStateViolation
from workflow_console.lifecycle.instance import (
    InstanceAction,
    InstanceStatus,
    action_for_target,
    allowed_actions,
    instance_transition,
    is_terminal,
)

LEGAL = {
    (InstanceStatus.RUNNING, InstanceAction.COMPLETE): InstanceStatus.COMPLETED,
    (InstanceStatus.RUNNING, InstanceAction.SUSPEND): InstanceStatus.SUSPENDED,
    (InstanceStatus.RUNNING, InstanceAction.CANCEL): InstanceStatus.CANCELLED,
    (InstanceStatus.SUSPENDED, InstanceAction.CANCEL): InstanceStatus.CANCELLED,
    (InstanceStatus.SUSPENDED, InstanceAction.RESUME): InstanceStatus.RUNNING,
}

TERMINAL = [InstanceStatus.COMPLETED, InstanceStatus.FAILED, InstanceStatus.CANCELLED]


@pytest.mark.parametrize(("current", "action"), list(LEGAL))
def test_legal_transitions(current: InstanceStatus, action: InstanceAction) -> None:
    assert instance_transition(current, action) is LEGAL[(current, action)]


@pytest.mark.parametrize("current", TERMINAL)
@pytest.mark.parametrize("action", list(InstanceAction))
def test_terminal_statuses_reject_everything(
    current: InstanceStatus, action: InstanceAction
) -> None:
    assert is_terminal(current)
    with pytest.raises(TerminalStateViolation):
        instance_transition(current, action)


def test_resume_requires_suspended() -> None:
    with pytest.raises(IllegalTransitionError) as excinfo:
        instance_transition(InstanceStatus.RUNNING, InstanceAction.RESUME)

    assert not isinstance(excinfo.value, TerminalStateViolation)


@pytest.mark.parametrize("action", [InstanceAction.COMPLETE, InstanceAction.SUSPEND])
def test_complete_and_suspend_require_running(action: InstanceAction) -> None:
    with pytest.raises(IllegalTransitionError):
        instance_transition(InstanceStatus.SUSPENDED, action)


def test_every_non_listed_pair_is_rejected() -> None:
    for current in InstanceStatus:
        for action in InstanceAction:
            if (current, action) in LEGAL:
                continue
            with pytest.raises(IllegalTransitionError):
                instance_transition(current, action)


def test_allowed_actions() -> None:
    assert allowed_actions(InstanceStatus.RUNNING) == [
        InstanceAction.COMPLETE,
        InstanceAction.SUSPEND,
        InstanceAction.CANCEL,
    ]
    assert allowed_actions(InstanceStatus.SUSPENDED) == [
        InstanceAction.CANCEL,
        InstanceAction.RESUME,
    ]
    for status in TERMINAL:
        assert allowed_actions(status) == []


def test_action_for_target() -> None:
    assert (
        action_for_target(InstanceStatus.RUNNING, InstanceStatus.SUSPENDED)
        is InstanceAction.SUSPEND
    )
    assert (
        action_for_target(InstanceStatus.SUSPENDED, InstanceStatus.RUNNING)
        is InstanceAction.RESUME
    )


def test_action_for_target_never_reaches_failed() -> None:
    with pytest.raises(IllegalTransitionError):
        action_for_target(InstanceStatus.RUNNING, InstanceStatus.FAILED)


def test_action_for_target_from_terminal_status() -> None:
    with pytest.raises(TerminalStateViolation):
        action_for_target(InstanceStatus.CANCELLED, InstanceStatus.RUNNING)

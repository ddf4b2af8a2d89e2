"""Explicit state machines for definitions and instances.

Status values are closed enums and each module's transition table is the only
place that decides which operation is legal from which status.
"""

from workflow_console.lifecycle.definition import (
    DefinitionAction,
    DefinitionStatus,
    DefinitionTransition,
    ensure_startable,
    plan_definition_transition,
)
from workflow_console.lifecycle.instance import (
    InstanceAction,
    InstanceStatus,
    action_for_target,
    allowed_actions,
    instance_transition,
    is_terminal,
)

__all__ = [
    "DefinitionAction",
    "DefinitionStatus",
    "DefinitionTransition",
    "InstanceAction",
    "InstanceStatus",
    "action_for_target",
    "allowed_actions",
    "ensure_startable",
    "instance_transition",
    "is_terminal",
    "plan_definition_transition",
]

"""Request and response bodies of the console API (camelCase on the wire)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from workflow_console.lifecycle.definition import DefinitionStatus
from workflow_console.lifecycle.instance import InstanceStatus


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DefinitionCreate(ApiModel):
    name: str = Field(min_length=1)
    description: str | None = None
    graph: dict[str, Any] = Field(
        default_factory=lambda: {"nodes": [], "edges": []},
        description="Graph payload (nodes/edges) as produced by the designer.",
    )
    author: str | None = None
    activate: bool = Field(
        default=False,
        description="Activate right after creating. A failed activation keeps the draft.",
    )


class DefinitionVersionCreate(ApiModel):
    name: str = Field(min_length=1)
    description: str | None = None
    graph: dict[str, Any]
    author: str | None = None


class DefinitionUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    graph: dict[str, Any] | None = None
    status: DefinitionStatus | None = None
    author: str | None = None


class GraphValidation(ApiModel):
    valid: bool
    nodes: int
    edges: int
    violations: list[dict[str, object]] = Field(default_factory=list)


class InstanceStart(ApiModel):
    definition_id: str = Field(min_length=1)
    instance_name: str = Field(min_length=1)
    context: dict[str, Any] | str | None = None


class InstanceStatusUpdate(ApiModel):
    status: InstanceStatus

"""Pydantic models for records exchanged with the remote workflow store.

The store speaks camelCase JSON. Records are snapshots: the store owns the
truth and a fresh read always replaces whatever was cached locally.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from workflow_console.graph.model import WorkflowGraph
from workflow_console.graph.serializer import decode_definition, encode_definition
from workflow_console.lifecycle.definition import DefinitionStatus
from workflow_console.lifecycle.instance import InstanceStatus
from workflow_console.payload import OpaqueJson

T = TypeVar("T")


class StoreModel(BaseModel):
    # The store may send numeric ids.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class WorkflowDefinition(StoreModel):
    id: str
    name: str
    description: str | None = None
    version: int = Field(default=1, ge=1)
    status: DefinitionStatus = DefinitionStatus.DRAFT
    definition: str = "{}"

    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @field_validator("definition", mode="before")
    @classmethod
    def _definition_as_text(cls, value: object) -> object:
        # Some stores return the jsonb column as an object instead of a string.
        if value is None:
            return "{}"
        if isinstance(value, dict):
            return json.dumps(value, ensure_ascii=False)
        return value

    def graph(self) -> WorkflowGraph:
        return decode_definition(self.definition)


class DefinitionDraft(StoreModel):
    """Full-record body for create and update (replace, never patch)."""

    name: str = Field(min_length=1)
    description: str | None = None
    version: int | None = Field(default=None, ge=1)
    status: DefinitionStatus = DefinitionStatus.DRAFT
    definition: str = "{}"
    created_by: str | None = None
    updated_by: str | None = None

    @classmethod
    def from_graph(
        cls,
        *,
        name: str,
        graph: WorkflowGraph,
        description: str | None = None,
        version: int | None = None,
        status: DefinitionStatus = DefinitionStatus.DRAFT,
        author: str | None = None,
    ) -> DefinitionDraft:
        return cls(
            name=name,
            description=description,
            version=version,
            status=status,
            definition=encode_definition(graph),
            created_by=author,
            updated_by=author,
        )


class WorkflowInstance(StoreModel):
    id: str
    name: str
    definition_ref: str | None = Field(default=None, alias="workflowDefinitionId")
    status: InstanceStatus = InstanceStatus.RUNNING
    current_step: str | None = None
    context: str | None = None

    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_definition_ref(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        nested = data.get("workflowDefinition")
        if isinstance(nested, dict) and "workflowDefinitionId" not in data:
            data = {**data, "workflowDefinitionId": nested.get("id")}
        return data

    @field_validator("definition_ref", mode="before")
    @classmethod
    def _ref_as_text(cls, value: object) -> object:
        if value is None:
            return None
        return str(value)

    @field_validator("context", mode="before")
    @classmethod
    def _context_as_text(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)

    @field_validator("started_at", "completed_at")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    def context_payload(self) -> OpaqueJson:
        return OpaqueJson.of(self.context)


class Page(BaseModel, Generic[T]):
    """One page of a paged listing.

    A bare JSON array is accepted as a single, final page.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    content: list[T] = Field(default_factory=list)
    total_elements: int | None = None
    total_pages: int | None = None
    number: int = 0
    size: int | None = None
    last: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"content": data, "totalElements": len(data), "totalPages": 1, "last": True}
        return data

    @property
    def is_last(self) -> bool:
        if self.last is not None:
            return self.last
        if self.total_pages is not None:
            return self.number + 1 >= self.total_pages
        return self.size is None or len(self.content) < self.size

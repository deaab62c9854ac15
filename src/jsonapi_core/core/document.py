"""pydantic models for JSON:API response documents.

Documents are dumped with ``exclude_unset``: a key is present in the output
only when it was explicitly given, so ``"data": null`` survives while optional
members that were never computed stay absent.

See https://jsonapi.org/format/#document-structure
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Member(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class JsonApiObject(_Member):
    version: str = "1.0"
    meta: dict[str, Any] | None = None


class LinkObject(_Member):
    href: str
    meta: dict[str, Any] | None = None


Links = dict[str, str | LinkObject | None]


def _check_identity(model: Any) -> None:
    if (model.id is None) == (model.lid is None):
        raise ValueError(f"{model.type!r} resource needs exactly one of id and lid")


class ResourceIdentifier(_Member):
    type: str
    id: str | None = None
    lid: str | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def check_identity(self) -> ResourceIdentifier:
        _check_identity(self)
        return self


class Relationship(_Member):
    """``data: None`` is a valid empty to-one relationship; an object with no members is not."""

    links: Links | None = None
    data: ResourceIdentifier | list[ResourceIdentifier] | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def check_not_empty(self) -> Relationship:
        if not self.model_fields_set & {"links", "data", "meta"}:
            raise ValueError("relationship needs at least one of links, data and meta")
        return self


class Resource(_Member):
    type: str
    id: str | None = None
    lid: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    relationships: dict[str, Relationship] | None = None
    links: Links | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def check_identity(self) -> Resource:
        _check_identity(self)
        return self

    def identifier(self) -> ResourceIdentifier:
        if self.id is not None:
            return ResourceIdentifier(type=self.type, id=self.id)
        return ResourceIdentifier(type=self.type, lid=self.lid)


class ErrorSource(_Member):
    pointer: str | None = None
    parameter: str | None = None
    header: str | None = None


class ErrorObject(_Member):
    id: str | None = None
    links: Links | None = None
    status: str | None = None
    code: str | None = None
    title: str | None = None
    detail: str | None = None
    source: ErrorSource | None = None
    meta: dict[str, Any] | None = None


class SingleDocument(_Member):
    jsonapi: JsonApiObject = Field(default_factory=JsonApiObject)
    data: Resource | None
    links: Links | None = None
    meta: dict[str, Any] | None = None
    included: list[Resource] | None = None


class CollectionDocument(_Member):
    jsonapi: JsonApiObject = Field(default_factory=JsonApiObject)
    data: list[Resource]
    links: Links | None = None
    meta: dict[str, Any] | None = None
    included: list[Resource] | None = None


class ErrorDocument(_Member):
    jsonapi: JsonApiObject = Field(default_factory=JsonApiObject)
    errors: list[ErrorObject] = Field(min_length=1)
    links: Links | None = None
    meta: dict[str, Any] | None = None


class MetaDocument(_Member):
    """Meta-only acknowledgement, e.g. for a delete without a response body."""

    jsonapi: JsonApiObject = Field(default_factory=JsonApiObject)
    meta: dict[str, Any]
    links: Links | None = None


Document = SingleDocument | CollectionDocument | ErrorDocument | MetaDocument

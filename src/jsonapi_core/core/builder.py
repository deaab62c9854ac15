"""Immutable, chainable builders for JSON:API documents.

Every setter returns a new builder, so a partially configured builder can be
shared and extended without affecting other users of it::

    base = DocumentBuilder.collection().with_meta({"total": 2})
    doc = base.resources([article]).with_links({"self": url}).build()

Each factory on :class:`DocumentBuilder` returns the builder of one document
shape, so only that shape's setters exist. Calling a setter of another shape
raises :class:`DocumentShapeError` immediately; missing optional members are
never an error and are simply absent from the output.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from jsonapi_core.core.document import (
    CollectionDocument,
    ErrorDocument,
    ErrorObject,
    ErrorSource,
    JsonApiObject,
    LinkObject,
    Links,
    MetaDocument,
    Relationship,
    Resource,
    ResourceIdentifier,
    SingleDocument,
)
from jsonapi_core.exceptions import DocumentShapeError, ResourceIdentityError


B = TypeVar("B", bound="_DocumentBuilder")
P = TypeVar("P", bound="_PrimaryDataBuilder")


# Primary-data setters; each exists only on the builder of its shape.
_DATA_SETTERS = frozenset({"resource", "resources", "append", "error", "include"})


def _present(**members: Any) -> dict[str, Any]:
    return {name: value for name, value in members.items() if value is not None}


def link(href: str, meta: Mapping[str, Any] | None = None) -> LinkObject:
    return LinkObject(**_present(href=href, meta=dict(meta) if meta is not None else None))


def resource_identifier(
    type: str, id: str | None = None, lid: str | None = None, meta: Mapping[str, Any] | None = None
) -> ResourceIdentifier:
    if (id is None) == (lid is None):
        raise ResourceIdentityError(f"{type!r} identifier needs exactly one of id and lid")
    return ResourceIdentifier(**_present(type=type, id=id, lid=lid, meta=dict(meta) if meta is not None else None))


@dataclass(frozen=True)
class RelationshipBuilder:
    links: Links | None = None
    data: ResourceIdentifier | tuple[ResourceIdentifier, ...] | None = None
    has_data: bool = False
    meta: Mapping[str, Any] | None = None

    def to_one(self, identifier: ResourceIdentifier | None) -> RelationshipBuilder:
        return replace(self, data=identifier, has_data=True)

    def to_many(self, identifiers: Iterable[ResourceIdentifier]) -> RelationshipBuilder:
        return replace(self, data=tuple(identifiers), has_data=True)

    def with_links(self, links: Links) -> RelationshipBuilder:
        return replace(self, links=dict(links))

    def with_meta(self, meta: Mapping[str, Any]) -> RelationshipBuilder:
        return replace(self, meta=dict(meta))

    def build(self) -> Relationship:
        members = _present(links=self.links, meta=self.meta)
        if self.has_data:
            members["data"] = list(self.data) if isinstance(self.data, tuple) else self.data
        if not members:
            raise DocumentShapeError("relationship needs at least one of links, data and meta")
        return Relationship(**members)


@dataclass(frozen=True)
class ResourceBuilder:
    type: str
    id: str | None = None
    lid: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)
    relationships: Mapping[str, Relationship] = field(default_factory=dict)
    links: Links | None = None
    meta: Mapping[str, Any] | None = None

    def with_id(self, id: str) -> ResourceBuilder:
        if self.lid is not None:
            raise ResourceIdentityError(f"{self.type!r} resource already has lid {self.lid!r}")
        return replace(self, id=id)

    def with_lid(self, lid: str) -> ResourceBuilder:
        if self.id is not None:
            raise ResourceIdentityError(f"{self.type!r} resource already has id {self.id!r}")
        return replace(self, lid=lid)

    def attribute(self, name: str, value: Any) -> ResourceBuilder:
        return replace(self, attributes={**self.attributes, name: value})

    def with_attributes(self, attributes: Mapping[str, Any]) -> ResourceBuilder:
        return replace(self, attributes={**self.attributes, **attributes})

    def relationship(self, name: str, relationship: Relationship | RelationshipBuilder) -> ResourceBuilder:
        if isinstance(relationship, RelationshipBuilder):
            relationship = relationship.build()
        return replace(self, relationships={**self.relationships, name: relationship})

    def with_links(self, links: Links) -> ResourceBuilder:
        return replace(self, links=dict(links))

    def with_meta(self, meta: Mapping[str, Any]) -> ResourceBuilder:
        return replace(self, meta=dict(meta))

    def build(self) -> Resource:
        if (self.id is None) == (self.lid is None):
            raise ResourceIdentityError(f"{self.type!r} resource needs exactly one of id and lid")
        members = _present(
            type=self.type,
            id=self.id,
            lid=self.lid,
            links=self.links,
            meta=self.meta,
            relationships=dict(self.relationships) or None,
        )
        return Resource(attributes=dict(self.attributes), **members)


@dataclass(frozen=True)
class ErrorBuilder:
    id: str | None = None
    status: str | None = None
    code: str | None = None
    title: str | None = None
    detail: str | None = None
    source: ErrorSource | None = None
    links: Links | None = None
    meta: Mapping[str, Any] | None = None

    def with_status(self, status: int | str) -> ErrorBuilder:
        return replace(self, status=str(status))

    def with_code(self, code: str) -> ErrorBuilder:
        return replace(self, code=code)

    def with_title(self, title: str) -> ErrorBuilder:
        return replace(self, title=title)

    def with_detail(self, detail: str) -> ErrorBuilder:
        return replace(self, detail=detail)

    def with_id(self, id: str) -> ErrorBuilder:
        return replace(self, id=id)

    def pointer(self, pointer: str) -> ErrorBuilder:
        return replace(self, source=ErrorSource(pointer=pointer))

    def parameter(self, parameter: str) -> ErrorBuilder:
        return replace(self, source=ErrorSource(parameter=parameter))

    def header(self, header: str) -> ErrorBuilder:
        return replace(self, source=ErrorSource(header=header))

    def with_links(self, links: Links) -> ErrorBuilder:
        return replace(self, links=dict(links))

    def with_meta(self, meta: Mapping[str, Any]) -> ErrorBuilder:
        return replace(self, meta=dict(meta))

    def build(self) -> ErrorObject:
        return ErrorObject(
            **_present(
                id=self.id,
                status=self.status,
                code=self.code,
                title=self.title,
                detail=self.detail,
                source=self.source,
                links=self.links,
                meta=self.meta,
            )
        )


@dataclass(frozen=True)
class _DocumentBuilder:
    shape: ClassVar[str]

    version: str = "1.0"
    links: Links | None = None
    meta: Mapping[str, Any] | None = None

    def with_links(self: B, links: Links) -> B:
        return replace(self, links=dict(links))

    def with_meta(self: B, meta: Mapping[str, Any]) -> B:
        return replace(self, meta=dict(meta))

    def _members(self) -> dict[str, Any]:
        return _present(jsonapi=JsonApiObject(version=self.version), links=self.links, meta=self.meta)

    if not TYPE_CHECKING:
        # Invisible to type checkers, which reject these calls outright.
        def __getattr__(self, name: str) -> Any:
            if name in _DATA_SETTERS:
                raise DocumentShapeError(f"cannot call {name}() on a {self.shape} document builder")
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")


@dataclass(frozen=True)
class _PrimaryDataBuilder(_DocumentBuilder):
    included: tuple[Resource, ...] | None = None

    def include(self: P, *resources: Resource | ResourceBuilder) -> P:
        built = tuple(r.build() if isinstance(r, ResourceBuilder) else r for r in resources)
        return replace(self, included=(*(self.included or ()), *built))

    def _members(self) -> dict[str, Any]:
        members = super()._members()
        if self.included is not None:
            members["included"] = list(self.included)
        return members


@dataclass(frozen=True)
class SingleDocumentBuilder(_PrimaryDataBuilder):
    shape: ClassVar[str] = "single"

    data: Resource | None = None

    def resource(self, resource: Resource | ResourceBuilder | None) -> SingleDocumentBuilder:
        if isinstance(resource, ResourceBuilder):
            resource = resource.build()
        return replace(self, data=resource)

    def build(self) -> SingleDocument:
        return SingleDocument(data=self.data, **self._members())


@dataclass(frozen=True)
class CollectionDocumentBuilder(_PrimaryDataBuilder):
    shape: ClassVar[str] = "collection"

    data: tuple[Resource, ...] = ()

    def resources(self, resources: Iterable[Resource | ResourceBuilder]) -> CollectionDocumentBuilder:
        built = tuple(r.build() if isinstance(r, ResourceBuilder) else r for r in resources)
        return replace(self, data=built)

    def append(self, resource: Resource | ResourceBuilder) -> CollectionDocumentBuilder:
        if isinstance(resource, ResourceBuilder):
            resource = resource.build()
        return replace(self, data=(*self.data, resource))

    def build(self) -> CollectionDocument:
        return CollectionDocument(data=list(self.data), **self._members())


@dataclass(frozen=True)
class ErrorDocumentBuilder(_DocumentBuilder):
    shape: ClassVar[str] = "errors"

    error_list: tuple[ErrorObject, ...] = ()

    def error(self, error: ErrorObject | ErrorBuilder) -> ErrorDocumentBuilder:
        if isinstance(error, ErrorBuilder):
            error = error.build()
        return replace(self, error_list=(*self.error_list, error))

    def build(self) -> ErrorDocument:
        if not self.error_list:
            raise DocumentShapeError("error document needs at least one error")
        return ErrorDocument(errors=list(self.error_list), **self._members())


@dataclass(frozen=True)
class MetaDocumentBuilder(_DocumentBuilder):
    shape: ClassVar[str] = "meta"

    def build(self) -> MetaDocument:
        if self.meta is None:
            raise DocumentShapeError("meta-only document needs meta")
        return MetaDocument(**self._members())


class DocumentBuilder:
    """Entry points; each factory commits to one document shape."""

    @staticmethod
    def single(version: str = "1.0") -> SingleDocumentBuilder:
        return SingleDocumentBuilder(version=version)

    @staticmethod
    def collection(version: str = "1.0") -> CollectionDocumentBuilder:
        return CollectionDocumentBuilder(version=version)

    @staticmethod
    def errors(version: str = "1.0") -> ErrorDocumentBuilder:
        return ErrorDocumentBuilder(version=version)

    @staticmethod
    def meta_only(meta: Mapping[str, Any] | None = None, version: str = "1.0") -> MetaDocumentBuilder:
        return MetaDocumentBuilder(version=version, meta=dict(meta) if meta is not None else None)

"""Resource descriptors: how raw records map onto JSON:API resources."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from jsonapi_core.core.builder import RelationshipBuilder, ResourceBuilder
from jsonapi_core.core.document import Resource
from jsonapi_core.core.query import Query
from jsonapi_core.exceptions import DescriptorError

AttributeType = Literal["boolean", "string", "number", "date", "object", "array", "unknown"]
RelationshipKind = Literal["to-one", "to-many"]

# Members a resource object reserves at its top level.
RESERVED_ATTRIBUTES = frozenset({"id", "type"})


@dataclass(frozen=True)
class RelationshipDescriptor:
    resource_id: str
    kind: RelationshipKind = "to-one"
    id_key: str = "id"
    foreign_key: str | None = None


@dataclass(frozen=True)
class ResourceDescriptor:
    resource_id: str
    base_url: str
    id_key: str | tuple[str, ...]
    attributes: Mapping[str, AttributeType] = field(default_factory=dict)
    list_attributes: tuple[str, ...] = ()
    relationships: Mapping[str, RelationshipDescriptor] = field(default_factory=dict)

    def url(self, id: str | None = None) -> str:
        collection = f"{self.base_url}/{self.resource_id}"
        return collection if id is None else f"{collection}/{id}"

    def record_id(self, record: Mapping[str, Any]) -> str:
        """Resource id of ``record``; composite keys are joined with ``-``."""
        keys = (self.id_key,) if isinstance(self.id_key, str) else self.id_key
        parts = []
        for key in keys:
            value = record.get(key)
            if value is None:
                raise DescriptorError(f"Missing required key field {key!r} in {self.resource_id!r} record")
            parts.append(str(value))
        return "-".join(parts)


@dataclass(frozen=True)
class DescriptorBuilder:
    """Fluent, immutable construction of a :class:`ResourceDescriptor`.

    Redefining an attribute, relationship, base URL or id key raises
    :class:`DescriptorError`, as does building without a base URL or id key.
    """

    resource_id: str
    base_url: str | None = None
    id_key: str | tuple[str, ...] | None = None
    attributes: Mapping[str, AttributeType] = field(default_factory=dict)
    list_attributes: tuple[str, ...] = ()
    relationships: Mapping[str, RelationshipDescriptor] = field(default_factory=dict)

    def with_base_url(self, url: str) -> DescriptorBuilder:
        if self.base_url is not None:
            raise DescriptorError(f"Base URL is already set to {self.base_url}.")
        return replace(self, base_url=url.rstrip("/"))

    def with_id_key(self, *keys: str) -> DescriptorBuilder:
        if self.id_key is not None:
            raise DescriptorError(f"ID key is already set to {self.id_key}.")
        if not keys:
            raise DescriptorError("ID key needs at least one field.")
        return replace(self, id_key=keys[0] if len(keys) == 1 else tuple(keys))

    def with_attribute(self, name: str, type: AttributeType = "string") -> DescriptorBuilder:
        if name in self.attributes:
            raise DescriptorError(f"Attribute {name} already exists.")
        if name in RESERVED_ATTRIBUTES:
            raise DescriptorError(f"Attribute name {name} is reserved.")
        return replace(self, attributes={**self.attributes, name: type})

    def with_attributes(self, attributes: Mapping[str, AttributeType]) -> DescriptorBuilder:
        builder = self
        for name, type in attributes.items():
            builder = builder.with_attribute(name, type)
        return builder

    def with_list_attributes(self, *names: str) -> DescriptorBuilder:
        return replace(self, list_attributes=tuple(names))

    def with_relationship(
        self,
        name: str,
        resource_id: str,
        kind: RelationshipKind = "to-one",
        id_key: str = "id",
        foreign_key: str | None = None,
    ) -> DescriptorBuilder:
        if name in self.relationships:
            raise DescriptorError(f"Relationship {name} already exists.")
        relationship = RelationshipDescriptor(resource_id, kind, id_key, foreign_key)
        return replace(self, relationships={**self.relationships, name: relationship})

    def build(self) -> ResourceDescriptor:
        if self.id_key is None:
            raise DescriptorError("ID key is not set.")
        if self.base_url is None:
            raise DescriptorError("Base URL is not set.")
        unknown = [name for name in self.list_attributes if name not in self.attributes]
        if unknown:
            raise DescriptorError(f"List attributes {unknown} are not declared attributes.")
        return ResourceDescriptor(
            resource_id=self.resource_id,
            base_url=self.base_url,
            id_key=self.id_key,
            attributes=dict(self.attributes),
            list_attributes=self.list_attributes,
            relationships=dict(self.relationships),
        )


def describe(resource_id: str) -> DescriptorBuilder:
    return DescriptorBuilder(resource_id=resource_id)


def to_resource(
    descriptor: ResourceDescriptor,
    record: Mapping[str, Any],
    id: str | None = None,
    fields: list[str] | None = None,
) -> Resource:
    """Turn a raw record into a resource object with ``self`` and relationship links.

    ``fields`` is the sparse fieldset for the descriptor's type; it restricts
    both attributes and relationships. An explicit ``id`` wins over the id key.
    """
    resource_id = id if id is not None else descriptor.record_id(record)
    selected = set(fields) if fields is not None else None

    attributes = {
        name: value
        for name, value in record.items()
        if name not in RESERVED_ATTRIBUTES and (selected is None or name in selected)
    }
    self_url = descriptor.url(resource_id)
    builder = (
        ResourceBuilder(type=descriptor.resource_id)
        .with_id(resource_id)
        .with_attributes(attributes)
        .with_links({"self": self_url})
    )
    for name in descriptor.relationships:
        if selected is not None and name not in selected:
            continue
        links = RelationshipBuilder().with_links(
            {"self": f"{self_url}/relationships/{name}", "related": f"{self_url}/{name}"}
        )
        builder = builder.relationship(name, links)
    return builder.build()


def with_default_fieldset(query: Query, descriptor: ResourceDescriptor) -> Query:
    """Fill ``fields[<type>]`` from the descriptor's list attributes when the client asked for none."""
    if query.fieldset(descriptor.resource_id) is not None or not descriptor.list_attributes:
        return query
    return query.with_fields(descriptor.resource_id, descriptor.list_attributes)

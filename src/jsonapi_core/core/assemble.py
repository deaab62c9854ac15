"""Glue from a parsed query and adapter results to a response document.

See https://jsonapi.org/format/#fetching-resources
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from jsonapi_core.config import DEFAULT_SETTINGS, Settings
from jsonapi_core.core.builder import DocumentBuilder, ErrorBuilder
from jsonapi_core.core.cursor import next_cursor
from jsonapi_core.core.descriptor import ResourceDescriptor, to_resource, with_default_fieldset
from jsonapi_core.core.document import CollectionDocument, Document, ErrorDocument, SingleDocument
from jsonapi_core.core.pagination import cursor_links, effective_offset_page, offset_links, offset_meta
from jsonapi_core.core.ports.adapter import JsonApiAdapter
from jsonapi_core.core.query import CursorPage, Query

logger = logging.getLogger(__name__)


def collection_document(
    descriptor: ResourceDescriptor,
    query: Query,
    records: Sequence[Mapping[str, Any]],
    total: int,
    settings: Settings | None = None,
    fields: list[str] | None = None,
) -> CollectionDocument:
    """Collection document with pagination links and ``total`` meta.

    ``fields`` overrides the query's fieldset for the resources themselves
    (e.g. a default fieldset), while links keep reflecting the client's query.
    """
    settings = settings or DEFAULT_SETTINGS
    url = descriptor.url()
    fieldset = fields if fields is not None else query.fieldset(descriptor.resource_id)
    resources = [to_resource(descriptor, record, fields=fieldset) for record in records]

    page = query.page
    meta: dict[str, Any]
    if isinstance(page, CursorPage):
        links = cursor_links(url, query, next_cursor(records, page, descriptor.id_key))
        meta = {"total": total}
    else:
        current = effective_offset_page(page, settings.default_page_limit)
        links = offset_links(url, query, total, settings.default_page_limit)
        meta = offset_meta(current.limit, current.offset, total)

    return (
        DocumentBuilder.collection(settings.jsonapi_version)
        .resources(resources)
        .with_links(links.to_dict())
        .with_meta(meta)
        .build()
    )


def single_document(
    descriptor: ResourceDescriptor,
    record: Mapping[str, Any] | None,
    id: str | None = None,
    settings: Settings | None = None,
    fields: list[str] | None = None,
) -> SingleDocument:
    """Single-resource document; a missing record yields ``"data": null``."""
    settings = settings or DEFAULT_SETTINGS
    builder = DocumentBuilder.single(settings.jsonapi_version)
    if record is not None:
        resource = to_resource(descriptor, record, id=id, fields=fields)
        builder = builder.resource(resource).with_links({"self": descriptor.url(resource.id)})
    elif id is not None:
        builder = builder.with_links({"self": descriptor.url(id)})
    return builder.build()


def not_found_document(descriptor: ResourceDescriptor, id: str, settings: Settings | None = None) -> ErrorDocument:
    settings = settings or DEFAULT_SETTINGS
    error = (
        ErrorBuilder()
        .with_status(404)
        .with_title("Not Found")
        .with_detail(f"Resource {descriptor.resource_id!r} with id {id!r} not found")
        .parameter("id")
    )
    return DocumentBuilder.errors(settings.jsonapi_version).error(error).build()


async def fetch_collection(
    adapter: JsonApiAdapter,
    descriptor: ResourceDescriptor,
    query: Query,
    settings: Settings | None = None,
) -> CollectionDocument:
    """Fetch one page and the total count concurrently, then assemble the document.

    The adapter sees the descriptor's default fieldset when the client asked
    for none; the links keep the client's own query.
    """
    settings = settings or DEFAULT_SETTINGS
    logger.debug("Fetching %s collection with query %s", descriptor.resource_id, query.as_dict())
    fetch_query = with_default_fieldset(query, descriptor)
    if fetch_query.page is None:
        fetch_query = fetch_query.with_page(effective_offset_page(None, settings.default_page_limit))
    records, total = await asyncio.gather(adapter.multiple(fetch_query), adapter.count(fetch_query))
    return collection_document(
        descriptor,
        query,
        records,
        total,
        settings,
        fields=fetch_query.fieldset(descriptor.resource_id),
    )


async def fetch_single(
    adapter: JsonApiAdapter,
    descriptor: ResourceDescriptor,
    id: str,
    query: Query | None = None,
    settings: Settings | None = None,
) -> Document:
    """Fetch one resource; a missing record yields a 404 error document."""
    query = query or Query()
    fields = query.fieldset(descriptor.resource_id)
    # The adapter gets every declared attribute so it can project, even without a fieldset.
    record = await adapter.single(id, fields if fields is not None else list(descriptor.attributes) or None)
    if record is None:
        logger.debug("Resource %s with id %s not found", descriptor.resource_id, id)
        return not_found_document(descriptor, id, settings)
    return single_document(descriptor, record, id=id, settings=settings, fields=fields)

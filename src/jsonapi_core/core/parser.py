"""Parsing and serialization of JSON:API query strings.

``parse`` never raises on malformed optional input: every reserved parameter
falls back to its documented default on its own, so the HTTP layer does not
need parsing-specific exception handling.

See https://jsonapi.org/format/#fetching
"""

from __future__ import annotations

import logging
import re
from typing import Any

from jsonapi_core.config import DEFAULT_SETTINGS, Settings
from jsonapi_core.core import querystring
from jsonapi_core.core.query import (
    ASCENDING,
    DESCENDING,
    RESERVED_KEYS,
    CursorPage,
    Direction,
    OffsetPage,
    Page,
    Query,
)

logger = logging.getLogger(__name__)

MAX_SAFE_INTEGER = 2**53 - 1

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_safe_integer(value: object) -> int | None:
    """Parse a decimal integer that survives a round trip through a double.

    Returns ``None`` for anything else (fractions, exponents, garbage, or
    magnitudes beyond 2**53 - 1).
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _INTEGER_RE.match(text):
        return None
    number = int(text)
    if abs(number) > MAX_SAFE_INTEGER:
        return None
    return number


def parse_sort(value: object) -> dict[str, Direction]:
    """``-created,title`` -> ``{"created": -1, "title": 1}``, insertion ordered."""
    sorting: dict[str, Direction] = {}
    if not isinstance(value, str):
        return sorting
    for token in _split(value):
        if token.startswith("-"):
            name = token[1:].strip()
            if name:
                sorting[name] = DESCENDING
        else:
            sorting[token] = ASCENDING
    return sorting


def parse_page(value: object, settings: Settings = DEFAULT_SETTINGS) -> Page | None:
    """Resolve the ``page`` block into an offset or cursor page.

    A ``cursor`` key always selects cursor pagination, even next to ``offset``.
    Any invalid member drops the whole block (``None``) rather than clamping it.
    """
    if not isinstance(value, dict):
        return None

    limit: int | None = settings.default_page_limit
    if "limit" in value:
        limit = parse_safe_integer(value["limit"])

    if "cursor" in value:
        cursor = value["cursor"]
        if not isinstance(cursor, str):
            logger.debug("Dropping page block: non-string cursor %r", cursor)
            return None
        field = value.get("field")
        if not isinstance(field, str) or not field.strip():
            field = settings.default_cursor_field
        if limit is None or limit <= 0:
            logger.debug("Dropping cursor page block: invalid limit %r", value.get("limit"))
            return None
        return CursorPage(cursor=cursor, field=field.strip(), limit=limit)

    if "offset" in value or "limit" in value:
        offset: int | None = 0
        if "offset" in value:
            offset = parse_safe_integer(value["offset"])
        if offset is None or offset < 0 or limit is None or limit <= 0:
            logger.debug("Dropping offset page block: offset=%r limit=%r", value.get("offset"), value.get("limit"))
            return None
        return OffsetPage(offset=offset, limit=limit)

    return None


def parse_filter(value: object) -> dict[str, Any] | None:
    """Pass the ``filter`` tree through untouched; empty, scalar or list filters are absent."""
    if isinstance(value, dict):
        return value or None
    if value:
        logger.debug("Dropping filter that is not a mapping: %r", value)
    return None


def parse_fields(value: object) -> dict[str, dict[str, Any]]:
    """``fields[articles]=title,body`` -> ``{"articles": {"title": 1, "body": 1}}``."""
    fields: dict[str, dict[str, Any]] = {}
    if not isinstance(value, dict):
        return fields
    for resource_type, field_list in value.items():
        if not isinstance(field_list, str):
            logger.debug("Ignoring non-string fieldset for %r", resource_type)
            continue
        names = _split(field_list)
        if names:
            fields[resource_type] = {name: 1 for name in names}
    return fields


def parse_include(value: object) -> list[str] | None:
    """``author,comments.author`` -> ``["author", "comments.author"]``; duplicates are kept."""
    if not isinstance(value, str):
        return None
    return _split(value)


def parse(raw: str, settings: Settings | None = None) -> Query:
    """Parse the query portion of a URL (without the leading ``?``) into a :class:`Query`.

    >>> parse("sort=-created,title&page[offset]=20&page[limit]=10").as_dict()
    {'sort': {'created': -1, 'title': 1}, 'fields': {}, 'page': {'offset': 20, 'limit': 10}}
    """
    settings = settings or DEFAULT_SETTINGS
    decoded = querystring.decode(raw, max_depth=settings.max_depth, parameter_limit=settings.parameter_limit)
    return Query(
        sort=parse_sort(decoded.get("sort")),
        page=parse_page(decoded.get("page"), settings),
        filter=parse_filter(decoded.get("filter")),
        fields=parse_fields(decoded.get("fields")),
        include=parse_include(decoded.get("include")),
        extras={key: value for key, value in decoded.items() if key not in RESERVED_KEYS},
    )


def serialize_sort(sort: dict[str, Direction]) -> str:
    return ",".join(f"-{name}" if direction == DESCENDING else name for name, direction in sort.items())


def serialize_page(page: Page) -> dict[str, Any]:
    if isinstance(page, CursorPage):
        return {"cursor": page.cursor, "field": page.field, "limit": page.limit}
    return {"offset": page.offset, "limit": page.limit}


def to_params(query: Query) -> dict[str, Any]:
    """Nested parameter mapping for ``query``, ready for :func:`querystring.encode`."""
    params: dict[str, Any] = {}
    if query.sort:
        params["sort"] = serialize_sort(query.sort)
    if query.page is not None:
        params["page"] = serialize_page(query.page)
    if query.filter:
        params["filter"] = query.filter
    fields = {kind: ",".join(names) for kind, names in query.fields.items() if names}
    if fields:
        params["fields"] = fields
    if query.include is not None:
        params["include"] = ",".join(query.include)
    for key, value in query.extras.items():
        if key not in RESERVED_KEYS:
            params[key] = value
    return params


def serialize(query: Query) -> str:
    """Render ``query`` back into a query string that :func:`parse` maps to an equal value."""
    return querystring.encode(to_params(query))

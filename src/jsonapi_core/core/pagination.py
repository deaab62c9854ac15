"""Pagination link arithmetic for JSON:API collections.

Offsets are computed fresh from ``(limit, offset, total)`` for every response;
``total`` may change between requests, so nothing here is cached. Every link
carries the full request query (sort, filter, fields, include and unknown
parameters) with only ``page`` replaced.

See https://jsonapi.org/format/#fetching-pagination
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from jsonapi_core.core.parser import serialize
from jsonapi_core.core.query import CursorPage, OffsetPage, Page, Query

T = TypeVar("T")


@dataclass(frozen=True)
class PageOffsets:
    """Offsets of the pages around the current one; ``None`` means the link is absent."""

    limit: int
    current: int
    first: int
    last: int | None
    prev: int | None
    next: int | None

    def items(self) -> list[tuple[str, int]]:
        named = [
            ("self", self.current),
            ("first", self.first),
            ("last", self.last),
            ("prev", self.prev),
            ("next", self.next),
        ]
        return [(name, offset) for name, offset in named if offset is not None]


def paginate(limit: int, offset: int, total: int) -> PageOffsets:
    """Compute link offsets for an offset-paginated collection.

    ``last`` is absent for an empty collection, ``next`` once ``offset + limit``
    reaches ``total`` and ``prev`` while ``offset - limit`` is negative. An
    offset past the end keeps its ``prev`` unclamped.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    if offset < 0:
        raise ValueError(f"offset must not be negative, got {offset}")
    if total < 0:
        raise ValueError(f"total must not be negative, got {total}")

    last = ((total - 1) // limit) * limit if total > 0 else None
    following = offset + limit
    preceding = offset - limit
    return PageOffsets(
        limit=limit,
        current=offset,
        first=0,
        last=last,
        prev=preceding if preceding >= 0 else None,
        next=following if following < total else None,
    )


class PaginationLinks(BaseModel):
    """``self``/``first`` are always present; the rest only when such a page exists."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    self_: str = Field(alias="self")
    first: str
    last: str | None = None
    prev: str | None = None
    next: str | None = None

    def to_dict(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


def page_url(url: str, query: Query) -> str:
    """Append the serialized ``query`` to ``url``."""
    qs = serialize(query)
    if not qs:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{qs}"


def effective_offset_page(page: Page | None, default_limit: int) -> OffsetPage:
    if isinstance(page, CursorPage):
        raise ValueError("offset pagination requested for a cursor page")
    return page if page is not None else OffsetPage(offset=0, limit=default_limit)


def offset_links(url: str, query: Query, total: int, default_limit: int = 10) -> PaginationLinks:
    """Pagination links for an offset-paginated collection at ``url``.

    A query without ``page`` is linked as if the caller's default page
    (offset 0, ``default_limit``) had been requested.
    """
    page = effective_offset_page(query.page, default_limit)
    offsets = paginate(page.limit, page.offset, total)
    hrefs = {
        name: page_url(url, query.with_page(OffsetPage(offset=offset, limit=page.limit)))
        for name, offset in offsets.items()
    }
    return PaginationLinks.model_validate(hrefs)


def offset_meta(limit: int, offset: int, total: int) -> dict[str, int]:
    return {"total": total, "limit": limit, "offset": offset}


def cursor_links(url: str, query: Query, next_cursor: str | None = None) -> PaginationLinks:
    """Links for a cursor-paginated collection; ``next`` only when a following cursor is known."""
    page = query.page
    if not isinstance(page, CursorPage):
        raise ValueError("cursor links requested for a query without a cursor page")
    links: dict[str, Any] = {
        "self": page_url(url, query),
        "first": page_url(url, query.with_page(page.model_copy(update={"cursor": ""}))),
    }
    if next_cursor is not None:
        links["next"] = page_url(url, query.with_page(page.model_copy(update={"cursor": next_cursor})))
    return PaginationLinks.model_validate(links)


def window(records: Sequence[T], page: Page | None, default_limit: int = 10) -> list[T]:
    """Limit ``records`` the same way the links describe them.

    Cursor pages are assumed to be positioned already, so only their limit applies.
    """
    if isinstance(page, CursorPage):
        return list(records[: page.limit])
    offset_page = effective_offset_page(page, default_limit)
    return list(records[offset_page.offset : offset_page.offset + offset_page.limit])

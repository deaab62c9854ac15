"""Typed representation of a parsed JSON:API query string."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Direction = Literal[1, -1]
ASCENDING: Direction = 1
DESCENDING: Direction = -1

RESERVED_KEYS = ("sort", "page", "filter", "fields", "include")


class OffsetPage(BaseModel):
    """Skip-count pagination: ``page[offset]`` + ``page[limit]``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    offset: int = Field(0, ge=0)
    limit: int = Field(10, gt=0)


class CursorPage(BaseModel):
    """Position-marker pagination: ``page[cursor]`` + ``page[field]`` + ``page[limit]``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cursor: str
    field: str = "id"
    limit: int = Field(10, gt=0)


Page = OffsetPage | CursorPage


class Query(BaseModel):
    """A request's query string, normalized.

    ``page``, ``filter`` and ``include`` are ``None`` when the request did not
    carry them; ``sort`` and ``fields`` are always mappings. Unreserved
    parameters live in ``extras`` under their original key.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sort: dict[str, Direction] = Field(default_factory=dict)
    page: OffsetPage | CursorPage | None = None
    filter: dict[str, Any] | None = None
    fields: dict[str, dict[str, Literal[1]]] = Field(default_factory=dict)
    include: list[str] | None = None
    extras: dict[str, Any] = Field(default_factory=dict)

    def with_page(self, page: Page | None) -> Query:
        return self.model_copy(update={"page": page})

    def with_fields(self, resource_type: str, names: list[str] | tuple[str, ...]) -> Query:
        """Return a copy whose sparse fieldset for ``resource_type`` is ``names``.

        An empty ``names`` removes the resource type instead of storing an empty mapping.
        """
        fields = {k: dict(v) for k, v in self.fields.items() if k != resource_type}
        if names:
            fields[resource_type] = {name: 1 for name in names}
        return self.model_copy(update={"fields": fields})

    def fieldset(self, resource_type: str) -> list[str] | None:
        selected = self.fields.get(resource_type)
        return list(selected) if selected else None

    def as_dict(self) -> dict[str, Any]:
        """Flat JSON-compatible shape with unreserved keys at the top level."""
        out: dict[str, Any] = {"sort": dict(self.sort), "fields": {k: dict(v) for k, v in self.fields.items()}}
        if self.page is not None:
            out["page"] = self.page.model_dump()
        if self.filter is not None:
            out["filter"] = self.filter
        if self.include is not None:
            out["include"] = list(self.include)
        for key, value in self.extras.items():
            out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Query:
        """Inverse of :meth:`as_dict`; ``page`` is dispatched on the presence of ``cursor``."""
        raw_page = data.get("page")
        page: Page | None = None
        if isinstance(raw_page, dict):
            page = CursorPage.model_validate(raw_page) if "cursor" in raw_page else OffsetPage.model_validate(raw_page)
        return cls(
            sort=data.get("sort") or {},
            page=page,
            filter=data.get("filter"),
            fields=data.get("fields") or {},
            include=data.get("include"),
            extras={k: v for k, v in data.items() if k not in RESERVED_KEYS},
        )

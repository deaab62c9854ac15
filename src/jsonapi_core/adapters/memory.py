import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from jsonapi_core.core.cursor import decode_cursor
from jsonapi_core.core.pagination import window
from jsonapi_core.core.ports.adapter import Record
from jsonapi_core.core.query import CursorPage, Query

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _matches(record: Mapping[str, Any], conditions: Mapping[str, Any]) -> bool:
    for key, expected in conditions.items():
        value = record.get(key)
        if isinstance(expected, Mapping):
            if not isinstance(value, Mapping) or not _matches(value, expected):
                return False
        elif isinstance(expected, list):
            if _text(value) not in expected:
                return False
        elif _text(value) != expected:
            return False
    return True


def _order(value: Any) -> tuple[bool, Any]:
    return (value is None, value)


def _sort_key(name: str) -> Any:
    def key(record: Mapping[str, Any]) -> tuple[bool, Any]:
        return _order(record.get(name))

    return key


class InMemoryAdapter:
    """Adapter over a list of dict records, for tests and demos.

    Filters compare the string form of record values (a list means "any of"),
    sorting is stable across keys, and cursors continue after the
    ``(field, id)`` pair they encode, in the same order the records are sorted.
    """

    def __init__(
        self,
        resource_type: str,
        records: Iterable[Mapping[str, Any]] = (),
        id_key: str = "id",
        default_limit: int = 10,
    ) -> None:
        self._resource_type = resource_type
        self._id_key = id_key
        self._default_limit = default_limit
        self._records: list[Record] = [dict(record) for record in records]

    def _matching(self, query: Query) -> list[Record]:
        records = [r for r in self._records if _matches(r, query.filter or {})]
        sort = dict(query.sort)
        if isinstance(query.page, CursorPage):
            sort.setdefault(query.page.field, 1)
            sort.setdefault(self._id_key, 1)
        for name, direction in reversed(list(sort.items())):
            records.sort(key=_sort_key(name), reverse=direction == -1)
        return records

    def _follows(self, record: Record, field: str, after: tuple[Any, Any], directions: Mapping[str, int]) -> bool:
        for name, bound in ((field, after[0]), (self._id_key, after[1])):
            value, mark = _order(record.get(name)), _order(bound)
            if value != mark:
                return value > mark if directions.get(name, 1) == 1 else value < mark
        return False

    def _project(self, record: Record, fields: list[str] | None) -> Record:
        if fields is None:
            return dict(record)
        keep = {self._id_key, *fields}
        return {k: v for k, v in record.items() if k in keep}

    async def count(self, query: Query) -> int:
        return len(self._matching(query))

    async def multiple(self, query: Query) -> list[Record]:
        records = self._matching(query)
        page = query.page
        if isinstance(page, CursorPage) and page.cursor:
            after = decode_cursor(page.cursor)
            records = [r for r in records if self._follows(r, page.field, after, query.sort)]
        fields = query.fieldset(self._resource_type)
        if fields is not None and isinstance(page, CursorPage):
            fields = [*fields, page.field]
        return [self._project(r, fields) for r in window(records, page, self._default_limit)]

    async def single(self, id: str, fields: list[str] | None = None) -> Record | None:
        for record in self._records:
            if _text(record.get(self._id_key)) == id:
                return self._project(record, fields)
        return None

    async def create(self, data: Mapping[str, Any]) -> str:
        record = dict(data)
        if record.get(self._id_key) is None:
            record[self._id_key] = str(uuid.uuid4())
        self._records.append(record)
        logger.debug("Created record %s", record[self._id_key])
        return _text(record[self._id_key])

    async def update(self, id: str, data: Mapping[str, Any]) -> bool:
        for record in self._records:
            if _text(record.get(self._id_key)) == id:
                record.update({k: v for k, v in data.items() if k != self._id_key})
                return True
        return False

    async def remove(self, id: str) -> bool:
        for index, record in enumerate(self._records):
            if _text(record.get(self._id_key)) == id:
                del self._records[index]
                return True
        return False

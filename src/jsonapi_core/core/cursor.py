"""Opaque cursor helpers for cursor-paginated collections.

A cursor carries the sort value of the last record of a page plus its id for
tie-breaking, serialized as url-safe base64 JSON. Both keep their JSON type, so
an adapter can compare them with the same ordering it sorts by. The engine
itself never interprets ``page[cursor]``; adapters that want opaque cursors use
these.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping, Sequence
from typing import Any

from jsonapi_core.core.query import CursorPage
from jsonapi_core.exceptions import InvalidCursorError

_SCALARS = (str, int, float, bool, type(None))


def encode_cursor(sort_value: Any, id_value: Any) -> str:
    """Encode a sort value and ID into an opaque base64 cursor string.

    Values JSON cannot represent (dates, for one) are stored as strings.
    """
    payload = json.dumps({"s": sort_value, "i": id_value}, separators=(",", ":"), default=str)
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(cursor: str) -> tuple[Any, Any]:
    """Decode a cursor string back into (sort_value, id_value).

    Raises ``InvalidCursorError`` if the cursor is malformed or carries
    anything but JSON scalars.
    """
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        sort_value, id_value = payload["s"], payload["i"]
    except (ValueError, KeyError, TypeError, UnicodeDecodeError) as exc:
        raise InvalidCursorError(f"Malformed cursor: {cursor!r}") from exc
    if not isinstance(sort_value, _SCALARS) or not isinstance(id_value, _SCALARS):
        raise InvalidCursorError(f"Malformed cursor: {cursor!r}")
    return sort_value, id_value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def next_cursor(
    records: Sequence[Mapping[str, Any]], page: CursorPage, id_key: str | Sequence[str] = "id"
) -> str | None:
    """Cursor continuing after ``records``, or ``None`` when the page was not full.

    Composite id keys are joined with ``-`` into a string id.
    """
    if not records or len(records) < page.limit:
        return None
    last = records[-1]
    if isinstance(id_key, str):
        id_value = last.get(id_key)
    else:
        id_value = "-".join(_text(last.get(key)) for key in id_key)
    return encode_cursor(last.get(page.field), id_value)

from collections.abc import Mapping
from typing import Any, Protocol

from jsonapi_core.core.query import Query

Record = dict[str, Any]


class JsonApiAdapter(Protocol):
    """Storage side of a JSON:API resource.

    ``multiple`` and ``count`` receive the same parsed query and should agree
    with each other at a single point in time.
    """

    async def count(self, query: Query) -> int: ...

    async def multiple(self, query: Query) -> list[Record]: ...

    async def single(self, id: str, fields: list[str] | None = None) -> Record | None: ...

    async def create(self, data: Mapping[str, Any]) -> str: ...

    async def update(self, id: str, data: Mapping[str, Any]) -> bool: ...

    async def remove(self, id: str) -> bool: ...

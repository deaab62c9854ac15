from __future__ import annotations

from fastapi import Depends
from starlette.requests import Request

from jsonapi_core.config import Settings, load_settings
from jsonapi_core.core.parser import parse
from jsonapi_core.core.query import Query

_settings: Settings | None = None


def get_settings() -> Settings:
    """Return process settings, reading the environment lazily on first call."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def json_query(request: Request, settings: Settings = Depends(get_settings)) -> Query:
    """Parse the request's raw query string; malformed optional parameters fall back to defaults."""
    return parse(request.url.query, settings)

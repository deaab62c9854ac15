import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Process-wide defaults applied by the parser, paginator and CLI."""

    default_page_limit: int = 10
    default_cursor_field: str = "id"
    max_depth: int = 10
    parameter_limit: int = 1000
    base_url: str = "http://localhost:8000"
    jsonapi_version: str = "1.0"


def load_settings() -> Settings:
    """Read settings from ``JSONAPI_*`` environment variables, falling back to defaults."""
    defaults = Settings()
    limit = _env_int("JSONAPI_DEFAULT_PAGE_LIMIT", defaults.default_page_limit)
    return Settings(
        default_page_limit=limit if limit > 0 else defaults.default_page_limit,
        default_cursor_field=os.getenv("JSONAPI_DEFAULT_CURSOR_FIELD") or defaults.default_cursor_field,
        max_depth=max(0, _env_int("JSONAPI_MAX_DEPTH", defaults.max_depth)),
        parameter_limit=max(1, _env_int("JSONAPI_PARAMETER_LIMIT", defaults.parameter_limit)),
        base_url=(os.getenv("JSONAPI_BASE_URL") or defaults.base_url).rstrip("/"),
    )


DEFAULT_SETTINGS = Settings()

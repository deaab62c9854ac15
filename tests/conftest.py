"""Shared fixtures and helpers for tests."""

import logging
from pathlib import Path
from typing import Any

import pytest

from jsonapi_core.adapters import InMemoryAdapter
from jsonapi_core.config import Settings
from jsonapi_core.core.descriptor import ResourceDescriptor, describe

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Articles fixture data
# ---------------------------------------------------------------------------

BASE_URL = "http://api.test"


def make_articles(count: int) -> list[dict[str, Any]]:
    return [
        {
            "id": f"{i:03d}",
            "title": f"Article {i}",
            "body": f"Body of article {i}",
            "status": "published" if i % 2 else "draft",
            "created": f"2024-01-{i % 28 + 1:02d}",
        }
        for i in range(1, count + 1)
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url=BASE_URL)


@pytest.fixture
def articles_descriptor() -> ResourceDescriptor:
    return (
        describe("articles")
        .with_base_url(BASE_URL)
        .with_id_key("id")
        .with_attributes({"title": "string", "body": "string", "status": "string", "created": "date"})
        .with_list_attributes("title", "status")
        .with_relationship("author", "people")
        .with_relationship("comments", "comments", kind="to-many", foreign_key="article")
        .build()
    )


@pytest.fixture
def articles() -> list[dict[str, Any]]:
    return make_articles(25)


@pytest.fixture
def adapter(articles: list[dict[str, Any]]) -> InMemoryAdapter:
    return InMemoryAdapter("articles", articles)


@pytest.fixture
def numbered_adapter() -> InMemoryAdapter:
    """Integer ids and scores, where string order differs from numeric order."""
    return InMemoryAdapter("scores", [{"id": i, "score": (i * 7) % 12} for i in range(1, 13)])

import json
import sys
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from jsonapi_core.config import load_settings
from jsonapi_core.core.pagination import PaginationLinks, cursor_links, offset_links
from jsonapi_core.core.parser import parse, serialize
from jsonapi_core.core.query import CursorPage, Query

console = Console()


def parse_command(
    query: Annotated[str, typer.Argument(help="Query string, with or without the leading '?'.")],
) -> None:
    """Print the parsed query as JSON."""
    parsed = parse(query.lstrip("?"), load_settings())
    console.print_json(json.dumps(parsed.as_dict()))


def serialize_command(
    data: Annotated[str, typer.Argument(help="Query as JSON, or '-' to read it from stdin.")],
) -> None:
    """Print the canonical query string for a JSON query."""
    text = sys.stdin.read() if data == "-" else data
    try:
        query = Query.from_dict(json.loads(text))
    except (json.JSONDecodeError, AttributeError, ValidationError) as exc:
        raise typer.BadParameter(f"not a valid query: {exc}") from exc
    typer.echo(serialize(query))


def _render_links(links: PaginationLinks) -> None:
    table = Table(show_lines=False)
    table.add_column("rel")
    table.add_column("href", overflow="fold")
    for rel, href in links.to_dict().items():
        table.add_row(rel, Text(href))
    console.print(table)


def links(
    url: Annotated[str, typer.Argument(help="Collection URL the links point at.")],
    total: Annotated[int, typer.Option(min=0, help="Total number of records in the collection.")],
    query: Annotated[str, typer.Option(help="Query string of the current request.")] = "",
    next_cursor: Annotated[str | None, typer.Option(help="Cursor of the following page.")] = None,
) -> None:
    """Show the pagination links for a collection page."""
    settings = load_settings()
    parsed = parse(query.lstrip("?"), settings)
    if isinstance(parsed.page, CursorPage):
        _render_links(cursor_links(url, parsed, next_cursor))
    else:
        _render_links(offset_links(url, parsed, total, settings.default_page_limit))

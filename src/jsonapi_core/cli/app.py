import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from jsonapi_core.cli.query import links, parse_command, serialize_command

app = typer.Typer(
    name="jsonapi-core",
    help="jsonapi-core CLI: parse, serialize and paginate JSON:API query strings.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log parser fallbacks at debug level.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


app.command("parse")(parse_command)
app.command("serialize")(serialize_command)
app.command("links")(links)


def main() -> None:
    app()

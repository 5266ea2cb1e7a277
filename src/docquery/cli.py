"""CLI interface for docquery.

Requires the 'cli' extra: pip install docquery[cli]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

try:
    import typer
    from rich.console import Console
    from rich.table import Table
except ImportError:
    print(
        "CLI dependencies not installed. Install with: pip install docquery[cli]",
        file=sys.stderr,
    )
    sys.exit(1)

from docquery import __version__
from docquery.backends.memory import InMemoryConnection
from docquery.context import SearchContext
from docquery.exceptions import DocQueryError
from docquery.mapping.typed import TypedDocumentMapping

app = typer.Typer(
    name="docquery",
    help="Typed queries over document search services.",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
) -> None:
    if version:
        console.print(f"docquery {__version__}")
        raise typer.Exit()


@app.command()
def info() -> None:
    """Show information about the docquery installation."""
    table = Table(title="docquery info")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Version", __version__)
    table.add_row("Python", sys.version.split()[0])

    for dep_name in ["pydantic", "typer", "rich"]:
        try:
            mod = __import__(dep_name)
            ver = getattr(mod, "__version__", "installed")
            table.add_row(dep_name, str(ver))
        except ImportError:
            table.add_row(dep_name, "[red]not installed[/red]")

    console.print(table)


def _parse_term(term: str) -> tuple[str, Any]:
    field, sep, raw = term.partition("=")
    if not sep or not field:
        msg = f"Expected field=value, got '{term}'"
        raise typer.BadParameter(msg, param_hint="--where")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return field, value


def _load_documents(path: Path) -> list[dict[str, Any]]:
    if not path.is_file():
        console.print(f"[red]Error: {path} does not exist[/red]")
        raise typer.Exit(code=1)
    try:
        documents = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        console.print(f"[red]Error: {path} is not valid JSON ({exc.msg})[/red]")
        raise typer.Exit(code=1) from exc
    if not isinstance(documents, list) or not all(isinstance(d, dict) for d in documents):
        console.print(f"[red]Error: {path} must contain a JSON array of objects[/red]")
        raise typer.Exit(code=1)
    return documents


def _print_documents(documents: list[dict[str, Any]]) -> None:
    columns: list[str] = []
    for doc in documents:
        columns.extend(key for key in doc if key not in columns)
    table = Table(title=f"{len(documents)} documents")
    for column in columns:
        table.add_column(column, style="cyan" if column == "id" else None)
    for doc in documents:
        table.add_row(*(json.dumps(doc[c]) if c in doc else "" for c in columns))
    console.print(table)


@app.command()
def search(
    path: Path = typer.Argument(..., help="JSON file holding an array of documents"),  # noqa: B008
    document_type: str = typer.Option("documents", "--type", "-t", help="Document type name"),
    where: list[str] = typer.Option(  # noqa: B008
        [], "--where", "-w", help="Filter as field=value (repeatable)"
    ),
    order_by: str | None = typer.Option(None, "--order-by", "-o", help="Field to sort by"),
    descending: bool = typer.Option(False, "--descending", help="Sort descending"),
    skip: int = typer.Option(0, "--skip", min=0, help="Documents to skip"),
    take: int | None = typer.Option(None, "--take", min=0, help="Maximum documents to return"),
    count: bool = typer.Option(False, "--count", "-c", help="Print the match count only"),
    select: str | None = typer.Option(None, "--select", "-s", help="Print a single field"),
) -> None:
    """Run a query over documents loaded from a JSON file."""
    connection = InMemoryConnection({document_type: _load_documents(path)})
    mapping = TypedDocumentMapping(camel_case_fields=False, type_names={dict: document_type})
    context = SearchContext(connection, mapping)

    query = context.query(dict).where(**dict(_parse_term(term) for term in where))
    if order_by is not None:
        query = query.order_by_descending(order_by) if descending else query.order_by(order_by)
    if skip:
        query = query.skip(skip)
    if take is not None:
        query = query.take(take)

    try:
        if count:
            console.print(query.count())
        elif select is not None:
            for value in query.select(select):
                console.print(json.dumps(value))
        else:
            _print_documents(query.to_list())
    except DocQueryError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()

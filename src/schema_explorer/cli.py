"""
Command-line interface for schema_explorer.

Provides commands to list cached schema metadata, analyze object
dependencies, refresh the metadata cache and run live catalog inspections.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from schema_explorer import __version__
from schema_explorer.config import Settings
from schema_explorer.errors import InvalidArgumentError
from schema_explorer.explorer import SchemaExplorer
from schema_explorer.models import ALL_KINDS, ObjectKind

console = Console()

KIND_CHOICE = click.Choice([kind.value for kind in ALL_KINDS], case_sensitive=False)

json_option = click.option("--json", "as_json", is_flag=True, help="Print JSON instead of tables")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def print_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def run(ctx: click.Context, action, *args, **kwargs) -> Any:
    """Call ``action`` on a fresh explorer, turning failures into CLI errors."""
    try:
        explorer = ctx.obj["factory"](ctx.obj["settings"])
        return action(explorer, *args, **kwargs)
    except InvalidArgumentError as e:
        raise click.UsageError(str(e), ctx=ctx)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="schema-explorer")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file",
)
@click.option("--conn", type=str, default=None, help="Oracle connection string (user/pwd@host:port/service)")
@click.option("--owner", type=str, default=None, help="Schema owner to scope catalog queries to")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for metadata snapshot files",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_file: Optional[Path],
    conn: Optional[str],
    owner: Optional[str],
    cache_dir: Optional[Path],
) -> None:
    """
    Schema Explorer - cached Oracle schema metadata and dependency analysis

    Lists tables, views, triggers, procedures and functions from an on-disk
    metadata cache and reports what depends on a given object.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    try:
        settings = Settings.load(
            config_file,
            connection_string=conn,
            schema_owner=owner,
            cache_dir=cache_dir,
        )
    except InvalidArgumentError as e:
        raise click.UsageError(str(e), ctx=ctx)
    ctx.obj["settings"] = settings
    ctx.obj.setdefault("factory", SchemaExplorer.from_settings)


@cli.command(name="list")
@click.argument("kind", type=KIND_CHOICE)
@click.option("-n", "--name", "names", multiple=True, help="Only objects matching this name (repeatable)")
@click.option("--definitions", is_flag=True, help="Include definitions in table output")
@json_option
@click.pass_context
def list_objects(
    ctx: click.Context,
    kind: str,
    names: Tuple[str, ...],
    definitions: bool,
    as_json: bool,
) -> None:
    """
    List cached objects of KIND, optionally filtered by name.

    Examples:

        schema-explorer list tables

        schema-explorer list triggers -n AUDIT --json
    """
    objects = run(
        ctx,
        lambda explorer: explorer.list_objects(kind, names=list(names) if names else None),
    )

    if as_json:
        print_json([obj.to_dict() for obj in objects])
        return

    table = Table(title=f"{kind.capitalize()} ({len(objects)})")
    table.add_column("Name", style="cyan")
    if definitions:
        table.add_column("Definition", style="green")
    for obj in objects:
        row = [obj.name]
        if definitions:
            row.append(obj.definition.strip())
        table.add_row(*row)
    console.print(table)


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("name")
@json_option
@click.pass_context
def definition(ctx: click.Context, kind: str, name: str, as_json: bool) -> None:
    """Fetch the definition of NAME straight from the catalog."""
    text = run(ctx, lambda explorer: explorer.get_definition(kind, name))

    if as_json:
        print_json({"kind": kind, "name": name, "definition": text})
    else:
        click.echo(text)


@cli.command()
@click.argument("object_name")
@click.argument("object_type")
@click.option("--expand", is_flag=True, help="Include definitions of dependent procedures, functions and triggers")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Maximum dependents expanded per type")
@json_option
@click.pass_context
def dependents(
    ctx: click.Context,
    object_name: str,
    object_type: str,
    expand: bool,
    limit: Optional[int],
    as_json: bool,
) -> None:
    """
    Show the objects that depend on OBJECT_NAME of OBJECT_TYPE.

    Example:

        schema-explorer dependents EMPLOYEES TABLE --expand
    """
    analysis = run(
        ctx,
        lambda explorer: explorer.get_dependents(object_name, object_type, expand=expand, limit=limit),
    )

    if as_json:
        print_json(analysis.to_dict())
        return

    dep_table = Table(title=f"Dependents of {analysis.object_type} {analysis.object_name}")
    dep_table.add_column("Name", style="cyan")
    dep_table.add_column("Type", style="green")
    for edge in analysis.edges:
        dep_table.add_row(edge.dependent_name, edge.dependent_type)
    console.print(dep_table)

    if not analysis.edges:
        console.print("\n[yellow]No dependents found.[/yellow]")

    for obj in analysis.expanded:
        console.print(f"\n[bold]{obj.kind.object_type} {obj.name}[/bold]")
        console.print(obj.definition.strip(), markup=False, highlight=False)


@cli.command()
@click.argument(
    "kind",
    type=click.Choice([k.value for k in ALL_KINDS] + ["all"], case_sensitive=False),
    default="all",
)
@json_option
@click.pass_context
def refresh(ctx: click.Context, kind: str, as_json: bool) -> None:
    """
    Drop and repopulate the metadata cache for KIND (default: all).

    With "all", kinds are refreshed in order and the command stops at the
    first failure; kinds already refreshed keep their new snapshots.
    """
    if kind.lower() != "all":
        counts = run(ctx, lambda explorer: explorer.refresh(kind))
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            disable=as_json,
        ) as progress:
            task = progress.add_task("Refreshing metadata cache...", total=len(ALL_KINDS))

            def on_refreshed(refreshed: ObjectKind, count: int) -> None:
                progress.update(task, advance=1, description=f"Refreshed {refreshed.value} ({count})")

            counts = run(ctx, lambda explorer: explorer.refresh(on_refreshed=on_refreshed))

    if as_json:
        print_json({refreshed.value: count for refreshed, count in counts.items()})
        return

    summary = Table(title="Refreshed Snapshots")
    summary.add_column("Kind", style="cyan")
    summary.add_column("Objects", style="green", justify="right")
    for refreshed, count in counts.items():
        summary.add_row(refreshed.value, str(count))
    console.print(summary)


def _print_records(title: str, records: List[Any], columns: List[str], as_json: bool) -> None:
    """Print inspection records as JSON or as a rich table of ``columns``."""
    if as_json:
        print_json([r.to_dict() for r in records])
        return

    table = Table(title=title)
    for column in columns:
        table.add_column(column.replace("_", " ").title())
    for record in records:
        data = record.to_dict()
        table.add_row(*[
            ", ".join(data[c]) if isinstance(data[c], list) else ("" if data[c] is None else str(data[c]))
            for c in columns
        ])
    console.print(table)


@cli.command()
@click.argument("table_name")
@json_option
@click.pass_context
def columns(ctx: click.Context, table_name: str, as_json: bool) -> None:
    """Show the columns of TABLE_NAME."""
    records = run(ctx, lambda explorer: explorer.inspector.get_columns(table_name))
    _print_records(
        f"Columns of {table_name.upper()}",
        records,
        ["name", "data_type", "nullable", "default_value", "data_length", "precision", "scale"],
        as_json,
    )


@cli.command()
@click.argument("table_name")
@json_option
@click.pass_context
def keys(ctx: click.Context, table_name: str, as_json: bool) -> None:
    """Show the primary and foreign key columns of TABLE_NAME."""
    records = run(
        ctx,
        lambda explorer: (
            explorer.inspector.get_primary_keys(table_name)
            + explorer.inspector.get_foreign_keys(table_name)
        ),
    )
    _print_records(
        f"Keys of {table_name.upper()}",
        records,
        ["key_type", "constraint_name", "column_name", "referenced_constraint_name"],
        as_json,
    )


@cli.command()
@click.argument("table_name")
@json_option
@click.pass_context
def constraints(ctx: click.Context, table_name: str, as_json: bool) -> None:
    """Show the unique and check constraints of TABLE_NAME."""
    records = run(
        ctx,
        lambda explorer: (
            explorer.inspector.get_unique_constraints(table_name)
            + explorer.inspector.get_check_constraints(table_name)
        ),
    )
    _print_records(
        f"Constraints of {table_name.upper()}",
        records,
        ["constraint_type", "name", "column_name", "search_condition"],
        as_json,
    )


@cli.command()
@click.argument("table_name")
@json_option
@click.pass_context
def indexes(ctx: click.Context, table_name: str, as_json: bool) -> None:
    """Show the indexes of TABLE_NAME."""
    records = run(ctx, lambda explorer: explorer.inspector.list_indexes(table_name))
    _print_records(f"Indexes of {table_name.upper()}", records, ["name", "is_unique", "columns"], as_json)


@cli.command()
@json_option
@click.pass_context
def synonyms(ctx: click.Context, as_json: bool) -> None:
    """List synonyms and the objects they point to."""
    records = run(ctx, lambda explorer: explorer.inspector.list_synonyms())
    _print_records("Synonyms", records, ["name", "table_owner", "base_object_name"], as_json)


@cli.command()
@click.argument("object_name")
@json_option
@click.pass_context
def params(ctx: click.Context, object_name: str, as_json: bool) -> None:
    """Show the parameters of a standalone procedure or function."""
    records = run(ctx, lambda explorer: explorer.inspector.get_parameters(object_name))
    _print_records(
        f"Parameters of {object_name.upper()}",
        records,
        ["position", "name", "data_type", "direction"],
        as_json,
    )


@cli.command()
@click.argument("package_name")
@click.option("--body", is_flag=True, help="Show the package body instead of the specification")
@json_option
@click.pass_context
def package(ctx: click.Context, package_name: str, body: bool, as_json: bool) -> None:
    """Show the source of PACKAGE_NAME."""
    text = run(ctx, lambda explorer: explorer.inspector.get_package_source(package_name, body=body))

    if as_json:
        print_json({"package": package_name.upper(), "body": body, "source": text})
    else:
        click.echo(text)


if __name__ == "__main__":
    cli()

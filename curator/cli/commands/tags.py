"""Tag commands: browse the catalog and reconcile an entity's tags."""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from curator.app import dependencies
from curator.app.models.tag_contracts import Tag
from curator.app.services.association_targets import (
    ENTITY_KINDS,
    build_association_target,
)
from curator.app.services.remote_client import RemoteError
from curator.app.services.tag_reconciliation_service import (
    ReconciliationAbort,
    ReconciliationOutcome,
)

console = Console()
err_console = Console(stderr=True)

EXIT_PARTIAL_FAILURE = 1
EXIT_ABORTED = 2

KIND_CHOICE = click.Choice(ENTITY_KINDS, case_sensitive=False)


def _tag_table(title: str, rows: list[Tag]) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    for tag in rows:
        table.add_row(str(tag.id), tag.name)
    return table


@click.group()
def tags():
    """Browse tags and manage entity tags."""


@tags.command(name="list")
@click.option("--query", "-q", default=None, help="Filter tags by name.")
def list_tags(query: str | None):
    """List every tag in the catalog."""

    async def _run() -> list[Tag]:
        async with dependencies.build_remote_client() as client:
            return await dependencies.build_tag_catalog_service(client).list_all(query=query)

    try:
        rows = asyncio.run(_run())
    except RemoteError as exc:
        raise click.ClickException(str(exc)) from exc

    if not rows:
        console.print("[yellow]No tags found[/yellow]")
        return
    console.print(_tag_table("Tags", rows))


@tags.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("entity_id", type=click.IntRange(min=1))
def show(kind: str, entity_id: int):
    """Show the tags currently attached to an entity."""

    async def _run() -> tuple[Tag, ...]:
        async with dependencies.build_remote_client() as client:
            return await build_association_target(kind, client).list_tags(entity_id)

    try:
        rows = list(asyncio.run(_run()))
    except RemoteError as exc:
        raise click.ClickException(str(exc)) from exc

    if not rows:
        console.print(f"[yellow]{kind} {entity_id} has no tags[/yellow]")
        return
    console.print(_tag_table(f"Tags for {kind} {entity_id}", rows))


@tags.command(name="set")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("entity_id", type=click.IntRange(min=1))
@click.argument("tag_refs", nargs=-1)
@click.pass_context
def set_tags(ctx: click.Context, kind: str, entity_id: int, tag_refs: tuple[str, ...]):
    """Make an entity's tags exactly TAG_REFS (ids or names; none clears all tags)."""

    async def _run() -> ReconciliationOutcome:
        async with dependencies.build_remote_client() as client:
            desired = await dependencies.build_tag_catalog_service(client).resolve_tag_ids(
                tag_refs
            )
            target = build_association_target(kind, client)
            return await dependencies.get_reconciliation_service().reconcile(
                target, entity_id, desired
            )

    try:
        outcome = asyncio.run(_run())
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="TAG_REFS") from exc
    except ReconciliationAbort as exc:
        err_console.print(f"[red]Failed to update tags:[/red] {exc}")
        ctx.exit(EXIT_ABORTED)
    except RemoteError as exc:
        raise click.ClickException(str(exc)) from exc

    if not outcome.changed:
        console.print("[green]No changes[/green]")
        return
    if not outcome.has_failures:
        console.print(f"[green]Tags updated:[/green] {outcome.summary()}")
        return

    console.print(f"[yellow]Tags partially updated:[/yellow] {outcome.summary()}")
    failures = Table(title="Failed operations")
    failures.add_column("Operation")
    failures.add_column("Tag ID", justify="right", style="cyan")
    failures.add_column("Error", style="red")
    for failure in outcome.failures:
        failures.add_row(failure.operation, str(failure.tag_id), failure.error)
    err_console.print(failures)
    ctx.exit(EXIT_PARTIAL_FAILURE)

"""Content commands: read a page or a stored resource as markdown."""

import asyncio

import click
from rich.console import Console

from curator.app import dependencies
from curator.app.models.content_contracts import ContentError, NormalizedContent
from curator.app.services.content_fetch_service import (
    CONTENT_RESOURCE_KINDS,
    PageRef,
    ResourceRef,
    StoredContentRef,
    normalize_content_kind,
)

err_console = Console(stderr=True)

ELLIPSIS = "..."


def truncate_for_display(markdown: str, max_chars: int) -> str:
    if max_chars <= 0 or len(markdown) <= max_chars:
        return markdown
    return markdown[:max_chars].rstrip() + ELLIPSIS


def _fetch(ref: ResourceRef) -> NormalizedContent:
    async def _run() -> NormalizedContent:
        async with dependencies.build_remote_client() as client:
            return await dependencies.build_content_fetch_service(client).fetch(ref)

    return asyncio.run(_run())


def _render(
    ctx: click.Context,
    result: NormalizedContent,
    max_chars: int | None,
    fallback: str | None,
):
    if isinstance(result, ContentError):
        err_console.print(result.error, style="red", markup=False, highlight=False)
        if fallback:
            click.echo(fallback)
        ctx.exit(1)

    limit = dependencies.get_settings().content_preview_chars if max_chars is None else max_chars
    click.echo(truncate_for_display(result.markdown, limit))


_max_chars_option = click.option(
    "--max-chars",
    type=click.IntRange(min=0),
    default=None,
    help="Truncate output to this many characters (0 prints everything).",
)
_fallback_option = click.option(
    "--fallback",
    default=None,
    help="Text to print instead when the content cannot be fetched.",
)


@click.group()
def content():
    """Read normalized markdown content."""


@content.command()
@click.argument("url")
@_max_chars_option
@_fallback_option
@click.pass_context
def page(ctx: click.Context, url: str, max_chars: int | None, fallback: str | None):
    """Fetch a web page and print its main content as markdown."""
    if not url.startswith(("http://", "https://")):
        raise click.BadParameter("URL must be an absolute http/https URL", param_hint="URL")
    _render(ctx, _fetch(PageRef(url=url)), max_chars, fallback)


@content.command()
@click.argument("kind", type=click.Choice(CONTENT_RESOURCE_KINDS, case_sensitive=False))
@click.argument("resource_id", type=click.IntRange(min=1))
@_max_chars_option
@_fallback_option
@click.pass_context
def stored(
    ctx: click.Context,
    kind: str,
    resource_id: int,
    max_chars: int | None,
    fallback: str | None,
):
    """Print the server-normalized markdown of an article or URI."""
    ref = StoredContentRef(kind=normalize_content_kind(kind), resource_id=resource_id)
    _render(ctx, _fetch(ref), max_chars, fallback)

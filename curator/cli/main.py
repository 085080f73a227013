"""Main CLI entry point for curator."""

import click
from pydantic import ValidationError

from curator.app.dependencies import get_settings
from curator.app.logging_config import configure_application_logging
from curator.cli.commands import content, tags


@click.group()
@click.version_option(version="0.1.0")
def main():
    """curator - manage tags and read content from a curator server."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration:\n{exc}") from exc
    configure_application_logging(settings)


main.add_command(tags.tags)
main.add_command(content.content)


if __name__ == "__main__":
    main()

"""
CLI utilities.

Shared helpers for the command modules: version output, logging setup and
locating the search configuration.
"""

import logging
import platform
from pathlib import Path

import typer

from tokenized_search.core.manifest import DEFAULT_MANIFEST_NAME, SearchManifest, load_manifest


def get_version() -> str:
    """Get the package version (pyproject.toml in a checkout, metadata when installed)."""
    from tokenized_search import __version__

    return __version__


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"tokenized-search {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def load_search_config(config: Path | None) -> SearchManifest:
    """
    Load the search configuration.

    An explicit path must exist; otherwise ``search.toml`` in the current
    directory is used when present, and an empty configuration when not.
    """
    if config is not None:
        if not config.exists():
            typer.echo(f"Error: config file not found: {config}", err=True)
            raise typer.Exit(code=1)
        return load_manifest(config)

    default = Path.cwd() / DEFAULT_MANIFEST_NAME
    if default.exists():
        return load_manifest(default)
    return SearchManifest()

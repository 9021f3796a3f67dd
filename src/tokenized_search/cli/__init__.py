"""
tokenized-search CLI package.

- main.py: Typer app and the parse/normalize/validate commands
- utils.py: Shared utilities (version, logging, config lookup)
"""

from tokenized_search.cli.main import app
from tokenized_search.cli.utils import get_version, version_callback


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = [
    "app",
    "main",
    "get_version",
    "version_callback",
]

"""
Error types for tokenized search configuration and rule construction.

Parsing, serialization and validation never raise for user input: malformed
query text degrades to free text and a failing rule is skipped. These errors
cover the programmer-facing surface (configuration files and rule factories).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class TokenizedSearchError(Exception):
    """Base exception for all tokenized search errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ConfigError(TokenizedSearchError):
    """
    Raised when a search configuration cannot be loaded.

    Examples:
    - Malformed TOML
    - Delimiter that is not a single character
    - Unknown rule kind or strategy name
    - Field definition without operators
    """

    pass


class RuleError(TokenizedSearchError):
    """
    Raised when a validation rule is constructed with invalid arguments.

    Examples:
    - Unknown uniqueness constraint
    - Strategy that is not callable
    - Pattern that does not compile
    """

    pass


@dataclass
class ErrorContext:
    """
    Location of a configuration problem.

    Attributes:
        file: Path to the configuration file, if the config came from disk
        table: Dotted path of the offending table, e.g. ``rules[2]``
    """

    file: Path | None = None
    table: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "search.toml [rules[2]]"
        """
        location = str(self.file) if self.file else "<config>"
        if self.table:
            location += f" [{self.table}]"
        return location


def make_config_error(
    message: str,
    file: Path | None = None,
    table: str | None = None,
) -> ConfigError:
    """
    Helper to create a ConfigError with optional context.

    Args:
        message: Error description
        file: Optional configuration file path
        table: Optional dotted table path inside the file

    Returns:
        ConfigError with context if a location was provided
    """
    if file or table:
        return ConfigError(message, ErrorContext(file=file, table=table))
    return ConfigError(message)


def make_rule_error(message: str, rule_id: str | None = None) -> RuleError:
    """Helper to create a RuleError, prefixing the rule id when known."""
    if rule_id:
        return RuleError(f"rule {rule_id!r}: {message}")
    return RuleError(message)

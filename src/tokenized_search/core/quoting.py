"""
Quote-aware string scanning for query text.

Conventions:
- Double quotes delimit strings that may contain spaces
- Inside quotes a backslash escapes the next character: ``\\"`` is a literal
  quote, ``\\\\`` a literal backslash
- Outside quotes a backslash is an ordinary character
- ``ATOM_BOUNDARY`` marks an atomic non-text unit (an already rendered token)
  embedded in surrounding text; it always ends any open quote
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

QUOTE = '"'
ESCAPE = "\\"

# Object replacement character: stands in for an atomic inline unit
ATOM_BOUNDARY = "\ufffc"

_NBSP = "\u00a0"

# Escape sequences translated when unquoting; anything else stays as "\x"
_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "n": "\n",
    "t": "\t",
}

# on_char(char, index, in_quote) -> False stops the scan
CharCallback = Callable[[str, int, bool], bool | None]


@dataclass(frozen=True)
class QuotedString:
    """Result of unquoting a possibly quoted string."""

    value: str
    is_open: bool = False
    was_quoted: bool = False


def unescape_char(char: str) -> str:
    """Translate the character following a backslash inside quotes."""
    return _ESCAPES.get(char, ESCAPE + char)


def scan_quoted_string(text: str, on_char: CharCallback | None = None) -> bool:
    """
    Scan text left to right while tracking quote state.

    ``on_char`` is called for every character with the quote state that
    applies after that character (an opening quote reports True, a closing
    quote False). ``ATOM_BOUNDARY`` is reported as outside quotes and resets
    the state. Returning False from ``on_char`` stops the scan.

    Returns:
        True if the text ends inside an open quote

    Examples:
        >>> scan_quoted_string('"hello')
        True
        >>> scan_quoted_string('"hello" world')
        False
    """
    in_quote = False
    escaped = False

    for i, char in enumerate(text):
        if char == ATOM_BOUNDARY:
            if on_char is not None and on_char(char, i, False) is False:
                return in_quote
            in_quote = False
            escaped = False
            continue

        if in_quote and escaped:
            escaped = False
        elif in_quote and char == ESCAPE:
            escaped = True
        elif char == QUOTE:
            in_quote = not in_quote

        if on_char is not None and on_char(char, i, in_quote) is False:
            return in_quote

    return in_quote


def is_inside_quotes(text: str) -> bool:
    """
    Check whether the end of text sits inside an unclosed quoted string.

    Examples:
        >>> is_inside_quotes('"hello')
        True
        >>> is_inside_quotes('"hello\\\\"')
        True
        >>> is_inside_quotes('"hello"' + ATOM_BOUNDARY)
        False
    """
    if not text:
        return False
    return scan_quoted_string(text)


def find_last_word_boundary(text: str) -> int:
    """
    Find the index of the last word boundary in text.

    A space (or non-breaking space) is a boundary only outside quotes;
    ``ATOM_BOUNDARY`` is always a boundary.

    Returns:
        Index of the last boundary character, or -1 if there is none

    Examples:
        >>> find_last_word_boundary("hello world")
        5
        >>> find_last_word_boundary('"hello world"')
        -1
    """
    last = -1

    def visit(char: str, index: int, in_quote: bool) -> None:
        nonlocal last
        if char == ATOM_BOUNDARY:
            last = index
        elif not in_quote and char in (" ", _NBSP):
            last = index

    scan_quoted_string(text, visit)
    return last


def parse_quoted_string(text: str) -> QuotedString:
    """
    Unquote a possibly quoted string, handling escape sequences.

    Text that does not start with a quote is returned unchanged. Otherwise
    quoted runs are unescaped (``\\"``, ``\\\\``, ``\\n``, ``\\t``; other
    ``\\x`` sequences are kept literally) and the surrounding quotes dropped.
    ``is_open`` reports a missing closing quote; a dangling trailing
    backslash is dropped.

    Examples:
        >>> parse_quoted_string('"hello world"')
        QuotedString(value='hello world', is_open=False, was_quoted=True)
        >>> parse_quoted_string('"say \\\\"hi\\\\""').value
        'say "hi"'
        >>> parse_quoted_string('"hello')
        QuotedString(value='hello', is_open=True, was_quoted=True)
    """
    if not text:
        return QuotedString(value="")

    if not text.startswith(QUOTE):
        return QuotedString(value=text)

    chars: list[str] = []
    in_quote = False
    escaped = False

    for char in text:
        if escaped:
            chars.append(unescape_char(char))
            escaped = False
        elif not in_quote:
            if char == QUOTE:
                in_quote = True
            else:
                chars.append(char)
        elif char == ESCAPE:
            escaped = True
        elif char == QUOTE:
            in_quote = False
        else:
            chars.append(char)

    return QuotedString(
        value="".join(chars),
        is_open=in_quote or escaped,
        was_quoted=True,
    )


def escape_for_quotes(value: str) -> str:
    """
    Escape backslashes and quotes for use inside a quoted string.

    Examples:
        >>> escape_for_quotes('say "hi"')
        'say \\\\"hi\\\\"'
    """
    return value.replace(ESCAPE, ESCAPE * 2).replace(QUOTE, ESCAPE + QUOTE)


def quote_if_needed(value: str) -> str:
    """
    Quote a value only when it could not be read back unquoted.

    Spaces, quotes and backslashes require quoting; commas, colons and other
    punctuation do not.

    Examples:
        >>> quote_if_needed("hello")
        'hello'
        >>> quote_if_needed("hello world")
        '"hello world"'
        >>> quote_if_needed("a,b:c")
        'a,b:c'
    """
    if " " not in value and QUOTE not in value and ESCAPE not in value:
        return value
    return f"{QUOTE}{escape_for_quotes(value)}{QUOTE}"

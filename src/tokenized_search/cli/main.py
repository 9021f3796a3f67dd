"""
tokenized-search command line.

Commands:
  parse      Show the tokens a query lexes into
  normalize  Print the canonical form of a query
  validate   Run the configured rules and show the resulting plan
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from tokenized_search.core.errors import ConfigError
from tokenized_search.core.ir import FieldDefinition, FreeTextMode, Token, find_field
from tokenized_search.core.lexer import check_delimiter, parse_query_string, parse_query_to_tokens
from tokenized_search.core.manifest import SearchManifest
from tokenized_search.core.serializer import serialize_tokens
from tokenized_search.validation import (
    apply_plan,
    compute_editing_token_ids,
    reconcile_token_ids,
    validate_tokens,
)

from .utils import configure_logging, load_search_config, version_callback

app = typer.Typer(
    help="Parse, normalize and validate tokenized search queries.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Search configuration (default: ./search.toml)"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version information",
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
) -> None:
    """tokenized-search CLI main callback for global options."""
    configure_logging(verbose)


def _load(config: Path | None) -> SearchManifest:
    try:
        return load_search_config(config)
    except ConfigError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(code=1) from e


def _lex(query: str, manifest: SearchManifest) -> list[Token]:
    q = manifest.query
    return parse_query_string(
        query,
        manifest.fields,
        allow_unknown_fields=q.allow_unknown_fields,
        unknown_field_operators=q.unknown_field_operators,
        delimiter=q.delimiter,
    ).tokens


def _token_row(token: Token, fields: list[FieldDefinition]) -> tuple[str, ...]:
    fdef = find_field(fields, token.key)
    if token.invalid:
        status = f"[red]{token.invalid_reason or 'invalid'}[/red]"
    elif fdef is not None and not fdef.accepts_value(token.value):
        status = "[yellow]rejected[/yellow]"
    else:
        status = "[green]ok[/green]"
    return (str(token.pos), token.type.value, token.key, token.operator, token.value, status)


@app.command()
def parse(
    query: Annotated[str, typer.Argument(help="Query text")],
    config: ConfigOption = None,
    delimiter: Annotated[
        str | None, typer.Option("--delimiter", "-d", help="Override the configured delimiter")
    ] = None,
    allow_unknown_fields: Annotated[
        bool | None,
        typer.Option("--allow-unknown-fields/--known-fields-only", help="Accept unknown keys"),
    ] = None,
    free_text_mode: Annotated[
        FreeTextMode | None, typer.Option("--free-text-mode", help="How free text is kept")
    ] = None,
    output_json: JsonOption = False,
) -> None:
    """Show the tokens a query lexes into."""
    manifest = _load(config)
    q = manifest.query
    if delimiter is not None:
        try:
            q.delimiter = check_delimiter(delimiter)
        except ConfigError as e:
            console.print(f"[red]Invalid configuration:[/red] {e}")
            raise typer.Exit(code=1) from e
    if allow_unknown_fields is not None:
        q.allow_unknown_fields = allow_unknown_fields

    options: dict[str, Any] = {
        "allow_unknown_fields": q.allow_unknown_fields,
        "unknown_field_operators": q.unknown_field_operators,
        "delimiter": q.delimiter,
    }
    lexed = parse_query_string(query, manifest.fields, **options)
    tokens = parse_query_to_tokens(
        query, manifest.fields, free_text_mode=free_text_mode or q.free_text_mode, **options
    )

    if output_json:
        data = {
            "tokens": [t.model_dump(mode="json") for t in tokens],
            "has_incomplete_quote": lexed.has_incomplete_quote,
            "incomplete_quote_value": lexed.incomplete_quote_value,
        }
        console.print_json(json.dumps(data))
        return

    if not tokens:
        console.print("[dim]No tokens.[/dim]")
    else:
        table = Table(title="Tokens")
        table.add_column("Pos", style="dim")
        table.add_column("Type")
        table.add_column("Key")
        table.add_column("Operator")
        table.add_column("Value")
        table.add_column("Status")
        for token in tokens:
            table.add_row(*_token_row(token, manifest.fields))
        console.print(table)

    if lexed.has_incomplete_quote:
        console.print(
            f"[yellow]Incomplete quote:[/yellow] {lexed.incomplete_quote_value!r} is still open"
        )


@app.command()
def normalize(
    query: Annotated[str, typer.Argument(help="Query text")],
    config: ConfigOption = None,
) -> None:
    """Print the canonical form of a query."""
    manifest = _load(config)
    typer.echo(serialize_tokens(_lex(query, manifest), manifest.query.delimiter))


@app.command()
def validate(
    query: Annotated[str, typer.Argument(help="Query text")],
    previous: Annotated[
        str | None,
        typer.Option(
            "--previous",
            "-p",
            help="Previously committed query; only tokens that differ count as editing",
        ),
    ] = None,
    config: ConfigOption = None,
    output_json: JsonOption = False,
) -> None:
    """
    Run the configured rules against a query.

    Without --previous every token counts as editing, as on an initial
    load or paste.
    """
    manifest = _load(config)
    try:
        rules = manifest.build_rules()
    except ConfigError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(code=1) from e

    current = _lex(query, manifest)
    if previous is None:
        editing = compute_editing_token_ids([], current, force_check=True)
    else:
        before = _lex(previous, manifest)
        current = reconcile_token_ids(before, current)
        editing = compute_editing_token_ids(before, current)

    result = validate_tokens(current, manifest.fields, rules, editing)
    normalized = serialize_tokens(apply_plan(current, result.plan), manifest.query.delimiter)

    if output_json:
        data = {
            "violations": [v.model_dump(mode="json") for v in result.violations],
            "plan": result.plan.model_dump(mode="json"),
            "editing_token_ids": sorted(editing),
            "query": normalized,
        }
        console.print_json(json.dumps(data))
        return

    if not rules:
        console.print("[dim]No rules configured.[/dim]")

    if result.is_valid:
        console.print("[green]✓ No violations[/green]")
    else:
        by_id = {t.id: t for t in current}
        table = Table(title="Violations")
        table.add_column("Rule")
        table.add_column("Action")
        table.add_column("Reason")
        table.add_column("Message")
        table.add_column("Tokens")
        for v in result.violations:
            targets = ", ".join(
                serialize_tokens([by_id[tid]], manifest.query.delimiter)
                for tid in v.token_ids
                if tid in by_id
            )
            table.add_row(v.rule_id, v.action.value, v.reason, v.message or "", targets)
        console.print(table)

        deleted, marked = result.plan.deleted_ids, result.plan.marked_ids
        console.print(f"\n[dim]{len(deleted)} deleted, {len(marked)} marked[/dim]")

    typer.echo(f"Query: {normalized}")

"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tokenized_search import __version__
from tokenized_search.cli import app


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a CLI test runner."""
    return CliRunner()


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_normalize(cli_runner: CliRunner, search_toml: Path) -> None:
    result = cli_runner.invoke(
        app, ["normalize", 'status:is:"Inactive"   hello', "--config", str(search_toml)]
    )
    assert result.exit_code == 0
    assert result.stdout.strip() == "status:is:inactive hello"


def test_parse_json(cli_runner: CliRunner, search_toml: Path) -> None:
    result = cli_runner.invoke(
        app, ["parse", 'status:is:active "open quote', "--config", str(search_toml), "--json"]
    )
    assert result.exit_code == 0

    data = json.loads(result.stdout)
    assert [t["type"] for t in data["tokens"]] == ["filter", "freeText"]
    assert data["tokens"][0]["value"] == "active"
    assert data["has_incomplete_quote"] is True
    assert data["incomplete_quote_value"] == "open quote"


def test_parse_table(cli_runner: CliRunner, search_toml: Path) -> None:
    result = cli_runner.invoke(app, ["parse", "status:is:active", "--config", str(search_toml)])
    assert result.exit_code == 0
    assert "Tokens" in result.stdout
    assert "status" in result.stdout


def test_parse_unknown_fields_flag(cli_runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "empty.toml"
    config.write_text("")
    args = ["parse", "color:is:red", "--config", str(config), "--json"]

    strict = json.loads(cli_runner.invoke(app, args).stdout)
    assert strict["tokens"][0]["type"] == "freeText"

    loose = json.loads(cli_runner.invoke(app, [*args, "--allow-unknown-fields"]).stdout)
    assert loose["tokens"][0]["type"] == "filter"


def test_parse_bad_delimiter(cli_runner: CliRunner, search_toml: Path) -> None:
    result = cli_runner.invoke(
        app, ["parse", "x", "--config", str(search_toml), "--delimiter", "::"]
    )
    assert result.exit_code == 1


def test_validate_bulk_load_keeps_first(cli_runner: CliRunner, search_toml: Path) -> None:
    result = cli_runner.invoke(
        app,
        ["validate", "status:is:active status:is:inactive", "--config", str(search_toml), "--json"],
    )
    assert result.exit_code == 0

    data = json.loads(result.stdout)
    assert data["query"] == "status:is:active"
    assert len(data["plan"]["actions"]) == 1
    assert data["plan"]["actions"][0]["type"] == "delete"


def test_validate_with_previous_keeps_existing(cli_runner: CliRunner, search_toml: Path) -> None:
    result = cli_runner.invoke(
        app,
        [
            "validate",
            "status:is:inactive status:is:active",
            "--previous",
            "status:is:active",
            "--config",
            str(search_toml),
            "--json",
        ],
    )
    assert result.exit_code == 0
    assert json.loads(result.stdout)["query"] == "status:is:active"


def test_validate_marks_invalid_values(cli_runner: CliRunner, search_toml: Path) -> None:
    result = cli_runner.invoke(
        app, ["validate", "email:is:nope tag:is:a tag:is:a", "--config", str(search_toml)]
    )
    assert result.exit_code == 0
    assert "0 deleted, 1 marked" in result.stdout
    # tag opts out of unique-key
    assert "Query: email:is:nope tag:is:a tag:is:a" in result.stdout


def test_validate_clean_query(cli_runner: CliRunner, search_toml: Path) -> None:
    result = cli_runner.invoke(
        app, ["validate", "status:is:active", "--config", str(search_toml)]
    )
    assert result.exit_code == 0
    assert "No violations" in result.stdout


def test_invalid_config(cli_runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "search.toml"
    config.write_text('[[rules]]\nkind = "spellcheck"\n')

    result = cli_runner.invoke(app, ["validate", "x", "--config", str(config)])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.stdout


def test_missing_config(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(app, ["normalize", "x", "--config", str(tmp_path / "nope.toml")])
    assert result.exit_code == 1


def test_wrongly_typed_rule_option(cli_runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "search.toml"
    config.write_text('[[rules]]\nkind = "max_count"\nfield = "tag"\nmax = "three"\n')

    result = cli_runner.invoke(app, ["validate", "x", "--config", str(config)])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.stdout

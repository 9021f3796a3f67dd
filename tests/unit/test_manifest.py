"""Tests for search.toml loading and declarative rules."""

from pathlib import Path

import pytest

from tokenized_search.core.enum_values import exact_resolver
from tokenized_search.core.errors import ConfigError
from tokenized_search.core.ir import EnumOption, FieldType, FreeTextMode
from tokenized_search.core.manifest import (
    QueryConfig,
    RuleConfig,
    build_rules,
    load_manifest,
    parse_manifest,
)


class TestLoadManifest:
    def test_load(self, search_toml: Path) -> None:
        manifest = load_manifest(search_toml)

        assert manifest.path == search_toml
        assert manifest.query.delimiter == ":"
        assert manifest.query.free_text_mode == FreeTextMode.TOKENIZE
        assert [f.key for f in manifest.fields] == ["status", "email", "tag"]

        status = manifest.fields[0]
        assert status.type == FieldType.ENUM
        assert status.enum_values == ["active", EnumOption(value="inactive", label="Inactive")]
        assert manifest.fields[2].is_rule_disabled("unique-key")

    def test_rules(self, search_toml: Path) -> None:
        rules = load_manifest(search_toml).build_rules()

        assert [r.id for r in rules] == ["unique-key", "pattern-email", "enum-value"]
        assert rules[0].priority == 10

    def test_defaults(self) -> None:
        manifest = parse_manifest({})
        assert manifest.query == QueryConfig()
        assert manifest.query.unknown_field_operators == ["is"]
        assert manifest.fields == []
        assert manifest.rules == []

    def test_named_resolver(self) -> None:
        manifest = parse_manifest(
            {
                "fields": [
                    {
                        "key": "level",
                        "label": "Level",
                        "type": "enum",
                        "operators": ["is"],
                        "enum_values": ["low"],
                        "value_resolver": "exact",
                    }
                ]
            }
        )
        assert manifest.fields[0].value_resolver is exact_resolver


class TestManifestErrors:
    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "search.toml"
        path.write_text("[query\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_manifest(path)

    def test_bad_delimiter(self, tmp_path: Path) -> None:
        path = tmp_path / "search.toml"
        path.write_text('[query]\ndelimiter = "::"\n')
        with pytest.raises(ConfigError) as exc_info:
            load_manifest(path)
        assert exc_info.value.context is not None
        assert exc_info.value.context.table == "query"
        assert "search.toml [query]" in str(exc_info.value)

    def test_bad_free_text_mode(self) -> None:
        with pytest.raises(ConfigError, match="free_text_mode"):
            parse_manifest({"query": {"free_text_mode": "loud"}})

    def test_field_without_operators(self) -> None:
        with pytest.raises(ConfigError, match=r"fields\[0\]"):
            parse_manifest({"fields": [{"key": "x", "label": "X", "operators": []}]})

    def test_unknown_resolver(self) -> None:
        with pytest.raises(ConfigError, match="value_resolver"):
            parse_manifest(
                {"fields": [{"key": "x", "label": "X", "operators": ["is"], "value_resolver": "fuzzy"}]}
            )

    def test_rule_without_kind(self) -> None:
        with pytest.raises(ConfigError, match="kind"):
            parse_manifest({"rules": [{"strategy": "mark"}]})

    @pytest.mark.parametrize(
        ("table", "option"),
        [
            ({"kind": "max_count", "field": "tag", "max": "three"}, "max"),
            ({"kind": "max_count", "max": True}, "max"),
            ({"kind": "max_count", "field": 7, "max": 2}, "field"),
            ({"kind": "unique", "priority": "high"}, "priority"),
            ({"kind": "unique", "constraint": ["key"]}, "constraint"),
            ({"kind": "unique", "strategy": ["mark"]}, "strategy"),
            ({"kind": "pattern", "field": "email", "pattern": 5}, "pattern"),
            ({"kind": "enum", "message": 1}, "message"),
        ],
    )
    def test_wrongly_typed_rule_option(self, table: dict, option: str) -> None:
        manifest = parse_manifest({"rules": [table]}, Path("search.toml"))
        with pytest.raises(ConfigError, match=f"'{option}' must be") as exc_info:
            manifest.build_rules()
        assert exc_info.value.context is not None
        assert exc_info.value.context.table == "rules[0]"

    def test_unknown_constraint(self) -> None:
        with pytest.raises(ConfigError, match="unknown constraint"):
            build_rules([RuleConfig(kind="unique", options={"constraint": "fuzzy"})])

    def test_null_priority_is_accepted(self) -> None:
        [rule] = build_rules([RuleConfig(kind="enum", options={"priority": None})])
        assert rule.priority is None


class TestBuildRules:
    def test_all_kinds(self) -> None:
        rules = build_rules(
            [
                RuleConfig(kind="unique", options={"constraint": "exact", "strategy": "replace"}),
                RuleConfig(kind="max_count", options={"field": "tag", "max": 2, "strategy": "reject"}),
                RuleConfig(kind="pattern", options={"field": "email", "pattern": "@"}),
                RuleConfig(kind="enum", options={"priority": 3}),
            ]
        )
        assert [r.id for r in rules] == [
            "unique-exact",
            "max-count-tag",
            "pattern-email",
            "enum-value",
        ]
        assert rules[3].priority == 3

    def test_max_count_defaults_to_total(self) -> None:
        [rule] = build_rules([RuleConfig(kind="max_count", options={"max": 5})])
        assert rule.id == "max-count-total"

    def test_unknown_kind(self) -> None:
        with pytest.raises(ConfigError, match="Unknown rule kind"):
            build_rules([RuleConfig(kind="spellcheck", table="rules[0]")])

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ConfigError, match="Unknown strategy"):
            build_rules([RuleConfig(kind="max_count", options={"max": 1, "strategy": "replace"})])

    def test_missing_option(self) -> None:
        with pytest.raises(ConfigError, match="requires 'pattern'"):
            build_rules([RuleConfig(kind="pattern", options={"field": "email"})])

    def test_rule_error_becomes_config_error(self) -> None:
        with pytest.raises(ConfigError, match="unknown constraint"):
            build_rules([RuleConfig(kind="unique", options={"constraint": "value"}, table="rules[0]")])

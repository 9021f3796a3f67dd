import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tokenized_search.core.enum_values import ENUM_RESOLVERS
from tokenized_search.core.errors import RuleError, make_config_error
from tokenized_search.core.ir import DEFAULT_TOKEN_DELIMITER, FieldDefinition, FreeTextMode
from tokenized_search.core.operators import DEFAULT_UNKNOWN_FIELD_OPERATORS
from tokenized_search.validation.context import ValidationRule
from tokenized_search.validation.presets import MaxCount, RequireEnum, RequirePattern, Unique

DEFAULT_MANIFEST_NAME = "search.toml"


# =============================================================================
# Query Configuration
# =============================================================================


@dataclass
class QueryConfig:
    """How query text is lexed."""

    delimiter: str = DEFAULT_TOKEN_DELIMITER
    allow_unknown_fields: bool = False
    unknown_field_operators: list[str] = field(
        default_factory=lambda: list(DEFAULT_UNKNOWN_FIELD_OPERATORS)
    )
    free_text_mode: FreeTextMode = FreeTextMode.TOKENIZE


# =============================================================================
# Rule Configuration
# =============================================================================


@dataclass
class RuleConfig:
    """A declarative rule from a ``[[rules]]`` table."""

    kind: str  # "unique" | "max_count" | "pattern" | "enum"
    options: dict[str, Any] = field(default_factory=dict)
    table: str | None = None  # location for error messages, e.g. "rules[1]"


@dataclass
class SearchManifest:
    """Everything a ``search.toml`` declares."""

    query: QueryConfig = field(default_factory=QueryConfig)
    fields: list[FieldDefinition] = field(default_factory=list)
    rules: list[RuleConfig] = field(default_factory=list)
    path: Path | None = None

    def build_rules(self) -> list[ValidationRule]:
        return build_rules(self.rules, file=self.path)


# =============================================================================
# Builders
# =============================================================================

_STRATEGIES: dict[str, dict[str, Any]] = {
    "unique": {"mark": Unique.mark, "reject": Unique.reject, "replace": Unique.replace},
    "max_count": {"mark": MaxCount.mark, "reject": MaxCount.reject},
    "pattern": {"mark": RequirePattern.mark, "reject": RequirePattern.reject},
    "enum": {"mark": RequireEnum.mark, "reject": RequireEnum.reject},
}


def _strategy(config: RuleConfig, file: Path | None) -> Any:
    name = _option(config, "strategy", str, file, "mark")
    strategies = _STRATEGIES[config.kind]
    if name not in strategies:
        raise make_config_error(
            f"Unknown strategy {name!r} for {config.kind} rule, expected one of {sorted(strategies)}",
            file,
            config.table,
        )
    return strategies[name]


def _required(config: RuleConfig, key: str, file: Path | None) -> Any:
    if key not in config.options:
        raise make_config_error(f"{config.kind} rule requires '{key}'", file, config.table)
    return config.options[key]


def _typed(config: RuleConfig, key: str, value: Any, expected: type, file: Path | None) -> Any:
    # bool is an int subclass; TOML true/false is never a count or priority
    if isinstance(value, bool) or not isinstance(value, expected):
        raise make_config_error(
            f"{config.kind} rule option '{key}' must be {expected.__name__}, got {value!r}",
            file,
            config.table,
        )
    return value


def _option(
    config: RuleConfig, key: str, expected: type, file: Path | None, default: Any = None
) -> Any:
    value = config.options.get(key, default)
    if value is None:
        return None
    return _typed(config, key, value, expected, file)


def build_rule(config: RuleConfig, file: Path | None = None) -> ValidationRule:
    """Build one preset rule from its declaration."""
    if config.kind not in _STRATEGIES:
        raise make_config_error(
            f"Unknown rule kind {config.kind!r}, expected one of {sorted(_STRATEGIES)}",
            file,
            config.table,
        )

    strategy = _strategy(config, file)
    priority = _option(config, "priority", int, file)
    message = _option(config, "message", str, file)

    try:
        if config.kind == "unique":
            return Unique.rule(
                _option(config, "constraint", str, file, "key"), strategy, priority=priority
            )
        if config.kind == "max_count":
            return MaxCount.rule(
                _option(config, "field", str, file, "*"),
                _typed(config, "max", _required(config, "max", file), int, file),
                strategy,
                priority=priority,
                message=message,
            )
        if config.kind == "pattern":
            return RequirePattern.rule(
                _typed(config, "field", _required(config, "field", file), str, file),
                _typed(config, "pattern", _required(config, "pattern", file), str, file),
                strategy,
                priority=priority,
                message=message,
            )
        return RequireEnum.rule(strategy, priority=priority, message=message)
    except RuleError as e:
        raise make_config_error(e.message, file, config.table) from e


def build_rules(rule_configs: list[RuleConfig], file: Path | None = None) -> list[ValidationRule]:
    """Build preset rules in declaration order."""
    return [build_rule(config, file) for config in rule_configs]


def build_fields(
    field_tables: list[dict[str, Any]], file: Path | None = None
) -> list[FieldDefinition]:
    """
    Build field definitions from ``[[fields]]`` tables.

    A table may name a resolver (``value_resolver = "exact"``) from
    ``ENUM_RESOLVERS``; predicates cannot be expressed in TOML.
    """
    fields: list[FieldDefinition] = []

    for index, table in enumerate(field_tables):
        location = f"fields[{index}]"
        data = dict(table)

        resolver_name = data.pop("value_resolver", None)
        if resolver_name is not None:
            if resolver_name not in ENUM_RESOLVERS:
                raise make_config_error(
                    f"Unknown value_resolver {resolver_name!r}, expected one of {sorted(ENUM_RESOLVERS)}",
                    file,
                    location,
                )
            data["value_resolver"] = ENUM_RESOLVERS[resolver_name]

        try:
            fields.append(FieldDefinition(**data))
        except ValidationError as e:
            raise make_config_error(f"Invalid field definition: {e}", file, location) from e

    return fields


def _parse_query(data: dict[str, Any], file: Path | None) -> QueryConfig:
    delimiter = data.get("delimiter", DEFAULT_TOKEN_DELIMITER)
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise make_config_error(
            f"delimiter must be a single character, got {delimiter!r}", file, "query"
        )

    mode = data.get("free_text_mode", FreeTextMode.TOKENIZE.value)
    try:
        free_text_mode = FreeTextMode(mode)
    except ValueError as e:
        raise make_config_error(
            f"Unknown free_text_mode {mode!r}, expected one of {[m.value for m in FreeTextMode]}",
            file,
            "query",
        ) from e

    return QueryConfig(
        delimiter=delimiter,
        allow_unknown_fields=data.get("allow_unknown_fields", False),
        unknown_field_operators=data.get(
            "unknown_field_operators", list(DEFAULT_UNKNOWN_FIELD_OPERATORS)
        ),
        free_text_mode=free_text_mode,
    )


def parse_manifest(data: dict[str, Any], path: Path | None = None) -> SearchManifest:
    """Build a manifest from already-decoded TOML data."""
    rules: list[RuleConfig] = []
    for index, table in enumerate(data.get("rules", [])):
        options = dict(table)
        kind = options.pop("kind", None)
        if not kind:
            raise make_config_error("Rule is missing 'kind'", path, f"rules[{index}]")
        rules.append(RuleConfig(kind=kind, options=options, table=f"rules[{index}]"))

    return SearchManifest(
        query=_parse_query(data.get("query", {}), path),
        fields=build_fields(data.get("fields", []), path),
        rules=rules,
        path=path,
    )


def load_manifest(path: Path) -> SearchManifest:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise make_config_error(f"Invalid TOML: {e}", path) from e

    return parse_manifest(data, path)

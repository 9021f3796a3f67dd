"""
Enum value lookup.

Resolution is exact lookup, not fuzzy search: user input is matched against
each option's value or label and mapped to the option's internal value.
"""

from __future__ import annotations

from collections.abc import Sequence

from .ir import EnumOption, EnumResolverContext, EnumValue, EnumValueResolver


def as_enum_option(item: EnumValue) -> EnumOption:
    """Normalize a bare string enum value to an option whose label is the value."""
    if isinstance(item, EnumOption):
        return item
    return EnumOption(value=item, label=item)


def get_enum_value(item: EnumValue) -> str:
    """Internal value of an enum entry."""
    return item.value if isinstance(item, EnumOption) else item


def get_enum_label(item: EnumValue) -> str:
    """Display label of an enum entry."""
    return item.label if isinstance(item, EnumOption) else item


def case_insensitive_resolver(ctx: EnumResolverContext) -> str | None:
    """Case-insensitive match: ACTIVE and Active both resolve to active."""
    query = ctx.query.lower()
    if query == ctx.option.value.lower() or query == ctx.option.label.lower():
        return ctx.option.value
    return None


def exact_resolver(ctx: EnumResolverContext) -> str | None:
    """Only the exact value or label resolves."""
    if ctx.query == ctx.option.value or ctx.query == ctx.option.label:
        return ctx.option.value
    return None


ENUM_RESOLVERS: dict[str, EnumValueResolver] = {
    "case_insensitive": case_insensitive_resolver,
    "exact": exact_resolver,
}

DEFAULT_ENUM_RESOLVER: EnumValueResolver = case_insensitive_resolver


def resolve_enum_value(
    enum_values: Sequence[EnumValue] | None,
    query: str,
    resolver: EnumValueResolver | None = None,
) -> str:
    """
    Resolve user input to an internal enum value.

    The first option the resolver accepts wins. Input that matches nothing is
    returned unchanged.

    Examples:
        >>> opts = [EnumOption(value="active", label="Active")]
        >>> resolve_enum_value(opts, "ACTIVE")
        'active'
        >>> resolve_enum_value(opts, "act")
        'act'
    """
    if not query or not enum_values:
        return query

    resolve = resolver or DEFAULT_ENUM_RESOLVER
    for item in enum_values:
        resolved = resolve(EnumResolverContext(query=query, option=as_enum_option(item)))
        if resolved is not None:
            return resolved
    return query


def is_enum_member(
    enum_values: Sequence[EnumValue],
    query: str,
    resolver: EnumValueResolver | None = None,
) -> bool:
    """True if the input resolves to an option or already is an option value."""
    resolved = resolve_enum_value(enum_values, query, resolver)
    if resolved != query:
        return True
    return any(get_enum_value(item) == query for item in enum_values)

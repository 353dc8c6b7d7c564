"""Reading of the first-generation TOML configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib


@dataclass(frozen=True)
class TokenUnit:
    denom: str = ""
    exponent: int = 0
    aliases: list[str] = field(default_factory=list)
    price_id: str = ""


@dataclass(frozen=True)
class Token:
    name: str = ""
    units: list[TokenUnit] = field(default_factory=list)


@dataclass(frozen=True)
class PricefeedConfig:
    tokens: list[Token] = field(default_factory=list)


@dataclass(frozen=True)
class DistributionConfig:
    distribution_frequency: int = 0


@dataclass(frozen=True)
class TomlConfig:
    pricefeed: PricefeedConfig | None = None
    distribution: DistributionConfig | None = None


def _get(table: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = table.get(key, default)
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"{key}: expected {kind.__name__}, got {type(value).__name__}")
    return value


def _tables(table: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = _get(table, key, list, [])
    for item in items:
        if not isinstance(item, dict):
            raise ValueError(f"{key}: expected a list of tables")
    return items


def _unit(table: dict[str, Any]) -> TokenUnit:
    aliases = _get(table, "aliases", list, [])
    if not all(isinstance(alias, str) for alias in aliases):
        raise ValueError("aliases: expected a list of strings")
    return TokenUnit(
        denom=_get(table, "denom", str, ""),
        exponent=_get(table, "exponent", int, 0),
        aliases=list(aliases),
        price_id=_get(table, "price_id", str, ""),
    )


def _token(table: dict[str, Any]) -> Token:
    return Token(
        name=_get(table, "name", str, ""),
        units=[_unit(unit) for unit in _tables(table, "units")],
    )


def parse_config(data: bytes | str) -> TomlConfig:
    """Parse the pricefeed and distribution sections of a configuration document."""
    text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
    document = tomllib.loads(text)

    pricefeed = None
    if "pricefeed" in document:
        section = _get(document, "pricefeed", dict, {})
        pricefeed = PricefeedConfig(tokens=[_token(t) for t in _tables(section, "tokens")])

    distribution = None
    if "distribution" in document:
        section = _get(document, "distribution", dict, {})
        distribution = DistributionConfig(
            distribution_frequency=_get(section, "distribution_frequency", int, 0)
        )

    return TomlConfig(pricefeed=pricefeed, distribution=distribution)
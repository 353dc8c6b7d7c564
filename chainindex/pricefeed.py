"""Storage of tokens, their units and their prices."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from chainindex.store import Store, format_timestamp


@dataclass(frozen=True)
class TokenUnit:
    denom: str
    exponent: int
    aliases: list[str] = field(default_factory=list)
    price_id: str = ""


@dataclass(frozen=True)
class Token:
    name: str
    units: list[TokenUnit] = field(default_factory=list)


@dataclass(frozen=True)
class TokenPrice:
    unit_name: str
    price: float
    market_cap: int
    timestamp: datetime


def _price_rows(prices: Iterable[TokenPrice]) -> list[tuple]:
    return [
        (price.unit_name, price.price, price.market_cap, format_timestamp(price.timestamp))
        for price in prices
    ]


class PricefeedStore(Store):
    """Tokens, token units and token prices."""

    def get_tokens_price_id(self) -> list[str]:
        """Return the price ids of every stored token unit that has one."""
        rows = self.query("SELECT price_id FROM token_unit ORDER BY rowid")
        return [row["price_id"] for row in rows if row["price_id"]]

    def save_token(self, token: Token) -> None:
        """Store a token and its units; known ones are left as they are."""
        self.execute("INSERT INTO token (name) VALUES (?) ON CONFLICT DO NOTHING", (token.name,))

        rows = [
            (token.name, unit.denom, unit.exponent, json.dumps(list(unit.aliases)),
             unit.price_id or None)
            for unit in token.units
        ]
        if not rows:
            return
        sql = (
            "INSERT INTO token_unit (token_name, denom, exponent, aliases, price_id) "
            "VALUES (?, ?, ?, ?, ?) ON CONFLICT DO NOTHING"
        )
        with self._fail("error while saving token"):
            self._execute_many(sql, rows)

    def save_tokens_prices(self, prices: Iterable[TokenPrice]) -> None:
        """Store the latest prices, keeping for each unit the most recent one."""
        rows = _price_rows(prices)
        if not rows:
            return
        sql = """
INSERT INTO token_price (unit_name, price, market_cap, timestamp)
VALUES (?, ?, ?, ?)
ON CONFLICT (unit_name) DO UPDATE
    SET price = excluded.price,
        market_cap = excluded.market_cap,
        timestamp = excluded.timestamp
WHERE token_price.timestamp <= excluded.timestamp"""
        with self._fail("error while saving tokens prices"):
            self._execute_many(sql, rows)

    def save_token_prices_history(self, prices: Iterable[TokenPrice]) -> None:
        """Store prices as history; a unit's price at a known timestamp is replaced."""
        rows = _price_rows(prices)
        if not rows:
            return
        sql = """
INSERT INTO token_price_history (unit_name, price, market_cap, timestamp)
VALUES (?, ?, ?, ?)
ON CONFLICT (unit_name, timestamp) DO UPDATE
    SET price = excluded.price,
        market_cap = excluded.market_cap"""
        with self._fail("error while storing tokens price history"):
            self._execute_many(sql, rows)
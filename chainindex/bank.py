"""Storage of the bank module's total supply."""

from __future__ import annotations

from typing import Iterable

from chainindex.store import Coin, Store, encode_coins


class BankStore(Store):
    """Total supply of the chain."""

    def save_supply(self, coins: Iterable[Coin], height: int) -> None:
        """Store the total supply unless a newer one is already stored."""
        sql = """
INSERT INTO supply (coins, height)
VALUES (?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET coins = excluded.coins,
        height = excluded.height
WHERE supply.height <= excluded.height"""
        with self._fail("error while storing supply"):
            self.execute(sql, (encode_coins(coins), height))
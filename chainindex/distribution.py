"""Storage of the distribution module's community pool and parameters."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable

from chainindex.store import Coin, Store, encode_coins


@dataclass(frozen=True)
class DistributionParams:
    """The distribution module parameters seen at ``height``."""

    params: dict[str, Any] = field(default_factory=dict)
    height: int = 0


class DistributionStore(Store):
    """Community pool and distribution parameters."""

    def save_community_pool(self, coins: Iterable[Coin], height: int) -> None:
        """Store the community pool unless a newer one is already stored."""
        sql = """
INSERT INTO community_pool (coins, height)
VALUES (?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET coins = excluded.coins,
        height = excluded.height
WHERE community_pool.height <= excluded.height"""
        with self._fail("error while storing community pool"):
            self.execute(sql, (encode_coins(coins), height))

    def save_distribution_params(self, params: DistributionParams) -> None:
        """Store the distribution parameters unless newer ones are stored."""
        try:
            params_json = json.dumps(params.params)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"error while marshaling params: {exc}") from exc

        sql = """
INSERT INTO distribution_params (params, height)
VALUES (?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET params = excluded.params,
        height = excluded.height
WHERE distribution_params.height <= excluded.height"""
        with self._fail("error while storing distribution params"):
            self.execute(sql, (params_json, params.height))
"""Storage of staking parameters and the staking pool."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from chainindex.gov import Pool
from chainindex.store import Store, StoreError


@dataclass(frozen=True)
class StakingParams:
    """The staking module parameters seen at ``height``."""

    params: dict[str, Any] = field(default_factory=dict)
    height: int = 0


class StakingStore(Store):
    """Staking parameters and bonded token pool."""

    def save_staking_params(self, params: StakingParams) -> None:
        """Store the staking parameters unless newer ones are stored."""
        try:
            params_json = json.dumps(params.params)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"error while marshaling staking params: {exc}") from exc

        sql = """
INSERT INTO staking_params (params, height)
VALUES (?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET params = excluded.params,
        height = excluded.height
WHERE staking_params.height <= excluded.height"""
        with self._fail("error while storing staking params"):
            self.execute(sql, (params_json, params.height))

    def get_staking_params(self) -> StakingParams:
        """Return the stored staking parameters."""
        rows = self.query("SELECT * FROM staking_params LIMIT 1")
        if not rows:
            raise StoreError("no staking params found")
        return StakingParams(json.loads(rows[0]["params"]), rows[0]["height"])

    def save_staking_pool(self, pool: Pool) -> None:
        """Store the staking pool unless a newer one is stored."""
        sql = """
INSERT INTO staking_pool (bonded_tokens, not_bonded_tokens, height)
VALUES (?, ?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET bonded_tokens = excluded.bonded_tokens,
        not_bonded_tokens = excluded.not_bonded_tokens,
        height = excluded.height
WHERE staking_pool.height <= excluded.height"""
        with self._fail("error while storing staking pool"):
            self.execute(sql, (str(pool.bonded_tokens), str(pool.not_bonded_tokens), pool.height))
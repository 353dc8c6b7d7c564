"""Storage of the mint module's inflation and parameters."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from chainindex.store import Store


@dataclass(frozen=True)
class MintParams:
    """The mint module parameters seen at ``height``."""

    params: dict[str, Any] = field(default_factory=dict)
    height: int = 0


class MintStore(Store):
    """Inflation and mint parameters."""

    def save_inflation(self, inflation: Decimal | float | int | str, height: int) -> None:
        """Store the inflation unless a newer value is already stored."""
        try:
            value = Decimal(str(inflation))
        except InvalidOperation as exc:
            raise ValueError(f"invalid inflation value: {inflation!r}") from exc

        sql = """
INSERT INTO inflation (value, height)
VALUES (?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET value = excluded.value,
        height = excluded.height
WHERE inflation.height <= excluded.height"""
        with self._fail("error while storing inflation"):
            self.execute(sql, (str(value), height))

    def save_mint_params(self, params: MintParams) -> None:
        """Store the mint parameters unless newer ones are stored."""
        try:
            params_json = json.dumps(params.params)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"error while marshaling mint params: {exc}") from exc

        sql = """
INSERT INTO mint_params (params, height)
VALUES (?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET params = excluded.params,
        height = excluded.height
WHERE mint_params.height <= excluded.height"""
        with self._fail("error while storing mint params"):
            self.execute(sql, (params_json, params.height))
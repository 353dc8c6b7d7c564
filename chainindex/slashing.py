"""Storage of validator signing infos and slashing parameters."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from chainindex.store import Store, format_timestamp


@dataclass(frozen=True)
class ValidatorSigningInfo:
    validator_address: str
    start_height: int
    index_offset: int
    jailed_until: datetime
    tombstoned: bool
    missed_blocks_counter: int
    height: int


@dataclass(frozen=True)
class SlashingParams:
    """The slashing module parameters seen at ``height``."""

    params: dict[str, Any] = field(default_factory=dict)
    height: int = 0


class SlashingStore(Store):
    """Validator signing infos and slashing parameters."""

    def save_validators_signing_infos(self, infos: Iterable[ValidatorSigningInfo]) -> None:
        """Store signing infos, keeping for each validator the one of greatest height."""
        rows = [
            (
                info.validator_address,
                info.start_height,
                info.index_offset,
                format_timestamp(info.jailed_until),
                int(bool(info.tombstoned)),
                info.missed_blocks_counter,
                info.height,
            )
            for info in infos
        ]
        if not rows:
            return
        sql = """
INSERT INTO validator_signing_info
    (validator_address, start_height, index_offset, jailed_until, tombstoned,
     missed_blocks_counter, height)
VALUES (?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (validator_address) DO UPDATE
    SET validator_address = excluded.validator_address,
        start_height = excluded.start_height,
        index_offset = excluded.index_offset,
        jailed_until = excluded.jailed_until,
        tombstoned = excluded.tombstoned,
        missed_blocks_counter = excluded.missed_blocks_counter,
        height = excluded.height
WHERE validator_signing_info.height <= excluded.height"""
        with self._fail("error while storing validators signing infos"):
            self._execute_many(sql, rows)

    def save_slashing_params(self, params: SlashingParams) -> None:
        """Store the slashing parameters unless newer ones are stored."""
        params_json = json.dumps(params.params)
        sql = """
INSERT INTO slashing_params (params, height)
VALUES (?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET params = excluded.params,
        height = excluded.height
WHERE slashing_params.height <= excluded.height"""
        with self._fail("error while storing slashing params"):
            self.execute(sql, (params_json, params.height))
"""Storage of blocks, block-time averages and genesis data."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from chainindex.store import Store, StoreError, format_timestamp, parse_timestamp


@dataclass(frozen=True)
class Genesis:
    chain_id: str
    time: datetime
    initial_height: int


@dataclass(frozen=True)
class BlockRow:
    height: int
    hash: str
    num_txs: int
    total_gas: int
    proposer_address: str | None
    timestamp: datetime


def _block_row(row: dict[str, Any]) -> BlockRow:
    return BlockRow(
        height=row["height"],
        hash=row["hash"],
        num_txs=row["num_txs"],
        total_gas=row["total_gas"],
        proposer_address=row["proposer_address"],
        timestamp=parse_timestamp(row["timestamp"]),
    )


class ConsensusStore(Store):
    """Blocks, average block times and genesis information."""

    def get_last_block(self) -> BlockRow:
        """Return the stored block with the greatest height."""
        rows = self.query("SELECT * FROM block ORDER BY height DESC LIMIT 1")
        if not rows:
            raise StoreError("cannot get block, no blocks saved")
        return _block_row(rows[0])

    def get_last_block_height(self) -> int:
        """Return the greatest stored block height."""
        return self.get_last_block().height

    def _get_block_height_time(self, past_time: datetime) -> BlockRow:
        rows = self.query(
            "SELECT * FROM block WHERE timestamp <= ? ORDER BY timestamp DESC LIMIT 1",
            (format_timestamp(past_time),),
        )
        if not rows:
            raise StoreError("cannot get block time, no blocks saved")
        return _block_row(rows[0])

    def get_block_height_time_minute_ago(self, now: datetime) -> BlockRow:
        """Return the latest block produced at least a minute before ``now``."""
        return self._get_block_height_time(now - timedelta(minutes=1))

    def get_block_height_time_hour_ago(self, now: datetime) -> BlockRow:
        """Return the latest block produced at least an hour before ``now``."""
        return self._get_block_height_time(now - timedelta(hours=1))

    def get_block_height_time_day_ago(self, now: datetime) -> BlockRow:
        """Return the latest block produced at least a day before ``now``."""
        return self._get_block_height_time(now - timedelta(hours=24))

    def _save_average_time(self, table: str, label: str, average_time: float, height: int) -> None:
        sql = f"""
INSERT INTO {table} (average_time, height)
VALUES (?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET average_time = excluded.average_time,
        height = excluded.height
WHERE {table}.height <= excluded.height"""
        with self._fail(f"error while storing average block time {label}"):
            self.execute(sql, (average_time, height))

    def save_average_block_time_per_min(self, average_time: float, height: int) -> None:
        self._save_average_time("average_block_time_per_minute", "per minute", average_time, height)

    def save_average_block_time_per_hour(self, average_time: float, height: int) -> None:
        self._save_average_time("average_block_time_per_hour", "per hour", average_time, height)

    def save_average_block_time_per_day(self, average_time: float, height: int) -> None:
        self._save_average_time("average_block_time_per_day", "per day", average_time, height)

    def save_average_block_time_genesis(self, average_time: float, height: int) -> None:
        self._save_average_time(
            "average_block_time_from_genesis", "since genesis", average_time, height
        )

    def save_genesis(self, genesis: Genesis) -> None:
        """Store the genesis data, replacing any previous one."""
        sql = """
INSERT INTO genesis (time, chain_id, initial_height)
VALUES (?, ?, ?) ON CONFLICT (one_row_id) DO UPDATE
    SET time = excluded.time,
        initial_height = excluded.initial_height,
        chain_id = excluded.chain_id"""
        with self._fail("error while storing genesis"):
            self.execute(
                sql, (format_timestamp(genesis.time), genesis.chain_id, genesis.initial_height)
            )

    def get_genesis(self) -> Genesis:
        """Return the stored genesis data."""
        rows = self.query("SELECT * FROM genesis")
        if not rows:
            raise StoreError("no rows inside the genesis table")
        row = rows[0]
        return Genesis(row["chain_id"], parse_timestamp(row["time"]), row["initial_height"])
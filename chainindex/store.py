"""SQLite-backed storage shared by every indexer table."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, Sequence

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS account (
    address TEXT NOT NULL PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS vesting_account (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    type             TEXT NOT NULL,
    address          TEXT NOT NULL UNIQUE,
    original_vesting TEXT NOT NULL DEFAULT '[]',
    start_time       TEXT NOT NULL,
    end_time         TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS vesting_period (
    vesting_account_id INTEGER NOT NULL,
    period_order       INTEGER NOT NULL,
    length             INTEGER NOT NULL,
    amount             TEXT NOT NULL DEFAULT '[]'
);

CREATE TABLE IF NOT EXISTS validator (
    consensus_address TEXT NOT NULL PRIMARY KEY,
    consensus_pubkey  TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS block (
    height           INTEGER NOT NULL PRIMARY KEY,
    hash             TEXT NOT NULL UNIQUE,
    num_txs          INTEGER DEFAULT 0,
    total_gas        INTEGER DEFAULT 0,
    proposer_address TEXT,
    timestamp        TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS block_timestamp_index ON block (timestamp);

CREATE TABLE IF NOT EXISTS genesis (
    one_row_id     INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    chain_id       TEXT NOT NULL,
    time           TEXT NOT NULL,
    initial_height INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS average_block_time_per_minute (
    one_row_id   INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    average_time REAL NOT NULL,
    height       INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS average_block_time_per_hour (
    one_row_id   INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    average_time REAL NOT NULL,
    height       INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS average_block_time_per_day (
    one_row_id   INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    average_time REAL NOT NULL,
    height       INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS average_block_time_from_genesis (
    one_row_id   INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    average_time REAL NOT NULL,
    height       INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS supply (
    one_row_id INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    coins      TEXT NOT NULL,
    height     INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS community_pool (
    one_row_id INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    coins      TEXT NOT NULL,
    height     INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS distribution_params (
    one_row_id INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    params     TEXT NOT NULL,
    height     INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS fee_grant_allowance (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    grantee_address TEXT NOT NULL,
    granter_address TEXT NOT NULL,
    allowance       TEXT NOT NULL DEFAULT '{}',
    height          INTEGER NOT NULL,
    UNIQUE (grantee_address, granter_address)
);

CREATE TABLE IF NOT EXISTS gov_params (
    one_row_id     INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    deposit_params TEXT NOT NULL,
    voting_params  TEXT NOT NULL,
    tally_params   TEXT NOT NULL,
    height         INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS proposal (
    id                INTEGER NOT NULL PRIMARY KEY,
    title             TEXT NOT NULL,
    description       TEXT NOT NULL,
    content           TEXT NOT NULL,
    proposal_route    TEXT NOT NULL,
    proposal_type     TEXT NOT NULL,
    submit_time       TEXT NOT NULL,
    deposit_end_time  TEXT,
    voting_start_time TEXT,
    voting_end_time   TEXT,
    proposer_address  TEXT NOT NULL,
    status            TEXT
);

CREATE TABLE IF NOT EXISTS proposal_deposit (
    proposal_id       INTEGER NOT NULL,
    depositor_address TEXT,
    amount            TEXT,
    height            INTEGER NOT NULL,
    UNIQUE (proposal_id, depositor_address)
);

CREATE TABLE IF NOT EXISTS proposal_vote (
    proposal_id   INTEGER NOT NULL,
    voter_address TEXT NOT NULL,
    option        TEXT NOT NULL,
    height        INTEGER NOT NULL,
    UNIQUE (proposal_id, voter_address)
);

CREATE TABLE IF NOT EXISTS proposal_tally_result (
    proposal_id  INTEGER NOT NULL UNIQUE,
    yes          TEXT NOT NULL,
    abstain      TEXT NOT NULL,
    no           TEXT NOT NULL,
    no_with_veto TEXT NOT NULL,
    height       INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS proposal_staking_pool_snapshot (
    proposal_id       INTEGER NOT NULL UNIQUE,
    bonded_tokens     TEXT NOT NULL,
    not_bonded_tokens TEXT NOT NULL,
    height            INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS proposal_validator_status_snapshot (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    proposal_id       INTEGER,
    validator_address TEXT NOT NULL,
    voting_power      INTEGER NOT NULL,
    status            INTEGER NOT NULL,
    jailed            INTEGER NOT NULL,
    height            INTEGER NOT NULL,
    UNIQUE (proposal_id, validator_address)
);

CREATE TABLE IF NOT EXISTS inflation (
    one_row_id INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    value      REAL NOT NULL,
    height     INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS mint_params (
    one_row_id INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    params     TEXT NOT NULL,
    height     INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS token (
    name TEXT NOT NULL PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS token_unit (
    token_name TEXT NOT NULL,
    denom      TEXT NOT NULL UNIQUE,
    exponent   INTEGER NOT NULL,
    aliases    TEXT NOT NULL DEFAULT '[]',
    price_id   TEXT
);

CREATE TABLE IF NOT EXISTS token_price (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    unit_name  TEXT NOT NULL UNIQUE,
    price      REAL NOT NULL,
    market_cap INTEGER NOT NULL,
    timestamp  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS token_price_history (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    unit_name  TEXT NOT NULL,
    price      REAL NOT NULL,
    market_cap INTEGER NOT NULL,
    timestamp  TEXT NOT NULL,
    UNIQUE (unit_name, timestamp)
);

CREATE TABLE IF NOT EXISTS validator_signing_info (
    validator_address     TEXT NOT NULL PRIMARY KEY,
    start_height          INTEGER NOT NULL,
    index_offset          INTEGER NOT NULL,
    jailed_until          TEXT NOT NULL,
    tombstoned            INTEGER NOT NULL,
    missed_blocks_counter INTEGER NOT NULL,
    height                INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS slashing_params (
    one_row_id INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    params     TEXT NOT NULL,
    height     INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS staking_params (
    one_row_id INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    params     TEXT NOT NULL,
    height     INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS staking_pool (
    one_row_id        INTEGER NOT NULL DEFAULT 1 PRIMARY KEY CHECK (one_row_id = 1),
    bonded_tokens     TEXT NOT NULL,
    not_bonded_tokens TEXT NOT NULL,
    height            INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS validator_commission (
    validator_address   TEXT NOT NULL PRIMARY KEY,
    commission          TEXT NOT NULL,
    min_self_delegation TEXT NOT NULL,
    height              INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS validator_voting_power (
    validator_address TEXT NOT NULL PRIMARY KEY,
    voting_power      INTEGER NOT NULL,
    height            INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS validator_status (
    validator_address TEXT NOT NULL PRIMARY KEY,
    status            INTEGER NOT NULL,
    jailed            INTEGER NOT NULL,
    height            INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS double_sign_vote (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    type              INTEGER NOT NULL,
    height            INTEGER NOT NULL,
    round             INTEGER NOT NULL,
    block_id          TEXT NOT NULL,
    validator_address TEXT NOT NULL,
    validator_index   INTEGER NOT NULL,
    signature         TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS double_sign_evidence (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    height    INTEGER NOT NULL,
    vote_a_id INTEGER NOT NULL,
    vote_b_id INTEGER NOT NULL
);
"""


class StoreError(Exception):
    """Raised when a database operation fails."""


@dataclass(frozen=True)
class Coin:
    """An amount of a single denomination; the amount is kept as text."""

    denom: str
    amount: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", str(self.amount))


def encode_coins(coins: Iterable[Coin]) -> str:
    """Serialise coins into the text stored in coin columns."""
    return json.dumps([{"denom": coin.denom, "amount": coin.amount} for coin in coins])


def decode_coins(text: str | None) -> list[Coin]:
    """Read back coins written by :func:`encode_coins`."""
    if not text:
        return []
    return [Coin(item["denom"], item["amount"]) for item in json.loads(text)]


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as sortable UTC text; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    """Parse text written by :func:`format_timestamp` into an aware datetime."""
    return datetime.strptime(text, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


class Store:
    """A SQLite database holding the indexed chain data."""

    def __init__(self, path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(path)
        self._conn.row_factory = sqlite3.Row
        try:
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            self._conn.close()
            raise StoreError(f"error while creating schema: {exc}") from exc

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run one statement and commit it; return the number of rows touched."""
        try:
            with self._conn:
                cursor = self._conn.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return cursor.rowcount

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a query and return its rows as dictionaries."""
        try:
            cursor = self._conn.execute(sql, tuple(params))
            return [dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    def _execute_many(self, sql: str, rows: Iterable[Sequence[Any]]) -> None:
        try:
            with self._conn:
                self._conn.executemany(sql, [tuple(row) for row in rows])
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

    @staticmethod
    @contextmanager
    def _fail(message: str) -> Iterator[None]:
        try:
            yield
        except StoreError as exc:
            raise StoreError(f"{message}: {exc}") from exc
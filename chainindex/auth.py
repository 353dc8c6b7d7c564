"""Storage of accounts and vesting accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from chainindex.store import Coin, Store, encode_coins, format_timestamp


class VestingKind(str, Enum):
    """The message type of a vesting account, as stored in the type column."""

    BASE = "cosmos.vesting.v1beta1.BaseVestingAccount"
    CONTINUOUS = "cosmos.vesting.v1beta1.ContinuousVestingAccount"
    DELAYED = "cosmos.vesting.v1beta1.DelayedVestingAccount"
    PERIODIC = "cosmos.vesting.v1beta1.PeriodicVestingAccount"
    PERMANENT_LOCKED = "cosmos.vesting.v1beta1.PermanentLockedAccount"


@dataclass(frozen=True)
class Account:
    address: str


@dataclass
class VestingPeriod:
    length: int
    amount: list[Coin] = field(default_factory=list)


@dataclass
class VestingAccount:
    """A vesting account; start and end times are Unix seconds."""

    kind: VestingKind
    address: str
    original_vesting: list[Coin] = field(default_factory=list)
    start_time: int = 0
    end_time: int = 0
    periods: list[VestingPeriod] = field(default_factory=list)


def _unix(seconds: int) -> str:
    return format_timestamp(datetime.fromtimestamp(seconds, tz=timezone.utc))


class AuthStore(Store):
    """Accounts and vesting accounts."""

    def save_accounts(self, accounts: Iterable[Account]) -> None:
        """Store the given accounts, ignoring those already known."""
        rows = [(account.address,) for account in accounts]
        if not rows:
            return
        with self._fail("error while storing accounts"):
            self._execute_many(
                "INSERT INTO account (address) VALUES (?) ON CONFLICT DO NOTHING", rows
            )

    def save_vesting_accounts(self, accounts: Iterable[VestingAccount]) -> None:
        """Store continuous, delayed and periodic vesting accounts; others are skipped."""
        for account in accounts:
            if account.kind in (VestingKind.CONTINUOUS, VestingKind.DELAYED):
                self._store_vesting_account(account)
            elif account.kind is VestingKind.PERIODIC:
                row_id = self._store_vesting_account(account)
                self._store_vesting_periods(row_id, account.periods)

    def _store_vesting_account(self, account: VestingAccount) -> int:
        sql = """
INSERT INTO vesting_account (type, address, original_vesting, end_time, start_time)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT (address) DO UPDATE
    SET original_vesting = excluded.original_vesting,
        end_time = excluded.end_time,
        start_time = excluded.start_time"""
        with self._fail(f"error while saving Vesting Account of type {account.kind.value}"):
            self.execute(
                sql,
                (
                    account.kind.value,
                    account.address,
                    encode_coins(account.original_vesting),
                    _unix(account.end_time),
                    _unix(account.start_time),
                ),
            )
            rows = self.query(
                "SELECT id FROM vesting_account WHERE address = ?", (account.address,)
            )
        return rows[0]["id"]

    def _store_vesting_periods(self, row_id: int, periods: Iterable[VestingPeriod]) -> None:
        with self._fail("error while deleting vesting period"):
            self.execute("DELETE FROM vesting_period WHERE vesting_account_id = ?", (row_id,))

        rows = [
            (row_id, order, period.length, encode_coins(period.amount))
            for order, period in enumerate(periods)
        ]
        with self._fail("error while saving vesting periods"):
            self._execute_many(
                "INSERT INTO vesting_period (vesting_account_id, period_order, length, amount) "
                "VALUES (?, ?, ?, ?)",
                rows,
            )

    def store_base_vesting_account_from_msg(
        self, account: VestingAccount, tx_timestamp: datetime
    ) -> None:
        """Store a vesting account created by a message, starting at the transaction time."""
        sql = """
INSERT INTO vesting_account (type, address, original_vesting, start_time, end_time)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT (address) DO UPDATE
    SET type = excluded.type,
        original_vesting = excluded.original_vesting,
        start_time = excluded.start_time,
        end_time = excluded.end_time"""
        with self._fail("error while storing vesting account"):
            self.execute(
                sql,
                (
                    VestingKind.BASE.value,
                    account.address,
                    encode_coins(account.original_vesting),
                    format_timestamp(tx_timestamp),
                    _unix(account.end_time),
                ),
            )

    def get_accounts(self) -> list[str]:
        """Return the addresses of all stored accounts, in insertion order."""
        return [row["address"] for row in self.query("SELECT address FROM account ORDER BY rowid")]
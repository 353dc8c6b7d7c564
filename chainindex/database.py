"""The complete indexer database, with pruning of height-bound data."""

from __future__ import annotations

from chainindex.bank import BankStore
from chainindex.consensus import ConsensusStore
from chainindex.distribution import DistributionStore
from chainindex.feegrant import FeeGrantStore
from chainindex.gov import GovStore
from chainindex.mint import MintStore
from chainindex.pricefeed import PricefeedStore
from chainindex.slashing import SlashingStore
from chainindex.staking import StakingStore

_STAKING_TABLES = (
    ("staking_pool", "staking pool"),
    ("validator_commission", "validator commission"),
    ("validator_voting_power", "validator voting power"),
    ("validator_status", "validator status"),
    ("double_sign_vote", "double sign votes"),
    ("double_sign_evidence", "double sign evidence"),
)


class Database(
    ConsensusStore,
    BankStore,
    FeeGrantStore,
    GovStore,
    DistributionStore,
    MintStore,
    PricefeedStore,
    SlashingStore,
    StakingStore,
):
    """Every table of the indexer in one database."""

    def prune(self, height: int) -> None:
        """Delete the module data stored at exactly ``height``."""
        with self._fail("error while pruning bank"):
            self._delete_at("supply", "supply", height)

        with self._fail("error while pruning staking"):
            for table, label in _STAKING_TABLES:
                self._delete_at(table, label, height)

        with self._fail("error while pruning mint"):
            self._delete_at("inflation", "inflation", height)

        with self._fail("error while pruning distribution"):
            self._delete_at("community_pool", "community pool", height)

        with self._fail("error while pruning slashing"):
            self._delete_at("validator_signing_info", "validator signing info", height)
            self._delete_at("slashing_params", "slashing params", height)

    def _delete_at(self, table: str, label: str, height: int) -> None:
        with self._fail(f"error while pruning {label}"):
            self.execute(f"DELETE FROM {table} WHERE height = ?", (height,))
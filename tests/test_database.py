from datetime import datetime, timezone
from decimal import Decimal

import pytest

from chainindex.auth import Account
from chainindex.database import Database
from chainindex.gov import Pool
from chainindex.slashing import SlashingParams, ValidatorSigningInfo
from chainindex.store import Coin, StoreError


@pytest.fixture
def db():
    database = Database()
    yield database
    database.close()


def _count(db, table):
    return db.query(f"SELECT COUNT(*) AS n FROM {table}")[0]["n"]


def _fill(db, height):
    db.save_supply([Coin("uatom", "10")], height)
    db.save_staking_pool(Pool(1, 2, height))
    db.save_inflation(Decimal("0.1"), height)
    db.save_community_pool([Coin("uatom", "1.5")], height)
    db.save_slashing_params(SlashingParams({"signed_blocks_window": "10"}, height))
    db.save_validators_signing_infos([
        ValidatorSigningInfo(
            "cosmosvalcons1qqqqrezrl53hujmpdch6d805ac75n220ku09rl", 1, 1,
            datetime(2020, 1, 1, tzinfo=timezone.utc), False, 0, height,
        )
    ])
    db.execute(
        "INSERT INTO validator_voting_power (validator_address, voting_power, height) "
        "VALUES (?, ?, ?)",
        ("cosmosvalcons1qqqqrezrl53hujmpdch6d805ac75n220ku09rl", 100, height),
    )


PRUNED = (
    "supply",
    "staking_pool",
    "inflation",
    "community_pool",
    "slashing_params",
    "validator_signing_info",
    "validator_voting_power",
)


def test_prune_removes_data_at_height(db):
    _fill(db, 10)
    db.prune(10)
    assert {table: _count(db, table) for table in PRUNED} == {table: 0 for table in PRUNED}


def test_prune_keeps_other_heights(db):
    _fill(db, 10)
    db.prune(9)
    assert {table: _count(db, table) for table in PRUNED} == {table: 1 for table in PRUNED}


def test_prune_leaves_accounts(db):
    db.save_accounts([Account("cosmos1ltzt0z992ke6qgmtjxtygwzn36km4cy6cqdknt")])
    db.prune(0)
    assert db.get_accounts() == ["cosmos1ltzt0z992ke6qgmtjxtygwzn36km4cy6cqdknt"]


def test_prune_on_closed_database_raises():
    database = Database()
    database.close()
    with pytest.raises(StoreError, match="error while pruning bank: error while pruning supply"):
        database.prune(1)
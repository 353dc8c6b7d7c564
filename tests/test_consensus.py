from datetime import datetime, timedelta, timezone

import pytest

from chainindex.consensus import ConsensusStore, Genesis
from chainindex.store import StoreError, format_timestamp

VALCONS = "desmosvalcons1mxrd5cyjgpx5vfgltrdufq9wq4ynwc799ndrg8"
PUBKEY = "cosmosvalconspub1zcjduepq7mft6gfls57a0a42d7uhx656cckhfvtrlmw744jv4q0mvlv0dypskehfk8"
TIME_AGO = datetime(2020, 1, 1, 15, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    with ConsensusStore() as db:
        db.execute(
            "INSERT INTO validator (consensus_address, consensus_pubkey) VALUES (?, ?)",
            (VALCONS, PUBKEY),
        )
        yield db


def _insert_block(store, height, timestamp, block_hash=None):
    store.execute(
        "INSERT INTO block (height, hash, num_txs, total_gas, proposer_address, timestamp) "
        "VALUES (?, ?, '0', '0', ?, ?)",
        (height, block_hash or f"HASH{height}", VALCONS, format_timestamp(timestamp)),
    )


@pytest.mark.parametrize(
    "method, delta",
    [
        ("get_block_height_time_minute_ago", timedelta(minutes=1)),
        ("get_block_height_time_hour_ago", timedelta(hours=1)),
        ("get_block_height_time_day_ago", timedelta(hours=24)),
    ],
)
def test_get_block_height_time_ago(store, method, delta):
    _insert_block(store, 1000, TIME_AGO, "5EF85F2251F656BA0FBFED9AEFCBC44A9CCBCFD8B96897E74426E07229D2ADE0")

    result = getattr(store, method)(TIME_AGO + delta)

    assert result.timestamp == TIME_AGO
    assert result.height == 1000
    assert result.proposer_address == VALCONS


def test_get_block_height_time_picks_latest_eligible(store):
    _insert_block(store, 10, TIME_AGO - timedelta(minutes=5))
    _insert_block(store, 11, TIME_AGO)
    _insert_block(store, 12, TIME_AGO + timedelta(seconds=30))

    result = store.get_block_height_time_minute_ago(TIME_AGO + timedelta(minutes=1))
    assert result.height == 11


def test_get_block_height_time_without_old_block_raises(store):
    _insert_block(store, 1, TIME_AGO)
    with pytest.raises(StoreError):
        store.get_block_height_time_hour_ago(TIME_AGO)


def test_get_last_block_and_height(store):
    _insert_block(store, 5, TIME_AGO)
    _insert_block(store, 9, TIME_AGO + timedelta(seconds=6))
    _insert_block(store, 7, TIME_AGO + timedelta(seconds=12))

    assert store.get_last_block().height == 9
    assert store.get_last_block_height() == 9


def test_get_last_block_when_empty_raises(store):
    with pytest.raises(StoreError, match="no blocks saved"):
        store.get_last_block()
    with pytest.raises(StoreError):
        store.get_last_block_height()


@pytest.mark.parametrize(
    "method, table",
    [
        ("save_average_block_time_per_min", "average_block_time_per_minute"),
        ("save_average_block_time_per_hour", "average_block_time_per_hour"),
        ("save_average_block_time_per_day", "average_block_time_per_day"),
        ("save_average_block_time_genesis", "average_block_time_from_genesis"),
    ],
)
def test_save_average_block_time(store, method, table):
    save = getattr(store, method)

    def stored():
        rows = store.query(f"SELECT average_time, height FROM {table}")
        assert len(rows) == 1
        return rows[0]["average_time"], rows[0]["height"]

    save(5.05, 10)
    assert stored() == (5.05, 10)

    save(6, 9)
    assert stored() == (5.05, 10), "updating with a lower height should not change the data"

    save(10, 10)
    assert stored() == (10, 10), "updating with same height should change the data"

    save(20, 15)
    assert stored() == (20, 15), "updating with higher height should change the data"


def test_save_genesis_keeps_a_single_row(store):
    store.save_genesis(Genesis("testnet-1", datetime(2020, 1, 2, 15, 0, 0, tzinfo=timezone.utc), 0))
    store.save_genesis(Genesis("testnet-2", datetime(2020, 1, 1, 15, 0, 0, tzinfo=timezone.utc), 0))

    rows = store.query("SELECT * FROM genesis")
    assert len(rows) == 1
    assert store.get_genesis() == Genesis(
        "testnet-2", datetime(2020, 1, 1, 15, 0, 0, tzinfo=timezone.utc), 0
    )


def test_get_genesis(store):
    store.execute(
        "INSERT INTO genesis (chain_id, time, initial_height) VALUES (?, ?, ?)",
        ("testnet-1", format_timestamp(datetime(2020, 1, 1, 15, 0, 0, tzinfo=timezone.utc)), 0),
    )

    assert store.get_genesis() == Genesis(
        "testnet-1", datetime(2020, 1, 1, 15, 0, 0, tzinfo=timezone.utc), 0
    )


def test_get_genesis_when_empty_raises(store):
    with pytest.raises(StoreError, match="genesis"):
        store.get_genesis()
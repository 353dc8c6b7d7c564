from datetime import datetime, timezone

import pytest

from chainindex.auth import Account, AuthStore, VestingAccount, VestingKind, VestingPeriod
from chainindex.store import Coin, decode_coins, parse_timestamp

ADDRESS = "cosmos140xsjjg6pwkjp0xjz8zru7ytha60l5aee9nlf7"


@pytest.fixture
def store():
    with AuthStore() as db:
        yield db


def test_save_account_twice_keeps_one_row(store):
    store.save_accounts([Account(ADDRESS)])
    store.save_accounts([Account(ADDRESS)])

    rows = store.query("SELECT * FROM account")
    assert rows == [{"address": ADDRESS}]


def test_save_no_accounts_does_nothing(store):
    store.save_accounts([])
    assert store.get_accounts() == []


def test_get_accounts_returns_insertion_order(store):
    expected = [
        "cosmos1ltzt0z992ke6qgmtjxtygwzn36km4cy6cqdknt",
        "cosmos1re6zjpyczs0w7flrl6uacl0r4teqtyg62crjsn",
        "cosmos1eg47ue0l85lzkfgc4leske6hcah8cz3qajpjy2",
        "cosmos1495ghynrns8sxfnw8mj887pgh0c9z6c4lqkzme",
        "cosmos18fzr6adp3gjw43xu62vfhg248lepfwpf0pj2dm",
    ]
    for address in expected:
        store.execute("INSERT INTO account (address) VALUES (?)", (address,))

    assert store.get_accounts() == expected


def _periodic(periods):
    return VestingAccount(
        kind=VestingKind.PERIODIC,
        address=ADDRESS,
        original_vesting=[Coin("uatom", 100)],
        start_time=1_600_000_000,
        end_time=1_600_086_400,
        periods=periods,
    )


def test_periodic_vesting_account_stores_periods(store):
    account = _periodic([VestingPeriod(3600, [Coin("uatom", 40)]), VestingPeriod(7200, [Coin("uatom", 60)])])
    store.save_vesting_accounts([account])

    rows = store.query("SELECT * FROM vesting_account")
    assert len(rows) == 1
    assert rows[0]["type"] == VestingKind.PERIODIC.value
    assert rows[0]["address"] == ADDRESS
    assert decode_coins(rows[0]["original_vesting"]) == [Coin("uatom", "100")]
    assert parse_timestamp(rows[0]["start_time"]) == datetime.fromtimestamp(1_600_000_000, timezone.utc)
    assert parse_timestamp(rows[0]["end_time"]) == datetime.fromtimestamp(1_600_086_400, timezone.utc)

    periods = store.query(
        "SELECT vesting_account_id, period_order, length, amount FROM vesting_period ORDER BY period_order"
    )
    assert [(p["vesting_account_id"], p["period_order"], p["length"], decode_coins(p["amount"])) for p in periods] == [
        (rows[0]["id"], 0, 3600, [Coin("uatom", "40")]),
        (rows[0]["id"], 1, 7200, [Coin("uatom", "60")]),
    ]


def test_saving_periodic_account_again_replaces_periods(store):
    store.save_vesting_accounts([_periodic([VestingPeriod(3600, [Coin("uatom", 40)]), VestingPeriod(7200, [])])])
    store.save_vesting_accounts([_periodic([VestingPeriod(100, [Coin("uatom", 100)])])])

    assert len(store.query("SELECT * FROM vesting_account")) == 1
    periods = store.query("SELECT period_order, length FROM vesting_period")
    assert periods == [{"period_order": 0, "length": 100}]


@pytest.mark.parametrize("kind", [VestingKind.CONTINUOUS, VestingKind.DELAYED])
def test_continuous_and_delayed_accounts_have_no_periods(store, kind):
    account = VestingAccount(kind, ADDRESS, [Coin("uatom", 5)], 10, 20, [VestingPeriod(1, [])])
    store.save_vesting_accounts([account])

    rows = store.query("SELECT type, address FROM vesting_account")
    assert rows == [{"type": kind.value, "address": ADDRESS}]
    assert store.query("SELECT * FROM vesting_period") == []


def test_other_vesting_kinds_are_ignored(store):
    account = VestingAccount(VestingKind.PERMANENT_LOCKED, ADDRESS, [Coin("uatom", 5)])
    store.save_vesting_accounts([account])
    assert store.query("SELECT * FROM vesting_account") == []


def test_existing_account_keeps_type_on_update(store):
    store.save_vesting_accounts([VestingAccount(VestingKind.CONTINUOUS, ADDRESS, [Coin("uatom", 5)], 10, 20)])
    store.save_vesting_accounts([VestingAccount(VestingKind.DELAYED, ADDRESS, [Coin("uatom", 7)], 30, 40)])

    rows = store.query("SELECT * FROM vesting_account")
    assert len(rows) == 1
    assert rows[0]["type"] == VestingKind.CONTINUOUS.value
    assert decode_coins(rows[0]["original_vesting"]) == [Coin("uatom", "7")]
    assert parse_timestamp(rows[0]["start_time"]) == datetime.fromtimestamp(30, timezone.utc)


def test_base_vesting_account_from_msg_uses_tx_timestamp(store):
    tx_time = datetime(2020, 1, 1, 15, 0, 0, tzinfo=timezone.utc)
    account = VestingAccount(VestingKind.CONTINUOUS, ADDRESS, [Coin("uatom", 10)], 0, 1_700_000_000)
    store.store_base_vesting_account_from_msg(account, tx_time)

    rows = store.query("SELECT * FROM vesting_account")
    assert len(rows) == 1
    assert rows[0]["type"] == VestingKind.BASE.value
    assert parse_timestamp(rows[0]["start_time"]) == tx_time
    assert parse_timestamp(rows[0]["end_time"]) == datetime.fromtimestamp(1_700_000_000, timezone.utc)
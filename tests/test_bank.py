import pytest

from chainindex.bank import BankStore
from chainindex.store import Coin, decode_coins


@pytest.fixture
def store():
    with BankStore() as db:
        yield db


def _supply(store):
    rows = store.query("SELECT * FROM supply")
    assert len(rows) == 1, "supply table should contain only one row"
    return decode_coins(rows[0]["coins"]), rows[0]["height"]


def test_save_supply(store):
    original = [Coin("desmos", 10000), Coin("uatom", 15)]
    store.save_supply(original, 10)
    assert _supply(store) == (original, 10)

    # Lower height does not change the data
    store.save_supply([Coin("desmos", 10000), Coin("uatom", 15)], 9)
    assert _supply(store) == (original, 10)

    # Same height replaces the data
    coins = [Coin("uakash", 10)]
    store.save_supply(coins, 10)
    assert _supply(store) == (coins, 10)

    # Higher height replaces the data
    coins = [Coin("btc", 10)]
    store.save_supply(coins, 20)
    assert _supply(store) == (coins, 20)


def test_save_empty_supply(store):
    store.save_supply([], 3)
    assert _supply(store) == ([], 3)
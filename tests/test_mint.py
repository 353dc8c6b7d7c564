import json
from decimal import Decimal

import pytest

from chainindex.mint import MintParams, MintStore


@pytest.fixture
def store():
    db = MintStore()
    yield db
    db.close()


def _inflation(store):
    return [(row["value"], row["height"]) for row in store.query("SELECT * FROM inflation")]


def test_save_inflation_respects_height(store):
    store.save_inflation(Decimal("100.50"), 100)
    assert _inflation(store) == [(100.50, 100)]

    store.save_inflation(Decimal("200.00"), 90)
    assert _inflation(store) == [(100.50, 100)]

    store.save_inflation(Decimal("300.00"), 100)
    assert _inflation(store) == [(300.00, 100)]

    store.save_inflation(Decimal("400.00"), 110)
    assert _inflation(store) == [(400.00, 110)]


def test_save_inflation_rejects_garbage(store):
    with pytest.raises(ValueError):
        store.save_inflation("not-a-number", 1)


def test_save_mint_params_round_trip(store):
    params = {
        "mint_denom": "udaric",
        "inflation_rate_change": "0.400000000000000000",
        "inflation_max": "0.800000000000000000",
        "inflation_min": "0.400000000000000000",
        "goal_bonded": "0.800000000000000000",
        "blocks_per_year": "5006000",
    }
    store.save_mint_params(MintParams(params, 10))

    rows = store.query("SELECT * FROM mint_params")
    assert len(rows) == 1
    assert json.loads(rows[0]["params"]) == params
    assert rows[0]["height"] == 10


def test_save_mint_params_lower_height_ignored(store):
    store.save_mint_params(MintParams({"mint_denom": "udaric"}, 10))
    store.save_mint_params(MintParams({"mint_denom": "other"}, 5))
    rows = store.query("SELECT * FROM mint_params")
    assert json.loads(rows[0]["params"]) == {"mint_denom": "udaric"}
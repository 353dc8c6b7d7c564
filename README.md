# chainindex

`chainindex` is the storage layer of a blockchain indexer. It keeps the
state that an indexer collects while following a chain (accounts and
vesting accounts, token supply, governance proposals, deposits and votes,
staking and slashing data, mint and distribution parameters, token prices
and fee grants) in a SQLite database. Where a value is stored together
with the block height it was read at, a write with a lower height never
overwrites a newer one.

## Quick start

```python
from chainindex.database import Database
from chainindex.store import Coin

with Database("index.sqlite") as db:          # ":memory:" is the default
    db.save_supply([Coin("uatom", 15)], height=10)
    db.save_supply([Coin("uatom", 99)], height=9)   # ignored: lower height
    print(db.query("SELECT * FROM supply"))
```

Every store creates the whole schema when it is opened, so any store class
can be used on its own or through `Database`, which combines them all.

## Modules

| Module | Names | What it holds |
| --- | --- | --- |
| `chainindex.store` | `Store`, `Coin`, `StoreError`, `encode_coins`, `decode_coins`, `format_timestamp`, `parse_timestamp` | The connection (`execute`, `query`, `close`, context manager), the coin value type, the error raised by failed database operations, and the text encodings used for coins and times |
| `chainindex.auth` | `AuthStore`, `Account`, `VestingAccount`, `VestingPeriod`, `VestingKind` | Accounts and vesting accounts with their periods (`save_accounts`, `save_vesting_accounts`, `store_base_vesting_account_from_msg`, `get_accounts`) |
| `chainindex.bank` | `BankStore` | Total supply (`save_supply`) |
| `chainindex.consensus` | `ConsensusStore`, `Genesis`, `BlockRow` | Block lookups, average block times and genesis data (`get_last_block`, `get_last_block_height`, `get_block_height_time_minute_ago`, `get_block_height_time_hour_ago`, `get_block_height_time_day_ago`, `save_average_block_time_per_min`, `save_average_block_time_per_hour`, `save_average_block_time_per_day`, `save_average_block_time_genesis`, `save_genesis`, `get_genesis`) |
| `chainindex.distribution` | `DistributionStore`, `DistributionParams` | Community pool and distribution parameters (`save_community_pool`, `save_distribution_params`) |
| `chainindex.feegrant` | `FeeGrantStore`, `FeeGrant`, `GrantRemoval` | Fee grant allowances (`save_fee_grant_allowance`, `delete_fee_grant_allowance`) |
| `chainindex.gov` | `GovStore`, `GovParams`, `Proposal`, `ProposalUpdate`, `Deposit`, `Vote`, `TallyResult`, `Pool`, `ProposalStakingPoolSnapshot`, `ProposalValidatorStatusSnapshot`, `ProposalStatus`, `VoteOption` | Governance parameters, proposals, deposits, votes, tally results and snapshots taken for proposals |
| `chainindex.mint` | `MintStore`, `MintParams` | Inflation and mint parameters (`save_inflation`, `save_mint_params`) |
| `chainindex.pricefeed` | `PricefeedStore`, `Token`, `TokenUnit`, `TokenPrice` | Tokens, their units, latest prices and price history (`get_tokens_price_id`, `save_token`, `save_tokens_prices`, `save_token_prices_history`) |
| `chainindex.slashing` | `SlashingStore`, `ValidatorSigningInfo`, `SlashingParams` | Validator signing infos and slashing parameters |
| `chainindex.staking` | `StakingStore`, `StakingParams` | Staking parameters and the staking pool (`save_staking_params`, `get_staking_params`, `save_staking_pool`) |
| `chainindex.database` | `Database` | All of the above in one object, plus `prune(height)` |
| `chainindex.legacy_config` | `parse_config`, `TomlConfig`, `PricefeedConfig`, `Token`, `TokenUnit`, `DistributionConfig` | Reading the `[pricefeed]` and `[distribution]` tables of an old TOML configuration file |

## Behaviour worth knowing

- Single-row tables (supply, inflation, community pool, the parameter
  tables, average block times, staking pool, genesis) hold one row. Saving
  at the same or a higher height replaces it; saving at a lower height is
  ignored. Genesis is always replaced.
- Coins are stored as JSON text; amounts are kept as strings. Times are
  stored as UTC text and read back as timezone-aware datetimes; naive
  datetimes are taken to be UTC.
- Saving an account that already exists is not an error, and
  `get_accounts` returns addresses in insertion order.
- `save_vesting_accounts` stores continuous, delayed and periodic vesting
  accounts (periodic ones with their periods, which replace any stored
  before) and skips other kinds.
  `store_base_vesting_account_from_msg` stores the account as a base
  vesting account starting at the transaction time.
- A proposal's `content` is a dictionary that must hold string `title`
  and `description` entries; otherwise `save_proposals` raises
  `ValueError`. Proposals already stored are left as they are.
- `get_proposal` and `get_gov_params` return `None` when nothing is
  stored; `get_last_block`, `get_genesis` and `get_staking_params` raise
  `StoreError`.
- `get_open_proposals_ids` returns the ids of proposals in deposit or
  voting period, followed by those marked invalid whose deposit or voting
  period has not ended yet.
- The `*_ago` lookups return the latest block whose timestamp is at or
  before one minute, hour or day before the given moment.
- `delete_fee_grant_allowance` removes an allowance only if it was stored
  at or before the removal height.
- `prune(height)` deletes the rows stored at exactly that height from the
  supply, staking pool, validator commission, voting power and status,
  double-sign, inflation, community pool, signing info and slashing
  parameter tables.

## What it does not do

`chainindex` only stores and reads data. It does not connect to a chain
node, fetch blocks or transactions, or run as a command or service. It has
no operations for writing blocks, validators or their commission, voting
power and status; those tables exist in the schema and can be filled with
`Store.execute`. `parse_config` reads an old configuration file but
nothing in the package writes or migrates configuration.

## Requirements

Python 3.10 or later. On Python 3.10 `tomli` is used to read TOML; later
versions use the standard library.
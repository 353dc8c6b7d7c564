"""Storage of governance parameters, proposals, deposits, votes and snapshots."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from chainindex.auth import Account, AuthStore
from chainindex.store import (
    Coin,
    decode_coins,
    encode_coins,
    format_timestamp,
    parse_timestamp,
)


class ProposalStatus(str, Enum):
    UNSPECIFIED = "PROPOSAL_STATUS_UNSPECIFIED"
    DEPOSIT_PERIOD = "PROPOSAL_STATUS_DEPOSIT_PERIOD"
    VOTING_PERIOD = "PROPOSAL_STATUS_VOTING_PERIOD"
    PASSED = "PROPOSAL_STATUS_PASSED"
    REJECTED = "PROPOSAL_STATUS_REJECTED"
    FAILED = "PROPOSAL_STATUS_FAILED"
    INVALID = "PROPOSAL_STATUS_INVALID"


class VoteOption(str, Enum):
    UNSPECIFIED = "VOTE_OPTION_UNSPECIFIED"
    YES = "VOTE_OPTION_YES"
    ABSTAIN = "VOTE_OPTION_ABSTAIN"
    NO = "VOTE_OPTION_NO"
    NO_WITH_VETO = "VOTE_OPTION_NO_WITH_VETO"


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _time(moment: datetime | None) -> str | None:
    return None if moment is None else format_timestamp(moment)


def _parse(text: str | None) -> datetime | None:
    return None if text is None else parse_timestamp(text)


@dataclass(frozen=True)
class GovParams:
    voting_params: dict[str, Any]
    deposit_params: dict[str, Any]
    tally_params: dict[str, Any]
    height: int


@dataclass(frozen=True)
class Proposal:
    """A governance proposal; ``content`` must hold a title and a description."""

    proposal_id: int
    proposal_route: str
    proposal_type: str
    content: dict[str, Any]
    status: str
    submit_time: datetime
    deposit_end_time: datetime | None
    voting_start_time: datetime | None
    voting_end_time: datetime | None
    proposer: str


@dataclass(frozen=True)
class ProposalUpdate:
    proposal_id: int
    status: str
    voting_start_time: datetime | None
    voting_end_time: datetime | None


@dataclass(frozen=True)
class Deposit:
    proposal_id: int
    depositor: str
    amount: list[Coin] = field(default_factory=list)
    height: int = 0


@dataclass(frozen=True)
class Vote:
    proposal_id: int
    voter: str
    option: VoteOption
    height: int


@dataclass(frozen=True)
class TallyResult:
    proposal_id: int
    yes: str
    abstain: str
    no: str
    no_with_veto: str
    height: int


@dataclass(frozen=True)
class Pool:
    bonded_tokens: int
    not_bonded_tokens: int
    height: int


@dataclass(frozen=True)
class ProposalStakingPoolSnapshot:
    proposal_id: int
    pool: Pool


@dataclass(frozen=True)
class ProposalValidatorStatusSnapshot:
    proposal_id: int
    validator_cons_address: str
    validator_voting_power: int
    validator_status: int
    validator_jailed: bool
    height: int


def _content_text(content: Any, key: str) -> str:
    if not isinstance(content, dict) or not isinstance(content.get(key), str):
        raise ValueError(f"invalid proposal content: missing {key}")
    return content[key]


class GovStore(AuthStore):
    """Governance data."""

    def save_gov_params(self, params: GovParams) -> None:
        """Store the governance parameters unless newer ones are stored."""
        sql = """
INSERT INTO gov_params (deposit_params, voting_params, tally_params, height)
VALUES (?, ?, ?, ?)
ON CONFLICT (one_row_id) DO UPDATE
    SET deposit_params = excluded.deposit_params,
        voting_params = excluded.voting_params,
        tally_params = excluded.tally_params,
        height = excluded.height
WHERE gov_params.height <= excluded.height"""
        with self._fail("error while storing gov params"):
            self.execute(
                sql,
                (
                    json.dumps(params.deposit_params),
                    json.dumps(params.voting_params),
                    json.dumps(params.tally_params),
                    params.height,
                ),
            )

    def get_gov_params(self) -> GovParams | None:
        """Return the stored governance parameters, or None if there are none."""
        rows = self.query("SELECT * FROM gov_params")
        if not rows:
            return None
        row = rows[0]
        return GovParams(
            voting_params=json.loads(row["voting_params"]),
            deposit_params=json.loads(row["deposit_params"]),
            tally_params=json.loads(row["tally_params"]),
            height=row["height"],
        )

    def save_proposals(self, proposals: Iterable[Proposal]) -> None:
        """Store the proposals and their proposers; known proposals are left as they are."""
        proposals = list(proposals)
        if not proposals:
            return

        rows = [
            (
                proposal.proposal_id,
                _content_text(proposal.content, "title"),
                _content_text(proposal.content, "description"),
                json.dumps(proposal.content),
                proposal.proposer,
                proposal.proposal_route,
                proposal.proposal_type,
                _text(proposal.status),
                _time(proposal.submit_time),
                _time(proposal.deposit_end_time),
                _time(proposal.voting_start_time),
                _time(proposal.voting_end_time),
            )
            for proposal in proposals
        ]

        with self._fail("error while storing proposers accounts"):
            self.save_accounts(Account(proposal.proposer) for proposal in proposals)

        sql = """
INSERT INTO proposal (
    id, title, description, content, proposer_address, proposal_route, proposal_type, status,
    submit_time, deposit_end_time, voting_start_time, voting_end_time
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT DO NOTHING"""
        with self._fail("error while storing proposals"):
            self._execute_many(sql, rows)

    def get_proposal(self, proposal_id: int) -> Proposal | None:
        """Return the proposal with the given id, or None if it is not stored."""
        rows = self.query("SELECT * FROM proposal WHERE id = ?", (proposal_id,))
        if not rows:
            return None
        row = rows[0]
        return Proposal(
            proposal_id=row["id"],
            proposal_route=row["proposal_route"],
            proposal_type=row["proposal_type"],
            content=json.loads(row["content"]),
            status=row["status"],
            submit_time=parse_timestamp(row["submit_time"]),
            deposit_end_time=_parse(row["deposit_end_time"]),
            voting_start_time=_parse(row["voting_start_time"]),
            voting_end_time=_parse(row["voting_end_time"]),
            proposer=row["proposer_address"],
        )

    def get_open_proposals_ids(self) -> list[int]:
        """Return ids of proposals in deposit or voting period.

        Proposals marked invalid whose deposit or voting period has not ended yet
        are returned too, after the others.
        """
        ids = [
            row["id"]
            for row in self.query(
                "SELECT id FROM proposal WHERE status = ? OR status = ? ORDER BY id",
                (ProposalStatus.DEPOSIT_PERIOD.value, ProposalStatus.VOTING_PERIOD.value),
            )
        ]
        now = format_timestamp(datetime.now(timezone.utc))
        ids.extend(
            row["id"]
            for row in self.query(
                "SELECT id FROM proposal WHERE status = ? "
                "AND (voting_end_time > ? OR deposit_end_time > ?) ORDER BY id",
                (ProposalStatus.INVALID.value, now, now),
            )
        )
        return ids

    def update_proposal(self, update: ProposalUpdate) -> None:
        """Update the status and voting period of a stored proposal."""
        sql = (
            "UPDATE proposal SET status = ?, voting_start_time = ?, voting_end_time = ? "
            "WHERE id = ?"
        )
        with self._fail("error while updating proposal"):
            self.execute(
                sql,
                (
                    _text(update.status),
                    _time(update.voting_start_time),
                    _time(update.voting_end_time),
                    update.proposal_id,
                ),
            )

    def save_deposits(self, deposits: Iterable[Deposit]) -> None:
        """Store deposits, keeping for each depositor the one of greatest height."""
        rows = [
            (deposit.proposal_id, deposit.depositor, encode_coins(deposit.amount), deposit.height)
            for deposit in deposits
        ]
        if not rows:
            return
        sql = """
INSERT INTO proposal_deposit (proposal_id, depositor_address, amount, height)
VALUES (?, ?, ?, ?)
ON CONFLICT (proposal_id, depositor_address) DO UPDATE
    SET amount = excluded.amount,
        height = excluded.height
WHERE proposal_deposit.height <= excluded.height"""
        with self._fail("error while storing deposits"):
            self._execute_many(sql, rows)

    def get_deposits(self, proposal_id: int) -> list[Deposit]:
        """Return the deposits stored for a proposal, in insertion order."""
        rows = self.query(
            "SELECT * FROM proposal_deposit WHERE proposal_id = ? ORDER BY rowid", (proposal_id,)
        )
        return [
            Deposit(
                row["proposal_id"],
                row["depositor_address"],
                decode_coins(row["amount"]),
                row["height"],
            )
            for row in rows
        ]

    def save_vote(self, vote: Vote) -> None:
        """Store a vote and its voter, unless a newer vote of that voter is stored."""
        with self._fail("error while storing voter account"):
            self.save_accounts([Account(vote.voter)])

        sql = """
INSERT INTO proposal_vote (proposal_id, voter_address, option, height)
VALUES (?, ?, ?, ?)
ON CONFLICT (proposal_id, voter_address) DO UPDATE
    SET option = excluded.option,
        height = excluded.height
WHERE proposal_vote.height <= excluded.height"""
        with self._fail("error while storing vote"):
            self.execute(sql, (vote.proposal_id, vote.voter, _text(vote.option), vote.height))

    def save_tally_results(self, tallies: Iterable[TallyResult]) -> None:
        """Store tally results, keeping for each proposal the one of greatest height."""
        rows = [
            (t.proposal_id, t.yes, t.abstain, t.no, t.no_with_veto, t.height) for t in tallies
        ]
        if not rows:
            return
        sql = """
INSERT INTO proposal_tally_result (proposal_id, yes, abstain, no, no_with_veto, height)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT (proposal_id) DO UPDATE
    SET yes = excluded.yes,
        abstain = excluded.abstain,
        no = excluded.no,
        no_with_veto = excluded.no_with_veto,
        height = excluded.height
WHERE proposal_tally_result.height <= excluded.height"""
        with self._fail("error while storing tally result"):
            self._execute_many(sql, rows)

    def save_proposal_staking_pool_snapshot(self, snapshot: ProposalStakingPoolSnapshot) -> None:
        """Store the staking pool seen by a proposal, unless a newer one is stored."""
        sql = """
INSERT INTO proposal_staking_pool_snapshot (proposal_id, bonded_tokens, not_bonded_tokens, height)
VALUES (?, ?, ?, ?)
ON CONFLICT (proposal_id) DO UPDATE
    SET proposal_id = excluded.proposal_id,
        bonded_tokens = excluded.bonded_tokens,
        not_bonded_tokens = excluded.not_bonded_tokens,
        height = excluded.height
WHERE proposal_staking_pool_snapshot.height <= excluded.height"""
        pool = snapshot.pool
        with self._fail("error while storing proposal staking pool snapshot"):
            self.execute(
                sql,
                (
                    snapshot.proposal_id,
                    str(pool.bonded_tokens),
                    str(pool.not_bonded_tokens),
                    pool.height,
                ),
            )

    def save_proposal_validators_statuses_snapshots(
        self, snapshots: Iterable[ProposalValidatorStatusSnapshot]
    ) -> None:
        """Store validator statuses seen by proposals, keeping the newest per validator."""
        rows = [
            (
                s.proposal_id,
                s.validator_cons_address,
                s.validator_voting_power,
                s.validator_status,
                int(bool(s.validator_jailed)),
                s.height,
            )
            for s in snapshots
        ]
        if not rows:
            return
        sql = """
INSERT INTO proposal_validator_status_snapshot
    (proposal_id, validator_address, voting_power, status, jailed, height)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT (proposal_id, validator_address) DO UPDATE
    SET proposal_id = excluded.proposal_id,
        validator_address = excluded.validator_address,
        voting_power = excluded.voting_power,
        status = excluded.status,
        jailed = excluded.jailed,
        height = excluded.height
WHERE proposal_validator_status_snapshot.height <= excluded.height"""
        with self._fail("error while storing proposal validator statuses snapshot"):
            self._execute_many(sql, rows)
"""Storage of fee grant allowances."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from chainindex.auth import Account, AuthStore


@dataclass(frozen=True)
class FeeGrant:
    """An allowance given by ``granter`` to ``grantee``, seen at ``height``."""

    granter: str
    grantee: str
    allowance: dict[str, Any] = field(default_factory=dict)
    height: int = 0


@dataclass(frozen=True)
class GrantRemoval:
    """The revocation of the allowance given by ``granter`` to ``grantee``."""

    grantee: str
    granter: str
    height: int


class FeeGrantStore(AuthStore):
    """Fee grant allowances between accounts."""

    def save_fee_grant_allowance(self, allowance: FeeGrant) -> None:
        """Store the allowance and both accounts, unless a newer allowance is stored."""
        try:
            self.save_accounts([Account(allowance.granter), Account(allowance.grantee)])
        except Exception as exc:
            raise type(exc)(f"error while storing fee grant allowance accounts: {exc}") from exc

        try:
            allowance_json = json.dumps(allowance.allowance)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"error while marshaling grant allowance: {exc}") from exc

        sql = """
INSERT INTO fee_grant_allowance (grantee_address, granter_address, allowance, height)
VALUES (?, ?, ?, ?)
ON CONFLICT (grantee_address, granter_address) DO UPDATE
    SET allowance = excluded.allowance,
        height = excluded.height
WHERE fee_grant_allowance.height <= excluded.height"""
        with self._fail("error while saving fee grant allowance"):
            self.execute(
                sql, (allowance.grantee, allowance.granter, allowance_json, allowance.height)
            )

    def delete_fee_grant_allowance(self, removal: GrantRemoval) -> None:
        """Remove the allowance if it was stored at or before the removal height."""
        sql = (
            "DELETE FROM fee_grant_allowance "
            "WHERE grantee_address = ? AND granter_address = ? AND height <= ?"
        )
        with self._fail("error while deleting grant allowance"):
            self.execute(sql, (removal.grantee, removal.granter, removal.height))
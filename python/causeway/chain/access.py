"""Role-based capability checks for privileged operations."""

from __future__ import annotations

from collections import defaultdict

from eth_utils import keccak

from causeway.chain.ledger import Ledger
from causeway.core.encoding import display
from causeway.core.errors import InsufficientPermissions
from causeway.core.types import Address, Bytes32

DEFAULT_ADMIN_ROLE: Bytes32 = b"\x00" * 32
MAPPER_ROLE: Bytes32 = keccak(text="MAPPER_ROLE")
MANAGER_ROLE: Bytes32 = keccak(text="MANAGER_ROLE")
STATE_SYNCER_ROLE: Bytes32 = keccak(text="STATE_SYNCER_ROLE")
DEPOSITOR_ROLE: Bytes32 = keccak(text="DEPOSITOR_ROLE")
PREDICATE_ROLE: Bytes32 = keccak(text="PREDICATE_ROLE")


class AccessControl:
    """Role membership for one component. Admins grant and revoke every role."""

    def __init__(self, ledger: Ledger, owner: str, admin: Address) -> None:
        self.ledger = ledger
        self.owner = owner
        self._members: defaultdict[Bytes32, set[Address]] = defaultdict(set)
        self._members[DEFAULT_ADMIN_ROLE].add(admin)

    def has_role(self, role: Bytes32, account: Address) -> bool:
        return account in self._members.get(role, ())

    def require(self, role: Bytes32, account: Address) -> None:
        if not self.has_role(role, account):
            raise InsufficientPermissions(
                f"{self.owner}: INSUFFICIENT_PERMISSIONS for {display(account)}"
            )

    def grant_role(self, caller: Address, role: Bytes32, account: Address) -> None:
        with self.ledger.transaction(caller, f"{self.owner}.grantRole"):
            self.require(DEFAULT_ADMIN_ROLE, caller)
            self.ledger.add_member(self._members[role], account)

    def revoke_role(self, caller: Address, role: Bytes32, account: Address) -> None:
        with self.ledger.transaction(caller, f"{self.owner}.revokeRole"):
            self.require(DEFAULT_ADMIN_ROLE, caller)
            self.ledger.discard_member(self._members[role], account)

"""In-memory token models with the custody hooks predicates rely on.

Only the behaviour the bridge touches is modelled: balances, approvals and
transfers. Every mutation is journaled on the owning ledger, so a failed
bridge call leaves balances untouched.
"""

from __future__ import annotations

from typing import Sequence

from causeway.assets import events
from causeway.chain.access import DEFAULT_ADMIN_ROLE, PREDICATE_ROLE, AccessControl
from causeway.chain.ledger import Ledger
from causeway.core.encoding import display
from causeway.core.errors import TransferRejected
from causeway.core.types import ETHER_ADDRESS, ZERO_ADDRESS, Address


class Token:
    """Shared plumbing: identity, ledger and role membership."""

    def __init__(self, ledger: Ledger, address: Address, name: str, admin: Address) -> None:
        self.ledger = ledger
        self.address = address
        self.name = name
        self.access = AccessControl(ledger, name, admin)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {display(self.address)})"


class FungibleToken(Token):
    def __init__(self, ledger: Ledger, address: Address, name: str, admin: Address) -> None:
        super().__init__(ledger, address, name, admin)
        self._balances: dict[Address, int] = {}
        self._allowances: dict[tuple[Address, Address], int] = {}

    def balance_of(self, account: Address) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self._allowances.get((owner, spender), 0)

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    def mint(self, caller: Address, to: Address, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.mint"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            self._mint(to, amount)

    def approve(self, caller: Address, spender: Address, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.approve"):
            self.ledger.set_item(self._allowances, (caller, spender), amount)
            self.ledger.emit(events.approval_log(self.address, caller, spender, amount))

    def transfer(self, caller: Address, to: Address, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.transfer"):
            self._move(caller, to, amount)

    def transfer_from(self, caller: Address, owner: Address, to: Address, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.transferFrom"):
            if caller != owner:
                allowed = self.allowance(owner, caller)
                if allowed < amount:
                    raise TransferRejected(f"{self.name}: insufficient allowance")
                self.ledger.set_item(self._allowances, (owner, caller), allowed - amount)
            self._move(owner, to, amount)

    def _move(self, sender: Address, to: Address, amount: int) -> None:
        if to == ZERO_ADDRESS:
            raise TransferRejected(f"{self.name}: transfer to the zero address")
        if amount < 0:
            raise TransferRejected(f"{self.name}: negative amount")
        balance = self.balance_of(sender)
        if balance < amount:
            raise TransferRejected(
                f"{self.name}: {display(sender)} holds {balance}, needs {amount}"
            )
        self.ledger.set_item(self._balances, sender, balance - amount)
        self.ledger.set_item(self._balances, to, self.balance_of(to) + amount)
        self.ledger.emit(events.transfer_log(self.address, sender, to, amount))

    def _mint(self, to: Address, amount: int) -> None:
        self.ledger.set_item(self._balances, to, self.balance_of(to) + amount)
        self.ledger.emit(events.transfer_log(self.address, ZERO_ADDRESS, to, amount))

    def _burn(self, owner: Address, amount: int) -> None:
        balance = self.balance_of(owner)
        if amount <= 0 or balance < amount:
            raise TransferRejected(f"{self.name}: cannot burn {amount} of {balance}")
        self.ledger.set_item(self._balances, owner, balance - amount)
        self.ledger.emit(events.transfer_log(self.address, owner, ZERO_ADDRESS, amount))


class NonFungibleToken(Token):
    def __init__(self, ledger: Ledger, address: Address, name: str, admin: Address) -> None:
        super().__init__(ledger, address, name, admin)
        self._owners: dict[int, Address] = {}
        self._approvals: dict[int, Address] = {}
        self._operators: set[tuple[Address, Address]] = set()

    def owner_of(self, token_id: int) -> Address | None:
        return self._owners.get(token_id)

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def balance_of(self, account: Address) -> int:
        return sum(1 for owner in self._owners.values() if owner == account)

    def is_approved_for_all(self, owner: Address, operator: Address) -> bool:
        return (owner, operator) in self._operators

    def mint(self, caller: Address, to: Address, token_id: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.mint"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            self._mint(to, token_id)

    def approve(self, caller: Address, spender: Address, token_id: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.approve"):
            owner = self.owner_of(token_id)
            if owner is None or (owner != caller and not self.is_approved_for_all(owner, caller)):
                raise TransferRejected(f"{self.name}: caller may not approve token {token_id}")
            self.ledger.set_item(self._approvals, token_id, spender)

    def set_approval_for_all(self, caller: Address, operator: Address, approved: bool) -> None:
        with self.ledger.transaction(caller, f"{self.name}.setApprovalForAll"):
            if approved:
                self.ledger.add_member(self._operators, (caller, operator))
            else:
                self.ledger.discard_member(self._operators, (caller, operator))
            self.ledger.emit(events.approval_for_all_log(self.address, caller, operator, approved))

    def transfer_from(self, caller: Address, owner: Address, to: Address, token_id: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.transferFrom"):
            if to == ZERO_ADDRESS:
                raise TransferRejected(f"{self.name}: transfer to the zero address")
            if self.owner_of(token_id) != owner:
                raise TransferRejected(f"{self.name}: {display(owner)} does not own token {token_id}")
            if (
                caller != owner
                and self._approvals.get(token_id) != caller
                and not self.is_approved_for_all(owner, caller)
            ):
                raise TransferRejected(f"{self.name}: caller not approved for token {token_id}")
            self.ledger.delete_item(self._approvals, token_id)
            self.ledger.set_item(self._owners, token_id, to)
            self.ledger.emit(events.nft_transfer_log(self.address, owner, to, token_id))

    def _mint(self, to: Address, token_id: int) -> None:
        if self.exists(token_id):
            raise TransferRejected(f"{self.name}: token {token_id} already minted")
        self.ledger.set_item(self._owners, token_id, to)
        self.ledger.emit(events.nft_transfer_log(self.address, ZERO_ADDRESS, to, token_id))

    def _burn(self, owner: Address, token_id: int) -> None:
        if self.owner_of(token_id) != owner:
            raise TransferRejected(f"{self.name}: {display(owner)} does not own token {token_id}")
        self.ledger.delete_item(self._owners, token_id)
        self.ledger.delete_item(self._approvals, token_id)
        self.ledger.emit(events.nft_transfer_log(self.address, owner, ZERO_ADDRESS, token_id))


class MintableNonFungibleToken(NonFungibleToken):
    """Root-side collectible whose tokens may originate on the child chain.

    Only accounts holding the predicate role can mint, which is how tokens
    first created on child materialise on root when they exit.
    """

    def mint(self, caller: Address, to: Address, token_id: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.mint"):
            self.access.require(PREDICATE_ROLE, caller)
            self._mint(to, token_id)


class MultiToken(Token):
    def __init__(self, ledger: Ledger, address: Address, name: str, admin: Address) -> None:
        super().__init__(ledger, address, name, admin)
        self._balances: dict[tuple[Address, int], int] = {}
        self._operators: set[tuple[Address, Address]] = set()

    def balance_of(self, account: Address, token_id: int) -> int:
        return self._balances.get((account, token_id), 0)

    def is_approved_for_all(self, owner: Address, operator: Address) -> bool:
        return (owner, operator) in self._operators

    def mint(self, caller: Address, to: Address, token_id: int, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.mint"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            self._credit(to, token_id, amount)
            self.ledger.emit(events.transfer_single_log(
                self.address, caller, ZERO_ADDRESS, to, token_id, amount
            ))

    def set_approval_for_all(self, caller: Address, operator: Address, approved: bool) -> None:
        with self.ledger.transaction(caller, f"{self.name}.setApprovalForAll"):
            if approved:
                self.ledger.add_member(self._operators, (caller, operator))
            else:
                self.ledger.discard_member(self._operators, (caller, operator))
            self.ledger.emit(events.approval_for_all_log(self.address, caller, operator, approved))

    def safe_transfer_from(
        self,
        caller: Address,
        sender: Address,
        to: Address,
        token_id: int,
        amount: int,
    ) -> None:
        with self.ledger.transaction(caller, f"{self.name}.safeTransferFrom"):
            self._check_transfer(caller, sender, to)
            self._debit(sender, token_id, amount)
            self._credit(to, token_id, amount)
            self.ledger.emit(events.transfer_single_log(
                self.address, caller, sender, to, token_id, amount
            ))

    def safe_batch_transfer_from(
        self,
        caller: Address,
        sender: Address,
        to: Address,
        token_ids: Sequence[int],
        amounts: Sequence[int],
    ) -> None:
        with self.ledger.transaction(caller, f"{self.name}.safeBatchTransferFrom"):
            if len(token_ids) != len(amounts):
                raise TransferRejected(f"{self.name}: ids and amounts length mismatch")
            self._check_transfer(caller, sender, to)
            for token_id, amount in zip(token_ids, amounts):
                self._debit(sender, token_id, amount)
                self._credit(to, token_id, amount)
            self.ledger.emit(events.transfer_batch_log(
                self.address, caller, sender, to, token_ids, amounts
            ))

    def _check_transfer(self, caller: Address, sender: Address, to: Address) -> None:
        if to == ZERO_ADDRESS:
            raise TransferRejected(f"{self.name}: transfer to the zero address")
        if caller != sender and not self.is_approved_for_all(sender, caller):
            raise TransferRejected(f"{self.name}: caller is not owner nor approved")

    def _credit(self, to: Address, token_id: int, amount: int) -> None:
        if amount < 0:
            raise TransferRejected(f"{self.name}: negative amount")
        self.ledger.set_item(self._balances, (to, token_id), self.balance_of(to, token_id) + amount)

    def _debit(self, owner: Address, token_id: int, amount: int) -> None:
        balance = self.balance_of(owner, token_id)
        if amount < 0 or balance < amount:
            raise TransferRejected(
                f"{self.name}: {display(owner)} holds {balance} of id {token_id}, needs {amount}"
            )
        self.ledger.set_item(self._balances, (owner, token_id), balance - amount)


class NativeCurrency(Token):
    """Plain account balances of the root chain's own currency."""

    def __init__(self, ledger: Ledger, admin: Address, name: str = "Ether") -> None:
        super().__init__(ledger, ETHER_ADDRESS, name, admin)
        self._balances: dict[Address, int] = {}

    def balance_of(self, account: Address) -> int:
        return self._balances.get(account, 0)

    def mint(self, caller: Address, to: Address, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.mint"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            self.ledger.set_item(self._balances, to, self.balance_of(to) + amount)

    def transfer(self, caller: Address, to: Address, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.transfer"):
            balance = self.balance_of(caller)
            if amount < 0 or balance < amount:
                raise TransferRejected(
                    f"{self.name}: {display(caller)} holds {balance}, needs {amount}"
                )
            self.ledger.set_item(self._balances, caller, balance - amount)
            self.ledger.set_item(self._balances, to, self.balance_of(to) + amount)

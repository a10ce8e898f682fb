"""Child-chain token counterparts: minted on deposit, burned on withdraw.

Each ``withdraw*`` call burns the caller's balance and emits the burn event
that the matching root predicate later accepts as exit evidence.
"""

from __future__ import annotations

from typing import Sequence

from causeway.assets import events
from causeway.assets.tokens import FungibleToken, MultiToken, NonFungibleToken
from causeway.chain.access import DEFAULT_ADMIN_ROLE, DEPOSITOR_ROLE
from causeway.core.encoding import abi_decode
from causeway.core.errors import TransferRejected
from causeway.core.types import ZERO_ADDRESS, Address


class ChildFungible(FungibleToken):
    """Mirrored fungible balance; also serves as wrapped native currency."""

    def mint(self, caller: Address, to: Address, amount: int) -> None:
        raise TransferRejected(f"{self.name}: supply is only minted by deposits")

    def deposit(self, caller: Address, user: Address, deposit_data: bytes) -> None:
        with self.ledger.transaction(caller, f"{self.name}.deposit"):
            self.access.require(DEPOSITOR_ROLE, caller)
            (amount,) = abi_decode(["uint256"], deposit_data)
            self._mint(user, amount)

    def withdraw(self, caller: Address, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.withdraw"):
            self._burn(caller, amount)


class ChildNonFungible(NonFungibleToken):
    def mint(self, caller: Address, to: Address, token_id: int) -> None:
        raise TransferRejected(f"{self.name}: tokens are only minted by deposits")

    def deposit(self, caller: Address, user: Address, deposit_data: bytes) -> None:
        with self.ledger.transaction(caller, f"{self.name}.deposit"):
            self.access.require(DEPOSITOR_ROLE, caller)
            (token_id,) = abi_decode(["uint256"], deposit_data)
            self._mint(user, token_id)

    def withdraw(self, caller: Address, token_id: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.withdraw"):
            self._burn(caller, token_id)


class ChildMintableNonFungible(ChildNonFungible):
    """Collectible that can also be created natively on the child chain."""

    def mint(self, caller: Address, to: Address, token_id: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.mint"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            self._mint(to, token_id)


class ChildMultiToken(MultiToken):
    def mint(self, caller: Address, to: Address, token_id: int, amount: int) -> None:
        raise TransferRejected(f"{self.name}: supply is only minted by deposits")

    def deposit(self, caller: Address, user: Address, deposit_data: bytes) -> None:
        with self.ledger.transaction(caller, f"{self.name}.deposit"):
            self.access.require(DEPOSITOR_ROLE, caller)
            token_ids, amounts, _ = abi_decode(["uint256[]", "uint256[]", "bytes"], deposit_data)
            if len(token_ids) != len(amounts):
                raise TransferRejected(f"{self.name}: ids and amounts length mismatch")
            for token_id, amount in zip(token_ids, amounts):
                self._credit(user, token_id, amount)
            self.ledger.emit(events.transfer_batch_log(
                self.address, caller, ZERO_ADDRESS, user, token_ids, amounts
            ))

    def withdraw_single(self, caller: Address, token_id: int, amount: int) -> None:
        with self.ledger.transaction(caller, f"{self.name}.withdrawSingle"):
            self._debit(caller, token_id, amount)
            self.ledger.emit(events.transfer_single_log(
                self.address, caller, caller, ZERO_ADDRESS, token_id, amount
            ))

    def withdraw_batch(
        self,
        caller: Address,
        token_ids: Sequence[int],
        amounts: Sequence[int],
    ) -> None:
        with self.ledger.transaction(caller, f"{self.name}.withdrawBatch"):
            if len(token_ids) != len(amounts):
                raise TransferRejected(f"{self.name}: ids and amounts length mismatch")
            for token_id, amount in zip(token_ids, amounts):
                self._debit(caller, token_id, amount)
            self.ledger.emit(events.transfer_batch_log(
                self.address, caller, caller, ZERO_ADDRESS, token_ids, amounts
            ))

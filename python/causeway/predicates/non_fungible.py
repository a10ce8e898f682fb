"""Custody of non-fungible root tokens."""

from __future__ import annotations

from causeway.assets import events
from causeway.assets.tokens import NonFungibleToken
from causeway.core.encoding import abi_decode, address_to_topic, topic_to_int
from causeway.core.errors import InsufficientCustody, InvalidSignature
from causeway.core.types import Address, AssetType, LogEntry
from causeway.predicates.base import TokenPredicate


class NonFungiblePredicate(TokenPredicate):
    asset_type = AssetType.NON_FUNGIBLE
    token_class = NonFungibleToken
    locked_event = events.LOCKED_ERC721
    exited_event = events.EXITED_ERC721

    def _lock(self, depositor: Address, receiver: Address, token: NonFungibleToken, deposit_data: bytes) -> None:
        (token_id,) = abi_decode(["uint256"], deposit_data)
        token.transfer_from(self.address, depositor, self.address, token_id)
        self.ledger.emit(events.indexed_log(
            self.address,
            self.locked_event,
            [address_to_topic(depositor), address_to_topic(receiver), address_to_topic(token.address)],
            ["uint256"],
            [token_id],
        ))

    def validate_exit_log(self, withdrawer: Address, log: LogEntry) -> None:
        if len(log.topics) != 4 or log.signature != events.TRANSFER:
            raise InvalidSignature(f"{self.name}: INVALID_SIGNATURE")
        self._check_burn(withdrawer, log, sender=1, receiver=2)

    def _release(self, withdrawer: Address, token: NonFungibleToken, log: LogEntry) -> None:
        token_id = topic_to_int(log.topics[3])
        if token.owner_of(token_id) != self.address:
            raise InsufficientCustody(f"{self.name}: token {token_id} is not in custody")
        self._transfer_out(withdrawer, token, token_id)

    def _transfer_out(self, withdrawer: Address, token: NonFungibleToken, token_id: int) -> None:
        token.transfer_from(self.address, self.address, withdrawer, token_id)
        self.ledger.emit(events.indexed_log(
            self.address,
            self.exited_event,
            [address_to_topic(withdrawer), address_to_topic(token.address)],
            ["uint256"],
            [token_id],
        ))

"""Custody of collectibles that may be created on the child chain."""

from __future__ import annotations

from causeway.assets import events
from causeway.assets.tokens import MintableNonFungibleToken
from causeway.core.encoding import address_to_topic, topic_to_int
from causeway.core.errors import InsufficientCustody
from causeway.core.types import Address, AssetType, LogEntry
from causeway.predicates.non_fungible import NonFungiblePredicate


class MintableNonFungiblePredicate(NonFungiblePredicate):
    """Releases from custody when the token was locked, mints it otherwise.

    The predicate must hold the token's predicate role to mint.
    """

    asset_type = AssetType.MINTABLE_NON_FUNGIBLE
    token_class = MintableNonFungibleToken
    locked_event = events.LOCKED_MINTABLE_ERC721
    exited_event = events.EXITED_MINTABLE_ERC721

    def _release(self, withdrawer: Address, token: MintableNonFungibleToken, log: LogEntry) -> None:
        token_id = topic_to_int(log.topics[3])
        if not token.exists(token_id):
            token.mint(self.address, withdrawer, token_id)
            self.ledger.emit(events.indexed_log(
                self.address,
                self.exited_event,
                [address_to_topic(withdrawer), address_to_topic(token.address)],
                ["uint256"],
                [token_id],
            ))
            return
        if token.owner_of(token_id) != self.address:
            raise InsufficientCustody(f"{self.name}: token {token_id} exists outside custody")
        self._transfer_out(withdrawer, token, token_id)

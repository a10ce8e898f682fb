"""Custody of multi-token (fungible per id) root assets."""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from causeway.assets import events
from causeway.assets.tokens import MultiToken
from causeway.core.encoding import abi_decode, address_to_topic
from causeway.core.errors import InsufficientCustody, InvalidWithdrawSignature, TransferRejected
from causeway.core.types import Address, AssetType, LogEntry
from causeway.predicates.base import TokenPredicate


class MultiTokenPredicate(TokenPredicate):
    """Accepts both single and batch burns; topic 0 picks the decoding."""

    asset_type = AssetType.MULTI_TOKEN
    token_class = MultiToken

    def _lock(self, depositor: Address, receiver: Address, token: MultiToken, deposit_data: bytes) -> None:
        token_ids, amounts, _ = abi_decode(["uint256[]", "uint256[]", "bytes"], deposit_data)
        if len(token_ids) != len(amounts):
            raise TransferRejected(f"{self.name}: ids and amounts length mismatch")
        token.safe_batch_transfer_from(self.address, depositor, self.address, token_ids, amounts)
        self.ledger.emit(events.indexed_log(
            self.address,
            events.LOCKED_BATCH_ERC1155,
            [address_to_topic(depositor), address_to_topic(receiver), address_to_topic(token.address)],
            ["uint256[]", "uint256[]"],
            [list(token_ids), list(amounts)],
        ))

    def validate_exit_log(self, withdrawer: Address, log: LogEntry) -> None:
        if len(log.topics) != 4 or log.signature not in (events.TRANSFER_SINGLE, events.TRANSFER_BATCH):
            raise InvalidWithdrawSignature(f"{self.name}: INVALID_WITHDRAW_SIG")
        self._check_burn(withdrawer, log, sender=2, receiver=3)

    def _release(self, withdrawer: Address, token: MultiToken, log: LogEntry) -> None:
        if log.signature == events.TRANSFER_SINGLE:
            token_id, amount = abi_decode(["uint256", "uint256"], log.data)
            self._require_custody(token, [token_id], [amount])
            token.safe_transfer_from(self.address, self.address, withdrawer, token_id, amount)
            self.ledger.emit(events.indexed_log(
                self.address,
                events.EXITED_ERC1155,
                [address_to_topic(withdrawer), address_to_topic(token.address)],
                ["uint256", "uint256"],
                [token_id, amount],
            ))
            return

        token_ids, amounts = abi_decode(["uint256[]", "uint256[]"], log.data)
        if len(token_ids) != len(amounts):
            raise InvalidWithdrawSignature(f"{self.name}: ids and amounts length mismatch")
        self._require_custody(token, token_ids, amounts)
        token.safe_batch_transfer_from(self.address, self.address, withdrawer, token_ids, amounts)
        self.ledger.emit(events.indexed_log(
            self.address,
            events.EXITED_BATCH_ERC1155,
            [address_to_topic(withdrawer), address_to_topic(token.address)],
            ["uint256[]", "uint256[]"],
            [list(token_ids), list(amounts)],
        ))

    def _require_custody(self, token: MultiToken, token_ids: Sequence[int], amounts: Sequence[int]) -> None:
        claimed: defaultdict[int, int] = defaultdict(int)
        for token_id, amount in zip(token_ids, amounts):
            claimed[token_id] += amount
        for token_id, total in claimed.items():
            held = token.balance_of(self.address, token_id)
            if held < total:
                raise InsufficientCustody(
                    f"{self.name}: holds {held} of id {token_id}, exit claims {total}"
                )

"""Custody of the root chain's native currency."""

from __future__ import annotations

from causeway.assets import events
from causeway.assets.tokens import NativeCurrency
from causeway.core.encoding import abi_decode, address_to_topic, display
from causeway.core.errors import InsufficientCustody, InvalidSignature
from causeway.core.types import Address, AssetType, LogEntry
from causeway.predicates.base import TokenPredicate


class NativeCurrencyPredicate(TokenPredicate):
    """Native deposits arrive as value already moved into the predicate.

    Withdrawals are burns of the wrapped child token; the amount is read from
    the log data, as for any fungible transfer.
    """

    asset_type = AssetType.NATIVE_CURRENCY
    token_class = NativeCurrency

    def _lock(self, depositor: Address, receiver: Address, token: NativeCurrency, deposit_data: bytes) -> None:
        (amount,) = abi_decode(["uint256"], deposit_data)
        self.ledger.emit(events.indexed_log(
            self.address,
            events.LOCKED_ETHER,
            [address_to_topic(depositor), address_to_topic(receiver)],
            ["uint256"],
            [amount],
        ))

    def validate_exit_log(self, withdrawer: Address, log: LogEntry) -> None:
        if len(log.topics) != 3 or log.signature != events.TRANSFER:
            raise InvalidSignature(f"{self.name}: INVALID_SIGNATURE")
        self._check_burn(withdrawer, log, sender=1, receiver=2)

    def _release(self, withdrawer: Address, token: NativeCurrency, log: LogEntry) -> None:
        (amount,) = abi_decode(["uint256"], log.data)
        held = token.balance_of(self.address)
        if held < amount:
            raise InsufficientCustody(
                f"{self.name}: holds {held} of {display(token.address)}, exit claims {amount}"
            )
        token.transfer(self.address, withdrawer, amount)
        self.ledger.emit(events.indexed_log(
            self.address,
            events.EXITED_ETHER,
            [address_to_topic(withdrawer)],
            ["uint256"],
            [amount],
        ))

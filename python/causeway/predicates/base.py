"""Common contract for per-asset-class custody predicates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

import structlog

from causeway.assets.tokens import Token
from causeway.chain.access import MANAGER_ROLE, AccessControl
from causeway.chain.ledger import Ledger
from causeway.core.encoding import display, topic_to_address
from causeway.core.errors import InsufficientCustody, InvalidReceiver, InvalidSender
from causeway.core.types import ZERO_ADDRESS, Address, AssetType, LogEntry

logger = structlog.get_logger()


class TokenPredicate(ABC):
    """Holds locked assets of one class and releases them on proven burns.

    The predicate's own balance in an asset is the custody record. ``lock``
    and ``release_on_exit`` may only be driven by the manager role;
    ``validate_exit_log`` is pure and may be called by anyone.
    """

    asset_type: ClassVar[AssetType]
    token_class: ClassVar[type[Token]]

    def __init__(self, ledger: Ledger, address: Address, admin: Address) -> None:
        self.ledger = ledger
        self.address = address
        self.access = AccessControl(ledger, type(self).__name__, admin)

    @property
    def name(self) -> str:
        return type(self).__name__

    def lock(
        self,
        caller: Address,
        depositor: Address,
        receiver: Address,
        token: Token,
        deposit_data: bytes,
    ) -> None:
        with self.ledger.transaction(caller, f"{self.name}.lockTokens"):
            self.access.require(MANAGER_ROLE, caller)
            self._lock(depositor, receiver, token, deposit_data)
            logger.info(
                "deposit_locked",
                predicate=self.name,
                token=display(token.address),
                depositor=display(depositor),
                receiver=display(receiver),
            )

    def release_on_exit(
        self,
        caller: Address,
        withdrawer: Address,
        token: Token,
        log: LogEntry,
    ) -> None:
        with self.ledger.transaction(caller, f"{self.name}.exitTokens"):
            self.access.require(MANAGER_ROLE, caller)
            self.validate_exit_log(withdrawer, log)
            try:
                self._release(withdrawer, token, log)
            except InsufficientCustody:
                logger.critical(
                    "custody_violation",
                    predicate=self.name,
                    token=display(token.address),
                    withdrawer=display(withdrawer),
                )
                raise

    @abstractmethod
    def validate_exit_log(self, withdrawer: Address, log: LogEntry) -> None:
        """Raise unless ``log`` is this class's burn by ``withdrawer``."""

    @abstractmethod
    def _lock(self, depositor: Address, receiver: Address, token: Token, deposit_data: bytes) -> None:
        ...

    @abstractmethod
    def _release(self, withdrawer: Address, token: Token, log: LogEntry) -> None:
        ...

    def _check_burn(self, withdrawer: Address, log: LogEntry, sender: int, receiver: int) -> None:
        """Topic ``sender`` must name the withdrawer and topic ``receiver`` the zero address."""
        if topic_to_address(log.topics[sender]) != withdrawer:
            raise InvalidSender(f"{self.name}: INVALID_SENDER")
        if topic_to_address(log.topics[receiver]) != ZERO_ADDRESS:
            raise InvalidReceiver(f"{self.name}: INVALID_RECEIVER")

"""Exactly-once bookkeeping for redeemed burns."""

from __future__ import annotations

from causeway.chain.ledger import Ledger
from causeway.core.types import Bytes32


class ExitTracker:
    """Set of exit ids that have already released assets.

    Marks are journaled, so a mark made by an exit that later fails is
    reverted along with everything else the exit touched.
    """

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._processed: set[Bytes32] = set()

    def __len__(self) -> int:
        return len(self._processed)

    def is_processed(self, exit_id: Bytes32) -> bool:
        return exit_id in self._processed

    def mark_if_unseen(self, exit_id: Bytes32) -> bool:
        """Record ``exit_id``; False if it was already recorded.

        Must run inside the caller's ledger transaction so the check and the
        mark happen under one lock.
        """
        if not self.ledger.in_transaction:
            raise RuntimeError("exit ids can only be marked inside a transaction")
        if exit_id in self._processed:
            return False
        self.ledger.add_member(self._processed, exit_id)
        return True

"""Root-side table of committed child-chain checkpoints."""

from __future__ import annotations

import structlog

from causeway.assets import events
from causeway.chain.access import DEFAULT_ADMIN_ROLE, AccessControl
from causeway.chain.ledger import Ledger
from causeway.core.encoding import address_to_topic, int_to_topic
from causeway.core.types import Address, Bytes32, CheckpointHeader

logger = structlog.get_logger()


class CheckpointManager:
    """Append-only header table keyed by header id, starting at 1.

    Headers are immutable once written. Submission is restricted to the
    admin role; consensus over what gets submitted happens elsewhere.
    """

    def __init__(self, ledger: Ledger, address: Address, admin: Address) -> None:
        self.ledger = ledger
        self.address = address
        self.access = AccessControl(ledger, "CheckpointManager", admin)
        self._headers: dict[int, CheckpointHeader] = {}

    @property
    def current_checkpoint_number(self) -> int:
        return len(self._headers)

    def submit_checkpoint(
        self,
        caller: Address,
        root: Bytes32,
        start_block: int,
        end_block: int,
        timestamp: int = 0,
    ) -> CheckpointHeader:
        if len(root) != 32:
            raise ValueError(f"checkpoint root must be 32 bytes, got {len(root)}")
        if not 0 <= start_block <= end_block:
            raise ValueError(f"invalid block range [{start_block}, {end_block}]")

        with self.ledger.transaction(caller, "submitCheckpoint"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            header = CheckpointHeader(
                header_id=self.current_checkpoint_number + 1,
                root=root,
                start_block=start_block,
                end_block=end_block,
                proposer=caller,
                created_at=timestamp,
            )
            self.ledger.set_item(self._headers, header.header_id, header)
            self.ledger.emit(events.indexed_log(
                self.address,
                events.NEW_HEADER_BLOCK,
                [address_to_topic(caller), int_to_topic(header.header_id)],
                ["uint256", "uint256", "bytes32"],
                [start_block, end_block, root],
            ))

        logger.info(
            "checkpoint_submitted",
            header_id=header.header_id,
            start=start_block,
            end=end_block,
            root=root.hex(),
        )
        return header

    def header(self, header_id: int) -> CheckpointHeader | None:
        return self._headers.get(header_id)

    def headers(self) -> list[CheckpointHeader]:
        return [self._headers[i] for i in sorted(self._headers)]

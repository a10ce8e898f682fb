"""Root-to-child notices and the in-process transport that carries them.

A notice payload is ``abi(bytes32 kind, bytes body)``. Two kinds exist:

* ``DEPOSIT``: body is ``abi(address receiver, address root_token, bytes data)``
* ``MAP_TOKEN``: body is ``abi(address root, address child, bytes32 type_tag)``
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from eth_utils import keccak

from causeway.assets import events
from causeway.chain.ledger import Ledger
from causeway.core.encoding import abi_decode, abi_encode, address_to_topic, int_to_topic
from causeway.core.types import Address, Bytes32

if TYPE_CHECKING:
    from causeway.bridge.child_manager import ChildChainManager

logger = structlog.get_logger()

DEPOSIT: Bytes32 = keccak(text="DEPOSIT")
MAP_TOKEN: Bytes32 = keccak(text="MAP_TOKEN")


def encode_notice(kind: Bytes32, body: bytes) -> bytes:
    return abi_encode(["bytes32", "bytes"], [kind, body])


def decode_notice(payload: bytes) -> tuple[Bytes32, bytes]:
    return abi_decode(["bytes32", "bytes"], payload)


def deposit_notice(receiver: Address, root_token: Address, deposit_data: bytes) -> bytes:
    body = abi_encode(["address", "address", "bytes"], [receiver, root_token, deposit_data])
    return encode_notice(DEPOSIT, body)


def map_token_notice(root: Address, child: Address, type_tag: Bytes32) -> bytes:
    body = abi_encode(["address", "address", "bytes32"], [root, child, type_tag])
    return encode_notice(MAP_TOKEN, body)


def decode_deposit(body: bytes) -> tuple[Address, Address, bytes]:
    return abi_decode(["address", "address", "bytes"], body)


def decode_mapping(body: bytes) -> tuple[Address, Address, Bytes32]:
    return abi_decode(["address", "address", "bytes32"], body)


@dataclass(frozen=True, slots=True)
class Notice:
    notice_id: int
    receiver: Address
    payload: bytes


class StateSender:
    """Outbound queue on the root ledger. Ids increase by one from 1."""

    def __init__(self, ledger: Ledger, address: Address) -> None:
        self.ledger = ledger
        self.address = address
        self._outbox: list[Notice] = []

    def __len__(self) -> int:
        return len(self._outbox)

    def sync_state(self, caller: Address, receiver: Address, payload: bytes) -> Notice:
        with self.ledger.transaction(caller, "syncState"):
            notice = Notice(len(self._outbox) + 1, receiver, payload)
            self.ledger.record(self._outbox.pop)
            self._outbox.append(notice)
            self.ledger.emit(events.indexed_log(
                self.address,
                events.STATE_SYNCED,
                [int_to_topic(notice.notice_id), address_to_topic(receiver)],
                ["bytes"],
                [payload],
            ))
            return notice

    def pending(self, after: int = 0) -> list[Notice]:
        """Notices with an id greater than ``after``, oldest first."""
        return self._outbox[after:]


class NoticeRelay:
    """Delivers queued notices to a child manager in id order.

    Stops at the first notice the child rejects; ``delivered`` then points at
    the last notice that went through and the next ``relay`` retries it.
    """

    def __init__(self, sender: StateSender, receiver: ChildChainManager, syncer: Address) -> None:
        self.sender = sender
        self.receiver = receiver
        self.syncer = syncer
        self.delivered = 0

    def relay(self) -> int:
        count = 0
        for notice in self.sender.pending(self.delivered):
            if notice.receiver != self.receiver.address:
                self.delivered = notice.notice_id
                continue
            self.receiver.on_receive_notice(self.syncer, notice.notice_id, notice.payload)
            self.delivered = notice.notice_id
            count += 1
        if count:
            logger.debug("notices_relayed", count=count, last=self.delivered)
        return count

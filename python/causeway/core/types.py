"""Core type definitions for the Causeway bridge."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TypeAlias

import rlp
from eth_utils import keccak

from causeway.core.errors import UnregisteredAsset

Bytes32: TypeAlias = bytes
Address: TypeAlias = bytes
Wei: TypeAlias = int

ZERO_ADDRESS: Address = b"\x00" * 20
ZERO_HASH: Bytes32 = b"\x00" * 32
# Sentinel standing in for the native currency wherever a token address is expected.
ETHER_ADDRESS: Address = b"\xee" * 20


class AssetType(Enum):
    """Asset classes the bridge knows how to custody."""

    FUNGIBLE = "ERC20"
    NON_FUNGIBLE = "ERC721"
    MINTABLE_NON_FUNGIBLE = "MintableERC721"
    MULTI_TOKEN = "ERC1155"
    NATIVE_CURRENCY = "Ether"

    @property
    def tag(self) -> Bytes32:
        """32-byte wire tag carried in mapping notices."""
        return keccak(text=self.value)

    @classmethod
    def from_tag(cls, tag: Bytes32) -> AssetType:
        for member in cls:
            if member.tag == tag:
                return member
        raise UnregisteredAsset(f"unknown asset type tag 0x{tag.hex()}")

    @classmethod
    def from_name(cls, name: str) -> AssetType:
        lowered = name.lower()
        for member in cls:
            if lowered in (member.name.lower(), member.value.lower()):
                return member
        raise UnregisteredAsset(f"unknown asset type {name!r}")


@dataclass(frozen=True, slots=True)
class CheckpointHeader:
    """A committed root over the block range [start_block, end_block]."""

    header_id: int
    root: Bytes32
    start_block: int
    end_block: int
    proposer: Address = ZERO_ADDRESS
    created_at: int = 0

    @property
    def depth(self) -> int:
        """Audit path length implied by the block range."""
        return (self.end_block - self.start_block).bit_length()

    def contains(self, block_number: int) -> bool:
        return self.start_block <= block_number <= self.end_block


@dataclass(frozen=True, slots=True)
class LogEntry:
    emitter: Address
    topics: tuple[Bytes32, ...]
    data: bytes = b""

    @property
    def signature(self) -> Bytes32:
        return self.topics[0] if self.topics else b""

    def to_rlp(self) -> list:
        return [self.emitter, list(self.topics), self.data]


@dataclass(frozen=True, slots=True)
class Receipt:
    """Transaction outcome record as committed in a block's receipts trie."""

    status: int
    cumulative_gas_used: int
    logs_bloom: bytes
    logs: tuple[LogEntry, ...]
    tx_type: int = 0

    def encode(self) -> bytes:
        payload = rlp.encode([
            self.status,
            self.cumulative_gas_used,
            self.logs_bloom,
            [log.to_rlp() for log in self.logs],
        ])
        if self.tx_type:
            return bytes([self.tx_type]) + payload
        return payload


@dataclass(frozen=True, slots=True)
class Block:
    number: int
    timestamp: int
    transactions_root: Bytes32
    receipts_root: Bytes32
    transactions: tuple[bytes, ...] = field(default_factory=tuple)
    receipts: tuple[Receipt, ...] = field(default_factory=tuple)

    @property
    def leaf(self) -> Bytes32:
        """Checkpoint leaf binding the four committed block fields."""
        return block_leaf(
            self.number,
            self.timestamp,
            self.transactions_root,
            self.receipts_root,
        )


@dataclass(frozen=True, slots=True)
class ExitProof:
    """Everything a withdrawer submits to prove a burn on the child chain."""

    header_id: int
    sibling_path: tuple[Bytes32, ...]
    block_number: int
    block_timestamp: int
    transactions_root: Bytes32
    receipts_root: Bytes32
    receipt_rlp: bytes
    receipt_trie_proof: tuple[bytes, ...]
    nibble_path: bytes
    log_index: int

    @property
    def leaf(self) -> Bytes32:
        return block_leaf(
            self.block_number,
            self.block_timestamp,
            self.transactions_root,
            self.receipts_root,
        )


def block_leaf(
    number: int,
    timestamp: int,
    transactions_root: Bytes32,
    receipts_root: Bytes32,
) -> Bytes32:
    return keccak(
        number.to_bytes(32, "big")
        + timestamp.to_bytes(32, "big")
        + transactions_root
        + receipts_root
    )

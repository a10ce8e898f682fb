"""Word-level helpers for topics, addresses and ABI payloads."""

from __future__ import annotations

from typing import Iterable, Sequence

from eth_abi import decode, encode
from eth_utils import keccak, to_canonical_address, to_checksum_address

from causeway.core.errors import InvalidProof
from causeway.core.types import Address, Bytes32, LogEntry


def event_signature(text: str) -> Bytes32:
    return keccak(text=text)


def address_to_topic(address: Address) -> Bytes32:
    return address.rjust(32, b"\x00")


def int_to_topic(value: int) -> Bytes32:
    return value.to_bytes(32, "big")


def topic_to_address(topic: Bytes32) -> Address:
    if len(topic) != 32:
        raise InvalidProof(f"topic must be 32 bytes, got {len(topic)}")
    return topic[12:]


def topic_to_int(topic: Bytes32) -> int:
    if len(topic) != 32:
        raise InvalidProof(f"topic must be 32 bytes, got {len(topic)}")
    return int.from_bytes(topic, "big")


def as_address(value: str | bytes) -> Address:
    """Accept hex strings or raw bytes, return the 20-byte form."""
    return to_canonical_address(value)


def display(address: Address) -> str:
    return to_checksum_address(address)


def abi_encode(types: Sequence[str], values: Sequence[object]) -> bytes:
    return encode(list(types), list(values))


def abi_decode(types: Sequence[str], data: bytes) -> tuple:
    """Decode ``data`` and normalise addresses to raw bytes."""
    try:
        values = decode(list(types), data)
    except Exception as e:
        raise InvalidProof(f"cannot decode {list(types)}: {e}") from e
    return tuple(
        as_address(v) if t == "address" else v
        for t, v in zip(types, values)
    )


def logs_bloom(logs: Iterable[LogEntry]) -> bytes:
    """2048-bit bloom over every emitter and topic."""
    bloom = 0
    for log in logs:
        for item in (log.emitter, *log.topics):
            digest = keccak(item)
            for i in (0, 2, 4):
                bloom |= 1 << (int.from_bytes(digest[i:i + 2], "big") & 2047)
    return bloom.to_bytes(256, "big")

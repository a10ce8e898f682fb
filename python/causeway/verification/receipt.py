"""Structural decoding of receipts and their logs."""

from __future__ import annotations

import rlp

from causeway.core.errors import IndexOutOfRange, InvalidProof
from causeway.core.types import LogEntry, Receipt


def split_receipt_type(receipt: bytes) -> tuple[int, bytes]:
    """Separate an EIP-2718 type byte from the RLP payload."""
    if not receipt:
        raise InvalidProof("empty receipt")
    if receipt[0] <= 0x7F:
        return receipt[0], receipt[1:]
    return 0, receipt


def _decode_fields(receipt: bytes) -> tuple[int, list]:
    tx_type, payload = split_receipt_type(receipt)
    try:
        fields = rlp.decode(payload)
    except rlp.DecodingError as e:
        raise InvalidProof(f"receipt is not valid RLP: {e}") from e
    if not isinstance(fields, list) or len(fields) != 4 or not isinstance(fields[3], list):
        raise InvalidProof("receipt must be [status, cumulativeGas, bloom, logs]")
    return tx_type, fields


def _to_log(raw: object) -> LogEntry:
    if not isinstance(raw, list) or len(raw) != 3:
        raise InvalidProof("log must be [address, topics, data]")
    emitter, topics, data = raw
    if not isinstance(emitter, bytes) or len(emitter) != 20:
        raise InvalidProof("log emitter must be a 20-byte address")
    if not isinstance(topics, list) or not all(
        isinstance(t, bytes) and len(t) == 32 for t in topics
    ):
        raise InvalidProof("log topics must be 32-byte words")
    if not isinstance(data, bytes):
        raise InvalidProof("log data must be a byte string")
    return LogEntry(emitter=emitter, topics=tuple(topics), data=data)


def extract_log(receipt: bytes, log_index: int) -> LogEntry:
    """Return log ``log_index`` of an encoded receipt."""
    _, fields = _decode_fields(receipt)
    logs = fields[3]
    if log_index < 0 or log_index >= len(logs):
        raise IndexOutOfRange(
            f"log index {log_index} out of range for receipt with {len(logs)} logs"
        )
    return _to_log(logs[log_index])


def decode_receipt(receipt: bytes) -> Receipt:
    tx_type, fields = _decode_fields(receipt)
    status, gas, bloom, logs = fields
    return Receipt(
        status=int.from_bytes(status, "big"),
        cumulative_gas_used=int.from_bytes(gas, "big"),
        logs_bloom=bloom,
        logs=tuple(_to_log(raw) for raw in logs),
        tx_type=tx_type,
    )

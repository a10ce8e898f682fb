"""Exit proof wire format and exit identifiers.

Wire layout (one RLP list)::

    [header_id, concat(sibling_path), block_number, block_timestamp,
     transactions_root, receipts_root, receipt, rlp(trie_nodes),
     rlp(hex_prefix_path), log_index]
"""

from __future__ import annotations

import rlp
from eth_utils import keccak
from rlp.sedes import big_endian_int

from causeway.core.errors import InvalidProof
from causeway.core.types import Bytes32, ExitProof
from causeway.verification.patricia import bytes_to_nibbles, decode_hex_prefix, encode_hex_prefix

FIELD_COUNT = 10


def receipt_key(tx_index: int) -> bytes:
    """Trie key under which a block commits the receipt of ``tx_index``."""
    return rlp.encode(tx_index)


def nibble_path_for(tx_index: int) -> bytes:
    return encode_hex_prefix(bytes_to_nibbles(receipt_key(tx_index)), is_leaf=False)


def key_nibbles(proof: ExitProof) -> tuple[int, ...]:
    nibbles, _ = decode_hex_prefix(proof.nibble_path)
    return nibbles


def exit_id(proof: ExitProof) -> Bytes32:
    """Identifier of the burn a proof redeems: (block, receipt key, log index).

    The key is hashed as a nibble array, so paths that differ only in their
    hex-prefix padding map to the same exit.
    """
    return keccak(
        proof.block_number.to_bytes(32, "big")
        + bytes(key_nibbles(proof))
        + proof.log_index.to_bytes(32, "big")
    )


def encode_exit_proof(proof: ExitProof) -> bytes:
    try:
        nodes = [rlp.decode(node) for node in proof.receipt_trie_proof]
    except rlp.DecodingError as e:
        raise InvalidProof(f"trie proof node is not valid RLP: {e}") from e
    return rlp.encode([
        proof.header_id,
        b"".join(proof.sibling_path),
        proof.block_number,
        proof.block_timestamp,
        proof.transactions_root,
        proof.receipts_root,
        proof.receipt_rlp,
        rlp.encode(nodes),
        rlp.encode(proof.nibble_path),
        proof.log_index,
    ])


def _uint(item: object, name: str) -> int:
    try:
        value = big_endian_int.deserialize(item)
    except rlp.DeserializationError as e:
        raise InvalidProof(f"{name} is not a canonical integer") from e
    if value >= 1 << 256:
        raise InvalidProof(f"{name} does not fit in 256 bits")
    return value


def _hash(item: object, name: str) -> Bytes32:
    if not isinstance(item, bytes) or len(item) != 32:
        raise InvalidProof(f"{name} must be a 32-byte hash")
    return item


def decode_exit_proof(data: bytes) -> ExitProof:
    try:
        items = rlp.decode(data)
    except rlp.DecodingError as e:
        raise InvalidProof(f"exit payload is not valid RLP: {e}") from e
    if not isinstance(items, list) or len(items) != FIELD_COUNT:
        raise InvalidProof(f"exit payload must be a list of {FIELD_COUNT} items")

    siblings, receipt, nodes_rlp, path_rlp = items[1], items[6], items[7], items[8]
    if not all(isinstance(x, bytes) for x in (siblings, receipt, nodes_rlp, path_rlp)):
        raise InvalidProof("exit payload fields have the wrong shape")
    if len(siblings) % 32:
        raise InvalidProof("sibling path length must be a multiple of 32")

    try:
        nodes = rlp.decode(nodes_rlp)
        path = rlp.decode(path_rlp)
    except rlp.DecodingError as e:
        raise InvalidProof(f"trie proof is not valid RLP: {e}") from e
    if not isinstance(nodes, list) or not isinstance(path, bytes):
        raise InvalidProof("trie proof must be a node list and a byte path")

    return ExitProof(
        header_id=_uint(items[0], "header_id"),
        sibling_path=tuple(siblings[i:i + 32] for i in range(0, len(siblings), 32)),
        block_number=_uint(items[2], "block_number"),
        block_timestamp=_uint(items[3], "block_timestamp"),
        transactions_root=_hash(items[4], "transactions_root"),
        receipts_root=_hash(items[5], "receipts_root"),
        receipt_rlp=receipt,
        receipt_trie_proof=tuple(rlp.encode(node) for node in nodes),
        nibble_path=path,
        log_index=_uint(items[9], "log_index"),
    )

"""Hexary Patricia trie: builder, proof generation and inclusion verification.

Nodes follow the usual layout: a branch is 17 items (16 children plus a value
slot), extensions and leaves are 2 items whose first item is a hex-prefix
encoded nibble run. Children whose encoding is shorter than 32 bytes are
embedded in their parent; everything else is referenced by keccak hash.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence, Union

import rlp
from eth_utils import keccak

from causeway.core.errors import InvalidProof
from causeway.core.types import Bytes32

Node = list
Reference = Union[bytes, list]

BLANK_NODE = b""
EMPTY_TRIE_ROOT: Bytes32 = keccak(rlp.encode(BLANK_NODE))


def bytes_to_nibbles(data: bytes) -> tuple[int, ...]:
    nibbles: list[int] = []
    for byte in data:
        nibbles.append(byte >> 4)
        nibbles.append(byte & 0x0F)
    return tuple(nibbles)


def encode_hex_prefix(nibbles: Sequence[int], is_leaf: bool) -> bytes:
    flag = 2 if is_leaf else 0
    if len(nibbles) % 2:
        prefixed = [flag + 1, *nibbles]
    else:
        prefixed = [flag, 0, *nibbles]
    return bytes(
        (prefixed[i] << 4) | prefixed[i + 1]
        for i in range(0, len(prefixed), 2)
    )


def decode_hex_prefix(data: bytes) -> tuple[tuple[int, ...], bool]:
    """Return (nibbles, is_leaf) for a hex-prefix encoded path."""
    if not data:
        raise InvalidProof("empty hex-prefix path")
    nibbles = bytes_to_nibbles(data)
    flag = nibbles[0]
    if flag > 3:
        raise InvalidProof(f"invalid hex-prefix flag {flag}")
    if flag & 1:
        return nibbles[1:], flag >= 2
    if nibbles[1] != 0:
        raise InvalidProof("non-zero hex-prefix padding")
    return nibbles[2:], flag >= 2


class PatriciaTrie:
    """Write-then-read trie used to commit receipts and transactions."""

    def __init__(self) -> None:
        self._items: dict[tuple[int, ...], bytes] = {}
        self._nodes: dict[Bytes32, bytes] = {}
        self._root: Node | None = None
        self._dirty = False

    def __len__(self) -> int:
        return len(self._items)

    def put(self, key: bytes, value: bytes) -> None:
        if not value:
            raise ValueError("empty values cannot be stored")
        self._items[bytes_to_nibbles(key)] = value
        self._dirty = True

    def get(self, key: bytes) -> bytes | None:
        return self._items.get(bytes_to_nibbles(key))

    @property
    def root_hash(self) -> Bytes32:
        root = self._root_node()
        if root is None:
            return EMPTY_TRIE_ROOT
        return keccak(rlp.encode(root))

    def prove(self, key: bytes) -> tuple[bytes, ...]:
        """Encoded nodes on the path from the root to ``key``'s value."""
        root = self._root_node()
        nibbles = bytes_to_nibbles(key)
        if root is None or nibbles not in self._items:
            raise KeyError(key.hex())

        node = root
        proof = [rlp.encode(node)]
        pos = 0
        while True:
            if len(node) == 17:
                if pos == len(nibbles):
                    break
                ref = node[nibbles[pos]]
                pos += 1
            else:
                path, is_leaf = decode_hex_prefix(node[0])
                pos += len(path)
                if is_leaf:
                    break
                ref = node[1]
            node = self._resolve(ref)
            proof.append(rlp.encode(node))
        return tuple(proof)

    def _root_node(self) -> Node | None:
        if self._dirty:
            self._nodes = {}
            items = sorted(self._items.items())
            self._root = self._build(items, 0) if items else None
            self._dirty = False
        return self._root

    def _build(self, items: list[tuple[tuple[int, ...], bytes]], depth: int) -> Node:
        if len(items) == 1:
            nibbles, value = items[0]
            return [encode_hex_prefix(nibbles[depth:], True), value]

        shared = _shared_prefix(items, depth)
        if shared:
            child = self._build(items, depth + shared)
            run = items[0][0][depth:depth + shared]
            return [encode_hex_prefix(run, False), self._reference(child)]

        branch: list[Reference] = [BLANK_NODE] * 17
        groups: defaultdict[int, list[tuple[tuple[int, ...], bytes]]] = defaultdict(list)
        for nibbles, value in items:
            if len(nibbles) == depth:
                branch[16] = value
            else:
                groups[nibbles[depth]].append((nibbles, value))
        for nibble, group in groups.items():
            branch[nibble] = self._reference(self._build(group, depth + 1))
        return branch

    def _reference(self, node: Node) -> Reference:
        encoded = rlp.encode(node)
        if len(encoded) < 32:
            return node
        digest = keccak(encoded)
        self._nodes[digest] = encoded
        return digest

    def _resolve(self, ref: Reference) -> Node:
        if isinstance(ref, list):
            return ref
        return rlp.decode(self._nodes[ref])


def _shared_prefix(items: list[tuple[tuple[int, ...], bytes]], depth: int) -> int:
    first = items[0][0]
    limit = min(len(nibbles) for nibbles, _ in items) - depth
    shared = 0
    while shared < limit and all(
        nibbles[depth + shared] == first[depth + shared] for nibbles, _ in items
    ):
        shared += 1
    return shared


def verify_proof(
    key: Sequence[int],
    value: bytes,
    proof_nodes: Sequence[bytes],
    root: Bytes32,
) -> bool:
    """Check that ``value`` is stored under nibble path ``key`` in the trie ``root``."""
    if not key or not proof_nodes:
        return False

    key = tuple(key)
    expected: Reference = root
    pos = 0
    for i, encoded in enumerate(proof_nodes):
        if isinstance(expected, list):
            if rlp.encode(expected) != encoded:
                return False
        elif len(expected) != 32 or keccak(encoded) != expected:
            return False

        try:
            node = rlp.decode(encoded)
        except rlp.DecodingError:
            return False
        if not isinstance(node, list):
            return False
        last = i == len(proof_nodes) - 1

        if len(node) == 17:
            if pos == len(key):
                return last and node[16] == value
            ref = node[key[pos]]
            pos += 1
            if ref == BLANK_NODE:
                return False
        elif len(node) == 2 and isinstance(node[0], bytes):
            try:
                path, is_leaf = decode_hex_prefix(node[0])
            except InvalidProof:
                return False
            if key[pos:pos + len(path)] != path:
                return False
            pos += len(path)
            if is_leaf:
                return last and pos == len(key) and node[1] == value
            if not path:
                return False
            ref = node[1]
        else:
            return False
        expected = ref

    return False

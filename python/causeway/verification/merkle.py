"""Binary merkle tree over checkpointed block headers."""

from __future__ import annotations

from typing import Sequence

from eth_utils import keccak

from causeway.core.types import Block, Bytes32, ZERO_HASH


class BlockMerkleTree:
    """Merkle tree over block leaves for one checkpoint range."""

    def __init__(self) -> None:
        self._leaves: list[Bytes32] = []
        self._tree: list[list[Bytes32]] = []
        self._root: Bytes32 = ZERO_HASH

    @classmethod
    def from_blocks(cls, blocks: Sequence[Block]) -> BlockMerkleTree:
        tree = cls()
        tree.build([block.leaf for block in blocks])
        return tree

    def build(self, leaves: Sequence[Bytes32]) -> Bytes32:
        """Build tree from leaf hashes, padding with zero words to a power of 2."""
        if not leaves:
            raise ValueError("checkpoint range must contain at least one block")

        self._leaves = list(leaves)
        target_size = 1
        while target_size < len(self._leaves):
            target_size *= 2
        while len(self._leaves) < target_size:
            self._leaves.append(ZERO_HASH)

        self._tree = [self._leaves]
        current_level = self._leaves
        while len(current_level) > 1:
            next_level: list[Bytes32] = []
            for i in range(0, len(current_level), 2):
                next_level.append(keccak(current_level[i] + current_level[i + 1]))
            self._tree.append(next_level)
            current_level = next_level

        self._root = self._tree[-1][0]
        return self._root

    def get_root(self) -> Bytes32:
        return self._root

    @property
    def depth(self) -> int:
        return len(self._tree) - 1

    def generate_proof(self, index: int) -> tuple[Bytes32, ...]:
        """Sibling hashes from the leaf at ``index`` up to the root."""
        if not 0 <= index < len(self._leaves):
            raise IndexError(f"Index {index} out of range")

        path: list[Bytes32] = []
        current_index = index
        for level in self._tree[:-1]:
            path.append(level[current_index ^ 1])
            current_index //= 2
        return tuple(path)


def verify_membership(
    leaf: Bytes32,
    path: Sequence[Bytes32],
    index: int,
    root: Bytes32,
) -> bool:
    """Recompute the root from ``leaf`` and its audit path.

    Bit ``i`` of ``index`` (least significant first) says whether the running
    hash is the right-hand child at level ``i``.
    """
    if index < 0 or index >= 1 << len(path):
        return False

    current = leaf
    for sibling in path:
        if len(sibling) != 32:
            return False
        if index % 2 == 0:
            current = keccak(current + sibling)
        else:
            current = keccak(sibling + current)
        index //= 2

    return current == root

import pytest
from eth_utils import keccak

from causeway.core.types import ZERO_HASH, Block, CheckpointHeader, block_leaf
from causeway.verification.merkle import BlockMerkleTree, verify_membership


def make_blocks(start: int, count: int) -> list[Block]:
    return [
        Block(
            number=n,
            timestamp=1_000 + n,
            transactions_root=keccak(text=f"tx-{n}"),
            receipts_root=keccak(text=f"rc-{n}"),
        )
        for n in range(start, start + count)
    ]


@pytest.mark.parametrize("count", [1, 2, 3, 5, 8, 13])
def test_every_block_proves_against_root(count):
    blocks = make_blocks(100, count)
    tree = BlockMerkleTree.from_blocks(blocks)
    header = CheckpointHeader(1, tree.get_root(), 100, 100 + count - 1)

    assert tree.depth == header.depth
    for i, block in enumerate(blocks):
        path = tree.generate_proof(i)
        assert len(path) == header.depth
        assert verify_membership(block.leaf, path, i, tree.get_root())


def test_single_block_root_is_its_leaf():
    blocks = make_blocks(7, 1)
    tree = BlockMerkleTree.from_blocks(blocks)

    assert tree.get_root() == blocks[0].leaf
    assert tree.generate_proof(0) == ()
    assert verify_membership(blocks[0].leaf, (), 0, tree.get_root())


def test_range_is_padded_with_zero_words():
    blocks = make_blocks(1, 3)
    tree = BlockMerkleTree.from_blocks(blocks)

    left = keccak(blocks[0].leaf + blocks[1].leaf)
    right = keccak(blocks[2].leaf + ZERO_HASH)
    assert tree.get_root() == keccak(left + right)


def test_flipping_any_sibling_bit_fails():
    blocks = make_blocks(10, 6)
    tree = BlockMerkleTree.from_blocks(blocks)
    path = tree.generate_proof(4)

    for level, sibling in enumerate(path):
        for bit in (0, 77, 255):
            flipped = bytearray(sibling)
            flipped[bit // 8] ^= 1 << (bit % 8)
            forged = path[:level] + (bytes(flipped),) + path[level + 1:]
            assert not verify_membership(blocks[4].leaf, forged, 4, tree.get_root())


def test_wrong_index_or_leaf_fails():
    blocks = make_blocks(1, 4)
    tree = BlockMerkleTree.from_blocks(blocks)
    path = tree.generate_proof(1)

    assert not verify_membership(blocks[1].leaf, path, 2, tree.get_root())
    assert not verify_membership(blocks[2].leaf, path, 1, tree.get_root())
    assert not verify_membership(blocks[1].leaf, path, 4, tree.get_root())
    assert not verify_membership(blocks[1].leaf, path, -1, tree.get_root())


def test_leaf_binds_all_four_fields():
    block = make_blocks(5, 1)[0]
    assert block.leaf == keccak(
        (5).to_bytes(32, "big")
        + (1_005).to_bytes(32, "big")
        + block.transactions_root
        + block.receipts_root
    )
    assert block.leaf != block_leaf(5, 1_006, block.transactions_root, block.receipts_root)


def test_empty_range_rejected():
    with pytest.raises(ValueError):
        BlockMerkleTree().build([])

"""Off-chain assembly of exit proofs.

:func:`build_exit_proof` works on blocks already in hand (the in-process
ledger, tests). :class:`ExitProofBuilder` fetches the same material from a
child-chain JSON-RPC endpoint and never mutates anything.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import structlog
from eth_utils import to_bytes, to_canonical_address
from web3 import AsyncHTTPProvider, AsyncWeb3

from causeway.core.config import RpcConfig
from causeway.core.errors import InvalidProof
from causeway.core.types import Block, CheckpointHeader, ExitProof, LogEntry, Receipt
from causeway.verification.exit_proof import nibble_path_for, receipt_key
from causeway.verification.merkle import BlockMerkleTree
from causeway.verification.patricia import PatriciaTrie

logger = structlog.get_logger()


def receipts_trie(receipts: Sequence[Receipt]) -> PatriciaTrie:
    trie = PatriciaTrie()
    for index, receipt in enumerate(receipts):
        trie.put(receipt_key(index), receipt.encode())
    return trie


def build_exit_proof(
    blocks: Sequence[Block],
    header_id: int,
    block_number: int,
    tx_index: int,
    log_index: int,
) -> ExitProof:
    """Assemble the proof for log ``log_index`` of receipt ``tx_index``.

    ``blocks`` must be the whole checkpoint range, in order. Only the burn
    block needs its receipts populated.
    """
    if not blocks:
        raise ValueError("checkpoint range is empty")
    start = blocks[0].number
    for offset, block in enumerate(blocks):
        if block.number != start + offset:
            raise ValueError(f"checkpoint range is not contiguous at block {block.number}")
    if not start <= block_number < start + len(blocks):
        raise ValueError(f"block {block_number} is outside the supplied range")

    burn = blocks[block_number - start]
    if not 0 <= tx_index < len(burn.receipts):
        raise ValueError(f"block {block_number} has no receipt {tx_index}")

    trie = receipts_trie(burn.receipts)
    if trie.root_hash != burn.receipts_root:
        raise InvalidProof(f"receipts of block {block_number} do not match its receipts root")

    tree = BlockMerkleTree.from_blocks(blocks)
    return ExitProof(
        header_id=header_id,
        sibling_path=tree.generate_proof(block_number - start),
        block_number=block_number,
        block_timestamp=burn.timestamp,
        transactions_root=burn.transactions_root,
        receipts_root=burn.receipts_root,
        receipt_rlp=burn.receipts[tx_index].encode(),
        receipt_trie_proof=trie.prove(receipt_key(tx_index)),
        nibble_path=nibble_path_for(tx_index),
        log_index=log_index,
    )


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return to_bytes(hexstr=value)
    return bytes(value)


def _as_int(value: Any) -> int:
    if isinstance(value, str):
        return int(value, 16)
    return int(value)


class ExitProofBuilder:
    """Builds exit proofs for burn transactions on a live child chain."""

    def __init__(self, config: RpcConfig) -> None:
        self.config = config
        self._web3: AsyncWeb3 | None = None

    async def connect(self) -> None:
        provider = AsyncHTTPProvider(self.config.child_rpc_url)
        self._web3 = AsyncWeb3(provider)
        chain_id = await self._web3.eth.chain_id
        latest = await self._web3.eth.block_number
        logger.info("connected_to_rpc", chain_id=chain_id, latest_block=latest)

    async def close(self) -> None:
        if self._web3 and self._web3.provider:
            await self._web3.provider.disconnect()
        self._web3 = None

    @property
    def web3(self) -> AsyncWeb3:
        if self._web3 is None:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._web3

    async def get_block(self, block_number: int, with_receipts: bool = False) -> Block:
        raw = await self.web3.eth.get_block(block_number)
        receipts: tuple[Receipt, ...] = ()
        if with_receipts:
            fetched = await asyncio.gather(
                *(self.web3.eth.get_transaction_receipt(h) for h in raw.get("transactions", []))
            )
            receipts = tuple(self._parse_receipt(r) for r in fetched)
        return Block(
            number=raw["number"],
            timestamp=raw["timestamp"],
            transactions_root=_as_bytes(raw["transactionsRoot"]),
            receipts_root=_as_bytes(raw["receiptsRoot"]),
            receipts=receipts,
        )

    def _parse_receipt(self, raw: Any) -> Receipt:
        logs = tuple(
            LogEntry(
                emitter=to_canonical_address(log["address"]),
                topics=tuple(_as_bytes(t) for t in log["topics"]),
                data=_as_bytes(log["data"]),
            )
            for log in raw["logs"]
        )
        return Receipt(
            status=_as_int(raw["status"]),
            cumulative_gas_used=_as_int(raw["cumulativeGasUsed"]),
            logs_bloom=_as_bytes(raw["logsBloom"]),
            logs=logs,
            tx_type=_as_int(raw.get("type", 0)),
        )

    async def get_range(self, start: int, end: int, burn_block: int) -> list[Block]:
        """Fetch ``[start, end]`` in batches; only ``burn_block`` gets receipts."""
        blocks: list[Block] = []
        current = start
        while current <= end:
            batch_end = min(current + self.config.batch_size - 1, end)
            batch = await asyncio.gather(*(
                self.get_block(n, with_receipts=(n == burn_block))
                for n in range(current, batch_end + 1)
            ))
            blocks.extend(batch)
            logger.debug("checkpoint_range_fetched", start=current, end=batch_end)
            current = batch_end + 1
        return blocks

    async def build(self, tx_hash: str, header: CheckpointHeader, log_index: int) -> ExitProof:
        receipt = await self.web3.eth.get_transaction_receipt(tx_hash)
        block_number = receipt["blockNumber"]
        tx_index = receipt["transactionIndex"]
        if not header.contains(block_number):
            raise ValueError(
                f"block {block_number} is not covered by checkpoint {header.header_id} "
                f"[{header.start_block}, {header.end_block}]"
            )

        blocks = await self.get_range(header.start_block, header.end_block, block_number)
        tree = BlockMerkleTree.from_blocks(blocks)
        if tree.get_root() != header.root:
            raise InvalidProof(
                f"RPC blocks do not reproduce the root of checkpoint {header.header_id}"
            )

        proof = build_exit_proof(blocks, header.header_id, block_number, tx_index, log_index)
        logger.info(
            "exit_proof_built",
            tx=tx_hash,
            header_id=header.header_id,
            block=block_number,
            log_index=log_index,
        )
        return proof

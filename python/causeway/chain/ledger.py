"""In-process model of a single chain's execution semantics.

Every state-mutating call runs inside :meth:`Ledger.transaction`. Calls are
serialized by a re-entrant lock, nested calls join the outermost one, and all
mutations register an undo step in the call's journal. If the outermost call
raises, the journal is unwound in reverse and no partial state survives.
Successful outermost calls produce a :class:`Receipt` carrying the logs they
emitted; :meth:`Ledger.seal_block` commits pending receipts into a block.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, MutableMapping, MutableSet

import rlp
import structlog

from causeway.core.encoding import logs_bloom
from causeway.core.types import Address, Block, LogEntry, Receipt
from causeway.verification.patricia import PatriciaTrie

logger = structlog.get_logger()

GAS_PER_CALL = 21_000

_MISSING = object()


@dataclass(slots=True)
class Call:
    sender: Address
    label: str
    index: int
    receipt: Receipt | None = None


class Ledger:
    """Serialized, revertible state container for one chain."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.blocks: list[Block] = []
        self.last_call: Call | None = None
        self._lock = threading.RLock()
        self._journal: list[Callable[[], None]] | None = None
        self._current: Call | None = None
        self._logs: list[LogEntry] = []
        self._pending_receipts: list[Receipt] = []
        self._pending_transactions: list[bytes] = []
        self._cumulative_gas = 0
        self._nonce = 0

    @contextmanager
    def transaction(self, sender: Address, label: str) -> Iterator[Call]:
        with self._lock:
            if self._current is not None:
                yield self._current
                return

            call = Call(sender=sender, label=label, index=len(self._pending_receipts))
            self._current = call
            self._journal = []
            self._logs = []
            try:
                yield call
            except BaseException:
                for undo in reversed(self._journal):
                    undo()
                logger.debug("call_reverted", ledger=self.name, call=label)
                raise
            else:
                self._commit(call)
            finally:
                self._current = None
                self._journal = None
                self._logs = []

    @property
    def in_transaction(self) -> bool:
        return self._current is not None

    def record(self, undo: Callable[[], None]) -> None:
        if self._journal is None:
            raise RuntimeError(f"{self.name}: state mutation outside a transaction")
        self._journal.append(undo)

    def emit(self, log: LogEntry) -> None:
        self.record(self._logs.pop)
        self._logs.append(log)

    # Journaled primitives used by every stateful component.

    def set_item(self, mapping: MutableMapping[Any, Any], key: Any, value: Any) -> None:
        previous = mapping.get(key, _MISSING)

        def undo() -> None:
            if previous is _MISSING:
                mapping.pop(key, None)
            else:
                mapping[key] = previous

        self.record(undo)
        mapping[key] = value

    def delete_item(self, mapping: MutableMapping[Any, Any], key: Any) -> None:
        if key not in mapping:
            return
        previous = mapping[key]
        self.record(lambda: mapping.__setitem__(key, previous))
        del mapping[key]

    def add_member(self, members: MutableSet[Any], item: Any) -> None:
        if item in members:
            return
        self.record(lambda: members.discard(item))
        members.add(item)

    def discard_member(self, members: MutableSet[Any], item: Any) -> None:
        if item not in members:
            return
        self.record(lambda: members.add(item))
        members.discard(item)

    def _commit(self, call: Call) -> None:
        self._cumulative_gas += GAS_PER_CALL
        logs = tuple(self._logs)
        receipt = Receipt(
            status=1,
            cumulative_gas_used=self._cumulative_gas,
            logs_bloom=logs_bloom(logs),
            logs=logs,
        )
        call.receipt = receipt
        self._pending_receipts.append(receipt)
        self._pending_transactions.append(
            rlp.encode([self._nonce, call.sender, call.label.encode()])
        )
        self._nonce += 1
        self.last_call = call

    @property
    def pending_receipts(self) -> tuple[Receipt, ...]:
        return tuple(self._pending_receipts)

    @property
    def next_block_number(self) -> int:
        return len(self.blocks) + 1

    def seal_block(self, timestamp: int) -> Block:
        """Commit pending calls into the next block."""
        with self._lock:
            receipts = tuple(self._pending_receipts)
            transactions = tuple(self._pending_transactions)

            block = Block(
                number=self.next_block_number,
                timestamp=timestamp,
                transactions_root=_index_trie(transactions).root_hash,
                receipts_root=_index_trie(r.encode() for r in receipts).root_hash,
                transactions=transactions,
                receipts=receipts,
            )
            self.blocks.append(block)
            self._pending_receipts = []
            self._pending_transactions = []
            self._cumulative_gas = 0

        logger.debug(
            "block_sealed",
            ledger=self.name,
            block=block.number,
            txs=len(receipts),
        )
        return block

    def block(self, number: int) -> Block:
        if not 1 <= number <= len(self.blocks):
            raise KeyError(f"{self.name}: no block {number}")
        return self.blocks[number - 1]


def _index_trie(values: Any) -> PatriciaTrie:
    trie = PatriciaTrie()
    for index, value in enumerate(values):
        trie.put(rlp.encode(index), value)
    return trie

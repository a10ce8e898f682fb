"""File-backed store of checkpoint headers for off-chain tooling."""

from __future__ import annotations

import json
import struct
from pathlib import Path
from typing import Iterator

import structlog

from causeway.core.types import Bytes32, CheckpointHeader

logger = structlog.get_logger()

_HEADER_FORMAT = "<Q32sQQ20sQ"


class CheckpointStore:
    """Persistent header table mirroring a root chain's checkpoints."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)

        self.headers_path = base_path / "headers"
        self.headers_path.mkdir(exist_ok=True)

        self.index_path = base_path / "index.json"
        self._index: dict[int, str] = {}
        self._load_index()

    def store(self, header: CheckpointHeader) -> None:
        header_file = self.headers_path / f"{header.header_id}.bin"

        with open(header_file, "wb") as f:
            f.write(self._serialize(header))

        self._index[header.header_id] = header_file.name
        self._save_index()

        logger.debug("checkpoint_stored", header_id=header.header_id)

    def add(self, root: Bytes32, start_block: int, end_block: int, created_at: int = 0) -> CheckpointHeader:
        """Append a header under the next free id."""
        if len(root) != 32:
            raise ValueError(f"checkpoint root must be 32 bytes, got {len(root)}")
        if not 0 <= start_block <= end_block:
            raise ValueError(f"invalid block range [{start_block}, {end_block}]")
        if end_block >= 1 << 64 or not 0 <= created_at < 1 << 64:
            raise ValueError("block numbers and timestamps must fit in 64 bits")
        header = CheckpointHeader(
            header_id=self.next_id,
            root=root,
            start_block=start_block,
            end_block=end_block,
            created_at=created_at,
        )
        self.store(header)
        return header

    def load(self, header_id: int) -> CheckpointHeader | None:
        if header_id not in self._index:
            return None

        header_file = self.headers_path / self._index[header_id]
        if not header_file.exists():
            return None

        with open(header_file, "rb") as f:
            return self._deserialize(f.read())

    def has_header(self, header_id: int) -> bool:
        return header_id in self._index

    @property
    def next_id(self) -> int:
        return max(self._index, default=0) + 1

    def list_headers(self) -> list[int]:
        return sorted(self._index.keys())

    def iter_headers(self) -> Iterator[CheckpointHeader]:
        for header_id in self.list_headers():
            header = self.load(header_id)
            if header:
                yield header

    def _serialize(self, header: CheckpointHeader) -> bytes:
        return struct.pack(
            _HEADER_FORMAT,
            header.header_id,
            header.root,
            header.start_block,
            header.end_block,
            header.proposer,
            header.created_at,
        )

    def _deserialize(self, data: bytes) -> CheckpointHeader:
        header_id, root, start, end, proposer, created_at = struct.unpack(_HEADER_FORMAT, data)
        return CheckpointHeader(
            header_id=header_id,
            root=root,
            start_block=start,
            end_block=end,
            proposer=proposer,
            created_at=created_at,
        )

    def _load_index(self) -> None:
        if self.index_path.exists():
            with open(self.index_path) as f:
                raw = json.load(f)
                self._index = {int(k): v for k, v in raw.items()}

    def _save_index(self) -> None:
        with open(self.index_path, "w") as f:
            json.dump({str(k): v for k, v in self._index.items()}, f)

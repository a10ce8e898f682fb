"""
Causeway: a two-chain asset bridge.

Assets deposited on a root chain are locked by per-asset-class predicates and
mirrored on a child chain. Burns on the child chain are redeemed on the root
chain with exit proofs checked against committed checkpoints.
"""

from causeway.core.types import (
    AssetType,
    Block,
    CheckpointHeader,
    ExitProof,
    LogEntry,
    Receipt,
)

__version__ = "0.1.0"
__all__ = [
    "AssetType",
    "Block",
    "CheckpointHeader",
    "ExitProof",
    "LogEntry",
    "Receipt",
]

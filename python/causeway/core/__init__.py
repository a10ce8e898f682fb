"""Core types, configuration and utilities for Causeway."""

from causeway.core.types import (
    AssetType,
    Block,
    CheckpointHeader,
    ExitProof,
    LogEntry,
    Receipt,
    ETHER_ADDRESS,
    ZERO_ADDRESS,
)
from causeway.core.config import CausewayConfig
from causeway.core.errors import BridgeError

__all__ = [
    "AssetType",
    "Block",
    "CheckpointHeader",
    "ExitProof",
    "LogEntry",
    "Receipt",
    "ETHER_ADDRESS",
    "ZERO_ADDRESS",
    "CausewayConfig",
    "BridgeError",
]

"""Root and child bridge managers and the registries they consult."""

from causeway.bridge.registry import PredicateRegistry
from causeway.bridge.exits import ExitTracker
from causeway.bridge.checkpoints import CheckpointManager
from causeway.bridge.notices import Notice, NoticeRelay, StateSender
from causeway.bridge.root_manager import RootChainManager
from causeway.bridge.child_manager import ChildChainManager

__all__ = [
    "PredicateRegistry",
    "ExitTracker",
    "CheckpointManager",
    "Notice",
    "NoticeRelay",
    "StateSender",
    "RootChainManager",
    "ChildChainManager",
]

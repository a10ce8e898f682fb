"""Single-chain execution model: serialized, revertible calls and blocks."""

from causeway.chain.ledger import Ledger
from causeway.chain.access import AccessControl

__all__ = ["Ledger", "AccessControl"]

"""Off-chain tooling: proof building and checkpoint storage."""

from causeway.client.proof_builder import ExitProofBuilder, build_exit_proof
from causeway.client.storage import CheckpointStore

__all__ = ["ExitProofBuilder", "build_exit_proof", "CheckpointStore"]

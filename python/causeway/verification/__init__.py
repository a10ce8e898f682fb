"""Checkpoint, trie and receipt verification for exit proofs."""

from causeway.verification.verifier import ExitVerifier, VerificationResult, VerificationStatus
from causeway.verification.merkle import BlockMerkleTree
from causeway.verification.patricia import PatriciaTrie
from causeway.verification.exit_proof import decode_exit_proof, encode_exit_proof, exit_id

__all__ = [
    "ExitVerifier",
    "VerificationResult",
    "VerificationStatus",
    "BlockMerkleTree",
    "PatriciaTrie",
    "decode_exit_proof",
    "encode_exit_proof",
    "exit_id",
]

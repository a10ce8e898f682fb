"""Exit proof verification against a committed checkpoint."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog

from causeway.core.config import ProofConfig
from causeway.core.errors import IndexOutOfRange, InvalidProof
from causeway.core.types import Bytes32, CheckpointHeader, ExitProof, LogEntry
from causeway.verification import patricia
from causeway.verification.exit_proof import exit_id, key_nibbles
from causeway.verification.merkle import verify_membership
from causeway.verification.receipt import extract_log

logger = structlog.get_logger()


class VerificationStatus(Enum):
    VALID = "valid"
    UNKNOWN_CHECKPOINT = "unknown_checkpoint"
    BLOCK_OUT_OF_RANGE = "block_out_of_range"
    INVALID_HEADER = "invalid_header"
    INVALID_RECEIPT = "invalid_receipt"
    LOG_INDEX_OUT_OF_RANGE = "log_index_out_of_range"
    INVALID_LOG = "invalid_log"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    status: VerificationStatus
    message: str
    exit_id: Bytes32 | None = None
    log: LogEntry | None = None

    @property
    def valid(self) -> bool:
        return self.status is VerificationStatus.VALID


class ExitVerifier:
    """Checks that a proof's log sits in a receipt of a checkpointed block.

    Stages run in order and stop at the first failure: block inclusion under
    the checkpoint root, receipt inclusion under the block's receipts root,
    then structural extraction of the requested log.
    """

    def __init__(self, config: ProofConfig | None = None) -> None:
        self.config = config or ProofConfig()

    def check(
        self,
        proof: ExitProof,
        header: CheckpointHeader | None,
    ) -> VerificationResult:
        """Run every stage and report the outcome without raising."""
        if header is None:
            return VerificationResult(
                status=VerificationStatus.UNKNOWN_CHECKPOINT,
                message=f"No checkpoint with header id {proof.header_id}",
            )

        if not header.contains(proof.block_number):
            return VerificationResult(
                status=VerificationStatus.BLOCK_OUT_OF_RANGE,
                message=(
                    f"Block {proof.block_number} outside checkpoint range "
                    f"[{header.start_block}, {header.end_block}]"
                ),
            )

        path_length = len(proof.sibling_path)
        if path_length != header.depth or path_length > self.config.max_sibling_path:
            return VerificationResult(
                status=VerificationStatus.INVALID_HEADER,
                message=f"Sibling path has {path_length} hashes, checkpoint depth is {header.depth}",
            )

        if not verify_membership(
            proof.leaf,
            proof.sibling_path,
            proof.block_number - header.start_block,
            header.root,
        ):
            return VerificationResult(
                status=VerificationStatus.INVALID_HEADER,
                message="Block is not included in the checkpoint root",
            )

        if len(proof.receipt_trie_proof) > self.config.max_trie_nodes:
            return VerificationResult(
                status=VerificationStatus.INVALID_RECEIPT,
                message=f"Trie proof exceeds {self.config.max_trie_nodes} nodes",
            )

        try:
            nibbles = key_nibbles(proof)
        except InvalidProof as e:
            return VerificationResult(
                status=VerificationStatus.INVALID_RECEIPT,
                message=str(e),
            )

        if not patricia.verify_proof(
            nibbles,
            proof.receipt_rlp,
            proof.receipt_trie_proof,
            proof.receipts_root,
        ):
            return VerificationResult(
                status=VerificationStatus.INVALID_RECEIPT,
                message="Receipt is not included in the receipts root",
            )

        try:
            log = extract_log(proof.receipt_rlp, proof.log_index)
        except IndexOutOfRange as e:
            return VerificationResult(
                status=VerificationStatus.LOG_INDEX_OUT_OF_RANGE,
                message=str(e),
            )
        except InvalidProof as e:
            return VerificationResult(
                status=VerificationStatus.INVALID_LOG,
                message=str(e),
            )

        return VerificationResult(
            status=VerificationStatus.VALID,
            message="Proof verified successfully",
            exit_id=exit_id(proof),
            log=log,
        )

    def verify(
        self,
        proof: ExitProof,
        header: CheckpointHeader | None,
    ) -> VerificationResult:
        """Like :meth:`check`, but raise on any failure."""
        result = self.check(proof, header)
        if not result.valid:
            logger.warning(
                "exit_proof_rejected",
                header_id=proof.header_id,
                block=proof.block_number,
                status=result.status.value,
                message=result.message,
            )
            if result.status is VerificationStatus.LOG_INDEX_OUT_OF_RANGE:
                raise IndexOutOfRange(result.message)
            raise InvalidProof(result.message)
        return result

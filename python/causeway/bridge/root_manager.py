"""Root-chain entry point for deposits, token mappings and exits."""

from __future__ import annotations

import structlog

from causeway.assets.tokens import Token
from causeway.bridge.checkpoints import CheckpointManager
from causeway.bridge.exits import ExitTracker
from causeway.bridge.notices import StateSender, deposit_notice, map_token_notice
from causeway.bridge.registry import PredicateRegistry
from causeway.chain.access import AccessControl
from causeway.chain.ledger import Ledger
from causeway.core.config import ProofConfig
from causeway.core.encoding import abi_encode, display
from causeway.core.errors import AlreadyExited, TransferRejected, UnregisteredAsset
from causeway.core.types import ETHER_ADDRESS, Address, AssetType, Bytes32
from causeway.predicates.base import TokenPredicate
from causeway.verification.exit_proof import decode_exit_proof
from causeway.verification.verifier import ExitVerifier, VerificationResult

logger = structlog.get_logger()


class RootChainManager:
    """Locks deposits into predicates and releases them against proven burns.

    The manager must hold the manager role on every predicate it registers.
    Each public call is one ledger transaction: it either completes or leaves
    no trace, including the exit mark.
    """

    def __init__(
        self,
        ledger: Ledger,
        address: Address,
        admin: Address,
        checkpoints: CheckpointManager,
        state_sender: StateSender,
        child_manager: Address,
        config: ProofConfig | None = None,
    ) -> None:
        self.ledger = ledger
        self.address = address
        self.access = AccessControl(ledger, "RootChainManager", admin)
        self.registry = PredicateRegistry(ledger, address, self.access)
        self.exits = ExitTracker(ledger)
        self.verifier = ExitVerifier(config)
        self.checkpoints = checkpoints
        self.state_sender = state_sender
        self.child_manager = child_manager

    # Registry

    def register_predicate(self, caller: Address, asset_type: AssetType, predicate: TokenPredicate) -> None:
        self.registry.register_predicate(caller, asset_type, predicate)

    def map_token(self, caller: Address, root_token: Token, child_token: Address, asset_type: AssetType) -> None:
        with self.ledger.transaction(caller, "mapToken"):
            self.registry.map_token(caller, root_token, child_token, asset_type)
            self._notify(map_token_notice(root_token.address, child_token, asset_type.tag))

    def remap_token(self, caller: Address, root_token: Address, child_token: Address) -> None:
        with self.ledger.transaction(caller, "remapToken"):
            asset_type = self.registry.remap_token(caller, root_token, child_token)
            self._notify(map_token_notice(root_token, child_token, asset_type.tag))

    # Deposits

    def deposit_for(
        self,
        depositor: Address,
        receiver: Address,
        root_token: Address,
        deposit_data: bytes,
    ) -> None:
        with self.ledger.transaction(depositor, "depositFor"):
            if root_token == ETHER_ADDRESS:
                raise TransferRejected("RootChainManager: use deposit_ether_for for native currency")
            self._deposit(depositor, receiver, root_token, deposit_data)

    def deposit_ether_for(self, depositor: Address, receiver: Address, amount: int) -> None:
        with self.ledger.transaction(depositor, "depositEtherFor"):
            currency = self.registry.token(ETHER_ADDRESS)
            predicate = self.registry.predicate_for(ETHER_ADDRESS)
            currency.transfer(depositor, predicate.address, amount)
            self._deposit(depositor, receiver, ETHER_ADDRESS, abi_encode(["uint256"], [amount]))

    def _deposit(self, depositor: Address, receiver: Address, root_token: Address, deposit_data: bytes) -> None:
        if self.registry.child_token_for(root_token) is None:
            raise UnregisteredAsset(f"{display(root_token)} is not mapped")
        token = self.registry.token(root_token)
        predicate = self.registry.predicate_for(root_token)
        predicate.lock(self.address, depositor, receiver, token, deposit_data)
        self._notify(deposit_notice(receiver, root_token, deposit_data))

    def _notify(self, payload: bytes) -> None:
        self.state_sender.sync_state(self.address, self.child_manager, payload)

    # Exits

    def exit(self, caller: Address, payload: bytes) -> Bytes32:
        """Redeem a burn proven by ``payload``; return its exit id."""
        with self.ledger.transaction(caller, "exit"):
            proof = decode_exit_proof(payload)
            result = self.verifier.verify(proof, self.checkpoints.header(proof.header_id))

            if not self.exits.mark_if_unseen(result.exit_id):
                raise AlreadyExited(f"exit 0x{result.exit_id.hex()} was already processed")

            log = result.log
            asset_type = self.registry.asset_type_for(log.emitter)
            token = self.registry.root_token_for(log.emitter)
            predicate = self.registry.predicate_for_type(asset_type)
            predicate.validate_exit_log(caller, log)
            predicate.release_on_exit(self.address, caller, token, log)

            logger.info(
                "exit_processed",
                exit_id=result.exit_id.hex(),
                withdrawer=display(caller),
                asset_type=asset_type.name,
                token=display(token.address),
                block=proof.block_number,
            )
            return result.exit_id

    def preview_exit(self, withdrawer: Address, payload: bytes) -> VerificationResult:
        """Run every exit check without touching state.

        Raises the same errors :meth:`exit` would, except that nothing is
        marked and nothing is released.
        """
        proof = decode_exit_proof(payload)
        result = self.verifier.verify(proof, self.checkpoints.header(proof.header_id))
        if self.exits.is_processed(result.exit_id):
            raise AlreadyExited(f"exit 0x{result.exit_id.hex()} was already processed")
        asset_type = self.registry.asset_type_for(result.log.emitter)
        self.registry.predicate_for_type(asset_type).validate_exit_log(withdrawer, result.log)
        return result

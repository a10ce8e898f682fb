from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from eth_utils import keccak

from causeway.assets.child_tokens import (
    ChildFungible,
    ChildMintableNonFungible,
    ChildMultiToken,
    ChildNonFungible,
)
from causeway.assets.tokens import (
    FungibleToken,
    MintableNonFungibleToken,
    MultiToken,
    NativeCurrency,
    NonFungibleToken,
)
from causeway.bridge import (
    CheckpointManager,
    ChildChainManager,
    NoticeRelay,
    RootChainManager,
    StateSender,
)
from causeway.chain.access import DEPOSITOR_ROLE, MANAGER_ROLE, MAPPER_ROLE, PREDICATE_ROLE, STATE_SYNCER_ROLE
from causeway.chain.ledger import Call, Ledger
from causeway.client.proof_builder import build_exit_proof
from causeway.core.encoding import abi_encode
from causeway.core.types import AssetType, CheckpointHeader, ExitProof
from causeway.predicates import PREDICATES
from causeway.verification.exit_proof import encode_exit_proof
from causeway.verification.merkle import BlockMerkleTree


def addr(label: str) -> bytes:
    return keccak(text=label)[-20:]


ADMIN = addr("admin")
ALICE = addr("alice")
BOB = addr("bob")
SYNCER = addr("syncer")


def credit(token, account: bytes, amount: int) -> None:
    """Give ``account`` child supply the way a relayed deposit would."""
    if not token.access.has_role(DEPOSITOR_ROLE, ADMIN):
        token.access.grant_role(ADMIN, DEPOSITOR_ROLE, ADMIN)
    token.deposit(ADMIN, account, abi_encode(["uint256"], [amount]))


@dataclass
class Deployment:
    root: Ledger
    child: Ledger
    checkpoints: CheckpointManager
    sender: StateSender
    root_manager: RootChainManager
    child_manager: ChildChainManager
    relay: NoticeRelay
    predicates: dict = field(default_factory=dict)
    root_tokens: dict = field(default_factory=dict)
    child_tokens: dict = field(default_factory=dict)
    checkpointed_through: int = 0
    clock: int = 1_700_000_000

    def seal_child(self):
        self.clock += 2
        return self.child.seal_block(self.clock)

    def checkpoint(self) -> CheckpointHeader:
        """Seal pending child calls and checkpoint every unchecked block."""
        start = self.checkpointed_through + 1
        if self.child.pending_receipts or len(self.child.blocks) < start:
            self.seal_child()
        end = len(self.child.blocks)
        tree = BlockMerkleTree.from_blocks(self.child.blocks[start - 1:end])
        header = self.checkpoints.submit_checkpoint(ADMIN, tree.get_root(), start, end, self.clock)
        self.checkpointed_through = end
        return header

    def proof_for(self, call: Call, log_index: int = 0, header: CheckpointHeader | None = None) -> ExitProof:
        """Proof for a child call made since the last checkpoint."""
        block_number = self.child.next_block_number
        header = header or self.checkpoint()
        blocks = self.child.blocks[header.start_block - 1:header.end_block]
        return build_exit_proof(blocks, header.header_id, block_number, call.index, log_index)

    def exit_payload(self, call: Call, log_index: int = 0) -> bytes:
        return encode_exit_proof(self.proof_for(call, log_index))


@pytest.fixture
def bridge() -> Deployment:
    root = Ledger("root")
    child = Ledger("child")

    checkpoints = CheckpointManager(root, addr("checkpoint-manager"), ADMIN)
    sender = StateSender(root, addr("state-sender"))
    child_manager = ChildChainManager(child, addr("child-chain-manager"), ADMIN)
    root_manager = RootChainManager(
        root,
        addr("root-chain-manager"),
        ADMIN,
        checkpoints,
        sender,
        child_manager.address,
    )
    root_manager.access.grant_role(ADMIN, MAPPER_ROLE, ADMIN)
    child_manager.access.grant_role(ADMIN, STATE_SYNCER_ROLE, SYNCER)

    deployment = Deployment(
        root=root,
        child=child,
        checkpoints=checkpoints,
        sender=sender,
        root_manager=root_manager,
        child_manager=child_manager,
        relay=NoticeRelay(sender, child_manager, SYNCER),
    )

    for asset_type, predicate_class in PREDICATES.items():
        predicate = predicate_class(root, addr(predicate_class.__name__), ADMIN)
        predicate.access.grant_role(ADMIN, MANAGER_ROLE, root_manager.address)
        root_manager.register_predicate(ADMIN, asset_type, predicate)
        deployment.predicates[asset_type] = predicate

    erc20 = FungibleToken(root, addr("root-erc20"), "DummyERC20", ADMIN)
    erc20.mint(ADMIN, ALICE, 1_000)
    erc721 = NonFungibleToken(root, addr("root-erc721"), "DummyERC721", ADMIN)
    for token_id in (1, 2, 3):
        erc721.mint(ADMIN, ALICE, token_id)
    mintable = MintableNonFungibleToken(root, addr("root-mintable-erc721"), "DummyMintableERC721", ADMIN)
    mintable.access.grant_role(ADMIN, PREDICATE_ROLE, ADMIN)
    mintable.access.grant_role(ADMIN, PREDICATE_ROLE, deployment.predicates[AssetType.MINTABLE_NON_FUNGIBLE].address)
    mintable.mint(ADMIN, ALICE, 7)
    erc1155 = MultiToken(root, addr("root-erc1155"), "DummyERC1155", ADMIN)
    for token_id, amount in ((1, 100), (2, 50), (3, 10)):
        erc1155.mint(ADMIN, ALICE, token_id, amount)
    ether = NativeCurrency(root, ADMIN)
    ether.mint(ADMIN, ALICE, 10**18)

    deployment.root_tokens = {
        AssetType.FUNGIBLE: erc20,
        AssetType.NON_FUNGIBLE: erc721,
        AssetType.MINTABLE_NON_FUNGIBLE: mintable,
        AssetType.MULTI_TOKEN: erc1155,
        AssetType.NATIVE_CURRENCY: ether,
    }
    deployment.child_tokens = {
        AssetType.FUNGIBLE: ChildFungible(child, addr("child-erc20"), "ChildERC20", ADMIN),
        AssetType.NON_FUNGIBLE: ChildNonFungible(child, addr("child-erc721"), "ChildERC721", ADMIN),
        AssetType.MINTABLE_NON_FUNGIBLE: ChildMintableNonFungible(
            child, addr("child-mintable-erc721"), "ChildMintableERC721", ADMIN
        ),
        AssetType.MULTI_TOKEN: ChildMultiToken(child, addr("child-erc1155"), "ChildERC1155", ADMIN),
        AssetType.NATIVE_CURRENCY: ChildFungible(child, addr("child-ether"), "ChildEther", ADMIN),
    }

    for asset_type, child_token in deployment.child_tokens.items():
        child_token.access.grant_role(ADMIN, DEPOSITOR_ROLE, child_manager.address)
        child_manager.add_token(ADMIN, child_token)
        root_manager.map_token(ADMIN, deployment.root_tokens[asset_type], child_token.address, asset_type)

    deployment.relay.relay()
    return deployment

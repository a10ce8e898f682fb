import pytest

from causeway.assets import events
from causeway.bridge.notices import DEPOSIT, decode_deposit, decode_notice
from causeway.core.encoding import abi_encode
from causeway.core.errors import TransferRejected, UnregisteredAsset
from causeway.core.types import ETHER_ADDRESS, AssetType
from causeway.assets.tokens import FungibleToken

from conftest import ADMIN, ALICE, BOB, addr


def uint(value: int) -> bytes:
    return abi_encode(["uint256"], [value])


def test_fungible_deposit_locks_and_mints(bridge):
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    predicate = bridge.predicates[AssetType.FUNGIBLE]
    child = bridge.child_tokens[AssetType.FUNGIBLE]

    erc20.approve(ALICE, predicate.address, 100)
    bridge.root_manager.deposit_for(ALICE, BOB, erc20.address, uint(100))

    assert erc20.balance_of(ALICE) == 900
    assert erc20.balance_of(predicate.address) == 100
    assert child.balance_of(BOB) == 0

    assert bridge.relay.relay() == 1
    assert child.balance_of(BOB) == 100


def test_deposit_notice_payload(bridge):
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    erc20.approve(ALICE, bridge.predicates[AssetType.FUNGIBLE].address, 5)
    bridge.root_manager.deposit_for(ALICE, BOB, erc20.address, uint(5))

    notice = bridge.sender.pending(bridge.relay.delivered)[0]
    kind, body = decode_notice(notice.payload)
    assert notice.receiver == bridge.child_manager.address
    assert kind == DEPOSIT
    assert decode_deposit(body) == (BOB, erc20.address, uint(5))


def test_deposit_emits_locked_event(bridge):
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    predicate = bridge.predicates[AssetType.FUNGIBLE]
    erc20.approve(ALICE, predicate.address, 5)
    bridge.root_manager.deposit_for(ALICE, BOB, erc20.address, uint(5))

    signatures = [log.signature for log in bridge.root.last_call.receipt.logs]
    assert events.LOCKED_ERC20 in signatures
    assert events.STATE_SYNCED in signatures


def test_deposit_without_approval_reverts(bridge):
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    queued = len(bridge.sender)

    with pytest.raises(TransferRejected):
        bridge.root_manager.deposit_for(ALICE, ALICE, erc20.address, uint(100))

    assert erc20.balance_of(ALICE) == 1_000
    assert len(bridge.sender) == queued


def test_unmapped_token_rejected(bridge):
    stray = FungibleToken(bridge.root, addr("stray"), "Stray", ADMIN)
    with pytest.raises(UnregisteredAsset):
        bridge.root_manager.deposit_for(ALICE, ALICE, stray.address, uint(1))


def test_native_sentinel_rejected_by_deposit_for(bridge):
    with pytest.raises(TransferRejected):
        bridge.root_manager.deposit_for(ALICE, ALICE, ETHER_ADDRESS, uint(1))


def test_ether_deposit(bridge):
    ether = bridge.root_tokens[AssetType.NATIVE_CURRENCY]
    predicate = bridge.predicates[AssetType.NATIVE_CURRENCY]

    bridge.root_manager.deposit_ether_for(ALICE, BOB, 10**17)
    bridge.relay.relay()

    assert ether.balance_of(predicate.address) == 10**17
    assert ether.balance_of(ALICE) == 9 * 10**17
    assert bridge.child_tokens[AssetType.NATIVE_CURRENCY].balance_of(BOB) == 10**17


def test_non_fungible_deposit(bridge):
    erc721 = bridge.root_tokens[AssetType.NON_FUNGIBLE]
    predicate = bridge.predicates[AssetType.NON_FUNGIBLE]

    erc721.approve(ALICE, predicate.address, 2)
    bridge.root_manager.deposit_for(ALICE, ALICE, erc721.address, uint(2))
    bridge.relay.relay()

    assert erc721.owner_of(2) == predicate.address
    assert bridge.child_tokens[AssetType.NON_FUNGIBLE].owner_of(2) == ALICE


def test_multi_token_deposit(bridge):
    erc1155 = bridge.root_tokens[AssetType.MULTI_TOKEN]
    predicate = bridge.predicates[AssetType.MULTI_TOKEN]
    child = bridge.child_tokens[AssetType.MULTI_TOKEN]

    erc1155.set_approval_for_all(ALICE, predicate.address, True)
    data = abi_encode(["uint256[]", "uint256[]", "bytes"], [[1, 2], [30, 5], b""])
    bridge.root_manager.deposit_for(ALICE, ALICE, erc1155.address, data)
    bridge.relay.relay()

    assert erc1155.balance_of(predicate.address, 1) == 30
    assert erc1155.balance_of(predicate.address, 2) == 5
    assert erc1155.balance_of(ALICE, 1) == 70
    assert child.balance_of(ALICE, 1) == 30
    assert child.balance_of(ALICE, 2) == 5


def test_mintable_deposit(bridge):
    mintable = bridge.root_tokens[AssetType.MINTABLE_NON_FUNGIBLE]
    predicate = bridge.predicates[AssetType.MINTABLE_NON_FUNGIBLE]

    mintable.set_approval_for_all(ALICE, predicate.address, True)
    bridge.root_manager.deposit_for(ALICE, ALICE, mintable.address, uint(7))
    bridge.relay.relay()

    assert mintable.owner_of(7) == predicate.address
    assert bridge.child_tokens[AssetType.MINTABLE_NON_FUNGIBLE].owner_of(7) == ALICE

import pytest

from causeway.bridge.notices import deposit_notice, encode_notice, map_token_notice
from causeway.chain.access import DEPOSITOR_ROLE, MAPPER_ROLE
from causeway.core.encoding import abi_encode
from causeway.core.errors import (
    InsufficientPermissions,
    TransferRejected,
    UnregisteredAsset,
    UnsupportedNoticeType,
)
from causeway.core.types import AssetType

from conftest import ADMIN, ALICE, SYNCER, addr


def test_notice_requires_state_syncer(bridge):
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    payload = deposit_notice(ALICE, erc20.address, abi_encode(["uint256"], [1]))

    with pytest.raises(InsufficientPermissions):
        bridge.child_manager.on_receive_notice(ALICE, 1, payload)


def test_unknown_notice_type(bridge):
    payload = encode_notice(b"\x01" * 32, b"")
    with pytest.raises(UnsupportedNoticeType):
        bridge.child_manager.on_receive_notice(SYNCER, 1, payload)


def test_deposit_for_unmapped_token(bridge):
    payload = deposit_notice(ALICE, addr("unmapped"), abi_encode(["uint256"], [1]))
    with pytest.raises(UnregisteredAsset):
        bridge.child_manager.on_receive_notice(SYNCER, 1, payload)


def test_mapping_with_unknown_type_tag(bridge):
    payload = map_token_notice(addr("root"), addr("child"), b"\x02" * 32)
    with pytest.raises(UnregisteredAsset):
        bridge.child_manager.on_receive_notice(SYNCER, 1, payload)
    assert bridge.child_manager.root_to_child_token(addr("root")) is None


def test_direct_mapping_clears_stale_reverse_entries(bridge):
    manager = bridge.child_manager
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    old_child = bridge.child_tokens[AssetType.FUNGIBLE].address

    with pytest.raises(InsufficientPermissions):
        manager.map_token(ALICE, erc20.address, addr("child-v2"))

    manager.access.grant_role(ADMIN, MAPPER_ROLE, ADMIN)
    manager.map_token(ADMIN, erc20.address, addr("child-v2"))

    assert manager.root_to_child_token(erc20.address) == addr("child-v2")
    assert manager.child_to_root_token(addr("child-v2")) == erc20.address
    assert manager.child_to_root_token(old_child) is None


def test_duplicate_non_fungible_deposit_reverts(bridge):
    erc721 = bridge.root_tokens[AssetType.NON_FUNGIBLE]
    payload = deposit_notice(ALICE, erc721.address, abi_encode(["uint256"], [1]))

    bridge.child_manager.on_receive_notice(SYNCER, 100, payload)
    with pytest.raises(TransferRejected):
        bridge.child_manager.on_receive_notice(SYNCER, 101, payload)
    assert bridge.child_tokens[AssetType.NON_FUNGIBLE].balance_of(ALICE) == 1


def test_relay_stops_at_rejected_notice(bridge):
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    child = bridge.child_tokens[AssetType.FUNGIBLE]
    child.access.revoke_role(ADMIN, DEPOSITOR_ROLE, bridge.child_manager.address)

    erc20.approve(ALICE, bridge.predicates[AssetType.FUNGIBLE].address, 10)
    bridge.root_manager.deposit_for(ALICE, ALICE, erc20.address, abi_encode(["uint256"], [10]))
    delivered = bridge.relay.delivered

    with pytest.raises(InsufficientPermissions):
        bridge.relay.relay()
    assert bridge.relay.delivered == delivered
    assert child.balance_of(ALICE) == 0

import pytest

from causeway.assets.tokens import FungibleToken, MultiToken
from causeway.bridge.notices import MAP_TOKEN, decode_mapping, decode_notice
from causeway.core.errors import InsufficientPermissions, RegistryConflict, UnregisteredAsset
from causeway.core.types import AssetType
from causeway.predicates import FungiblePredicate

from conftest import ADMIN, ALICE, addr


def test_lookups(bridge):
    registry = bridge.root_manager.registry
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    child = bridge.child_tokens[AssetType.FUNGIBLE]

    assert registry.asset_type_for(child.address) is AssetType.FUNGIBLE
    assert registry.root_token_for(child.address) is erc20
    assert registry.child_token_for(erc20.address) == child.address
    assert registry.predicate_for(erc20.address) is bridge.predicates[AssetType.FUNGIBLE]


def test_unregistered_lookups(bridge):
    registry = bridge.root_manager.registry
    with pytest.raises(UnregisteredAsset):
        registry.asset_type_for(addr("nobody"))
    with pytest.raises(UnregisteredAsset):
        registry.predicate_for(addr("nobody"))
    assert registry.child_token_for(addr("nobody")) is None


def test_map_requires_mapper_role(bridge):
    token = FungibleToken(bridge.root, addr("new"), "New", ADMIN)
    with pytest.raises(InsufficientPermissions):
        bridge.root_manager.map_token(ALICE, token, addr("child-new"), AssetType.FUNGIBLE)


def test_map_rejects_duplicate_mappings(bridge):
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    token = FungibleToken(bridge.root, addr("new"), "New", ADMIN)

    with pytest.raises(RegistryConflict):
        bridge.root_manager.map_token(ADMIN, erc20, addr("child-new"), AssetType.FUNGIBLE)
    with pytest.raises(RegistryConflict):
        bridge.root_manager.map_token(
            ADMIN, token, bridge.child_tokens[AssetType.FUNGIBLE].address, AssetType.FUNGIBLE
        )


def test_asset_type_is_write_once(bridge):
    registry = bridge.root_manager.registry
    token = FungibleToken(bridge.root, addr("new"), "New", ADMIN)

    registry.register_asset_type(ADMIN, token, AssetType.FUNGIBLE)
    registry.register_asset_type(ADMIN, token, AssetType.FUNGIBLE)
    with pytest.raises(RegistryConflict):
        registry.register_asset_type(ADMIN, token, AssetType.NATIVE_CURRENCY)
    assert registry.asset_type_of(token.address) is AssetType.FUNGIBLE


def test_asset_type_must_match_token_class(bridge):
    token = MultiToken(bridge.root, addr("multi"), "Multi", ADMIN)
    with pytest.raises(RegistryConflict):
        bridge.root_manager.map_token(ADMIN, token, addr("child-multi"), AssetType.FUNGIBLE)
    with pytest.raises(UnregisteredAsset):
        bridge.root_manager.registry.asset_type_of(token.address)


def test_predicate_registration_requires_admin_and_matching_type(bridge):
    predicate = FungiblePredicate(bridge.root, addr("other-predicate"), ADMIN)
    with pytest.raises(InsufficientPermissions):
        bridge.root_manager.register_predicate(ALICE, AssetType.FUNGIBLE, predicate)
    with pytest.raises(RegistryConflict):
        bridge.root_manager.register_predicate(ADMIN, AssetType.MULTI_TOKEN, predicate)


def test_map_sends_notice(bridge):
    token = FungibleToken(bridge.root, addr("new"), "New", ADMIN)
    bridge.root_manager.map_token(ADMIN, token, addr("child-new"), AssetType.FUNGIBLE)

    kind, body = decode_notice(bridge.sender.pending(bridge.relay.delivered)[-1].payload)
    assert kind == MAP_TOKEN
    assert decode_mapping(body) == (token.address, addr("child-new"), AssetType.FUNGIBLE.tag)

    bridge.relay.relay()
    assert bridge.child_manager.root_to_child_token(token.address) == addr("child-new")


def test_remap_keeps_type_and_clears_stale_entries(bridge):
    registry = bridge.root_manager.registry
    erc20 = bridge.root_tokens[AssetType.FUNGIBLE]
    old_child = bridge.child_tokens[AssetType.FUNGIBLE].address

    with pytest.raises(InsufficientPermissions):
        bridge.root_manager.remap_token(ALICE, erc20.address, addr("child-v2"))

    bridge.root_manager.remap_token(ADMIN, erc20.address, addr("child-v2"))
    bridge.relay.relay()

    assert registry.child_token_for(erc20.address) == addr("child-v2")
    assert registry.asset_type_for(addr("child-v2")) is AssetType.FUNGIBLE
    with pytest.raises(UnregisteredAsset):
        registry.root_token_for(old_child)
    assert bridge.child_manager.root_to_child_token(erc20.address) == addr("child-v2")
    assert bridge.child_manager.child_to_root_token(old_child) is None


def test_remap_of_unknown_token(bridge):
    with pytest.raises(UnregisteredAsset):
        bridge.root_manager.remap_token(ADMIN, addr("nobody"), addr("child"))

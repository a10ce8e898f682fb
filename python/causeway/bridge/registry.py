"""Root-side registries: asset types, predicates and token mappings."""

from __future__ import annotations

import structlog

from causeway.assets import events
from causeway.assets.tokens import (
    FungibleToken,
    MintableNonFungibleToken,
    MultiToken,
    NativeCurrency,
    NonFungibleToken,
    Token,
)
from causeway.chain.access import DEFAULT_ADMIN_ROLE, MAPPER_ROLE, AccessControl
from causeway.chain.ledger import Ledger
from causeway.core.encoding import address_to_topic, display
from causeway.core.errors import RegistryConflict, UnregisteredAsset
from causeway.core.types import Address, AssetType
from causeway.predicates.base import TokenPredicate

logger = structlog.get_logger()

TOKEN_CLASSES: dict[AssetType, type[Token]] = {
    AssetType.FUNGIBLE: FungibleToken,
    AssetType.NON_FUNGIBLE: NonFungibleToken,
    AssetType.MINTABLE_NON_FUNGIBLE: MintableNonFungibleToken,
    AssetType.MULTI_TOKEN: MultiToken,
    AssetType.NATIVE_CURRENCY: NativeCurrency,
}


class PredicateRegistry:
    """Resolves assets to the predicate that custodies them.

    Asset types are write-once per root token. A root token maps to exactly
    one child token and back; only the admin role may point a mapped root
    token at a different child.
    """

    def __init__(self, ledger: Ledger, address: Address, access: AccessControl) -> None:
        self.ledger = ledger
        self.address = address
        self.access = access
        self._predicates: dict[AssetType, TokenPredicate] = {}
        self._asset_types: dict[Address, AssetType] = {}
        self._tokens: dict[Address, Token] = {}
        self._root_to_child: dict[Address, Address] = {}
        self._child_to_root: dict[Address, Address] = {}

    def register_predicate(
        self,
        caller: Address,
        asset_type: AssetType,
        predicate: TokenPredicate,
    ) -> None:
        with self.ledger.transaction(caller, "registerPredicate"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            if predicate.asset_type is not asset_type:
                raise RegistryConflict(
                    f"{predicate.name} custodies {predicate.asset_type.name}, not {asset_type.name}"
                )
            self.ledger.set_item(self._predicates, asset_type, predicate)
            self.ledger.emit(events.indexed_log(
                self.address,
                events.PREDICATE_REGISTERED,
                [asset_type.tag, address_to_topic(predicate.address)],
            ))
        logger.info(
            "predicate_registered",
            asset_type=asset_type.name,
            predicate=display(predicate.address),
        )

    def register_asset_type(self, caller: Address, token: Token, asset_type: AssetType) -> None:
        with self.ledger.transaction(caller, "registerAssetType"):
            self.access.require(MAPPER_ROLE, caller)
            self._register_asset_type(token, asset_type)

    def _register_asset_type(self, token: Token, asset_type: AssetType) -> None:
        existing = self._asset_types.get(token.address)
        if existing is not None:
            if existing is not asset_type:
                raise RegistryConflict(
                    f"{display(token.address)} is already registered as {existing.name}"
                )
            return
        if not isinstance(token, TOKEN_CLASSES[asset_type]):
            raise RegistryConflict(f"{token!r} cannot be registered as {asset_type.name}")
        self.ledger.set_item(self._asset_types, token.address, asset_type)
        self.ledger.set_item(self._tokens, token.address, token)

    def map_token(self, caller: Address, token: Token, child: Address, asset_type: AssetType) -> None:
        with self.ledger.transaction(caller, "mapToken"):
            self.access.require(MAPPER_ROLE, caller)
            if asset_type not in self._predicates:
                raise UnregisteredAsset(f"no predicate registered for {asset_type.name}")
            if token.address in self._root_to_child or child in self._child_to_root:
                raise RegistryConflict(
                    f"{display(token.address)} or {display(child)} is already mapped"
                )
            self._register_asset_type(token, asset_type)
            self._link(token.address, child)

    def remap_token(self, caller: Address, root: Address, child: Address) -> AssetType:
        with self.ledger.transaction(caller, "remapToken"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            asset_type = self.asset_type_of(root)
            stale_child = self._root_to_child.get(root)
            stale_root = self._child_to_root.get(child)
            if stale_child is not None:
                self.ledger.delete_item(self._child_to_root, stale_child)
            if stale_root is not None:
                self.ledger.delete_item(self._root_to_child, stale_root)
            self._link(root, child)
            return asset_type

    def _link(self, root: Address, child: Address) -> None:
        self.ledger.set_item(self._root_to_child, root, child)
        self.ledger.set_item(self._child_to_root, child, root)
        self.ledger.emit(events.indexed_log(
            self.address,
            events.TOKEN_MAPPED,
            [address_to_topic(root), address_to_topic(child), self._asset_types[root].tag],
        ))
        logger.info("token_mapped", root=display(root), child=display(child))

    def token(self, root: Address) -> Token:
        try:
            return self._tokens[root]
        except KeyError:
            raise UnregisteredAsset(f"{display(root)} is not a registered root token") from None

    def asset_type_of(self, root: Address) -> AssetType:
        try:
            return self._asset_types[root]
        except KeyError:
            raise UnregisteredAsset(f"{display(root)} has no registered asset type") from None

    def predicate_for_type(self, asset_type: AssetType) -> TokenPredicate:
        try:
            return self._predicates[asset_type]
        except KeyError:
            raise UnregisteredAsset(f"no predicate registered for {asset_type.name}") from None

    def predicate_for(self, root: Address) -> TokenPredicate:
        return self.predicate_for_type(self.asset_type_of(root))

    def root_token_for(self, child: Address) -> Token:
        try:
            root = self._child_to_root[child]
        except KeyError:
            raise UnregisteredAsset(f"{display(child)} is not mapped to a root token") from None
        return self.token(root)

    def asset_type_for(self, emitter: Address) -> AssetType:
        """Asset type of the root token mirrored by child contract ``emitter``."""
        return self.asset_type_of(self.root_token_for(emitter).address)

    def child_token_for(self, root: Address) -> Address | None:
        return self._root_to_child.get(root)

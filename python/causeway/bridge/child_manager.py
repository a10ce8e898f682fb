"""Child-chain receiver of root notices and keeper of the token mapping."""

from __future__ import annotations

from typing import Union

import structlog

from causeway.assets import events
from causeway.assets.child_tokens import (
    ChildFungible,
    ChildMintableNonFungible,
    ChildMultiToken,
    ChildNonFungible,
)
from causeway.bridge.notices import DEPOSIT, MAP_TOKEN, decode_deposit, decode_mapping, decode_notice
from causeway.chain.access import DEFAULT_ADMIN_ROLE, MAPPER_ROLE, STATE_SYNCER_ROLE, AccessControl
from causeway.chain.ledger import Ledger
from causeway.core.encoding import address_to_topic, display
from causeway.core.errors import UnregisteredAsset, UnsupportedNoticeType
from causeway.core.types import Address, AssetType

logger = structlog.get_logger()

ChildToken = Union[ChildFungible, ChildNonFungible, ChildMintableNonFungible, ChildMultiToken]


class ChildChainManager:
    def __init__(self, ledger: Ledger, address: Address, admin: Address) -> None:
        self.ledger = ledger
        self.address = address
        self.access = AccessControl(ledger, "ChildChainManager", admin)
        self._tokens: dict[Address, ChildToken] = {}
        self._root_to_child: dict[Address, Address] = {}
        self._child_to_root: dict[Address, Address] = {}

    def add_token(self, caller: Address, token: ChildToken) -> None:
        """Make a deployed child token reachable by address.

        The manager also needs the token's depositor role before deposits to
        it can succeed.
        """
        with self.ledger.transaction(caller, "addToken"):
            self.access.require(DEFAULT_ADMIN_ROLE, caller)
            self.ledger.set_item(self._tokens, token.address, token)

    def map_token(self, caller: Address, root: Address, child: Address) -> None:
        with self.ledger.transaction(caller, "mapToken"):
            self.access.require(MAPPER_ROLE, caller)
            self._map_token(root, child)

    def _map_token(self, root: Address, child: Address) -> None:
        stale_child = self._root_to_child.get(root)
        stale_root = self._child_to_root.get(child)
        if stale_child is not None:
            self.ledger.delete_item(self._child_to_root, stale_child)
        if stale_root is not None:
            self.ledger.delete_item(self._root_to_child, stale_root)
        self.ledger.set_item(self._root_to_child, root, child)
        self.ledger.set_item(self._child_to_root, child, root)
        self.ledger.emit(events.indexed_log(
            self.address,
            events.TOKEN_MAPPED,
            [address_to_topic(root), address_to_topic(child)],
        ))
        logger.info("child_token_mapped", root=display(root), child=display(child))

    def on_receive_notice(self, caller: Address, notice_id: int, payload: bytes) -> None:
        with self.ledger.transaction(caller, "onStateReceive"):
            self.access.require(STATE_SYNCER_ROLE, caller)
            kind, body = decode_notice(payload)
            if kind == DEPOSIT:
                receiver, root, deposit_data = decode_deposit(body)
                self._deposit(receiver, root, deposit_data)
            elif kind == MAP_TOKEN:
                root, child, type_tag = decode_mapping(body)
                AssetType.from_tag(type_tag)
                self._map_token(root, child)
            else:
                raise UnsupportedNoticeType(f"ChildChainManager: INVALID_SYNC_TYPE 0x{kind.hex()}")
            logger.info("notice_received", notice_id=notice_id, kind=kind.hex()[:8])

    def _deposit(self, receiver: Address, root: Address, deposit_data: bytes) -> None:
        child = self._root_to_child.get(root)
        if child is None:
            raise UnregisteredAsset(f"ChildChainManager: TOKEN_NOT_MAPPED {display(root)}")
        token = self._tokens.get(child)
        if token is None:
            raise UnregisteredAsset(f"ChildChainManager: no token deployed at {display(child)}")
        token.deposit(self.address, receiver, deposit_data)

    def root_to_child_token(self, root: Address) -> Address | None:
        return self._root_to_child.get(root)

    def child_to_root_token(self, child: Address) -> Address | None:
        return self._child_to_root.get(child)

    def token(self, child: Address) -> ChildToken:
        try:
            return self._tokens[child]
        except KeyError:
            raise UnregisteredAsset(f"no child token at {display(child)}") from None

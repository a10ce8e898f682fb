"""Event signatures and log constructors shared by tokens and predicates."""

from __future__ import annotations

from typing import Sequence

from causeway.core.encoding import abi_encode, address_to_topic, event_signature, int_to_topic
from causeway.core.types import Address, Bytes32, LogEntry

TRANSFER = event_signature("Transfer(address,address,uint256)")
TRANSFER_SINGLE = event_signature("TransferSingle(address,address,address,uint256,uint256)")
TRANSFER_BATCH = event_signature("TransferBatch(address,address,address,uint256[],uint256[])")
APPROVAL = event_signature("Approval(address,address,uint256)")
APPROVAL_FOR_ALL = event_signature("ApprovalForAll(address,address,bool)")

LOCKED_ERC20 = event_signature("LockedERC20(address,address,address,uint256)")
LOCKED_ERC721 = event_signature("LockedERC721(address,address,address,uint256)")
LOCKED_MINTABLE_ERC721 = event_signature("LockedMintableERC721(address,address,address,uint256)")
LOCKED_BATCH_ERC1155 = event_signature(
    "LockedBatchERC1155(address,address,address,uint256[],uint256[])"
)
LOCKED_ETHER = event_signature("LockedEther(address,address,uint256)")

EXITED_ERC20 = event_signature("ExitedERC20(address,address,uint256)")
EXITED_ERC721 = event_signature("ExitedERC721(address,address,uint256)")
EXITED_MINTABLE_ERC721 = event_signature("ExitedMintableERC721(address,address,uint256)")
EXITED_ERC1155 = event_signature("ExitedERC1155(address,address,uint256,uint256)")
EXITED_BATCH_ERC1155 = event_signature("ExitedBatchERC1155(address,address,uint256[],uint256[])")
EXITED_ETHER = event_signature("ExitedEther(address,uint256)")

TOKEN_MAPPED = event_signature("TokenMapped(address,address,bytes32)")
PREDICATE_REGISTERED = event_signature("PredicateRegistered(bytes32,address)")
STATE_SYNCED = event_signature("StateSynced(uint256,address,bytes)")
NEW_HEADER_BLOCK = event_signature("NewHeaderBlock(address,uint256,uint256,uint256,bytes32)")


def transfer_log(emitter: Address, sender: Address, receiver: Address, amount: int) -> LogEntry:
    return LogEntry(
        emitter=emitter,
        topics=(TRANSFER, address_to_topic(sender), address_to_topic(receiver)),
        data=abi_encode(["uint256"], [amount]),
    )


def nft_transfer_log(emitter: Address, sender: Address, receiver: Address, token_id: int) -> LogEntry:
    return LogEntry(
        emitter=emitter,
        topics=(
            TRANSFER,
            address_to_topic(sender),
            address_to_topic(receiver),
            int_to_topic(token_id),
        ),
    )


def transfer_single_log(
    emitter: Address,
    operator: Address,
    sender: Address,
    receiver: Address,
    token_id: int,
    amount: int,
) -> LogEntry:
    return LogEntry(
        emitter=emitter,
        topics=(
            TRANSFER_SINGLE,
            address_to_topic(operator),
            address_to_topic(sender),
            address_to_topic(receiver),
        ),
        data=abi_encode(["uint256", "uint256"], [token_id, amount]),
    )


def transfer_batch_log(
    emitter: Address,
    operator: Address,
    sender: Address,
    receiver: Address,
    token_ids: Sequence[int],
    amounts: Sequence[int],
) -> LogEntry:
    return LogEntry(
        emitter=emitter,
        topics=(
            TRANSFER_BATCH,
            address_to_topic(operator),
            address_to_topic(sender),
            address_to_topic(receiver),
        ),
        data=abi_encode(["uint256[]", "uint256[]"], [list(token_ids), list(amounts)]),
    )


def indexed_log(
    emitter: Address,
    signature: Bytes32,
    indexed: Sequence[Bytes32],
    types: Sequence[str] = (),
    values: Sequence[object] = (),
) -> LogEntry:
    """Generic event: ``indexed`` words become topics, the rest is ABI data."""
    return LogEntry(
        emitter=emitter,
        topics=(signature, *indexed),
        data=abi_encode(types, values) if types else b"",
    )


def approval_log(emitter: Address, owner: Address, spender: Address, amount: int) -> LogEntry:
    return LogEntry(
        emitter=emitter,
        topics=(APPROVAL, address_to_topic(owner), address_to_topic(spender)),
        data=abi_encode(["uint256"], [amount]),
    )


def approval_for_all_log(emitter: Address, owner: Address, operator: Address, approved: bool) -> LogEntry:
    return LogEntry(
        emitter=emitter,
        topics=(APPROVAL_FOR_ALL, address_to_topic(owner), address_to_topic(operator)),
        data=abi_encode(["bool"], [approved]),
    )

import pytest
from eth_utils import keccak

from causeway.assets import events
from causeway.bridge.checkpoints import CheckpointManager
from causeway.bridge.notices import StateSender
from causeway.chain.ledger import Ledger
from causeway.core.errors import InsufficientPermissions

from conftest import ADMIN, ALICE, addr


@pytest.fixture
def manager():
    return CheckpointManager(Ledger("root"), addr("checkpoint-manager"), ADMIN)


def test_header_ids_start_at_one(manager):
    first = manager.submit_checkpoint(ADMIN, keccak(b"a"), 1, 4)
    second = manager.submit_checkpoint(ADMIN, keccak(b"b"), 5, 5)

    assert (first.header_id, second.header_id) == (1, 2)
    assert manager.current_checkpoint_number == 2
    assert manager.header(1) == first
    assert manager.header(2).depth == 0
    assert manager.header(3) is None
    assert manager.headers() == [first, second]


def test_submission_emits_new_header_block(manager):
    manager.submit_checkpoint(ADMIN, keccak(b"a"), 1, 4)
    (log,) = manager.ledger.last_call.receipt.logs
    assert log.signature == events.NEW_HEADER_BLOCK
    assert log.emitter == manager.address


def test_submission_is_admin_only(manager):
    with pytest.raises(InsufficientPermissions):
        manager.submit_checkpoint(ALICE, keccak(b"a"), 1, 4)
    assert manager.current_checkpoint_number == 0


@pytest.mark.parametrize("root, start, end", [(b"\x00" * 31, 1, 2), (keccak(b"a"), 5, 4)])
def test_malformed_checkpoint_rejected(manager, root, start, end):
    with pytest.raises(ValueError):
        manager.submit_checkpoint(ADMIN, root, start, end)


def test_state_sender_ids_and_revert():
    ledger = Ledger("root")
    sender = StateSender(ledger, addr("state-sender"))
    receiver = addr("receiver")

    assert sender.sync_state(ALICE, receiver, b"one").notice_id == 1
    with pytest.raises(RuntimeError):
        with ledger.transaction(ALICE, "doomed"):
            sender.sync_state(ALICE, receiver, b"two")
            raise RuntimeError("abort")

    notice = sender.sync_state(ALICE, receiver, b"three")
    assert notice.notice_id == 2
    assert [n.payload for n in sender.pending()] == [b"one", b"three"]
    assert [n.payload for n in sender.pending(1)] == [b"three"]

import pytest
from eth_utils import keccak, to_checksum_address

from causeway.assets import events
from causeway.client.proof_builder import ExitProofBuilder, build_exit_proof
from causeway.client.storage import CheckpointStore
from causeway.core.config import RpcConfig
from causeway.core.encoding import logs_bloom
from causeway.core.errors import InvalidProof
from causeway.core.types import ZERO_ADDRESS, Block, Receipt

from conftest import ALICE, addr

TOKEN = addr("token")


def test_store_round_trip(tmp_path):
    store = CheckpointStore(tmp_path)
    first = store.add(keccak(b"a"), 1, 8, created_at=1_700_000_000)
    second = store.add(keccak(b"b"), 9, 9)

    reopened = CheckpointStore(tmp_path)
    assert reopened.list_headers() == [1, 2]
    assert reopened.load(1) == first
    assert reopened.load(2) == second
    assert reopened.load(3) is None
    assert reopened.next_id == 3
    assert list(reopened.iter_headers()) == [first, second]


def test_store_rejects_bad_headers(tmp_path):
    store = CheckpointStore(tmp_path)
    with pytest.raises(ValueError):
        store.add(b"\x00" * 20, 1, 2)
    with pytest.raises(ValueError):
        store.add(keccak(b"a"), 3, 2)
    with pytest.raises(ValueError):
        store.add(keccak(b"a"), 1, 1 << 64)
    assert store.list_headers() == []


def test_builder_rejects_receipts_that_do_not_match_root():
    logs = (events.transfer_log(TOKEN, ALICE, ZERO_ADDRESS, 1),)
    receipt = Receipt(1, 21_000, logs_bloom(logs), logs)
    block = Block(1, 10, keccak(b"txs"), keccak(b"wrong"), receipts=(receipt,))

    with pytest.raises(InvalidProof):
        build_exit_proof([block], 1, 1, 0, 0)


def test_builder_rejects_bad_ranges():
    blocks = [Block(n, n, keccak(b"t"), keccak(b"r")) for n in (1, 2, 4)]
    with pytest.raises(ValueError):
        build_exit_proof(blocks, 1, 2, 0, 0)
    with pytest.raises(ValueError):
        build_exit_proof(blocks[:2], 1, 3, 0, 0)
    with pytest.raises(ValueError):
        build_exit_proof(blocks[:2], 1, 2, 0, 0)
    with pytest.raises(ValueError):
        build_exit_proof([], 1, 1, 0, 0)


def test_rpc_receipt_reencoding():
    log = events.transfer_log(TOKEN, ALICE, ZERO_ADDRESS, 40)
    expected = Receipt(1, 63_000, logs_bloom((log,)), (log,), tx_type=2)
    raw = {
        "status": 1,
        "cumulativeGasUsed": 63_000,
        "logsBloom": "0x" + expected.logs_bloom.hex(),
        "type": "0x2",
        "logs": [
            {
                "address": to_checksum_address(TOKEN),
                "topics": ["0x" + t.hex() for t in log.topics],
                "data": "0x" + log.data.hex(),
            }
        ],
    }

    parsed = ExitProofBuilder(RpcConfig())._parse_receipt(raw)
    assert parsed == expected
    assert parsed.encode() == expected.encode()


def test_builder_requires_connection():
    with pytest.raises(RuntimeError):
        ExitProofBuilder(RpcConfig()).web3

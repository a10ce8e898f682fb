from pathlib import Path

import pytest
from pydantic import ValidationError

from causeway.core.config import CausewayConfig, ProofConfig


def test_defaults():
    config = CausewayConfig()
    assert config.proof.max_trie_nodes == 64
    assert config.proof.max_sibling_path == 32
    assert config.log_level == "INFO"
    assert config.storage.data_dir == Path("data/checkpoints")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CAUSEWAY_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CAUSEWAY_RPC__CHILD_RPC_URL", "http://child:8545")
    monkeypatch.setenv("CAUSEWAY_PROOF__MAX_TRIE_NODES", "16")

    config = CausewayConfig()
    assert config.log_level == "DEBUG"
    assert config.rpc.child_rpc_url == "http://child:8545"
    assert config.proof.max_trie_nodes == 16


def test_yaml_file(tmp_path):
    path = tmp_path / "causeway.yaml"
    path.write_text(
        "json_logs: true\n"
        "rpc:\n"
        "  batch_size: 5\n"
        "storage:\n"
        f"  data_dir: {tmp_path / 'headers'}\n"
    )

    config = CausewayConfig.from_yaml(path)
    assert config.json_logs is True
    assert config.rpc.batch_size == 5
    assert config.storage.data_dir == tmp_path / "headers"


def test_bounds_validated():
    with pytest.raises(ValidationError):
        ProofConfig(max_trie_nodes=0)
    with pytest.raises(ValidationError):
        ProofConfig(max_sibling_path=65)

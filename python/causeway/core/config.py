"""Configuration management for Causeway."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class RpcConfig(BaseModel):
    """Endpoints used by the off-chain proof builder."""

    child_rpc_url: str = Field(default="http://localhost:8545", description="Child chain JSON-RPC")
    root_rpc_url: str = Field(default="http://localhost:9545", description="Root chain JSON-RPC")
    batch_size: int = Field(default=50, ge=1, description="Blocks fetched concurrently per batch")


class ProofConfig(BaseModel):
    """Upper bounds applied before any proof is walked."""

    max_trie_nodes: int = Field(default=64, ge=1)
    max_sibling_path: int = Field(default=32, ge=0, le=64)


class StorageConfig(BaseModel):
    data_dir: Path = Field(default=Path("data/checkpoints"))


class CausewayConfig(BaseSettings):
    """Root configuration for Causeway."""

    rpc: RpcConfig = Field(default_factory=RpcConfig)
    proof: ProofConfig = Field(default_factory=ProofConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_logs: bool = Field(default=False)

    model_config = {"env_prefix": "CAUSEWAY_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> CausewayConfig:
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

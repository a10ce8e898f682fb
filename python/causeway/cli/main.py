"""CLI entry point for Causeway."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
import structlog

from causeway.core.config import CausewayConfig
from causeway.core.log import configure_logging

app = typer.Typer(
    name="causeway",
    help="Exit proof tooling for a two-chain asset bridge",
)

logger = structlog.get_logger()

_config = CausewayConfig()


def _load_proof(proof: str) -> bytes:
    from eth_utils import is_hex, to_bytes

    text = proof.strip()
    if not is_hex(text):
        text = Path(text).read_text().strip()
    return to_bytes(hexstr=text)


@app.callback()
def setup(
    config_path: Path = typer.Option(
        Path("causeway.yaml"),
        "--config", "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    global _config
    _config = CausewayConfig.from_yaml(config_path) if config_path.exists() else CausewayConfig()
    configure_logging("DEBUG" if verbose else _config.log_level, _config.json_logs)


@app.command()
def decode(
    proof: str = typer.Argument(..., help="Hex-encoded exit payload, or a file containing one"),
) -> None:
    """Print the fields of an exit proof and the log it points at."""
    from causeway.core.encoding import display
    from causeway.core.errors import BridgeError
    from causeway.verification.exit_proof import decode_exit_proof, exit_id
    from causeway.verification.receipt import extract_log

    try:
        parsed = decode_exit_proof(_load_proof(proof))
    except (BridgeError, OSError) as e:
        typer.echo(f"Malformed proof: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Header id:     {parsed.header_id}")
    typer.echo(f"Block:         {parsed.block_number} (timestamp {parsed.block_timestamp})")
    typer.echo(f"Receipts root: 0x{parsed.receipts_root.hex()}")
    typer.echo(f"Sibling path:  {len(parsed.sibling_path)} hashes")
    typer.echo(f"Trie proof:    {len(parsed.receipt_trie_proof)} nodes")
    typer.echo(f"Log index:     {parsed.log_index}")

    try:
        log = extract_log(parsed.receipt_rlp, parsed.log_index)
        typer.echo(f"Exit id:       0x{exit_id(parsed).hex()}")
    except BridgeError as e:
        typer.echo(f"Log:           unreadable ({e})")
        raise typer.Exit(1)

    typer.echo(f"Emitter:       {display(log.emitter)}")
    for i, topic in enumerate(log.topics):
        typer.echo(f"Topic {i}:       0x{topic.hex()}")
    typer.echo(f"Data:          0x{log.data.hex()}")


@app.command()
def verify(
    proof: str = typer.Argument(..., help="Hex-encoded exit payload, or a file containing one"),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data", "-d",
        help="Directory containing stored checkpoints",
    ),
    withdrawer: Optional[str] = typer.Option(
        None,
        "--withdrawer", "-w",
        help="Also check the log is a burn by this address",
    ),
    asset_type: Optional[str] = typer.Option(
        None,
        "--asset-type", "-t",
        help="Asset class whose burn rules apply (ERC20, ERC721, MintableERC721, ERC1155, Ether)",
    ),
) -> None:
    """Pre-validate an exit proof against a stored checkpoint."""
    from causeway.chain.ledger import Ledger
    from causeway.client.storage import CheckpointStore
    from causeway.core.encoding import as_address
    from causeway.core.errors import BridgeError
    from causeway.core.types import AssetType, ZERO_ADDRESS
    from causeway.predicates import PREDICATES
    from causeway.verification.exit_proof import decode_exit_proof
    from causeway.verification.verifier import ExitVerifier

    store = CheckpointStore(data_dir or _config.storage.data_dir)
    try:
        parsed = decode_exit_proof(_load_proof(proof))
    except (BridgeError, OSError) as e:
        typer.echo(f"Malformed proof: {e}", err=True)
        raise typer.Exit(1)

    result = ExitVerifier(_config.proof).check(parsed, store.load(parsed.header_id))
    typer.echo(f"{result.status.value}: {result.message}")
    if not result.valid:
        raise typer.Exit(1)
    typer.echo(f"Exit id: 0x{result.exit_id.hex()}")

    if withdrawer and asset_type:
        try:
            predicate_class = PREDICATES[AssetType.from_name(asset_type)]
            predicate = predicate_class(Ledger("offline"), ZERO_ADDRESS, ZERO_ADDRESS)
            predicate.validate_exit_log(as_address(withdrawer), result.log)
        except BridgeError as e:
            typer.echo(f"Burn rejected: {e}", err=True)
            raise typer.Exit(1)
        typer.echo(f"Burn accepted by {predicate.name}")


@app.command()
def build(
    tx_hash: str = typer.Argument(..., help="Burn transaction hash on the child chain"),
    header_id: int = typer.Argument(..., help="Checkpoint covering the burn block"),
    log_index: int = typer.Option(0, "--log-index", "-l", help="Index of the burn log in its receipt"),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data", "-d",
        help="Directory containing stored checkpoints",
    ),
    rpc_url: Optional[str] = typer.Option(
        None,
        "--rpc",
        help="Child chain RPC URL",
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the payload here"),
) -> None:
    """Build an exit payload for a burn transaction."""
    from causeway.client.proof_builder import ExitProofBuilder
    from causeway.client.storage import CheckpointStore
    from causeway.verification.exit_proof import encode_exit_proof

    if rpc_url:
        _config.rpc.child_rpc_url = rpc_url

    store = CheckpointStore(data_dir or _config.storage.data_dir)
    header = store.load(header_id)
    if header is None:
        typer.echo(f"Checkpoint {header_id} not found", err=True)
        raise typer.Exit(1)

    builder = ExitProofBuilder(_config.rpc)

    async def run() -> bytes:
        await builder.connect()
        try:
            proof = await builder.build(tx_hash, header, log_index)
        finally:
            await builder.close()
        return encode_exit_proof(proof)

    payload = "0x" + asyncio.run(run()).hex()
    if output:
        output.write_text(payload + "\n")
        typer.echo(f"Exit payload written to {output}")
    else:
        typer.echo(payload)


@app.command("checkpoint-add")
def checkpoint_add(
    root: str = typer.Argument(..., help="Checkpoint root (0x-prefixed, 32 bytes)"),
    start_block: int = typer.Argument(..., help="First block in the checkpoint"),
    end_block: int = typer.Argument(..., help="Last block in the checkpoint"),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data", "-d",
        help="Directory containing stored checkpoints",
    ),
) -> None:
    """Record a checkpoint header under the next free id."""
    from eth_utils import to_bytes

    from causeway.client.storage import CheckpointStore

    store = CheckpointStore(data_dir or _config.storage.data_dir)
    try:
        header = store.add(to_bytes(hexstr=root), start_block, end_block)
    except ValueError as e:
        typer.echo(f"Invalid checkpoint: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Checkpoint {header.header_id}: blocks {start_block}-{end_block}")


@app.command()
def checkpoints(
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data", "-d",
        help="Directory containing stored checkpoints",
    ),
) -> None:
    """List stored checkpoint headers."""
    from causeway.client.storage import CheckpointStore

    store = CheckpointStore(data_dir or _config.storage.data_dir)
    headers = list(store.iter_headers())
    if not headers:
        typer.echo("No checkpoints stored")
        return
    for header in headers:
        typer.echo(
            f"{header.header_id:>6}  blocks {header.start_block}-{header.end_block}  "
            f"depth {header.depth}  root 0x{header.root.hex()}"
        )


def main() -> None:
    app()


if __name__ == "__main__":
    main()

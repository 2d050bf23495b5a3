"""
Merkle Allowlist Generator - Main Entry Point

Command line interface:
- generate: whitelist.json -> proofs.json
- verify: check one address's proof from a proofs file
"""


import sys
from typing import NoReturn

import click
import structlog

from merkle_allowlist import __version__
from merkle_allowlist.core.config import settings
from merkle_allowlist.core.errors import AllowlistError, InvalidAddressFormat
from merkle_allowlist.core.logging import setup_logging
from merkle_allowlist.crypto.address import decode_address
from merkle_allowlist.crypto.merkle import (
    MerkleProof,
    compute_leaf_hash,
    compute_root_from_proof,
    from_hex,
    to_hex,
    verify_proof,
)
from merkle_allowlist.services.artifacts import load_proofs, load_whitelist, write_proofs
from merkle_allowlist.services.proof_generation import ProofGenerationWorkflow

logger = structlog.get_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def fail(error: AllowlistError) -> NoReturn:
    """Report an error naming its stage and exit non-zero."""
    message = f"Error [{error.stage}]: {error.message}"
    if isinstance(error, InvalidAddressFormat) and error.index is not None:
        message += f" (address #{error.index})"
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL.",
)
def cli(log_level: str | None) -> None:
    """Merkle roots and inclusion proofs for address allowlists."""
    setup_logging(log_level)


@cli.command()
@click.option(
    "--input",
    "input_path",
    default=settings.INPUT_PATH,
    show_default=True,
    help="Whitelist JSON with an 'addresses' list.",
)
@click.option(
    "--output",
    "output_path",
    default=settings.OUTPUT_PATH,
    show_default=True,
    help="Where to write the proofs JSON.",
)
@click.option(
    "--address-length",
    type=click.IntRange(1, 64),
    default=settings.ADDRESS_BYTE_LENGTH,
    help="Reject addresses that do not decode to this many bytes.",
)
@click.option(
    "--verify/--no-verify",
    default=settings.VERIFY_PROOFS,
    show_default=True,
    help="Re-verify every proof against the root before writing.",
)
def generate(
    input_path: str,
    output_path: str,
    address_length: int | None,
    verify: bool,
) -> None:
    """Build the Merkle tree and write one proof per address."""
    try:
        addresses = load_whitelist(input_path)
        click.echo(f"Loaded {len(addresses)} addresses")

        result = ProofGenerationWorkflow().run(
            addresses,
            address_length=address_length,
            verify=verify,
        )
        click.echo(f"Created {len(result.entries)} leaves")
        click.echo(f"Merkle Root: {result.root_hex}")

        write_proofs(output_path, result.to_output())
    except AllowlistError as e:
        fail(e)

    click.echo(f"Proofs saved to {output_path}")


@cli.command()
@click.option(
    "--proofs",
    "proofs_path",
    default=settings.OUTPUT_PATH,
    show_default=True,
    help="Proofs JSON written by 'generate'.",
)
@click.option(
    "--tagged",
    is_flag=True,
    help="Also print the path with L/R side tags for each sibling.",
)
@click.argument("address")
def verify(proofs_path: str, tagged: bool, address: str) -> None:
    """Recompute the root from ADDRESS's proof and compare."""
    try:
        output = load_proofs(proofs_path)
        found = output.find(address)
        if found is None:
            click.echo(f"Address {address} not in {proofs_path}", err=True)
            sys.exit(1)

        index, record = found
        proof = MerkleProof(
            leaf_hash=compute_leaf_hash(decode_address(record.address)),
            leaf_index=index,
            siblings=tuple(from_hex(s) for s in record.proof),
            root_hash=from_hex(output.merkle_root),
            tree_size=len(output.proofs),
        )
    except AllowlistError as e:
        fail(e)
    except ValueError as e:
        click.echo(click.style(f"Error [verify]: malformed proof: {e}", fg="red"), err=True)
        sys.exit(1)

    computed = compute_root_from_proof(proof.leaf_hash, proof.leaf_index, proof.siblings)
    valid = verify_proof(proof)

    logger.info("Proof checked", address=address, index=index, valid=valid)
    click.echo(f"Address:  {record.address} (index {index})")
    click.echo(f"Root:     {output.merkle_root}")
    click.echo(f"Computed: {to_hex(computed)}")
    if tagged:
        for level, step in enumerate(proof.to_compact()):
            click.echo(f"Level {level}:  {step}")
    if valid:
        click.echo(click.style("VALID", fg="green"))
    else:
        click.echo(click.style("INVALID", fg="red"))
        sys.exit(1)


def main() -> None:
    """Run the CLI."""
    cli()


if __name__ == "__main__":
    main()

"""
Merkle Allowlist Generator - Proof Generation Workflow

Orchestrates one generation run:
1. Decode addresses to raw bytes
2. Build Merkle tree over their Keccak-256 leaves
3. Derive one inclusion proof per address
4. Optionally re-verify every proof against the root
5. Assemble the output in input order
"""

import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from merkle_allowlist.core.config import Settings, settings as default_settings
from merkle_allowlist.core.errors import AllowlistError, EmptyLeafSet, ProofVerificationError
from merkle_allowlist.crypto.address import decode_addresses
from merkle_allowlist.crypto.merkle import MerkleProof, MerkleTree, verify_proof
from merkle_allowlist.metrics.generator_metrics import GeneratorMetrics, get_generator_metrics
from merkle_allowlist.services.artifacts import ProofRecord, ProofsOutput

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AddressProof:
    """An input address paired with its proof."""

    address: str
    proof: MerkleProof

    def to_record(self) -> ProofRecord:
        return ProofRecord(address=self.address, proof=self.proof.siblings_hex())


@dataclass(frozen=True)
class AllowlistProofs:
    """Result of a generation run: shared root and per-address proofs."""

    root_hash: bytes
    entries: tuple[AddressProof, ...]

    @property
    def root_hex(self) -> str:
        return "0x" + self.root_hash.hex()

    def to_output(self) -> ProofsOutput:
        """Convert to the output artifact model."""
        return ProofsOutput(
            merkle_root=self.root_hex,
            proofs=[entry.to_record() for entry in self.entries],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the output artifact layout."""
        return self.to_output().model_dump()


def assemble_result(
    addresses: Sequence[str],
    tree: MerkleTree,
    proofs: Sequence[MerkleProof] | None = None,
) -> AllowlistProofs:
    """
    Pair each address, in input order, with its proof and the shared root.

    Args:
        addresses: Input addresses, kept verbatim
        tree: Tree built from those addresses in the same order
        proofs: Pre-computed proofs in leaf order; derived from tree if None
    """
    if len(addresses) != tree.leaf_count:
        raise ValueError(
            f"{len(addresses)} addresses for a tree of {tree.leaf_count} leaves"
        )
    if proofs is None:
        proofs = tree.get_all_proofs()

    return AllowlistProofs(
        root_hash=tree.root_hash,
        entries=tuple(
            AddressProof(address=address, proof=proof)
            for address, proof in zip(addresses, proofs)
        ),
    )


class ProofGenerationWorkflow:
    """
    Runs the address -> tree -> proofs pipeline for one address list.

    Every failure aborts the run. The computation is deterministic, so
    nothing is retried.
    """

    def __init__(
        self,
        config: Settings | None = None,
        metrics: GeneratorMetrics | None = None,
    ) -> None:
        """
        Initialize workflow.

        Args:
            config: Settings to use (defaults to the global settings)
            metrics: Metrics sink (defaults to the global instance)
        """
        self._settings = config or default_settings
        self._metrics = metrics or get_generator_metrics()

    @property
    def settings(self) -> Settings:
        return self._settings

    def run(
        self,
        addresses: Sequence[str],
        address_length: int | None = None,
        verify: bool | None = None,
    ) -> AllowlistProofs:
        """
        Build the tree and all proofs for an ordered address list.

        Args:
            addresses: Hex addresses, order significant
            address_length: Required byte length (defaults to settings)
            verify: Re-verify proofs before returning (defaults to settings)

        Raises:
            InvalidAddressFormat: First address that fails to decode
            EmptyLeafSet: If addresses is empty
            ProofVerificationError: If self verification fails
        """
        if address_length is None:
            address_length = self._settings.ADDRESS_BYTE_LENGTH
        if verify is None:
            verify = self._settings.VERIFY_PROOFS

        try:
            if not addresses:
                raise EmptyLeafSet("No addresses supplied")

            raw = decode_addresses(addresses, expected_length=address_length)

            build_start = time.perf_counter()
            tree = MerkleTree.from_leaves(raw)
            build_duration = time.perf_counter() - build_start
            self._metrics.record_merkle_build(build_duration, tree.leaf_count)

            logger.info(
                "Built Merkle tree",
                leaf_count=tree.leaf_count,
                depth=tree.depth,
                root=tree.root_hex,
                duration_seconds=round(build_duration, 4),
            )

            proof_start = time.perf_counter()
            proofs = tree.get_all_proofs()
            self._metrics.record_proof_generation(time.perf_counter() - proof_start)

            if verify:
                self._verify_all(addresses, proofs)

            result = assemble_result(addresses, tree, proofs)

        except AllowlistError as e:
            self._metrics.record_run(success=False, stage=e.stage)
            logger.error("Proof generation failed", **e.to_dict())
            self._write_metrics()
            raise

        self._metrics.record_run(success=True)
        self._metrics.record_root(result.root_hex, len(result.entries))
        self._write_metrics()

        logger.info(
            "Proof generation completed",
            address_count=len(result.entries),
            root=result.root_hex,
        )
        return result

    def _verify_all(
        self,
        addresses: Sequence[str],
        proofs: Sequence[MerkleProof],
    ) -> None:
        """Check every proof reproduces the root."""
        for address, proof in zip(addresses, proofs):
            valid = verify_proof(proof)
            self._metrics.record_merkle_verification(valid)
            if not valid:
                raise ProofVerificationError(
                    f"Proof for address {address!r} (index {proof.leaf_index}) "
                    "does not reproduce the root",
                    value=address,
                )

        logger.debug("All proofs verified", count=len(proofs))

    def _write_metrics(self) -> None:
        if self._settings.METRICS_ENABLED and self._settings.METRICS_TEXTFILE:
            self._metrics.write_textfile(self._settings.METRICS_TEXTFILE)

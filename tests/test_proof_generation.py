"""
Unit tests for the Proof Generation Workflow.
"""

from pathlib import Path

import pytest

from conftest import ADDRESS_0, ADDRESS_1, ADDRESS_2, LEAF_0, LEAF_1, LEAF_2, NODE_22, ROOT_01, ROOT_012
from merkle_allowlist.core.config import Settings
from merkle_allowlist.core.errors import EmptyLeafSet, InvalidAddressFormat, ProofVerificationError
from merkle_allowlist.crypto.address import decode_address
from merkle_allowlist.crypto.merkle import (
    MerkleTree,
    compute_leaf_hash,
    verify_proof,
    verify_proof_against_root,
)
from merkle_allowlist.metrics.generator_metrics import GeneratorMetrics
from merkle_allowlist.services.proof_generation import (
    AllowlistProofs,
    ProofGenerationWorkflow,
    assemble_result,
)


@pytest.fixture
def workflow(test_settings: Settings, metrics: GeneratorMetrics) -> ProofGenerationWorkflow:
    """Workflow with isolated settings and metrics."""
    return ProofGenerationWorkflow(config=test_settings, metrics=metrics)


def sample_value(metrics: GeneratorMetrics, name: str, labels: dict | None = None) -> float | None:
    return metrics.registry.get_sample_value(name, labels or {})


class TestAssembleResult:
    """Tests for assemble_result."""

    def test_pairs_in_input_order(self, sample_addresses: list[str]) -> None:
        """Test entries follow input order with verbatim addresses."""
        tree = MerkleTree.from_leaves([decode_address(a) for a in sample_addresses])
        result = assemble_result(sample_addresses, tree)

        assert [e.address for e in result.entries] == sample_addresses
        assert [e.proof.leaf_index for e in result.entries] == [0, 1, 2]
        assert result.root_hex == ROOT_012

    def test_length_mismatch(self) -> None:
        """Test addresses and tree must line up."""
        tree = MerkleTree.from_leaves([b"a", b"b"])

        with pytest.raises(ValueError, match="3 addresses"):
            assemble_result(["0x01", "0x02", "0x03"], tree)

    def test_to_dict(self) -> None:
        """Test the output layout."""
        tree = MerkleTree.from_leaves([decode_address(ADDRESS_0), decode_address(ADDRESS_1)])
        result = assemble_result([ADDRESS_0, ADDRESS_1], tree)

        assert result.to_dict() == {
            "merkle_root": ROOT_01,
            "proofs": [
                {"address": ADDRESS_0, "proof": [LEAF_1]},
                {"address": ADDRESS_1, "proof": [LEAF_0]},
            ],
        }


class TestProofGenerationWorkflow:
    """Tests for ProofGenerationWorkflow."""

    def test_two_addresses_vector(self, workflow: ProofGenerationWorkflow) -> None:
        """Test the two-address scenario against fixed vectors."""
        result = workflow.run([ADDRESS_0, ADDRESS_1])

        assert result.root_hex == ROOT_01
        assert [e.proof.siblings_hex() for e in result.entries] == [[LEAF_1], [LEAF_0]]

    def test_three_addresses_vector(
        self,
        workflow: ProofGenerationWorkflow,
        sample_addresses: list[str],
    ) -> None:
        """Test an odd-sized allowlist against fixed vectors."""
        result = workflow.run(sample_addresses)

        assert result.root_hex == ROOT_012
        assert [e.proof.siblings_hex() for e in result.entries] == [
            [LEAF_1, NODE_22],
            [LEAF_0, NODE_22],
            [LEAF_2, ROOT_01],
        ]

    def test_single_address(self, workflow: ProofGenerationWorkflow) -> None:
        """Test one address gives an empty proof and its leaf as root."""
        result = workflow.run([ADDRESS_2])

        assert result.root_hex == LEAF_2
        assert result.root_hash == compute_leaf_hash(decode_address(ADDRESS_2))
        assert result.entries[0].proof.siblings == ()

    def test_deterministic(
        self,
        workflow: ProofGenerationWorkflow,
        sample_addresses: list[str],
    ) -> None:
        """Test repeated runs give identical output."""
        first = workflow.run(sample_addresses)
        second = workflow.run(list(sample_addresses))

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_order_sensitive(
        self,
        workflow: ProofGenerationWorkflow,
        sample_addresses: list[str],
    ) -> None:
        """Test swapping two addresses changes the root."""
        swapped = [sample_addresses[2], sample_addresses[1], sample_addresses[0]]

        assert workflow.run(swapped).root_hash != workflow.run(sample_addresses).root_hash

    def test_all_proofs_verify(self, workflow: ProofGenerationWorkflow) -> None:
        """Test every address's proof verifies against the root."""
        addresses = ["0x" + f"{i:040x}" for i in range(1, 38)]
        result = workflow.run(addresses)

        for i, entry in enumerate(result.entries):
            leaf = compute_leaf_hash(decode_address(entry.address))
            assert verify_proof_against_root(leaf, i, entry.proof.siblings, result.root_hash)
            assert verify_proof(entry.proof)

    def test_duplicate_addresses_kept(self, workflow: ProofGenerationWorkflow) -> None:
        """Test repeated addresses each get their own positional proof."""
        result = workflow.run([ADDRESS_0, ADDRESS_0])

        assert len(result.entries) == 2
        assert result.entries[0].proof.siblings_hex() == [LEAF_0]

    def test_empty_raises(self, workflow: ProofGenerationWorkflow, metrics: GeneratorMetrics) -> None:
        """Test empty input raises EmptyLeafSet."""
        with pytest.raises(EmptyLeafSet):
            workflow.run([])

        assert sample_value(metrics, "merkle_allowlist_runs_total", {"status": "failed_build"}) == 1.0

    def test_invalid_address_fails_fast(
        self,
        workflow: ProofGenerationWorkflow,
        metrics: GeneratorMetrics,
    ) -> None:
        """Test one bad address aborts the whole run."""
        with pytest.raises(InvalidAddressFormat) as exc_info:
            workflow.run([ADDRESS_0, "0xZZ", ADDRESS_1])

        assert exc_info.value.index == 1
        assert exc_info.value.address == "0xZZ"
        assert sample_value(metrics, "merkle_allowlist_runs_total", {"status": "failed_decode"}) == 1.0

    def test_address_length_from_settings(self, metrics: GeneratorMetrics) -> None:
        """Test ADDRESS_BYTE_LENGTH is enforced."""
        config = Settings(_env_file=None, ADDRESS_BYTE_LENGTH=20)
        workflow = ProofGenerationWorkflow(config=config, metrics=metrics)

        with pytest.raises(InvalidAddressFormat, match="expected 20"):
            workflow.run([ADDRESS_0, "0xdeadbeef"])

    def test_address_length_override(self, workflow: ProofGenerationWorkflow) -> None:
        """Test the per-run length argument."""
        with pytest.raises(InvalidAddressFormat):
            workflow.run([ADDRESS_0], address_length=32)

        assert workflow.run([ADDRESS_0], address_length=20).root_hex == LEAF_0

    def test_verification_failure(
        self,
        workflow: ProofGenerationWorkflow,
        metrics: GeneratorMetrics,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a proof that fails self verification aborts the run."""
        monkeypatch.setattr(
            "merkle_allowlist.services.proof_generation.verify_proof",
            lambda proof: proof.leaf_index != 1,
        )

        with pytest.raises(ProofVerificationError, match="index 1"):
            workflow.run([ADDRESS_0, ADDRESS_1])

        assert sample_value(
            metrics, "merkle_allowlist_verifications_total", {"result": "invalid"}
        ) == 1.0

    def test_verification_skipped(
        self,
        workflow: ProofGenerationWorkflow,
        metrics: GeneratorMetrics,
    ) -> None:
        """Test verify=False skips the self check."""
        workflow.run([ADDRESS_0, ADDRESS_1], verify=False)

        assert sample_value(
            metrics, "merkle_allowlist_verifications_total", {"result": "valid"}
        ) is None

    def test_success_metrics(
        self,
        workflow: ProofGenerationWorkflow,
        metrics: GeneratorMetrics,
        sample_addresses: list[str],
    ) -> None:
        """Test metrics recorded for a successful run."""
        workflow.run(sample_addresses)

        assert sample_value(metrics, "merkle_allowlist_runs_total", {"status": "success"}) == 1.0
        assert sample_value(metrics, "merkle_allowlist_addresses_total") == 3.0
        assert sample_value(metrics, "merkle_allowlist_tree_size_count") == 1.0
        assert sample_value(
            metrics, "merkle_allowlist_verifications_total", {"result": "valid"}
        ) == 3.0
        assert sample_value(
            metrics,
            "merkle_allowlist_last_root_info",
            {"root": ROOT_012, "addresses": "3"},
        ) == 1.0

    def test_metrics_textfile(
        self,
        tmp_path: Path,
        metrics: GeneratorMetrics,
    ) -> None:
        """Test metrics are written to the configured textfile."""
        path = tmp_path / "allowlist.prom"
        config = Settings(_env_file=None, METRICS_ENABLED=True, METRICS_TEXTFILE=str(path))
        workflow = ProofGenerationWorkflow(config=config, metrics=metrics)

        workflow.run([ADDRESS_0])

        assert 'merkle_allowlist_runs_total{status="success"} 1.0' in path.read_text()


class TestAllowlistProofs:
    """Tests for AllowlistProofs."""

    def test_root_hex(self) -> None:
        result = AllowlistProofs(root_hash=b"\x01" * 32, entries=())

        assert result.root_hex == "0x" + "01" * 32
        assert result.to_dict() == {"merkle_root": "0x" + "01" * 32, "proofs": []}

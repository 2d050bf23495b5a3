"""
Merkle Allowlist Generator - Metrics

Prometheus metrics for proof generation runs.

The generator is a batch job, so metrics live on a dedicated registry
that is written to a node-exporter textfile at the end of a run instead
of being served over HTTP.

Metrics Categories:
- Merkle tree building
- Proof generation and self-verification
- Run outcomes
"""

import time

import structlog
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info, write_to_textfile

logger = structlog.get_logger(__name__)


class GeneratorMetrics:
    """
    Centralized metrics for the allowlist generator.

    Provides visibility into:
    - Tree build times and sizes
    - Proof generation times
    - Verification outcomes
    - Run success/failure per stage
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize all generator metrics."""
        self.registry = registry if registry is not None else CollectorRegistry()
        self._init_merkle_metrics()
        self._init_run_metrics()
        self._init_info_metrics()

    def _init_merkle_metrics(self) -> None:
        """Initialize Merkle tree metrics."""
        self.merkle_build_duration = Histogram(
            "merkle_allowlist_build_duration_seconds",
            "Merkle tree build time",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
            registry=self.registry,
        )

        self.merkle_tree_size = Histogram(
            "merkle_allowlist_tree_size",
            "Number of leaves in Merkle tree",
            buckets=[10, 50, 100, 500, 1000, 5000, 10000, 50000],
            registry=self.registry,
        )

        self.proof_generation_duration = Histogram(
            "merkle_allowlist_proof_duration_seconds",
            "Time to generate all proofs for a tree",
            buckets=[0.001, 0.01, 0.1, 0.5, 1.0, 5.0, 10.0],
            registry=self.registry,
        )

        self.proof_verifications = Counter(
            "merkle_allowlist_verifications_total",
            "Merkle proof verifications",
            ["result"],
            registry=self.registry,
        )

    def _init_run_metrics(self) -> None:
        """Initialize run outcome metrics."""
        self.runs_total = Counter(
            "merkle_allowlist_runs_total",
            "Total generation runs",
            ["status"],
            registry=self.registry,
        )

        self.addresses_total = Counter(
            "merkle_allowlist_addresses_total",
            "Total addresses committed to a root",
            registry=self.registry,
        )

        self.last_success_timestamp = Gauge(
            "merkle_allowlist_last_success_timestamp",
            "Timestamp of last successful run (Unix epoch)",
            registry=self.registry,
        )

    def _init_info_metrics(self) -> None:
        """Initialize info metrics."""
        self.last_root = Info(
            "merkle_allowlist_last_root",
            "Merkle root of the last successful run",
            registry=self.registry,
        )

    # Convenience methods

    def record_merkle_build(self, duration: float, tree_size: int) -> None:
        """Record Merkle tree build."""
        self.merkle_build_duration.observe(duration)
        self.merkle_tree_size.observe(tree_size)

    def record_proof_generation(self, duration: float) -> None:
        """Record generation of a tree's proofs."""
        self.proof_generation_duration.observe(duration)

    def record_merkle_verification(self, valid: bool) -> None:
        """Record Merkle proof verification."""
        result = "valid" if valid else "invalid"
        self.proof_verifications.labels(result=result).inc()

    def record_run(self, success: bool, stage: str | None = None) -> None:
        """Record a finished run; failures are labelled with their stage."""
        status = "success" if success else f"failed_{stage or 'run'}"
        self.runs_total.labels(status=status).inc()

    def record_root(self, root_hex: str, address_count: int) -> None:
        """Record the root committed by a successful run."""
        self.last_root.info({"root": root_hex, "addresses": str(address_count)})
        self.addresses_total.inc(address_count)
        self.last_success_timestamp.set(time.time())

    def write_textfile(self, path: str) -> None:
        """Write the registry in Prometheus text format."""
        write_to_textfile(path, self.registry)
        logger.debug("Metrics written", path=path)


# Singleton instance
_generator_metrics: GeneratorMetrics | None = None


def get_generator_metrics() -> GeneratorMetrics:
    """Get global generator metrics instance."""
    global _generator_metrics
    if _generator_metrics is None:
        _generator_metrics = GeneratorMetrics()
    return _generator_metrics

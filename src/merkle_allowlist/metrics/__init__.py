"""
Merkle Allowlist Generator - Metrics Module

Exports:
- Merkle tree build times
- Proof generation and verification counters
- Run outcome counters
"""

from merkle_allowlist.metrics.generator_metrics import (
    GeneratorMetrics,
    get_generator_metrics,
)

__all__ = [
    "GeneratorMetrics",
    "get_generator_metrics",
]

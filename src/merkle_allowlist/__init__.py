"""Merkle Allowlist Generator - Merkle roots and inclusion proofs for address allowlists."""

__version__ = "1.0.0"

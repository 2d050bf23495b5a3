"""
Merkle Allowlist Generator - Cryptographic Utilities

Provides address decoding, Merkle tree construction, proof generation,
and verification.
"""

from merkle_allowlist.crypto.address import decode_address, decode_addresses
from merkle_allowlist.crypto.merkle import (
    ODD_NODE_POLICY,
    MerkleProof,
    MerkleTree,
    compute_leaf_hash,
    compute_parent_hash,
    verify_proof,
)

__all__ = [
    "ODD_NODE_POLICY",
    "MerkleTree",
    "MerkleProof",
    "compute_leaf_hash",
    "compute_parent_hash",
    "decode_address",
    "decode_addresses",
    "verify_proof",
]

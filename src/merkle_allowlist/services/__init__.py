"""
Merkle Allowlist Generator - Services Package

Provides artifact I/O and the proof generation workflow.
"""

from merkle_allowlist.services.artifacts import (
    ProofRecord,
    ProofsOutput,
    WhitelistInput,
    load_proofs,
    load_whitelist,
    write_proofs,
)
from merkle_allowlist.services.proof_generation import (
    AddressProof,
    AllowlistProofs,
    ProofGenerationWorkflow,
    assemble_result,
)

__all__ = [
    "WhitelistInput",
    "ProofRecord",
    "ProofsOutput",
    "load_whitelist",
    "load_proofs",
    "write_proofs",
    "AddressProof",
    "AllowlistProofs",
    "ProofGenerationWorkflow",
    "assemble_result",
]

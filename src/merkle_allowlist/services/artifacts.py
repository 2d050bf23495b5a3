"""
Merkle Allowlist Generator - Artifact I/O

Reads the whitelist input artifact and writes the proofs output artifact.

Input:  {"addresses": ["0x...", ...]}
Output: {"merkle_root": "0x...", "proofs": [{"address": "0x...", "proof": ["0x...", ...]}]}
"""

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from merkle_allowlist.core.errors import InputFormatError, OutputWriteError

logger = structlog.get_logger(__name__)

HEX_DIGEST_PATTERN = r"^0x[0-9a-f]{64}$"


class WhitelistInput(BaseModel):
    """Input artifact: ordered list of addresses."""

    addresses: list[str]

    @field_validator("addresses", mode="before")
    @classmethod
    def reject_non_list(cls, value: object) -> object:
        # A bare string would otherwise fail with a less useful message
        if isinstance(value, str):
            raise ValueError("addresses must be a list of strings")
        return value


class ProofRecord(BaseModel):
    """One address and its inclusion proof."""

    address: str
    proof: list[str] = Field(default_factory=list)


class ProofsOutput(BaseModel):
    """Output artifact: shared root plus per-address proofs in input order."""

    merkle_root: str = Field(..., pattern=HEX_DIGEST_PATTERN)
    proofs: list[ProofRecord]

    def find(self, address: str) -> tuple[int, ProofRecord] | None:
        """Find an address (case-insensitive); returns (index, record)."""
        target = address.lower()
        for i, record in enumerate(self.proofs):
            if record.address.lower() == target:
                return i, record
        return None


def load_whitelist(path: str | Path) -> list[str]:
    """
    Load the ordered address list from a whitelist JSON file.

    Raises:
        InputFormatError: If the file is unreadable, not JSON, or has no
            list of string addresses
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputFormatError(f"Cannot read {path}: {e.strerror or e}", value=str(path)) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputFormatError(f"Failed to parse {path}: {e}", value=str(path)) from e

    try:
        whitelist = WhitelistInput.model_validate(data)
    except ValidationError as e:
        raise InputFormatError(
            f"Invalid whitelist in {path}: {e.errors()[0]['msg']}",
            value=str(path),
        ) from e

    logger.debug("Whitelist loaded", path=str(path), count=len(whitelist.addresses))
    return whitelist.addresses


def write_proofs(path: str | Path, output: ProofsOutput) -> None:
    """
    Write the proofs artifact as pretty-printed JSON.

    Raises:
        OutputWriteError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.write_text(output.model_dump_json(indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(f"Cannot write {path}: {e.strerror or e}", value=str(path)) from e
    logger.debug("Proofs written", path=str(path), count=len(output.proofs))


def load_proofs(path: str | Path) -> ProofsOutput:
    """
    Load a proofs artifact written by write_proofs.

    Raises:
        InputFormatError: If the file is unreadable or malformed
    """
    path = Path(path)
    try:
        return ProofsOutput.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InputFormatError(f"Cannot read {path}: {e.strerror or e}", value=str(path)) from e
    except ValidationError as e:
        raise InputFormatError(
            f"Invalid proofs file {path}: {e.errors()[0]['msg']}",
            value=str(path),
        ) from e

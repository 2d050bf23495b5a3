"""
Merkle Allowlist Generator - Error Types

Every error names the stage of the run that failed and, where there is
one, the input value that caused it. All of them abort the run.
"""

from typing import Any


class AllowlistError(Exception):
    """Base exception for allowlist generation errors."""

    stage = "run"

    def __init__(self, message: str, value: Any = None) -> None:
        self.message = message
        self.value = value
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logs."""
        return {
            "stage": self.stage,
            "error": self.message,
            "value": self.value,
        }


class InputFormatError(AllowlistError):
    """Input artifact could not be read or parsed."""

    stage = "load"


class InvalidAddressFormat(AllowlistError, ValueError):
    """An address string is not valid hex."""

    stage = "decode"

    def __init__(
        self,
        message: str,
        address: str,
        index: int | None = None,
    ) -> None:
        super().__init__(message, value=address)
        self.address = address
        self.index = index

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["index"] = self.index
        return data


class EmptyLeafSet(AllowlistError, ValueError):
    """No leaves supplied to build a tree from."""

    stage = "build"

    def __init__(self, message: str = "Cannot create Merkle tree from empty leaves") -> None:
        super().__init__(message)


class IndexOutOfRange(AllowlistError, IndexError):
    """Leaf index outside the tree."""

    stage = "prove"

    def __init__(self, index: int, leaf_count: int) -> None:
        super().__init__(
            f"Leaf index {index} out of bounds for tree of {leaf_count} leaves",
            value=index,
        )
        self.index = index
        self.leaf_count = leaf_count


class ProofVerificationError(AllowlistError):
    """A generated proof does not reproduce the root."""

    stage = "verify"


class OutputWriteError(AllowlistError):
    """Output artifact could not be written."""

    stage = "write"

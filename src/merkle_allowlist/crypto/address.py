"""
Merkle Allowlist Generator - Address Decoding

Turns hex address strings into the raw bytes that get hashed into leaves.

Decoding is strict and fail-fast: one bad address aborts the whole run.
Nothing is normalized. Case is irrelevant to hex decoding, but the
address string itself is kept verbatim by callers for the output.
"""

import binascii
from collections.abc import Sequence

from merkle_allowlist.core.errors import InvalidAddressFormat

HEX_PREFIXES = ("0x", "0X")


def strip_hex_prefix(value: str) -> str:
    """Remove a single leading 0x/0X, if present."""
    if value.startswith(HEX_PREFIXES):
        return value[2:]
    return value


def decode_address(address: str, expected_length: int | None = None) -> bytes:
    """
    Decode a hex address string into bytes.

    Args:
        address: Hex string, optionally 0x-prefixed
        expected_length: Required byte length, or None to accept any

    Returns:
        Decoded address bytes

    Raises:
        InvalidAddressFormat: On non-hex characters, odd digit count,
            empty payload or unexpected byte length
    """
    if not isinstance(address, str):
        raise InvalidAddressFormat(
            f"Address must be a string, got {type(address).__name__}",
            address=repr(address),
        )

    digits = strip_hex_prefix(address)

    if not digits:
        raise InvalidAddressFormat(f"Empty address: {address!r}", address=address)

    if len(digits) % 2:
        raise InvalidAddressFormat(
            f"Odd number of hex digits ({len(digits)}) in address {address!r}",
            address=address,
        )

    try:
        raw = binascii.unhexlify(digits)
    except (binascii.Error, ValueError):
        raise InvalidAddressFormat(
            f"Non-hex characters in address {address!r}",
            address=address,
        ) from None

    if expected_length is not None and len(raw) != expected_length:
        raise InvalidAddressFormat(
            f"Address {address!r} is {len(raw)} bytes, expected {expected_length}",
            address=address,
        )

    return raw


def decode_addresses(
    addresses: Sequence[str],
    expected_length: int | None = None,
) -> list[bytes]:
    """
    Decode a list of addresses, stopping at the first failure.

    The raised error carries the index of the offending address.
    """
    decoded = []
    for i, address in enumerate(addresses):
        try:
            decoded.append(decode_address(address, expected_length))
        except InvalidAddressFormat as e:
            e.index = i
            raise
    return decoded

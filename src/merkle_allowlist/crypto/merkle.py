"""
Merkle Allowlist Generator - Merkle Tree Implementation

Provides deterministic Merkle tree construction with Keccak-256 hashing,
inclusion proof generation, and verification.

The construction matches what an EVM allowlist contract recomputes:
- Leaves are keccak256(raw address bytes), with no prefix or salt
- Internal nodes are keccak256(left || right) in positional order,
  NOT sorted pairs
- Verifiers place each sibling left or right from the parity of the
  leaf index at that level

For odd numbers of nodes at a level, the last node is duplicated and
hashed with itself. Every proof therefore has exactly one sibling per
level, ceil(log2(n)) entries for n > 1 leaves. A verifier using the
promotion rule instead will reject these proofs.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from eth_utils import keccak

from merkle_allowlist.core.errors import EmptyLeafSet, IndexOutOfRange

ODD_NODE_POLICY = "duplicate"

DIGEST_SIZE = 32


class ProofDirection(str, Enum):
    """Side of the sibling relative to the path node."""

    LEFT = "L"
    RIGHT = "R"


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (the Ethereum variant, not NIST SHA3-256)."""
    return keccak(data)


def compute_leaf_hash(data: bytes) -> bytes:
    """
    Compute the hash of a leaf node.

    Args:
        data: Raw leaf data, normally decoded address bytes

    Returns:
        32-byte Keccak-256 digest
    """
    return keccak256(data)


def compute_parent_hash(left_hash: bytes, right_hash: bytes) -> bytes:
    """
    Compute the hash of an internal node.

    Args:
        left_hash: Digest of the left child
        right_hash: Digest of the right child

    Returns:
        32-byte Keccak-256 digest of left || right
    """
    return keccak256(left_hash + right_hash)


def to_hex(digest: bytes) -> str:
    """Encode a digest as a lowercase 0x-prefixed hex string."""
    return "0x" + digest.hex()


def from_hex(value: str) -> bytes:
    """Decode a 0x-prefixed (or bare) 32-byte hex digest."""
    digits = value[2:] if value.startswith(("0x", "0X")) else value
    digest = bytes.fromhex(digits)
    if len(digest) != DIGEST_SIZE:
        raise ValueError(f"Digest must be {DIGEST_SIZE} bytes, got {len(digest)}")
    return digest


@dataclass(frozen=True)
class MerkleProof:
    """
    Merkle inclusion proof for a leaf.

    Attributes:
        leaf_hash: Digest of the leaf being proven
        leaf_index: Position of the leaf in the input order
        siblings: Sibling digests, leaf to root
        root_hash: Expected Merkle root
        tree_size: Total number of leaves in the tree
    """

    leaf_hash: bytes
    leaf_index: int
    siblings: tuple[bytes, ...]
    root_hash: bytes
    tree_size: int

    def siblings_hex(self) -> list[str]:
        """Sibling digests as 0x-prefixed hex, the artifact format."""
        return [to_hex(s) for s in self.siblings]

    def path(self) -> Iterator[tuple[bytes, ProofDirection]]:
        """Yield (sibling, side) pairs with the side derived from index parity."""
        index = self.leaf_index
        for sibling in self.siblings:
            if index % 2 == 0:
                yield sibling, ProofDirection.RIGHT
            else:
                yield sibling, ProofDirection.LEFT
            index //= 2

    def to_compact(self) -> list[str]:
        """
        Serialize with explicit side tags.

        Format: ["R:0xhash1", "L:0xhash2", ...]
        """
        return [f"{direction.value}:{to_hex(sibling)}" for sibling, direction in self.path()]

    def to_dict(self) -> dict[str, Any]:
        """Serialize proof to dictionary."""
        return {
            "leaf_hash": to_hex(self.leaf_hash),
            "leaf_index": self.leaf_index,
            "proof": self.siblings_hex(),
            "root_hash": to_hex(self.root_hash),
            "tree_size": self.tree_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MerkleProof":
        """Deserialize proof from dictionary."""
        return cls(
            leaf_hash=from_hex(data["leaf_hash"]),
            leaf_index=data["leaf_index"],
            siblings=tuple(from_hex(s) for s in data["proof"]),
            root_hash=from_hex(data["root_hash"]),
            tree_size=data["tree_size"],
        )


class MerkleTree:
    """
    Merkle tree over an ordered list of leaves.

    The tree is stored as a list of levels. Level 0 holds the leaf
    digests, the last level holds only the root. The sibling of the node
    at position i is at position i ^ 1 on the same level.

    Example:
        >>> tree = MerkleTree.from_leaves([b"a", b"b", b"c"])
        >>> proof = tree.get_proof(2)
        >>> verify_proof(proof)
        True
    """

    def __init__(self, levels: list[tuple[bytes, ...]]) -> None:
        """
        Initialize Merkle tree (internal use).

        Use from_leaves() or from_hashes() to construct trees.
        """
        self._levels = levels

    @classmethod
    def from_leaves(cls, leaves: Sequence[bytes]) -> "MerkleTree":
        """
        Construct a Merkle tree from raw leaf data.

        Args:
            leaves: Leaf data, hashed with compute_leaf_hash

        Raises:
            EmptyLeafSet: If leaves is empty
        """
        if not leaves:
            raise EmptyLeafSet()

        return cls._build_tree([compute_leaf_hash(data) for data in leaves])

    @classmethod
    def from_hashes(cls, hashes: Sequence[bytes]) -> "MerkleTree":
        """
        Construct a Merkle tree using digests directly as leaves.

        Args:
            hashes: 32-byte leaf digests

        Raises:
            EmptyLeafSet: If hashes is empty
            ValueError: If a digest is not 32 bytes
        """
        if not hashes:
            raise EmptyLeafSet()

        for i, digest in enumerate(hashes):
            if len(digest) != DIGEST_SIZE:
                raise ValueError(
                    f"Leaf {i} is {len(digest)} bytes, expected {DIGEST_SIZE}"
                )

        return cls._build_tree(list(hashes))

    @classmethod
    def _build_tree(cls, leaf_hashes: list[bytes]) -> "MerkleTree":
        """Build all levels bottom-up from leaf digests."""
        current_level = tuple(leaf_hashes)
        levels = [current_level]

        while len(current_level) > 1:
            next_level = []

            for i in range(0, len(current_level), 2):
                left = current_level[i]
                if i + 1 < len(current_level):
                    right = current_level[i + 1]
                else:
                    # Odd case: pair the last node with itself
                    right = left
                next_level.append(compute_parent_hash(left, right))

            current_level = tuple(next_level)
            levels.append(current_level)

        return cls(levels)

    @property
    def root_hash(self) -> bytes:
        """Get the root digest (Merkle root)."""
        return self._levels[-1][0]

    @property
    def root_hex(self) -> str:
        """Get the Merkle root as 0x-prefixed hex."""
        return to_hex(self.root_hash)

    @property
    def leaves(self) -> tuple[bytes, ...]:
        """Get all leaf digests."""
        return self._levels[0]

    @property
    def levels(self) -> list[tuple[bytes, ...]]:
        """Get all levels, leaves first."""
        return list(self._levels)

    @property
    def leaf_count(self) -> int:
        """Get the number of leaves."""
        return len(self._levels[0])

    @property
    def depth(self) -> int:
        """Number of levels above the leaves, also the proof length."""
        return len(self._levels) - 1

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self.leaf_count:
            raise IndexOutOfRange(index, self.leaf_count)

    def get_leaf_hash(self, index: int) -> bytes:
        """
        Get the digest of a leaf by index.

        Raises:
            IndexOutOfRange: If index out of bounds
        """
        self._check_index(index)
        return self._levels[0][index]

    def get_proof(self, leaf_index: int) -> MerkleProof:
        """
        Generate inclusion proof for a leaf.

        Args:
            leaf_index: Index of the leaf to prove

        Returns:
            MerkleProof for the leaf

        Raises:
            IndexOutOfRange: If leaf_index out of bounds
        """
        self._check_index(leaf_index)

        siblings = []
        index = leaf_index

        for level in self._levels[:-1]:
            sibling_index = index ^ 1
            if sibling_index < len(level):
                siblings.append(level[sibling_index])
            else:
                # Duplicated node is its own sibling
                siblings.append(level[index])
            index //= 2

        return MerkleProof(
            leaf_hash=self._levels[0][leaf_index],
            leaf_index=leaf_index,
            siblings=tuple(siblings),
            root_hash=self.root_hash,
            tree_size=self.leaf_count,
        )

    def get_all_proofs(self) -> list[MerkleProof]:
        """Generate proofs for all leaves, in leaf order."""
        return [self.get_proof(i) for i in range(self.leaf_count)]


def compute_root_from_proof(
    leaf_hash: bytes,
    leaf_index: int,
    siblings: Sequence[bytes],
) -> bytes:
    """
    Recompute the root from a leaf and its sibling path.

    At each level an even index means the current node is the left
    child. The index is halved after every step.
    """
    current_hash = leaf_hash
    index = leaf_index

    for sibling in siblings:
        if index % 2 == 0:
            current_hash = compute_parent_hash(current_hash, sibling)
        else:
            current_hash = compute_parent_hash(sibling, current_hash)
        index //= 2

    return current_hash


def verify_proof_against_root(
    leaf_hash: bytes,
    leaf_index: int,
    siblings: Sequence[bytes],
    expected_root: bytes,
) -> bool:
    """
    Verify a sibling path against a specific root.

    Returns:
        True if the path reconstructs expected_root
    """
    if leaf_index < 0:
        return False
    return compute_root_from_proof(leaf_hash, leaf_index, siblings) == expected_root


def verify_proof(proof: MerkleProof) -> bool:
    """
    Verify a Merkle inclusion proof against the root it carries.

    Also rejects proofs whose length does not match the tree size, since
    every leaf has exactly one sibling per level.
    """
    if not 0 <= proof.leaf_index < proof.tree_size:
        return False
    if len(proof.siblings) != proof_length(proof.tree_size):
        return False
    return verify_proof_against_root(
        proof.leaf_hash,
        proof.leaf_index,
        proof.siblings,
        proof.root_hash,
    )


def proof_length(leaf_count: int) -> int:
    """ceil(log2(leaf_count)), 0 for a single leaf."""
    if leaf_count < 1:
        raise EmptyLeafSet()
    return (leaf_count - 1).bit_length()

"""
Pytest configuration and shared fixtures for allowlist tests.
"""

import json
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

from merkle_allowlist.core.config import Settings
from merkle_allowlist.metrics.generator_metrics import GeneratorMetrics

# Hardhat default accounts 0-2, with leaf digests keccak256(address bytes)
ADDRESS_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ADDRESS_1 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
ADDRESS_2 = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

LEAF_0 = "0xe9707d0e6171f728f7473c24cc0432a9b07eaaf1efed6a137a4a8c12c79552d9"
LEAF_1 = "0x00314e565e0574cb412563df634608d76f5c59d9f817e85966100ec1d48005c0"
LEAF_2 = "0x8a3552d60a98e0ade765adddad0a2e420ca9b1eef5f326ba7ab860bb4ea72c94"

# keccak256(LEAF_0 || LEAF_1), the root of [ADDRESS_0, ADDRESS_1]
ROOT_01 = "0xd23475cf57127790c97e39187b822dcff8f2746b545686570c611dbd95746be9"
# keccak256(LEAF_1 || LEAF_0), the root of [ADDRESS_1, ADDRESS_0]
ROOT_10 = "0x070e8db97b197cc0e4a1790c5e6c3667bab32d733db7f815fbe84f5824c7168d"
# keccak256(LEAF_2 || LEAF_2), the duplicated odd node
NODE_22 = "0x347dce04eb339ca70588960730ef0cada966bb1d5e10a9b9489a3e0ba47dc1b6"
# keccak256(ROOT_01 || NODE_22), the root of all three
ROOT_012 = "0xa3867f2d81f79d90a4144717770216f63c688a57bfb6703c55fd8abe59bed77b"


@pytest.fixture
def sample_addresses() -> list[str]:
    """Three addresses with known leaf and root vectors."""
    return [ADDRESS_0, ADDRESS_1, ADDRESS_2]


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and .env files."""
    return Settings(_env_file=None, VERIFY_PROOFS=True, METRICS_ENABLED=False)


@pytest.fixture
def metrics() -> GeneratorMetrics:
    """Metrics on a fresh registry."""
    return GeneratorMetrics(registry=CollectorRegistry())


@pytest.fixture
def whitelist_file(tmp_path: Path, sample_addresses: list[str]) -> Path:
    """Write a whitelist.json with the sample addresses."""
    path = tmp_path / "whitelist.json"
    path.write_text(json.dumps({"addresses": sample_addresses}))
    return path

"""Shared fixtures for the bridge client tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from erc20_bridge.models import IndexerRecord

TOKEN = "0xe2a6d9a5d7c3a0e8b8ed4a0a0c3a3c2c1b1a9f01"
TOKEN_BYTES32 = "0x9f8f72aa9304c8b593d555f12ef6589cc3a579a2"
RECIPIENT = "0x85BfE05492aFC3D04Ff3B2ca6771ACF6f853d90d"
BACKING = "0x742d35cc6634c0532925a3b844bc9e7595f0beb7"
MAPPING = "0x1f54b7af3a462aabed01d5910a3e5911e76d4b51"
BLOCK_HASH = "0x" + "ab" * 32


@pytest.fixture
def indexer_payload():
    """Indexer body for an observed registration."""
    return {
        "extrinsic_index": "5091-2",
        "account_id": "2sy3hdsWSSsGgokzJ1X9AB9pT5kmkV9sD1QzhvY2tBwhGfte",
        "block_num": 5091,
        "block_hash": BLOCK_HASH,
        "backing": BACKING,
        "source": TOKEN,
        "target": "0x0000000000000000000000000000000000000000",
        "block_timestamp": 1620000000,
        "mmr_index": 10180,
        "mmr_root": "0x" + "cd" * 32,
        "signatures": "",
        "block_header": "{}",
        "tx": "0x" + "ef" * 32,
    }


@pytest.fixture
def indexer_record(indexer_payload):
    return IndexerRecord.from_api(indexer_payload)


@pytest.fixture
def mock_gateway():
    """ChainGateway double with every coroutine method mocked."""
    gateway = MagicMock()
    gateway.token_count = AsyncMock()
    gateway.token_at = AsyncMock()
    gateway.token_info = AsyncMock()
    gateway.registration_record = AsyncMock()
    gateway.probe_string_symbol = AsyncMock()
    gateway.active_account = AsyncMock(return_value=RECIPIENT)
    gateway.wallet_chain_id = AsyncMock()
    gateway.submit_registration = AsyncMock(return_value="0x" + "11" * 32)
    gateway.submit_cross_transfer = AsyncMock(return_value="0x" + "22" * 32)
    gateway.submit_cross_chain_sync = AsyncMock(return_value="0x" + "33" * 32)
    return gateway


@pytest.fixture
def mock_metadata():
    """TokenMetadataProvider double."""
    metadata = MagicMock()
    metadata.symbol_and_decimals = AsyncMock(return_value=("RING", 18))
    metadata.bytes32_symbol = AsyncMock(return_value="MKR")
    metadata.name_and_logo = MagicMock(return_value=("Darwinia Network Native Token", "ring.svg"))
    metadata.balance = AsyncMock(return_value=10**18)
    return metadata

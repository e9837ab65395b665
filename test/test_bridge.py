#!/usr/bin/env python3
"""Tests for the TokenBridge facade wiring."""

from unittest.mock import AsyncMock, patch

import pytest

from erc20_bridge.bridge import TokenBridge
from erc20_bridge.config import BridgeConfig, DestinationChainConfig, IndexerConfig, SourceChainConfig
from erc20_bridge.utils.contract_utility import ContractUtility

from conftest import BACKING, MAPPING

TEST_KEY = "0x" + "4c" * 32


@pytest.fixture
def config():
    return BridgeConfig(
        source_chain=SourceChainConfig(rpc_url="https://ropsten.test", backing_address=BACKING),
        destination_chain=DestinationChainConfig(
            rpc_url="https://pangolin.test",
            mapping_address=MAPPING,
            network_id=43,
            proof_rpc_url="https://pangolin-archive.test"
        ),
        indexer=IndexerConfig(api_url="https://indexer.test", retry_delay=1.5, max_attempts=10),
        private_key=TEST_KEY,
    )


class TestTokenBridge:
    """Component wiring and shutdown."""

    def test_components_share_gateway_and_bus(self, config):
        bridge = TokenBridge(config)

        assert bridge.registrar.gateway is bridge.gateway
        assert bridge.catalog.gateway is bridge.gateway
        assert bridge.registrar.monitor is bridge.proof_monitor
        assert bridge.proof_monitor.bus is bridge.proof_bus
        assert bridge.registrar.destination_network_id == 43

    def test_clients_follow_config(self, config):
        bridge = TokenBridge(config)

        assert bridge.source_client.rpc_url == "https://ropsten.test"
        assert bridge.destination_client.rpc_url == "https://pangolin.test"
        assert bridge.wallet_client.rpc_url == "https://ropsten.test"
        assert bridge.wallet_client.address is not None
        assert bridge.source_client.address is None
        assert bridge.proof_client.rpc_url == "https://pangolin-archive.test"
        assert bridge.indexer.api_url == "https://indexer.test"
        assert bridge.proof_monitor.retry_delay == 1.5
        assert bridge.proof_monitor.max_attempts == 10

    @pytest.mark.asyncio
    async def test_context_manager_closes_everything(self, config):
        with patch.object(ContractUtility, "disconnect", new_callable=AsyncMock) as disconnect:
            async with TokenBridge(config) as bridge:
                bridge.proof_monitor.stop = AsyncMock()

        bridge.proof_monitor.stop.assert_awaited_once()
        assert disconnect.await_count == 3
        assert bridge.indexer._client.is_closed
        assert bridge.proof_client._client.is_closed

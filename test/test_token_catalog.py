#!/usr/bin/env python3
"""Unit tests for the TokenCatalog."""

import asyncio
import logging

import pytest

from erc20_bridge.exceptions import SymbolDecodeFailure
from erc20_bridge.models import Chain, TokenInfo
from erc20_bridge.token_catalog import TokenCatalog

from conftest import BACKING, RECIPIENT, TOKEN, TOKEN_BYTES32

DVM_TOKENS = [
    "0x0000000000000000000000000000000000000d01",
    "0x0000000000000000000000000000000000000d02",
]
SOURCES = {DVM_TOKENS[0]: TOKEN, DVM_TOKENS[1]: TOKEN_BYTES32}


def _barrier(expected: int):
    """Build a side effect that only returns once `expected` calls are in flight."""
    arrived = []
    ready = asyncio.Event()

    async def wait_for_all(result):
        arrived.append(result)
        if len(arrived) == expected:
            ready.set()
        await asyncio.wait_for(ready.wait(), timeout=1)
        return result

    return wait_for_all


@pytest.fixture
def catalog(mock_gateway, mock_metadata):
    return TokenCatalog(mock_gateway, mock_metadata)


class TestListTokens:
    """Token enumeration on both chains."""

    @pytest.mark.asyncio
    async def test_destination_tokens_resolve_to_source_metadata(self, catalog, mock_gateway, mock_metadata):
        barrier = _barrier(2)
        mock_gateway.token_count.return_value = 2

        async def token_at(chain, index):
            assert chain is Chain.DESTINATION
            return await barrier(DVM_TOKENS[index])

        async def token_info(dvm_address):
            return TokenInfo(source=SOURCES[dvm_address], backing=BACKING)

        mock_gateway.token_at.side_effect = token_at
        mock_gateway.token_info.side_effect = token_info
        mock_metadata.symbol_and_decimals.side_effect = lambda a: ("RING" if a == TOKEN else "MKR", 18)

        tokens = await catalog.list_tokens(Chain.DESTINATION, RECIPIENT)

        assert mock_gateway.token_at.await_count == 2
        assert mock_gateway.token_info.await_count == 2
        assert [t.address for t in tokens] == [TOKEN, TOKEN_BYTES32]
        assert [t.source for t in tokens] == [TOKEN, TOKEN_BYTES32]
        assert [t.symbol for t in tokens] == ["RING", "MKR"]
        assert all(t.backing == BACKING for t in tokens)
        mock_gateway.token_count.assert_awaited_once_with(Chain.DESTINATION)
        mock_metadata.balance.assert_any_await(TOKEN, RECIPIENT)

    @pytest.mark.asyncio
    async def test_source_tokens(self, catalog, mock_gateway, mock_metadata):
        barrier = _barrier(3)
        addresses = [TOKEN, TOKEN_BYTES32, BACKING]
        mock_gateway.token_count.return_value = 3

        async def token_at(chain, index):
            assert chain is Chain.SOURCE
            return await barrier(addresses[index])

        mock_gateway.token_at.side_effect = token_at

        tokens = await catalog.list_tokens(Chain.SOURCE, RECIPIENT)

        assert [t.address for t in tokens] == addresses
        assert all(t.balance == 10**18 for t in tokens)
        assert all(t.source is None for t in tokens)
        mock_gateway.token_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_undecodable_symbol_does_not_fail_listing(self, catalog, mock_gateway, mock_metadata, caplog):
        addresses = [TOKEN, TOKEN_BYTES32]
        mock_gateway.token_count.return_value = 2

        async def token_at(chain, index):
            return addresses[index]

        async def symbol_and_decimals(address):
            if address == TOKEN_BYTES32:
                raise SymbolDecodeFailure(f"symbol() of {address} is neither string nor bytes32")
            return "RING", 18

        mock_gateway.token_at.side_effect = token_at
        mock_metadata.symbol_and_decimals.side_effect = symbol_and_decimals

        with caplog.at_level(logging.WARNING):
            tokens = await catalog.list_tokens(Chain.SOURCE, RECIPIENT)

        assert [(t.address, t.symbol, t.decimals) for t in tokens] == [(TOKEN, "RING", 18), (TOKEN_BYTES32, "", 0)]
        assert tokens[1].balance == 10**18
        assert "neither string nor bytes32" in caplog.text

    @pytest.mark.asyncio
    async def test_no_account_returns_empty_list(self, catalog, mock_gateway):
        assert await catalog.list_tokens(Chain.SOURCE, None) == []
        mock_gateway.token_count.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_contract(self, catalog, mock_gateway):
        mock_gateway.token_count.return_value = 0
        assert await catalog.list_tokens(Chain.DESTINATION, RECIPIENT) == []


class TestDescribeToken:
    """Single token snapshots."""

    @pytest.mark.asyncio
    async def test_without_account_balance_is_zero(self, catalog, mock_metadata):
        token = await catalog.describe_token(TOKEN)

        assert token.balance == 0
        assert token.symbol == "RING"
        assert token.decimals == 18
        assert token.name == "Darwinia Network Native Token"
        assert token.logo == "ring.svg"
        mock_metadata.balance.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_with_account(self, catalog, mock_metadata):
        token = await catalog.describe_token(TOKEN, RECIPIENT)

        assert token.balance == 10**18
        mock_metadata.balance.assert_awaited_once_with(TOKEN, RECIPIENT)

"""Enumeration of the tokens known to either side of the bridge."""

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from .exceptions import SymbolDecodeFailure
from .models import Chain, Token

if TYPE_CHECKING:
    from .chain_gateway import ChainGateway
    from .token_metadata import TokenMetadataProvider

logger = logging.getLogger(__name__)


class TokenCatalog:
    """Lists bridge tokens with metadata and balances."""

    def __init__(self, gateway: "ChainGateway", metadata: "TokenMetadataProvider") -> None:
        self.gateway = gateway
        self.metadata = metadata

    async def describe_token(self, address: str, account: str | None = None) -> Token:
        """
        Build a Token snapshot for a source-chain address.

        The balance is only queried when `account` is given, otherwise it is 0.
        A symbol that decodes as neither string nor bytes32 yields an empty
        symbol and 0 decimals.
        """
        try:
            symbol, decimals = await self.metadata.symbol_and_decimals(address)
        except SymbolDecodeFailure as e:
            logger.warning(f"{e}, listing {address} without symbol and decimals")
            symbol, decimals = "", 0
        name, logo = self.metadata.name_and_logo(address)
        balance = await self.metadata.balance(address, account) if account else 0

        return Token(
            address=address,
            symbol=symbol,
            decimals=decimals,
            name=name,
            logo=logo,
            balance=balance,
        )

    async def list_tokens(self, chain: Chain, account: str | None) -> list[Token]:
        """
        List every token registered on `chain`'s bridge contract.

        Per-index lookups run concurrently; the result keeps index order.
        Returns an empty list when there is no account.
        """
        if not account:
            return []

        count = await self.gateway.token_count(chain)
        logger.info(f"Listing {count} token(s) on {chain.value}")

        match chain:
            case Chain.SOURCE:
                lookups = [self._source_token(index, account) for index in range(count)]
            case Chain.DESTINATION:
                lookups = [self._destination_token(index, account) for index in range(count)]

        return list(await asyncio.gather(*lookups))

    async def _source_token(self, index: int, account: str) -> Token:
        address = await self.gateway.token_at(Chain.SOURCE, index)
        return await self.describe_token(address, account)

    async def _destination_token(self, index: int, account: str) -> Token:
        dvm_address = await self.gateway.token_at(Chain.DESTINATION, index)
        info = await self.gateway.token_info(dvm_address)
        token = await self.describe_token(info.source, account)

        return replace(token, source=info.source, backing=info.backing)

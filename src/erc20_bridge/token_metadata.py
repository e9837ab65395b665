"""
ERC-20 metadata lookups used to decorate bridge tokens.

Symbol and decimals are read on chain; names and logos come from an optional
token list file mapping addresses to `{"name": ..., "logo": ...}`.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from eth_abi.exceptions import DecodingError
from web3 import Web3
from web3.exceptions import Web3Exception

from .exceptions import SymbolDecodeFailure

if TYPE_CHECKING:
    from .utils.contract_utility import ContractUtility

logger = logging.getLogger(__name__)


def decode_bytes32_symbol(raw: bytes) -> str:
    """Decode a bytes32 symbol, dropping the zero padding."""
    return raw.rstrip(b"\x00").decode("utf-8", errors="replace")


class TokenMetadataProvider:
    """Resolves symbol, decimals, name, logo and balances of ERC-20 tokens."""

    def __init__(self, client: "ContractUtility", token_list: dict[str, dict[str, Any]] | None = None):
        self.client = client
        # Keys are lowercased so lookups are case-insensitive
        self.token_list = {address.lower(): entry for address, entry in (token_list or {}).items()}

    @classmethod
    def from_token_list_file(cls, client: "ContractUtility", path: str | Path | None) -> "TokenMetadataProvider":
        if not path:
            return cls(client)

        with Path(path).open() as file:
            token_list = json.load(file)
        logger.info(f"Loaded {len(token_list)} token list entries from {path}")
        return cls(client, token_list)

    async def _symbol(self, address: str) -> str:
        try:
            return await self.client.contract(address, "Erc20String").functions.symbol().call()
        except (Web3Exception, DecodingError) as e:
            logger.debug(f"String symbol() failed for {address}, trying bytes32: {e}")
        return await self.bytes32_symbol(address)

    async def bytes32_symbol(self, address: str) -> str:
        """
        Read `symbol()` as a bytes32 value.

        Raises:
            SymbolDecodeFailure: If the call fails or does not decode as bytes32
        """
        try:
            raw = await self.client.contract(address, "Erc20Bytes32").functions.symbol().call()
        except (Web3Exception, DecodingError) as e:
            raise SymbolDecodeFailure(f"symbol() of {address} is neither string nor bytes32") from e
        return decode_bytes32_symbol(raw)

    async def symbol_and_decimals(self, address: str) -> tuple[str, int]:
        """
        Read symbol and decimals from the token contract.

        Raises:
            SymbolDecodeFailure: If symbol() decodes as neither string nor bytes32
        """
        symbol = await self._symbol(address)
        decimals = await self.client.contract(address, "Erc20String").functions.decimals().call()
        return symbol, int(decimals)

    def name_and_logo(self, address: str) -> tuple[str, str | None]:
        entry = self.token_list.get(address.lower(), {})
        return entry.get("name", ""), entry.get("logo")

    async def balance(self, address: str, account: str) -> int:
        token = self.client.contract(address, "Erc20String")
        return int(await token.functions.balanceOf(Web3.to_checksum_address(account)).call())

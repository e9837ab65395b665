#!/usr/bin/env python3
"""Typed access to the backing and mapping contracts.

Reads go through one read-only client per chain; transactions go through the
wallet connection and are returned as pending hashes without waiting for
confirmation.
"""

import logging
from typing import TYPE_CHECKING, Any

from web3 import Web3
from web3.contract import AsyncContract

from .exceptions import BridgeError
from .models import (
    Chain,
    Direction,
    ProofEvent,
    RegistrationRecord,
    RegistrationVariant,
    TokenInfo,
)

if TYPE_CHECKING:
    from .utils.contract_utility import ContractUtility

logger = logging.getLogger(__name__)


class ChainGateway:
    """Read, call and submit access to both sides of the bridge."""

    BACKING_ABI = "BridgeBacking"
    MAPPING_ABI = "MappingTokenFactory"
    STRING_SYMBOL_ABI = "Erc20String"

    def __init__(
        self,
        source: "ContractUtility",
        destination: "ContractUtility",
        wallet: "ContractUtility",
        backing_address: str,
        mapping_address: str
    ) -> None:
        """
        Initialize the ChainGateway.

        Args:
            source: Read client for the source chain
            destination: Read client for the destination chain
            wallet: Signing client transactions are submitted through
            backing_address: Backing contract on the source chain
            mapping_address: Mapping token factory on the destination chain
        """
        self.source = source
        self.destination = destination
        self.wallet = wallet
        self.backing_address = Web3.to_checksum_address(backing_address)
        self.mapping_address = Web3.to_checksum_address(mapping_address)

        self.backing: AsyncContract = source.contract(self.backing_address, self.BACKING_ABI)
        self.mapping: AsyncContract = destination.contract(self.mapping_address, self.MAPPING_ABI)

    # Reads

    async def token_count(self, chain: Chain) -> int:
        match chain:
            case Chain.SOURCE:
                return int(await self.backing.functions.assetLength().call())
            case Chain.DESTINATION:
                return int(await self.mapping.functions.tokenLength().call())

    async def token_at(self, chain: Chain, index: int) -> str:
        match chain:
            case Chain.SOURCE:
                return await self.backing.functions.allAssets(index).call()
            case Chain.DESTINATION:
                return await self.mapping.functions.allTokens(index).call()

    async def token_info(self, dvm_address: str) -> TokenInfo:
        """Resolve a destination-chain token to its source token and backing."""
        backing, source = await self.mapping.functions.tokenToInfo(
            Web3.to_checksum_address(dvm_address)
        ).call()
        return TokenInfo(source=source, backing=backing)

    async def registration_record(self, address: str) -> RegistrationRecord:
        target, timestamp = await self.backing.functions.assets(
            Web3.to_checksum_address(address)
        ).call()
        return RegistrationRecord(target=target, timestamp=int(timestamp))

    async def probe_string_symbol(self, address: str) -> str:
        """
        Call `symbol()` assuming it returns an ABI string.

        Raises:
            web3.exceptions.Web3Exception: If the call fails or the output does not decode as a string
        """
        token = self.source.contract(address, self.STRING_SYMBOL_ABI)
        return await token.functions.symbol().call()

    # Wallet

    async def active_account(self) -> str | None:
        """Account transactions are sent from, the node's first account without a local key."""
        if self.wallet.address:
            return self.wallet.address

        accounts = await self.wallet.w3.eth.accounts
        return accounts[0] if accounts else None

    async def wallet_chain_id(self) -> int:
        return await self.wallet.chain_id()

    # Transactions

    async def _send(self, contract_address: str, contract_name: str, method: str, *args: Any) -> str:
        sender = await self.active_account()
        if not sender:
            raise BridgeError("No active account available to submit transactions")

        contract = self.wallet.contract(contract_address, contract_name)
        tx_hash = await getattr(contract.functions, method)(*args).transact({"from": sender})
        tx_hex = Web3.to_hex(tx_hash)
        logger.info(f"Submitted {method} from {sender}: {tx_hex}")
        return tx_hex

    async def submit_registration(self, address: str, variant: RegistrationVariant) -> str:
        return await self._send(
            self.backing_address,
            self.BACKING_ABI,
            variant.value,
            Web3.to_checksum_address(address)
        )

    async def submit_cross_transfer(self, direction: Direction, token: str, recipient: str, amount: int) -> str:
        """
        Submit a cross-chain transfer.

        Source to destination calls `crossSendToken` on the backing contract,
        destination to source calls `crossTransfer` on the mapping contract.
        """
        token = Web3.to_checksum_address(token)
        recipient = Web3.to_checksum_address(recipient)

        match direction:
            case Direction.SOURCE_TO_DESTINATION:
                return await self._send(
                    self.backing_address, self.BACKING_ABI, "crossSendToken", token, recipient, int(amount)
                )
            case Direction.DESTINATION_TO_SOURCE:
                return await self._send(
                    self.mapping_address, self.MAPPING_ABI, "crossTransfer", token, recipient, int(amount)
                )

    async def submit_cross_chain_sync(self, proof: ProofEvent) -> str:
        nodes = [Web3.to_bytes(hexstr=node) for node in proof.proof]
        return await self._send(self.backing_address, self.BACKING_ABI, "crossChainSync", nodes)

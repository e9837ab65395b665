"""
Token registration coordination.

Decides whether a token needs registering, selects the registration entry
point matching the token's symbol encoding, submits it and hands the address
to the proof monitor. Also covers cross-chain sends and the final
`crossChainSync` confirmation.
"""

import logging
from typing import TYPE_CHECKING

from eth_abi.exceptions import DecodingError
from web3 import Web3
from web3.exceptions import Web3Exception

from .exceptions import InvalidAddress, NetworkMismatch
from .models import (
    BytesSymbol,
    Direction,
    ProofEvent,
    RegistrationStatus,
    StringSymbol,
    SymbolType,
)

if TYPE_CHECKING:
    from .chain_gateway import ChainGateway
    from .proof_monitor import ProofMonitor, ProofSubscription
    from .token_metadata import TokenMetadataProvider

logger = logging.getLogger(__name__)


def _valid_address(address: str | None) -> bool:
    return bool(address) and Web3.is_address(address)


class RegistrationCoordinator:
    """Registers source-chain tokens and tracks their registration state."""

    def __init__(
        self,
        gateway: "ChainGateway",
        metadata: "TokenMetadataProvider",
        monitor: "ProofMonitor",
        destination_network_id: int
    ) -> None:
        """
        Initialize the RegistrationCoordinator.

        Args:
            gateway: Access to the backing and mapping contracts
            metadata: Fallback resolver for bytes32 symbols
            monitor: Proof monitor started after each registration
            destination_network_id: Chain id the wallet must use for destination to source sends
        """
        self.gateway = gateway
        self.metadata = metadata
        self.monitor = monitor
        self.destination_network_id = destination_network_id

    async def status(self, address: str | None) -> RegistrationStatus | None:
        """
        Read the registration status of a source-chain token.

        Returns:
            The status, or None when `address` is not a valid address
        """
        if not _valid_address(address):
            logger.warning(str(InvalidAddress(address)))
            return None

        record = await self.gateway.registration_record(address)
        return record.status

    async def is_registered(self, address: str | None) -> bool:
        """True when the token is registering or registered."""
        status = await self.status(address)
        return status is not None and status is not RegistrationStatus.UNREGISTERED

    async def get_symbol_type(self, address: str) -> SymbolType:
        """
        Probe how the token's `symbol()` is encoded.

        Returns:
            StringSymbol when `symbol()` decodes as a string, otherwise a
            BytesSymbol carrying the symbol from the bytes32 resolver
        """
        try:
            symbol = await self.gateway.probe_string_symbol(address)
        except (Web3Exception, DecodingError) as e:
            logger.debug(f"symbol() of {address} is not a string ({e}), resolving as bytes32")
            return BytesSymbol(await self.metadata.bytes32_symbol(address))
        return StringSymbol(symbol)

    async def register(self, address: str) -> "ProofSubscription | None":
        """
        Register a token on the backing contract and start proof monitoring.

        The registration check is best effort: two concurrent calls for the
        same token may both submit.

        Returns:
            Subscription on the proof pipeline, None if already registered

        Raises:
            InvalidAddress: If `address` is not a valid address
        """
        if not _valid_address(address):
            raise InvalidAddress(address)

        if await self.is_registered(address):
            logger.info(f"Token {address} is already registered")
            return None

        symbol_type = await self.get_symbol_type(address)
        logger.info(
            f"Registering {symbol_type.symbol} ({address}) via {symbol_type.variant.value}"
        )
        tx_hash = await self.gateway.submit_registration(address, symbol_type.variant)
        logger.info(f"Register token transaction hash: {tx_hash}")

        return self.monitor.monitor(address)

    async def confirm_register(self, proof: ProofEvent) -> str:
        """Submit `crossChainSync` with a delivered proof to finalize registration."""
        logger.info(f"Confirming registration of {proof.source} with proof at {proof.at[:10]}...")
        return await self.gateway.submit_cross_chain_sync(proof)

    async def cross_send(self, direction: Direction, token: str, recipient: str, amount: int) -> str:
        """
        Transfer tokens across the bridge.

        Raises:
            InvalidAddress: If the token or recipient address is invalid
            NetworkMismatch: If sending from the destination chain while the
                wallet is connected to another network
        """
        for address in (token, recipient):
            if not _valid_address(address):
                raise InvalidAddress(address)
        if amount <= 0:
            raise ValueError(f"Amount must be positive, got {amount}")

        if direction is Direction.DESTINATION_TO_SOURCE:
            chain_id = await self.gateway.wallet_chain_id()
            if chain_id != self.destination_network_id:
                raise NetworkMismatch(expected=self.destination_network_id, actual=chain_id)

        logger.info(f"Cross send {amount} of {token} to {recipient} ({direction.value})")
        return await self.gateway.submit_cross_transfer(direction, token, recipient, amount)

"""
ERC-20 bridge client facade.

This module wires configuration, chain clients and the registration pipeline
together once per process, and hands the shared gateway and proof bus to
every component that needs them.
"""

import logging

from .chain_gateway import ChainGateway
from .config import BridgeConfig
from .proof_bus import ProofBus
from .proof_monitor import ProofMonitor
from .registrar import RegistrationCoordinator
from .token_catalog import TokenCatalog
from .token_metadata import TokenMetadataProvider
from .utils.contract_utility import ContractUtility
from .utils.indexer_client import IndexerClient
from .utils.proof_client import ReadProofClient

logger = logging.getLogger(__name__)


class TokenBridge:
    """
    Owns the process-wide bridge components.

    Use as an async context manager so HTTP sessions are closed and running
    proof monitors are cancelled on exit.
    """

    def __init__(self, config: BridgeConfig) -> None:
        """
        Initialize the TokenBridge.

        Args:
            config: Bridge configuration
        """
        self.config = config
        timeout = config.indexer.request_timeout

        # Chain clients
        self.source_client = ContractUtility(config.source_chain.rpc_url, request_timeout=timeout)
        self.destination_client = ContractUtility(config.destination_chain.rpc_url, request_timeout=timeout)
        self.wallet_client = ContractUtility(
            config.wallet_rpc_url,
            secret=config.private_key or "",
            request_timeout=timeout
        )

        self.gateway = ChainGateway(
            source=self.source_client,
            destination=self.destination_client,
            wallet=self.wallet_client,
            backing_address=config.source_chain.backing_address,
            mapping_address=config.destination_chain.mapping_address
        )
        self.metadata = TokenMetadataProvider.from_token_list_file(
            self.source_client, config.token_list_path
        )

        # Proof pipeline
        self.indexer = IndexerClient(config.indexer.api_url, timeout=timeout)
        self.proof_client = ReadProofClient(config.destination_chain.proof_rpc_url, timeout=timeout)
        self.proof_bus = ProofBus()
        self.proof_monitor = ProofMonitor(
            indexer=self.indexer,
            proof_client=self.proof_client,
            bus=self.proof_bus,
            retry_delay=config.indexer.retry_delay,
            max_attempts=config.indexer.max_attempts
        )

        self.registrar = RegistrationCoordinator(
            gateway=self.gateway,
            metadata=self.metadata,
            monitor=self.proof_monitor,
            destination_network_id=config.destination_chain.network_id
        )
        self.catalog = TokenCatalog(self.gateway, self.metadata)

        logger.info(
            f"TokenBridge initialized (backing {config.source_chain.backing_address}, "
            f"mapping {config.destination_chain.mapping_address})"
        )

    @classmethod
    def from_env(cls) -> "TokenBridge":
        """
        Create a TokenBridge from environment variables.

        Raises:
            ValueError: If required environment variables are missing
        """
        config = BridgeConfig.from_env()
        config.log_config()
        return cls(config)

    async def close(self) -> None:
        """Cancel running proof monitors and close network sessions."""
        await self.proof_monitor.stop()
        await self.indexer.aclose()
        await self.proof_client.aclose()
        for client in (self.source_client, self.destination_client, self.wallet_client):
            await client.disconnect()
        logger.info("TokenBridge closed")

    async def __aenter__(self) -> "TokenBridge":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

#!/usr/bin/env python3
"""Configuration management for the ERC-20 bridge client.

This module provides type-safe configuration dataclasses with validation.
Configuration is loaded either from environment variables or from a
chain-keyed JSON file, with sensible defaults where appropriate.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from web3 import Web3

# Get logger for this module
logger = logging.getLogger(__name__)


def _validate_url(url: str, label: str, schemes: tuple[str, ...]) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in schemes:
        raise ValueError(
            f"Invalid {label} URL scheme: {parsed.scheme}. "
            f"Expected {', '.join(schemes)}"
        )


def _checksum(instance: Any, field_name: str, label: str, env_name: str) -> None:
    """Validate an address field and store its checksummed form."""
    address = getattr(instance, field_name)
    if not address:
        raise ValueError(f"{label} is required ({env_name})")

    if not Web3.is_address(address):
        raise ValueError(f"Invalid {label.lower()}: {address}")

    checksummed = Web3.to_checksum_address(address)
    if checksummed != address:
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(instance, field_name, checksummed)


@dataclass(frozen=True, slots=True)
class SourceChainConfig:
    """Configuration for the source chain holding the backing contract.

    Attributes:
        rpc_url: HTTP(S) or WS(S) RPC endpoint for the source chain
        backing_address: Checksummed address of the backing contract
    """

    rpc_url: str
    backing_address: str

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ValueError("Source RPC URL is required (SOURCE_RPC_URL)")
        _validate_url(self.rpc_url, "RPC", ("http", "https", "ws", "wss"))
        _checksum(self, "backing_address", "Backing contract address", "BACKING_ADDRESS")


@dataclass(frozen=True, slots=True)
class DestinationChainConfig:
    """Configuration for the destination chain holding the mapping contract.

    Attributes:
        rpc_url: RPC endpoint for the destination chain
        mapping_address: Checksummed address of the mapping token factory
        network_id: Chain id the wallet must be connected to for outbound transfers
        proof_rpc_url: Endpoint serving `state_getReadProof`, defaults to rpc_url
    """

    rpc_url: str
    mapping_address: str
    network_id: int
    proof_rpc_url: str | None = None

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ValueError("Destination RPC URL is required (DESTINATION_RPC_URL)")
        _validate_url(self.rpc_url, "RPC", ("http", "https", "ws", "wss"))
        _checksum(self, "mapping_address", "Mapping contract address", "MAPPING_ADDRESS")

        if self.network_id <= 0:
            raise ValueError(f"Network id must be positive, got {self.network_id}")

        if self.proof_rpc_url is None:
            object.__setattr__(self, "proof_rpc_url", self.rpc_url)
        else:
            _validate_url(self.proof_rpc_url, "proof RPC", ("http", "https"))


@dataclass(frozen=True, slots=True)
class IndexerConfig:
    """Configuration for indexer polling.

    Attributes:
        api_url: Base URL of the indexer API
        retry_delay: Seconds between polls while the registration is not indexed
        max_attempts: Poll limit, None to poll until the record shows up
        request_timeout: HTTP request timeout in seconds
    """

    api_url: str
    retry_delay: float = 3.0
    max_attempts: int | None = None
    request_timeout: int = 30

    def __post_init__(self) -> None:
        if not self.api_url:
            raise ValueError("Indexer API URL is required (INDEXER_API_URL)")
        _validate_url(self.api_url, "indexer", ("http", "https"))
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))

        if self.retry_delay <= 0:
            raise ValueError(f"Retry delay must be positive, got {self.retry_delay}")
        if self.max_attempts is not None and self.max_attempts <= 0:
            raise ValueError(f"Max attempts must be positive, got {self.max_attempts}")
        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > 120:
            raise ValueError(f"Request timeout too long (max 120s), got {self.request_timeout}")


@dataclass(frozen=True, slots=True)
class BridgeConfig:
    """Main configuration for the bridge client.

    Attributes:
        source_chain: Backing side configuration
        destination_chain: Mapping side configuration
        indexer: Indexer polling configuration
        private_key: Key of the account submitting transactions (optional)
        wallet_rpc_url: Endpoint the signing wallet is connected to, defaults to the source RPC
        token_list_path: JSON file with token names and logos (optional)
    """

    source_chain: SourceChainConfig
    destination_chain: DestinationChainConfig
    indexer: IndexerConfig
    private_key: str | None = None
    wallet_rpc_url: str | None = None
    token_list_path: str | None = None

    def __post_init__(self) -> None:
        if self.private_key:
            key = self.private_key.removeprefix("0x")
            if len(key) != 64:
                raise ValueError(
                    f"Invalid private key length. Expected 64 hex characters, got {len(key)}"
                )
            try:
                int(key, 16)
            except ValueError:
                raise ValueError("Invalid private key format. Must be hexadecimal") from None

        if self.wallet_rpc_url is None:
            object.__setattr__(self, "wallet_rpc_url", self.source_chain.rpc_url)
        else:
            _validate_url(self.wallet_rpc_url, "wallet RPC", ("http", "https", "ws", "wss"))

    @classmethod
    def from_env(cls) -> "BridgeConfig":
        """Load configuration from environment variables.

        When BRIDGE_CONFIG is set the chain-keyed file it names is loaded
        instead, using BRIDGE_CHAIN as the key.

        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        if config_path := os.environ.get("BRIDGE_CONFIG"):
            return cls.from_file(config_path, os.environ.get("BRIDGE_CHAIN", "pangolin"))

        network_id = os.environ.get("DVM_NETWORK_ID", "")
        if not network_id:
            raise ValueError(
                "DVM_NETWORK_ID environment variable is required. "
                "This is the chain id of the destination network (e.g. 43 for Pangolin)."
            )

        max_attempts = os.environ.get("INDEXER_MAX_ATTEMPTS")

        return cls(
            source_chain=SourceChainConfig(
                rpc_url=os.environ.get("SOURCE_RPC_URL", ""),
                backing_address=os.environ.get("BACKING_ADDRESS", ""),
            ),
            destination_chain=DestinationChainConfig(
                rpc_url=os.environ.get("DESTINATION_RPC_URL", ""),
                mapping_address=os.environ.get("MAPPING_ADDRESS", ""),
                network_id=int(network_id),
                proof_rpc_url=os.environ.get("PROOF_RPC_URL"),
            ),
            indexer=IndexerConfig(
                api_url=os.environ.get("INDEXER_API_URL", ""),
                retry_delay=float(os.environ.get("INDEXER_RETRY_DELAY", "3")),
                max_attempts=int(max_attempts) if max_attempts else None,
                request_timeout=int(os.environ.get("REQUEST_TIMEOUT", "30")),
            ),
            private_key=os.environ.get("PRIVATE_KEY") or None,
            wallet_rpc_url=os.environ.get("WALLET_RPC_URL") or None,
            token_list_path=os.environ.get("TOKEN_LIST_PATH") or None,
        )

    @classmethod
    def from_file(cls, path: str | Path, chain: str) -> "BridgeConfig":
        """Load the entry for `chain` from a chain-keyed JSON configuration file.

        The private key is never read from the file; it comes from PRIVATE_KEY.

        Raises:
            ValueError: If the chain has no entry or a required key is missing
        """
        with Path(path).open() as file:
            entries: dict[str, Any] = json.load(file)

        entry = entries.get(chain)
        if entry is None:
            raise ValueError(
                f"No configuration for chain '{chain}'. "
                f"Available: {', '.join(sorted(entries))}"
            )

        try:
            return cls(
                source_chain=SourceChainConfig(
                    rpc_url=entry["ETHEREUM_PROVIDER"],
                    backing_address=entry["TRANSFER_BRIDGE_ETH_ADDRESS"],
                ),
                destination_chain=DestinationChainConfig(
                    rpc_url=entry["DARWINIA_PROVIDER"],
                    mapping_address=entry["MAPPING_FACTORY_ADDRESS"],
                    network_id=int(entry["DVM_NETWORK_ID"]),
                    proof_rpc_url=entry.get("PROOF_PROVIDER"),
                ),
                indexer=IndexerConfig(api_url=entry["DAPP_API"]),
                private_key=os.environ.get("PRIVATE_KEY") or None,
                wallet_rpc_url=entry.get("WALLET_PROVIDER"),
                token_list_path=entry.get("TOKEN_LIST"),
            )
        except KeyError as e:
            raise ValueError(f"Configuration for chain '{chain}' is missing {e.args[0]}") from None

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("ERC-20 Bridge Configuration")
        logger.info("=" * 60)

        logger.info("Source Chain:")
        logger.info(f"  RPC URL: {self.source_chain.rpc_url}")
        logger.info(f"  Backing: {self.source_chain.backing_address}")

        logger.info("Destination Chain:")
        logger.info(f"  RPC URL: {self.destination_chain.rpc_url}")
        logger.info(f"  Mapping: {self.destination_chain.mapping_address}")
        logger.info(f"  Network ID: {self.destination_chain.network_id}")
        logger.info(f"  Proof RPC: {self.destination_chain.proof_rpc_url}")

        logger.info("Indexer:")
        logger.info(f"  API URL: {self.indexer.api_url}")
        logger.info(f"  Retry Delay: {self.indexer.retry_delay} seconds")
        logger.info(f"  Max Attempts: {self.indexer.max_attempts or 'unbounded'}")

        logger.info("Wallet:")
        logger.info(f"  RPC URL: {self.wallet_rpc_url}")
        logger.info(f"  Private Key: {'[SET]' if self.private_key else '[NOT SET]'}")

        logger.info("=" * 60)

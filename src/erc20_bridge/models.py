#!/usr/bin/env python3
"""Data models for the ERC-20 bridge client.

This module provides immutable data classes for the on-chain registration
state, indexer responses and proof events used throughout the bridge client.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, ClassVar

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class Chain(Enum):
    """Which side of the bridge a read is made against."""
    SOURCE = "eth"
    DESTINATION = "dvm"


class Direction(Enum):
    """Direction of a cross-chain token transfer."""
    SOURCE_TO_DESTINATION = "eth-to-dvm"
    DESTINATION_TO_SOURCE = "dvm-to-eth"


class RegistrationVariant(Enum):
    """Registration entry point on the backing contract, keyed by symbol encoding."""
    STRING = "registerToken"
    BYTES32 = "registerTokenBytes32"


class RegistrationStatus(IntEnum):
    """Registration state of a source-chain token."""
    UNREGISTERED = 0
    REGISTERED = 1
    REGISTERING = 2


class MonitorState(Enum):
    """Lifecycle of a single proof monitor."""
    POLLING = "polling"
    PROOF_FETCHING = "proof_fetching"
    DELIVERED = "delivered"
    FAILED = "failed"
    CANCELLED = "cancelled"


def _is_zero_address(address: str | bytes | None) -> bool:
    if not address:
        return True
    if isinstance(address, bytes):
        return int.from_bytes(address, "big") == 0
    return int(address, 16) == 0


@dataclass(frozen=True, slots=True)
class RegistrationRecord:
    """Registration entry of the backing contract's `assets` mapping.

    Attributes:
        target: Linked destination-chain token address, zero until linked
        timestamp: Registration time, zero when never registered
    """

    target: str
    timestamp: int

    @property
    def status(self) -> RegistrationStatus:
        """Derive the registration status.

        | timestamp | target | status       |
        |-----------|--------|--------------|
        | 0         | any    | UNREGISTERED |
        | >0        | 0      | REGISTERING  |
        | >0        | !=0    | REGISTERED   |
        """
        match (self.timestamp > 0, _is_zero_address(self.target)):
            case (False, _):
                return RegistrationStatus.UNREGISTERED
            case (True, True):
                return RegistrationStatus.REGISTERING
            case _:
                return RegistrationStatus.REGISTERED


@dataclass(frozen=True, slots=True)
class TokenInfo:
    """Origin of a destination-chain mapped token."""
    source: str
    backing: str


@dataclass(frozen=True, slots=True)
class Token:
    """A bridgeable token with a metadata snapshot taken at read time.

    For destination-chain tokens `address` is the source-chain address and
    `source`/`backing` carry the mapping contract's origin record.
    """

    address: str
    symbol: str
    decimals: int
    name: str
    logo: str | None
    balance: int
    source: str | None = None
    backing: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "address": self.address,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "name": self.name,
            "logo": self.logo,
            "balance": str(self.balance),
            "source": self.source,
            "backing": self.backing,
        }


@dataclass(frozen=True, slots=True)
class IndexerRecord:
    """Registration extrinsic as reported by the indexer API.

    Attributes:
        extrinsic_index: Extrinsic position, e.g. "1234-2"
        account_id: Submitting account on the destination chain
        block_num: Destination-chain block number
        block_hash: Destination-chain block hash used for the proof
        backing: Backing contract address
        source: Registered source token address
        target: Mapped token address
        block_timestamp: Block time (Unix timestamp)
        mmr_index: MMR leaf index of the block
        mmr_root: MMR root
        signatures: Relayer signatures
        block_header: JSON encoded block header
        tx: Source-chain transaction hash
    """

    extrinsic_index: str
    account_id: str
    block_num: int
    block_hash: str
    backing: str
    source: str
    target: str
    block_timestamp: int
    mmr_index: int
    mmr_root: str
    signatures: str
    block_header: str
    tx: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "IndexerRecord":
        """Build a record from the indexer JSON body.

        Raises:
            ValueError: If the body carries no block hash
        """
        block_hash = data.get("block_hash")
        if not block_hash:
            raise ValueError(f"Indexer record without block_hash: {data}")

        return cls(
            extrinsic_index=str(data.get("extrinsic_index", "")),
            account_id=data.get("account_id", ""),
            block_num=int(data.get("block_num") or 0),
            block_hash=block_hash,
            backing=data.get("backing", ""),
            source=data.get("source", ""),
            target=data.get("target", ""),
            block_timestamp=int(data.get("block_timestamp") or 0),
            mmr_index=int(data.get("mmr_index") or 0),
            mmr_root=data.get("mmr_root", ""),
            signatures=data.get("signatures", ""),
            block_header=data.get("block_header", ""),
            tx=data.get("tx", ""),
        )


@dataclass(frozen=True, slots=True)
class ProofEvent:
    """Membership proof acquired for one registration.

    Attributes:
        source: Token address whose registration the proof covers
        block_hash: Block the proof was generated against
        leaf_key: Storage key the proof proves membership of
        at: Block hash reported by the proof provider
        proof: Proof nodes as hex strings
        record: Indexer record that located the block
    """

    source: str
    block_hash: str
    leaf_key: str
    at: str
    proof: tuple[str, ...]
    record: IndexerRecord | None = None

    def __str__(self) -> str:
        return (
            f"ProofEvent(source={self.source[:10]}..., "
            f"block={self.block_hash[:10]}..., "
            f"nodes={len(self.proof)})"
        )


@dataclass(frozen=True, slots=True)
class StringSymbol:
    """Token whose `symbol()` returns an ABI string."""
    symbol: str
    is_string: ClassVar[bool] = True

    @property
    def variant(self) -> RegistrationVariant:
        return RegistrationVariant.STRING


@dataclass(frozen=True, slots=True)
class BytesSymbol:
    """Token whose `symbol()` returns a fixed-size bytes32."""
    symbol: str
    is_string: ClassVar[bool] = False

    @property
    def variant(self) -> RegistrationVariant:
        return RegistrationVariant.BYTES32


SymbolType = StringSymbol | BytesSymbol

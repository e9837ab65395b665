"""
ERC-20 bridge client.

Registers source-chain tokens with the bridge backing contract, tracks their
registration state and acquires the proofs that finalize registration on the
mapping chain.
"""

from .bridge import TokenBridge
from .config import BridgeConfig
from .models import Chain, Direction, ProofEvent, RegistrationStatus, Token
from .proof_bus import ProofBus
from .proof_monitor import ProofMonitor
from .registrar import RegistrationCoordinator
from .token_catalog import TokenCatalog

__all__ = [
    "BridgeConfig",
    "Chain",
    "Direction",
    "ProofBus",
    "ProofEvent",
    "ProofMonitor",
    "RegistrationCoordinator",
    "RegistrationStatus",
    "Token",
    "TokenBridge",
    "TokenCatalog",
]
__version__ = "0.1.0"

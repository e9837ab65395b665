"""Error types raised by the bridge client."""


class BridgeError(Exception):
    """Base class for bridge client errors."""


class InvalidAddress(BridgeError, ValueError):
    """A value passed where a chain address was expected is not a valid address."""

    def __init__(self, address: object) -> None:
        self.address = address
        super().__init__(
            f"Token address is invalid, expected an ERC20 token address. Received value: {address}"
        )


class IndexerUnavailable(BridgeError):
    """The indexer could not be queried (transport or HTTP failure)."""


class NotYetIndexed(IndexerUnavailable):
    """The indexer answered but has not observed the registration yet."""


class ProofFetchFailure(BridgeError):
    """The membership proof for an observed block could not be fetched."""


class NetworkMismatch(BridgeError):
    """The wallet is connected to a different network than the transfer requires."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Wallet network {actual} does not match, please switch to network {expected}"
        )


class SymbolDecodeFailure(BridgeError):
    """A token's symbol could not be decoded as either string or bytes32."""


class SubscriptionClosed(BridgeError):
    """The proof subscriber was detached from its bus."""

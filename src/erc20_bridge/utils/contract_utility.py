import json
from functools import cache
from pathlib import Path
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.contract import AsyncContract
from web3.middleware import SignAndSendRawMiddlewareBuilder

CONTRACTS_DIR = Path(__file__).resolve().parent.parent / "contracts"


class ContractUtility:
    """
    Async web3 connection to one chain endpoint with the bundled bridge ABIs.

    Without a key the connection is read-only. With a key, transactions sent
    through it are signed locally and sent as raw transactions.
    """

    def __init__(self, rpc_url: str, secret: str = "", request_timeout: int = 30) -> None:
        """
        Args:
            rpc_url: HTTP(S) endpoint of the chain
            secret: Hex private key of the sending account, empty for read-only use
            request_timeout: Seconds before a JSON-RPC request is abandoned
        """
        if not rpc_url:
            raise ValueError("RPC URL is required")

        self.rpc_url = rpc_url
        self.account: LocalAccount | None = None
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": request_timeout}
        ))

        if secret:
            self._enable_signing(secret)

    def _enable_signing(self, secret: str) -> None:
        account: LocalAccount = Account.from_key(secret)
        self.w3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(account))
        self.w3.eth.default_account = account.address
        self.account = account

    @property
    def address(self) -> str | None:
        """Address of the signing account, None in read-only mode."""
        return self.account.address if self.account else None

    def contract(self, address: str, contract_name: str) -> AsyncContract:
        """Bind a bundled ABI to a deployed address on this chain."""
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=self.get_contract_abi(contract_name)
        )

    async def chain_id(self) -> int:
        return int(await self.w3.eth.chain_id)

    async def disconnect(self) -> None:
        """Close the provider's cached HTTP sessions, if it keeps any."""
        if disconnect := getattr(self.w3.provider, "disconnect", None):
            await disconnect()

    @staticmethod
    @cache
    def get_contract_abi(contract_name: str) -> list[dict[str, Any]]:
        """Load the ABI of a bundled contract by file stem, e.g. "BridgeBacking".

        Raises:
            FileNotFoundError: If no such contract is bundled
        """
        with (CONTRACTS_DIR / f"{contract_name}.json").open() as file:
            return json.load(file)["abi"]

import itertools
import logging
from typing import Any

import httpx

from ..exceptions import ProofFetchFailure

logger = logging.getLogger(__name__)


class ReadProofClient:
    """Fetches storage membership proofs over the destination node's JSON-RPC."""

    METHOD = "state_getReadProof"

    def __init__(self, rpc_url: str, timeout: float = 30.0, client: httpx.AsyncClient | None = None):
        self.rpc_url = rpc_url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug(f"Posting to {self.rpc_url}: {method} {params}")
        response = await self._client.post(self.rpc_url, json=payload)
        response.raise_for_status()
        body = response.json()

        if error := body.get("error"):
            raise ProofFetchFailure(f"{method} failed: {error.get('message', error)}")
        return body.get("result")

    async def get_membership_proof(self, block_hash: str, leaf_key: str) -> dict[str, Any]:
        """
        Request the read proof of `leaf_key` at `block_hash`.

        Returns:
            Dictionary with `at` (block hash) and `proof` (list of hex nodes)

        Raises:
            ProofFetchFailure: If the node rejects the request or returns no proof
            httpx.HTTPError: If the node could not be reached
        """
        result = await self._rpc(self.METHOD, [[leaf_key], block_hash])
        if not result or not result.get("proof"):
            raise ProofFetchFailure(f"No proof returned for {leaf_key} at {block_hash}")

        logger.info(f"Fetched read proof with {len(result['proof'])} nodes at {result.get('at', block_hash)}")
        return {"at": result.get("at") or block_hash, "proof": list(result["proof"])}

    async def aclose(self) -> None:
        await self._client.aclose()

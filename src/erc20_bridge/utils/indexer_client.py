import logging
from typing import Any

import httpx

from ..exceptions import IndexerUnavailable, NotYetIndexed
from ..models import IndexerRecord

logger = logging.getLogger(__name__)


class IndexerClient:
    """Reads registration extrinsics from the bridge indexer API."""

    REGISTER_PATH = "/api/ethereumIssuing/register"

    def __init__(self, api_url: str, timeout: float = 30.0, client: httpx.AsyncClient | None = None):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        url = self.api_url + path
        logger.debug(f"GET {url} params={params}")
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise IndexerUnavailable(f"Indexer request to {url} failed: {e}") from e

        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise IndexerUnavailable(f"Indexer returned a non-JSON body: {e}") from e

    async def fetch_register_record(self, source: str) -> IndexerRecord:
        """
        Fetch the registration record of a source token.

        Args:
            source: Source-chain token address

        Returns:
            The indexed registration record

        Raises:
            NotYetIndexed: If the indexer has no record for the token yet
            IndexerUnavailable: If the indexer could not be reached
        """
        data = await self._get(self.REGISTER_PATH, {"source": source})
        if not data:
            raise NotYetIndexed(f"Unreceived register block info for {source}")

        try:
            return IndexerRecord.from_api(data)
        except (TypeError, ValueError, AttributeError) as e:
            raise NotYetIndexed(f"Incomplete register block info for {source}: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()

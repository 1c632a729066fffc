import asyncio

from loguru import logger
from solana.rpc.async_api import AsyncClient
from solders.hash import Hash

from core.errors import BlockhashTimeout, BlockhashUnavailable


class SolanaRpcClient:
    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout
        self._client = AsyncClient(url, timeout=timeout)

    async def get_latest_blockhash(self) -> Hash:
        """Fetch the recent blockhash that bounds a transaction's validity window."""
        try:
            response = await asyncio.wait_for(self._client.get_latest_blockhash(), self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error(f"Timed out after {self.timeout}s fetching blockhash from {self.url}")
            raise BlockhashTimeout() from exc
        except Exception as exc:
            logger.error(f"Failed to fetch blockhash from {self.url}: {exc}")
            raise BlockhashUnavailable() from exc

        return response.value.blockhash

    async def close(self):
        await self._client.close()

"""DexScreener client — keyless spot price for any traded Solana mint."""

import asyncio

import httpx
from loguru import logger

from jitterhands.parsers.dexscreener.models import DexScreenerPair, DexScreenerTokenPairs
from jitterhands.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.dexscreener.com"
MAX_RETRIES = 3
RETRY_DELAYS = [1.0, 2.0, 4.0]


class DexScreenerClient:
    """Async REST client for the public DexScreener API (no auth)."""

    def __init__(self, max_rps: float = 4.0) -> None:
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            base_url=BASE_URL, timeout=10.0, headers={"Accept": "application/json"}
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str) -> object:
        """GET with backoff on 429 (honouring Retry-After) and timeouts.

        Non-retryable HTTP errors surface as httpx.HTTPStatusError.
        """
        for attempt in range(MAX_RETRIES + 1):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            last = attempt == MAX_RETRIES
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.get(path)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if last:
                    raise
                logger.debug(f"[DEXSCREENER] {type(e).__name__}, retry in {delay}s")
                await asyncio.sleep(delay)
                continue

            if resp.status_code == 429 and not last:
                retry_after = resp.headers.get("Retry-After", "")
                if retry_after.replace(".", "", 1).isdigit():
                    delay = max(delay, float(retry_after))
                logger.debug(f"[DEXSCREENER] 429, retry in {delay}s")
                await asyncio.sleep(delay)
                continue
            resp.raise_for_status()
            return resp.json()

        raise httpx.HTTPError(f"DexScreener {path}: retries exhausted")

    async def get_token_pairs(self, mint: str) -> list[DexScreenerPair]:
        """Solana pairs that have ``mint`` as base token."""
        data = await self._get_json(f"/latest/dex/tokens/{mint}")
        if isinstance(data, list):
            data = {"pairs": data}
        if not isinstance(data, dict):
            return []
        return DexScreenerTokenPairs.model_validate(data).solana_pairs(mint)

    async def get_most_liquid_pair(self, mint: str) -> DexScreenerPair | None:
        pairs = await self.get_token_pairs(mint)
        return max(pairs, key=lambda p: p.liquidity_usd, default=None)

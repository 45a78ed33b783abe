"""Birdeye Data Services client — price, identity and daily candles per mint.

Only the three endpoints the price enrichment needs are wrapped. Every
response is unwrapped from Birdeye's ``{"success": ..., "data": ...}``
envelope; an unsuccessful envelope, 401 or exhausted retries raise
BirdeyeApiError so ChainedPriceSource can move on to the next provider.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger

from jitterhands.parsers.birdeye.models import (
    BirdeyeOHLCVItem,
    BirdeyePrice,
    BirdeyeTokenOverview,
)
from jitterhands.parsers.rate_limiter import RateLimiter

BASE_URL = "https://public-api.birdeye.so"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]
RETRY_STATUSES = {429, 500, 502, 503, 504}


class BirdeyeApiError(Exception):
    pass


class BirdeyeClient:
    """Async client for the Birdeye public API (Solana only)."""

    def __init__(self, api_key: str, max_rps: float = 10.0) -> None:
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=15.0,
            headers={"X-API-KEY": api_key, "x-chain": "solana", "Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        """GET ``path`` and return the ``data`` payload, retrying 429/5xx and timeouts."""
        for attempt in range(MAX_RETRIES + 1):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.get(path, params=params)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt == MAX_RETRIES:
                    raise BirdeyeApiError(f"{path}: {type(e).__name__}") from e
                logger.debug(f"[BIRDEYE] {type(e).__name__} on {path}, retry in {delay}s")
                await asyncio.sleep(delay)
                continue

            if resp.status_code in RETRY_STATUSES:
                if attempt == MAX_RETRIES:
                    raise BirdeyeApiError(f"{path}: HTTP {resp.status_code} after retries")
                logger.debug(f"[BIRDEYE] HTTP {resp.status_code} on {path}, retry in {delay}s")
                await asyncio.sleep(delay)
                continue
            if resp.status_code == 401:
                raise BirdeyeApiError("Invalid API key (401)")
            if resp.status_code != 200:
                raise BirdeyeApiError(f"{path}: HTTP {resp.status_code}")

            body = resp.json()
            if not isinstance(body, dict):
                raise BirdeyeApiError(f"{path}: unexpected payload {type(body).__name__}")
            if not body.get("success", True):
                raise BirdeyeApiError(f"{path}: {body.get('message', 'unknown error')}")
            return body.get("data", body)

        raise BirdeyeApiError(f"{path}: request failed")

    async def get_token_overview(self, mint: str) -> BirdeyeTokenOverview:
        data = await self._get("/defi/token_overview", {"address": mint})
        return BirdeyeTokenOverview.model_validate(data or {"address": mint})

    async def get_price(self, mint: str) -> BirdeyePrice:
        data = await self._get("/defi/price", {"address": mint})
        return BirdeyePrice.model_validate(data or {})

    async def get_ohlcv(
        self,
        mint: str,
        interval: str = "1D",
        time_from: int | None = None,
        time_to: int | None = None,
    ) -> list[BirdeyeOHLCVItem]:
        """Candles for ``mint``; malformed candles are dropped, not fatal."""
        params: dict[str, Any] = {"address": mint, "type": interval}
        if time_from is not None:
            params["time_from"] = time_from
        if time_to is not None:
            params["time_to"] = time_to

        data = await self._get("/defi/ohlcv", params)
        items = data.get("items") if isinstance(data, dict) else None
        candles: list[BirdeyeOHLCVItem] = []
        for item in items or []:
            candle = BirdeyeOHLCVItem.from_api(item)
            if candle is not None:
                candles.append(candle)
        if items and len(candles) < len(items):
            logger.debug(f"[BIRDEYE] {mint[:8]}: dropped {len(items) - len(candles)} bad candles")
        return candles

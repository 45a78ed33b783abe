"""Helius API client — wallet transaction history for Solana.

Tries each configured API key in order (primary, then secondary). A key
that is rate limited, out of credits or erroring hands over to the next;
when every key fails HeliusApiError is raised and the caller can fall back
to public RPC.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger

from jitterhands.parsers.helius.models import HeliusTransaction
from jitterhands.parsers.normalizer import extract_transaction_list, parse_helius_transaction
from jitterhands.parsers.rate_limiter import RateLimiter

API_URL = "https://api.helius.xyz/v0"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class HeliusApiError(Exception):
    pass


class HeliusClient:
    """Async HTTP client for Helius Enhanced API."""

    def __init__(self, api_keys: list[str], max_rps: float = 10.0) -> None:
        self._api_keys = [k for k in api_keys if k]
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            timeout=10.0, headers={"Accept": "application/json"}
        )

    @property
    def has_keys(self) -> bool:
        return bool(self._api_keys)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_address_transactions(
        self, address: str, *, limit: int = 100
    ) -> list[HeliusTransaction]:
        """Fetch the latest enhanced transactions for a wallet (max 100)."""
        if not self._api_keys:
            raise HeliusApiError("No Helius API key configured")

        last_error = "no attempt"
        for index, api_key in enumerate(self._api_keys):
            label = "PRIMARY" if index == 0 else f"KEY{index + 1}"
            url = f"{API_URL}/addresses/{address}/transactions"
            params = {"api-key": api_key, "limit": min(limit, 100)}
            try:
                data = await self._get_with_retry(url, params, label)
            except HeliusApiError as e:
                last_error = str(e)
                logger.info(f"[HELIUS] {label} key failed ({e}), trying next")
                continue

            raw = extract_transaction_list(data)
            logger.info(f"[HELIUS] {label} key returned {len(raw)} transactions")
            return [parse_helius_transaction(tx) for tx in raw if isinstance(tx, dict)]

        raise HeliusApiError(f"All Helius keys failed: {last_error}")

    async def _get_with_retry(self, url: str, params: dict[str, Any], label: str) -> Any:
        for attempt in range(MAX_RETRIES + 1):
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.get(url, params=params)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    await asyncio.sleep(RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)])
                    continue
                raise HeliusApiError(f"{type(e).__name__}: {e}") from e

            if resp.status_code == 429:
                # Rate limited or out of credits: let the next key take over
                raise HeliusApiError("Rate limited (429)")
            if resp.status_code >= 500 and attempt < MAX_RETRIES:
                logger.debug(f"[HELIUS] {label} HTTP {resp.status_code}, retry {attempt + 1}")
                await asyncio.sleep(RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)])
                continue
            if resp.status_code != 200:
                raise HeliusApiError(f"HTTP {resp.status_code}")
            try:
                return resp.json()
            except ValueError as e:
                raise HeliusApiError(f"Invalid JSON from Helius: {e}") from e

        raise HeliusApiError("Request failed after retries")

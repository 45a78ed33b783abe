"""Public Solana JSON-RPC fallback for wallet history.

Used when every Helius key fails. Walks the configured endpoints in order:
getSignaturesForAddress, then getTransaction (jsonParsed) in small parallel
batches. The first endpoint that answers wins.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger

from jitterhands.models.transfer import Transaction
from jitterhands.parsers.normalizer import normalize_rpc_transaction
from jitterhands.parsers.rate_limiter import RateLimiter

DEFAULT_RPC_URLS = [
    "https://api.mainnet-beta.solana.com",
    "https://solana-api.projectserum.com",
    "https://rpc.ankr.com/solana",
]
BATCH_SIZE = 8
BATCH_DELAY_MIN = 0.1
BATCH_DELAY_MAX = 0.3


class SolanaRpcError(Exception):
    pass


class SolanaRpcClient:
    """Async JSON-RPC client rotating over public Solana endpoints."""

    def __init__(self, rpc_urls: list[str] | None = None, max_rps: float = 5.0) -> None:
        self._rpc_urls = rpc_urls or DEFAULT_RPC_URLS
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            timeout=30.0, headers={"Content-Type": "application/json"}
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, url: str, method: str, params: list[Any]) -> Any:
        await self._rate_limiter.acquire()
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        resp = await self._client.post(url, json=payload)
        if resp.status_code != 200:
            raise SolanaRpcError(f"{method}: HTTP {resp.status_code}")
        data = resp.json()
        if "error" in data:
            raise SolanaRpcError(f"{method}: {data['error']}")
        return data.get("result")

    async def get_wallet_transactions(self, address: str, *, limit: int = 100) -> list[Transaction]:
        """Fetch and normalize the latest wallet transactions that moved tokens."""
        last_error: Exception | None = None
        for url in self._rpc_urls:
            try:
                return await self._fetch_from(url, address, limit)
            except (SolanaRpcError, httpx.HTTPError, ValueError) as e:
                logger.warning(f"[RPC] {url} failed: {e}")
                last_error = e
        raise SolanaRpcError(f"All RPC endpoints failed: {last_error}") from last_error

    async def _fetch_from(self, url: str, address: str, limit: int) -> list[Transaction]:
        signatures = await self._call(
            url, "getSignaturesForAddress", [address, {"limit": min(limit, 1000)}]
        ) or []
        if not signatures:
            return []
        logger.info(f"[RPC] {len(signatures)} signatures for {address[:8]}, fetching details")

        transactions: list[Transaction] = []
        for i in range(0, len(signatures), BATCH_SIZE):
            batch = signatures[i:i + BATCH_SIZE]
            results = await asyncio.gather(
                *(self._get_transaction(url, sig.get("signature", "")) for sig in batch)
            )
            for raw in results:
                if raw:
                    parsed = normalize_rpc_transaction(raw, address)
                    if parsed is not None:
                        transactions.append(parsed)
            if i + BATCH_SIZE < len(signatures):
                delay = min(BATCH_DELAY_MAX, BATCH_DELAY_MIN + (i // BATCH_SIZE) * 0.02)
                await asyncio.sleep(delay)

        logger.info(f"[RPC] Parsed {len(transactions)} token transactions from {url}")
        return transactions

    async def _get_transaction(self, url: str, signature: str) -> dict | None:
        try:
            return await self._call(
                url,
                "getTransaction",
                [signature, {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0}],
            )
        except (SolanaRpcError, httpx.HTTPError, ValueError) as e:
            logger.debug(f"[RPC] getTransaction {signature[:8]} failed: {e}")
            return None

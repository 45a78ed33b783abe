"""Wallet analysis pipeline.

fetch (Helius -> RPC fallback) -> normalize -> aggregate -> price enrichment
-> per-token metrics -> summary + insights.

Only the fetch and price steps do I/O. The aggregate/metrics/summary core is
pure and runs on fully resolved in-memory data.
"""

import asyncio
import re
from dataclasses import replace
from datetime import UTC, datetime

from loguru import logger

from config.settings import Settings
from jitterhands.analytics.aggregator import aggregate
from jitterhands.analytics.insights import build_insights, compute_advanced_analytics
from jitterhands.analytics.metrics import compute_metrics
from jitterhands.analytics.summary import summarize
from jitterhands.models.token import TokenAggregate, TokenMetrics
from jitterhands.models.transfer import Transaction
from jitterhands.models.wallet import WalletReport
from jitterhands.parsers.birdeye.client import BirdeyeClient
from jitterhands.parsers.dexscreener.client import DexScreenerClient
from jitterhands.parsers.helius.client import HeliusApiError, HeliusClient
from jitterhands.parsers.normalizer import normalize_helius_transactions
from jitterhands.parsers.price_sources import (
    BirdeyePriceSource,
    ChainedPriceSource,
    DexScreenerPriceSource,
    PriceSnapshot,
    PriceSource,
)
from jitterhands.parsers.solana_rpc import SolanaRpcClient

# base58, 32-44 chars
_WALLET_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


class InvalidWalletError(ValueError):
    pass


def validate_wallet(address: str) -> str:
    address = (address or "").strip()
    if not _WALLET_RE.match(address):
        raise InvalidWalletError(f"Not a valid Solana address: {address!r}")
    return address


def _with_identity(token: TokenAggregate, snapshot: PriceSnapshot) -> TokenAggregate:
    """Fill Unknown symbol/name from provider metadata without touching quantities."""
    updates = {}
    if token.symbol == "Unknown" and snapshot.symbol:
        updates["symbol"] = snapshot.symbol
    if token.name == "Unknown Token" and snapshot.name:
        updates["name"] = snapshot.name
    return replace(token, **updates) if updates else token


async def analyze_transactions(
    wallet: str,
    transactions: list[Transaction],
    price_source: PriceSource,
    *,
    now: datetime | None = None,
    max_concurrency: int = 5,
    source: str = "",
) -> WalletReport:
    """Run the analytics core over already-fetched transactions."""
    now = now or datetime.now(UTC)
    tokens = aggregate(transactions, now=now)

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _snapshot(mint: str) -> PriceSnapshot:
        async with semaphore:
            return await price_source.get_snapshot(mint)

    mints = list(tokens)
    snapshots = await asyncio.gather(*(_snapshot(m) for m in mints))

    metrics: list[TokenMetrics] = []
    for mint, snap in zip(mints, snapshots):
        token = _with_identity(tokens[mint], snap)
        metrics.append(compute_metrics(token, snap.current_price, snap.ath_price, now=now))

    summary = summarize(metrics)
    logger.info(
        f"[ANALYZE] {wallet[:8]}: {len(transactions)} txs, {len(metrics)} tokens, "
        f"jitter={summary.jitter_score}, missed=${summary.total_missed_gains_current:,.0f}"
    )

    return WalletReport(
        wallet=wallet,
        transaction_count=len(transactions),
        tokens=metrics,
        summary=summary,
        insights=build_insights(metrics),
        analytics=compute_advanced_analytics(metrics),
        source=source,
        generated_at=now,
    )


class WalletAnalyzer:
    """Owns the provider clients for repeated wallet analyses."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._helius = HeliusClient(settings.helius_api_keys, max_rps=settings.helius_max_rps)
        self._rpc = SolanaRpcClient(settings.rpc_urls, max_rps=settings.solana_rpc_max_rps)

        self._birdeye: BirdeyeClient | None = None
        self._dexscreener: DexScreenerClient | None = None
        sources: list[PriceSource] = []
        if settings.enable_birdeye and settings.birdeye_api_key:
            self._birdeye = BirdeyeClient(settings.birdeye_api_key, max_rps=settings.birdeye_max_rps)
            sources.append(BirdeyePriceSource(self._birdeye))
        if settings.enable_dexscreener:
            self._dexscreener = DexScreenerClient(max_rps=settings.dexscreener_max_rps)
            sources.append(DexScreenerPriceSource(self._dexscreener))
        self.price_source = ChainedPriceSource(sources)

    async def __aenter__(self) -> "WalletAnalyzer":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self._helius.close()
        await self._rpc.close()
        if self._birdeye:
            await self._birdeye.close()
        if self._dexscreener:
            await self._dexscreener.close()

    async def fetch_transactions(self, wallet: str) -> tuple[list[Transaction], str]:
        """Wallet history from Helius, falling back to public RPC."""
        limit = self._settings.transaction_limit
        if self._helius.has_keys:
            try:
                raw = await self._helius.get_address_transactions(wallet, limit=limit)
                sol_price = self._settings.sol_price_usd or None
                return normalize_helius_transactions(raw, wallet, sol_price=sol_price), "HELIUS"
            except HeliusApiError as e:
                logger.warning(f"[ANALYZE] Helius unavailable, using RPC fallback: {e}")
        return await self._rpc.get_wallet_transactions(wallet, limit=limit), "RPC"

    async def analyze(self, wallet: str) -> WalletReport:
        wallet = validate_wallet(wallet)
        transactions, source = await self.fetch_transactions(wallet)
        return await analyze_transactions(
            wallet,
            transactions,
            self.price_source,
            max_concurrency=self._settings.price_concurrency,
            source=source,
        )

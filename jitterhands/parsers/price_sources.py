"""Price enrichment — current price, ATH and identity per mint.

The analyzer only depends on the PriceSource protocol. ChainedPriceSource
combines providers with a fixed precedence: for every field the first
provider that reports a usable (nonzero / non-empty) value wins.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Protocol

import httpx
from loguru import logger

from jitterhands.parsers.birdeye.client import BirdeyeApiError, BirdeyeClient
from jitterhands.parsers.dexscreener.client import DexScreenerClient


@dataclass
class PriceSnapshot:
    current_price: float = 0.0
    ath_price: float = 0.0
    symbol: str | None = None
    name: str | None = None
    source: str = ""


class PriceSource(Protocol):
    async def get_snapshot(self, mint: str) -> PriceSnapshot: ...


def _to_float(value: Decimal | str | None) -> float:
    if value in (None, ""):
        return 0.0
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return 0.0
    if not number.is_finite() or number < 0:
        return 0.0
    return float(number)


class BirdeyePriceSource:
    """Current price from the token overview, ATH from daily candles."""

    def __init__(self, client: BirdeyeClient) -> None:
        self._client = client

    async def get_snapshot(self, mint: str) -> PriceSnapshot:
        overview = await self._client.get_token_overview(mint)
        price = _to_float(overview.price)
        if price <= 0:
            price = _to_float((await self._client.get_price(mint)).value)

        try:
            candles = await self._client.get_ohlcv(mint, interval="1D")
        except BirdeyeApiError as e:
            logger.debug(f"[PRICE] Birdeye OHLCV failed for {mint[:8]}: {e}")
            candles = []
        ath = max((_to_float(c.h) for c in candles), default=0.0)

        return PriceSnapshot(
            current_price=price,
            ath_price=max(ath, price) if ath > 0 else 0.0,
            symbol=overview.symbol,
            name=overview.name,
            source="birdeye",
        )


class DexScreenerPriceSource:
    """Price of the most liquid Solana pair."""

    def __init__(self, client: DexScreenerClient) -> None:
        self._client = client

    async def get_snapshot(self, mint: str) -> PriceSnapshot:
        pair = await self._client.get_most_liquid_pair(mint)
        if pair is None:
            return PriceSnapshot(source="dexscreener")
        base = pair.baseToken
        return PriceSnapshot(
            current_price=_to_float(pair.priceUsd),
            ath_price=_to_float(pair.athPrice),
            symbol=base.symbol if base else None,
            name=base.name if base else None,
            source="dexscreener",
        )


class ChainedPriceSource:
    """Query providers in order; first nonzero value per field wins."""

    def __init__(self, sources: list[PriceSource]) -> None:
        self._sources = sources

    async def get_snapshot(self, mint: str) -> PriceSnapshot:
        result = PriceSnapshot()
        used: list[str] = []

        for source in self._sources:
            if result.current_price > 0 and result.ath_price > 0 and result.symbol and result.name:
                break
            try:
                snap = await source.get_snapshot(mint)
            except (BirdeyeApiError, httpx.HTTPError, ValueError) as e:
                logger.warning(f"[PRICE] {type(source).__name__} failed for {mint[:8]}: {e}")
                continue

            if result.current_price <= 0 and snap.current_price > 0:
                result.current_price = snap.current_price
                used.append(snap.source)
            if result.ath_price <= 0 and snap.ath_price > 0:
                result.ath_price = snap.ath_price
            if not result.symbol and snap.symbol:
                result.symbol = snap.symbol
            if not result.name and snap.name:
                result.name = snap.name

        result.source = ",".join(used)
        return result

"""Tests for price enrichment sources."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from jitterhands.parsers.birdeye.client import BirdeyeApiError
from jitterhands.parsers.birdeye.models import BirdeyeOHLCVItem, BirdeyePrice, BirdeyeTokenOverview
from jitterhands.parsers.dexscreener.models import DexScreenerPair, DexScreenerToken
from jitterhands.parsers.price_sources import (
    BirdeyePriceSource,
    ChainedPriceSource,
    DexScreenerPriceSource,
    PriceSnapshot,
    _to_float,
)

MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


def _candle(high: str) -> BirdeyeOHLCVItem:
    h = Decimal(high)
    return BirdeyeOHLCVItem(o=h, h=h, l=h, c=h, v=Decimal("1000"), unixTime=1700000000)


def _source(snapshot: PriceSnapshot | None = None, error: Exception | None = None) -> MagicMock:
    source = MagicMock()
    source.get_snapshot = AsyncMock(return_value=snapshot, side_effect=error)
    return source


class TestToFloat:
    def test_values(self) -> None:
        assert _to_float(Decimal("1.5")) == 1.5
        assert _to_float("0.25") == 0.25
        assert _to_float(None) == 0.0
        assert _to_float("") == 0.0
        assert _to_float("junk") == 0.0
        assert _to_float(Decimal("-3")) == 0.0
        assert _to_float("Infinity") == 0.0


class TestChainedPriceSource:
    @pytest.mark.asyncio
    async def test_first_nonzero_value_wins(self) -> None:
        first = _source(PriceSnapshot(current_price=0.0, ath_price=9.0, symbol="BONK", source="a"))
        second = _source(PriceSnapshot(current_price=2.0, ath_price=50.0, name="Bonk", source="b"))
        chain = ChainedPriceSource([first, second])

        snap = await chain.get_snapshot(MINT)

        assert snap.current_price == 2.0
        assert snap.ath_price == 9.0
        assert snap.symbol == "BONK"
        assert snap.name == "Bonk"
        assert snap.source == "b"

    @pytest.mark.asyncio
    async def test_failing_source_skipped(self) -> None:
        broken = _source(error=BirdeyeApiError("HTTP 500"))
        network = _source(error=httpx.ConnectError("down"))
        good = _source(PriceSnapshot(current_price=1.0, source="c"))
        chain = ChainedPriceSource([broken, network, good])

        snap = await chain.get_snapshot(MINT)

        assert snap.current_price == 1.0
        good.get_snapshot.assert_awaited_once_with(MINT)

    @pytest.mark.asyncio
    async def test_stops_once_complete(self) -> None:
        full = _source(PriceSnapshot(current_price=1.0, ath_price=2.0, symbol="S", name="N", source="a"))
        unused = _source(PriceSnapshot(current_price=5.0, source="b"))
        chain = ChainedPriceSource([full, unused])

        await chain.get_snapshot(MINT)

        unused.get_snapshot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_sources_empty(self) -> None:
        chain = ChainedPriceSource([_source(PriceSnapshot()), _source(error=ValueError("bad json"))])
        snap = await chain.get_snapshot(MINT)
        assert snap == PriceSnapshot()


class TestBirdeyePriceSource:
    @pytest.mark.asyncio
    async def test_ath_from_daily_highs(self) -> None:
        client = MagicMock()
        client.get_token_overview = AsyncMock(return_value=BirdeyeTokenOverview(
            address=MINT, symbol="BONK", name="Bonk", price=Decimal("0.00002"),
        ))
        client.get_ohlcv = AsyncMock(return_value=[
            _candle("0.00001"),
            _candle("0.00005"),
        ])
        client.get_price = AsyncMock()

        snap = await BirdeyePriceSource(client).get_snapshot(MINT)

        assert snap.current_price == pytest.approx(0.00002)
        assert snap.ath_price == pytest.approx(0.00005)
        assert snap.symbol == "BONK"
        client.get_price.assert_not_awaited()
        client.get_ohlcv.assert_awaited_once_with(MINT, interval="1D")

    @pytest.mark.asyncio
    async def test_price_fallback_and_ath_not_below_current(self) -> None:
        client = MagicMock()
        client.get_token_overview = AsyncMock(return_value=BirdeyeTokenOverview(address=MINT))
        client.get_price = AsyncMock(return_value=BirdeyePrice(value=Decimal("3")))
        client.get_ohlcv = AsyncMock(return_value=[_candle("2")])

        snap = await BirdeyePriceSource(client).get_snapshot(MINT)

        assert snap.current_price == 3.0
        assert snap.ath_price == 3.0

    @pytest.mark.asyncio
    async def test_no_candles_no_ath(self) -> None:
        client = MagicMock()
        client.get_token_overview = AsyncMock(return_value=BirdeyeTokenOverview(
            address=MINT, price=Decimal("1"),
        ))
        client.get_ohlcv = AsyncMock(return_value=[])

        snap = await BirdeyePriceSource(client).get_snapshot(MINT)

        assert snap.ath_price == 0.0

    @pytest.mark.asyncio
    async def test_ohlcv_failure_keeps_overview(self) -> None:
        client = MagicMock()
        client.get_token_overview = AsyncMock(return_value=BirdeyeTokenOverview(
            address=MINT, symbol="BONK", name="Bonk", price=Decimal("2.5"),
        ))
        client.get_ohlcv = AsyncMock(side_effect=BirdeyeApiError("HTTP 400"))

        snap = await BirdeyePriceSource(client).get_snapshot(MINT)

        assert snap.current_price == 2.5
        assert snap.ath_price == 0.0
        assert snap.symbol == "BONK"
        assert snap.name == "Bonk"


class TestDexScreenerPriceSource:
    @pytest.mark.asyncio
    async def test_most_liquid_pair(self) -> None:
        client = MagicMock()
        client.get_most_liquid_pair = AsyncMock(return_value=DexScreenerPair(
            chainId="solana",
            pairAddress="pair1",
            baseToken=DexScreenerToken(address=MINT, name="Bonk", symbol="BONK"),
            priceUsd="0.00002",
        ))

        snap = await DexScreenerPriceSource(client).get_snapshot(MINT)

        assert snap.current_price == pytest.approx(0.00002)
        assert snap.symbol == "BONK"
        assert snap.source == "dexscreener"

    @pytest.mark.asyncio
    async def test_no_pair(self) -> None:
        client = MagicMock()
        client.get_most_liquid_pair = AsyncMock(return_value=None)

        snap = await DexScreenerPriceSource(client).get_snapshot(MINT)

        assert snap.current_price == 0.0
        assert snap.symbol is None

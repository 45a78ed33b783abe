"""Birdeye response models, reduced to what price enrichment reads."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ValidationError


class BirdeyeTokenOverview(BaseModel):
    """/defi/token_overview: spot price plus symbol and name."""

    address: str = ""
    name: str | None = None
    symbol: str | None = None
    decimals: int | None = None
    price: Decimal | None = None
    marketCap: Decimal | None = None
    liquidity: Decimal | None = None
    priceChange24hPercent: Decimal | None = None

    model_config = {"extra": "ignore"}


class BirdeyePrice(BaseModel):
    """/defi/price: fallback spot price when the overview has none."""

    value: Decimal | None = None
    updateUnixTime: int | None = None
    liquidity: Decimal | None = None

    model_config = {"extra": "ignore"}


class BirdeyeOHLCVItem(BaseModel):
    """One /defi/ohlcv candle. The daily high is what ATH is derived from."""

    o: Decimal
    h: Decimal
    l: Decimal  # noqa: E741
    c: Decimal
    v: Decimal
    unixTime: int
    type: str | None = None

    model_config = {"extra": "ignore"}

    @classmethod
    def from_api(cls, item: Any) -> "BirdeyeOHLCVItem | None":
        if not isinstance(item, dict):
            return None
        try:
            return cls.model_validate(item)
        except ValidationError:
            return None

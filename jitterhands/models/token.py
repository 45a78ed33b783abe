"""Per-token trade history and the metrics derived from it."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class TokenStatus(str, Enum):
    NEVER_SOLD = "never_sold"
    SOLD = "sold"
    PARTIAL = "partial"
    HELD = "held"


@dataclass
class TradeLeg:
    """Single buy or sell leg of a token's history."""

    date: datetime
    side: str  # "buy" or "sell"
    amount: float
    price_usd: float


@dataclass
class TokenAggregate:
    """Running position state for one mint.

    Built by ``aggregate()``; quantities are accumulated in event order and
    the record is finalized once every transfer has been folded in.
    """

    mint: str
    symbol: str = "Unknown"
    name: str = "Unknown Token"

    total_bought: float = 0.0
    total_sold: float = 0.0
    current_held: float = 0.0
    total_volume_traded: float = 0.0
    total_transactions: int = 0

    buy_count: int = 0
    sell_count: int = 0
    # Observations with a usable (nonzero) price; drive the running averages
    priced_buy_count: int = 0
    priced_sell_count: int = 0

    avg_buy_price: float = 0.0
    avg_sell_price: float = 0.0
    best_buy_price: float | None = None  # lowest observed buy price
    worst_sell_price: float | None = None  # lowest observed sell price

    buy_dates: list[datetime] = field(default_factory=list)
    sell_dates: list[datetime] = field(default_factory=list)
    first_buy_date: datetime | None = None
    last_buy_date: datetime | None = None
    first_sell_date: datetime | None = None
    last_sell_date: datetime | None = None
    legs: list[TradeLeg] = field(default_factory=list)

    status: TokenStatus = TokenStatus.NEVER_SOLD


@dataclass
class TokenMetrics:
    """Profitability and counterfactual metrics for one token."""

    aggregate: TokenAggregate
    current_price: float = 0.0
    ath_price: float = 0.0

    total_cost: float = 0.0
    actual_proceeds: float = 0.0
    current_value: float = 0.0
    sold_cost: float = 0.0
    roi: float = 0.0  # percent

    what_if_current_value: float = 0.0
    missed_gains_current: float = 0.0
    roi_if_held_current: float = 0.0

    what_if_ath_value: float = 0.0
    missed_gains_ath: float = 0.0
    roi_if_held_ath: float = 0.0

    time_held_days: int = 0
    price_change: float = 0.0  # percent vs avg buy price
    status: TokenStatus = TokenStatus.NEVER_SOLD

    @property
    def mint(self) -> str:
        return self.aggregate.mint

    @property
    def symbol(self) -> str:
        return self.aggregate.symbol

    @property
    def name(self) -> str:
        return self.aggregate.name

    def to_dict(self) -> dict:
        agg = self.aggregate
        return {
            "mint": agg.mint,
            "symbol": agg.symbol,
            "name": agg.name,
            "status": self.status.value,
            "total_bought": agg.total_bought,
            "total_sold": agg.total_sold,
            "current_held": agg.current_held,
            "buy_count": agg.buy_count,
            "sell_count": agg.sell_count,
            "avg_buy_price": agg.avg_buy_price,
            "avg_sell_price": agg.avg_sell_price,
            "best_buy_price": agg.best_buy_price,
            "worst_sell_price": agg.worst_sell_price,
            "first_buy_date": agg.first_buy_date.isoformat() if agg.first_buy_date else None,
            "last_sell_date": agg.last_sell_date.isoformat() if agg.last_sell_date else None,
            "current_price": self.current_price,
            "ath_price": self.ath_price,
            "total_cost": self.total_cost,
            "actual_proceeds": self.actual_proceeds,
            "current_value": self.current_value,
            "roi": self.roi,
            "what_if_current_value": self.what_if_current_value,
            "missed_gains_current": self.missed_gains_current,
            "roi_if_held_current": self.roi_if_held_current,
            "what_if_ath_value": self.what_if_ath_value,
            "missed_gains_ath": self.missed_gains_ath,
            "roi_if_held_ath": self.roi_if_held_ath,
            "time_held_days": self.time_held_days,
            "price_change": self.price_change,
        }

"""Wallet-level aggregates and the report returned to callers."""

from dataclasses import dataclass, field
from datetime import datetime

from jitterhands.models.token import TokenMetrics


@dataclass
class WalletSummary:
    """Totals, averages and the jitter score across all tokens of a wallet."""

    token_count: int = 0
    sold_count: int = 0
    partial_count: int = 0
    never_sold_count: int = 0

    total_cost: float = 0.0
    total_proceeds: float = 0.0
    total_current_value: float = 0.0
    total_what_if_current: float = 0.0
    total_what_if_ath: float = 0.0
    total_missed_gains_current: float = 0.0
    total_missed_gains_ath: float = 0.0

    avg_roi: float = 0.0
    avg_roi_if_held: float = 0.0
    avg_hold_days: float = 0.0

    best_performer: TokenMetrics | None = None
    worst_performer: TokenMetrics | None = None
    biggest_miss: TokenMetrics | None = None

    jitter_score: int = 0  # 0-100, higher = more paperhanded

    def to_dict(self) -> dict:
        return {
            "token_count": self.token_count,
            "sold_count": self.sold_count,
            "partial_count": self.partial_count,
            "never_sold_count": self.never_sold_count,
            "total_cost": self.total_cost,
            "total_proceeds": self.total_proceeds,
            "total_current_value": self.total_current_value,
            "total_what_if_current": self.total_what_if_current,
            "total_what_if_ath": self.total_what_if_ath,
            "total_missed_gains_current": self.total_missed_gains_current,
            "total_missed_gains_ath": self.total_missed_gains_ath,
            "avg_roi": self.avg_roi,
            "avg_roi_if_held": self.avg_roi_if_held,
            "avg_hold_days": self.avg_hold_days,
            "best_performer": self.best_performer.mint if self.best_performer else None,
            "worst_performer": self.worst_performer.mint if self.worst_performer else None,
            "biggest_miss": self.biggest_miss.mint if self.biggest_miss else None,
            "jitter_score": self.jitter_score,
        }


@dataclass
class TradingInsight:
    """Human-readable observation about a wallet's trading behaviour."""

    kind: str  # "missed_opportunity", "best_performer", "pattern", "exit_timing", "comparison"
    title: str
    description: str
    value: str


@dataclass
class HoldTimeBucket:
    name: str
    min_days: float
    max_days: float
    count: int = 0


@dataclass
class RoiBucket:
    name: str
    min_roi: float  # percent, inclusive
    max_roi: float  # percent, exclusive
    count: int = 0


@dataclass
class AdvancedAnalytics:
    win_rate: float = 0.0  # percent of tokens with positive realized ROI
    avg_hold_days: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0  # percent
    hold_time_distribution: list[HoldTimeBucket] = field(default_factory=list)
    roi_distribution: list[RoiBucket] = field(default_factory=list)


@dataclass
class WalletReport:
    """Everything computed for one analysis run."""

    wallet: str
    transaction_count: int
    tokens: list[TokenMetrics]
    summary: WalletSummary
    insights: list[TradingInsight] = field(default_factory=list)
    analytics: AdvancedAnalytics | None = None
    source: str = ""
    generated_at: datetime | None = None

    def to_dict(self) -> dict:
        analytics = self.analytics
        return {
            "wallet": self.wallet,
            "transaction_count": self.transaction_count,
            "source": self.source,
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
            "summary": self.summary.to_dict(),
            "tokens": [t.to_dict() for t in self.tokens],
            "insights": [
                {"kind": i.kind, "title": i.title, "description": i.description, "value": i.value}
                for i in self.insights
            ],
            "analytics": None if analytics is None else {
                "win_rate": analytics.win_rate,
                "avg_hold_days": analytics.avg_hold_days,
                "sharpe_ratio": analytics.sharpe_ratio,
                "max_drawdown": analytics.max_drawdown,
                "hold_time_distribution": {
                    b.name: b.count for b in analytics.hold_time_distribution
                },
                "roi_distribution": {b.name: b.count for b in analytics.roi_distribution},
            },
        }

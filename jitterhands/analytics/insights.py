"""Trading insights and advanced analytics over computed token metrics."""

import math
from collections.abc import Sequence

from jitterhands.analytics.numeric import finite
from jitterhands.models.token import TokenMetrics
from jitterhands.models.wallet import AdvancedAnalytics, HoldTimeBucket, RoiBucket, TradingInsight

EARLY_SELL_DAYS = 7
BEST_PERFORMER_MIN_ROI = 100.0
DOMINANT_MISS_FACTOR = 1.5

HOLD_TIME_RANGES: list[tuple[str, float, float]] = [
    ("< 1 day", 0, 1),
    ("1-7 days", 1, 7),
    ("7-30 days", 7, 30),
    ("30-90 days", 30, 90),
    ("> 90 days", 90, math.inf),
]

ROI_RANGES: list[tuple[str, float, float]] = [
    ("<-50%", -math.inf, -50),
    ("-50% to 0%", -50, 0),
    ("0% to 50%", 0, 50),
    ("50% to 100%", 50, 100),
    ("100% to 500%", 100, 500),
    (">500%", 500, math.inf),
]


def _usd(value: float) -> str:
    return f"${round(value):,}"


def build_insights(tokens: Sequence[TokenMetrics]) -> list[TradingInsight]:
    """Return the insights that apply to this wallet, most important first."""
    if not tokens:
        return []

    insights: list[TradingInsight] = []

    biggest = tokens[0]
    for t in tokens[1:]:
        if t.missed_gains_current > biggest.missed_gains_current:
            biggest = t
    if biggest.missed_gains_current > 0:
        insights.append(TradingInsight(
            kind="missed_opportunity",
            title="Biggest Missed Opportunity",
            description=(
                f"If you held {biggest.symbol} instead of selling, you would have made "
                f"{_usd(biggest.missed_gains_current)} more."
            ),
            value=_usd(biggest.missed_gains_current),
        ))

    best = tokens[0]
    for t in tokens[1:]:
        if t.roi_if_held_current > best.roi_if_held_current:
            best = t
    if best.roi_if_held_current > BEST_PERFORMER_MIN_ROI:
        insights.append(TradingInsight(
            kind="best_performer",
            title="Best Performer (If Held)",
            description=(
                f"{best.symbol} would have returned {best.roi_if_held_current:.0f}% "
                f"if held to current price."
            ),
            value=f"{best.roi_if_held_current:.0f}%",
        ))

    early_sells = [
        t for t in tokens
        if t.roi > 0
        and t.roi_if_held_current > t.roi * 2
        and t.time_held_days < EARLY_SELL_DAYS
    ]
    if early_sells:
        avg_missed = sum(t.missed_gains_current for t in early_sells) / len(early_sells)
        insights.append(TradingInsight(
            kind="pattern",
            title="Pattern Detected: Selling Winners Too Early",
            description=(
                f"You sold {len(early_sells)} profitable tokens within {EARLY_SELL_DAYS} days, "
                f"missing an average of {_usd(avg_missed)} per token."
            ),
            value=f"{len(early_sells)} tokens",
        ))

    with_ath = [t for t in tokens if t.ath_price > 0 and t.aggregate.avg_buy_price > 0]
    if with_ath:
        avg_ath_roi = sum(
            (t.ath_price - t.aggregate.avg_buy_price) / t.aggregate.avg_buy_price * 100
            for t in with_ath
        ) / len(with_ath)
        avg_actual_roi = sum(t.roi for t in with_ath) / len(with_ath)
        if avg_ath_roi > avg_actual_roi * 2:
            insights.append(TradingInsight(
                kind="exit_timing",
                title="Exit Timing Analysis",
                description=(
                    f"Your tokens reached an average ATH ROI of {avg_ath_roi:.0f}%, "
                    f"but you realized only {avg_actual_roi:.0f}% on average."
                ),
                value=f"{avg_ath_roi:.0f}% vs {avg_actual_roi:.0f}%",
            ))

    ranked = sorted(tokens, key=lambda t: t.missed_gains_current, reverse=True)
    if len(ranked) >= 2:
        top, second = ranked[0], ranked[1]
        if second.missed_gains_current > 0 and (
            top.missed_gains_current > second.missed_gains_current * DOMINANT_MISS_FACTOR
        ):
            diff = top.missed_gains_current - second.missed_gains_current
            insights.append(TradingInsight(
                kind="comparison",
                title="Token Comparison",
                description=(
                    f"If you had held {top.symbol} instead of {second.symbol}, "
                    f"you would have made {_usd(diff)} more."
                ),
                value=_usd(diff),
            ))

    return insights


def compute_advanced_analytics(tokens: Sequence[TokenMetrics]) -> AdvancedAnalytics:
    """Win rate, hold time stats, Sharpe-style ratio and drawdown of what-if values.

    The ROI distribution bins each token by ROI if held, or realized ROI when
    the held figure is 0.
    """
    buckets = [HoldTimeBucket(name, lo, hi) for name, lo, hi in HOLD_TIME_RANGES]
    roi_buckets = [RoiBucket(name, lo, hi) for name, lo, hi in ROI_RANGES]
    if not tokens:
        return AdvancedAnalytics(hold_time_distribution=buckets, roi_distribution=roi_buckets)

    n = len(tokens)
    win_rate = sum(1 for t in tokens if t.roi > 0) / n * 100
    avg_hold = sum(t.time_held_days for t in tokens) / n

    rois = [t.roi_if_held_current for t in tokens if math.isfinite(t.roi_if_held_current)]
    sharpe = 0.0
    if rois:
        mean = sum(rois) / len(rois)
        variance = sum((r - mean) ** 2 for r in rois) / len(rois)
        std_dev = math.sqrt(variance)
        if std_dev > 0:
            sharpe = finite(mean / std_dev)

    max_drawdown = 0.0
    peak = 0.0
    for t in tokens:
        value = max(0.0, t.what_if_current_value)
        peak = max(peak, value)
        if peak > 0:
            max_drawdown = max(max_drawdown, (peak - value) / peak * 100)

    for t in tokens:
        for bucket in buckets:
            if bucket.min_days <= t.time_held_days < bucket.max_days:
                bucket.count += 1
                break

        roi = t.roi_if_held_current or t.roi
        for roi_bucket in roi_buckets:
            if roi_bucket.min_roi <= roi < roi_bucket.max_roi:
                roi_bucket.count += 1
                break

    return AdvancedAnalytics(
        win_rate=finite(win_rate),
        avg_hold_days=finite(avg_hold),
        sharpe_ratio=sharpe,
        max_drawdown=finite(max_drawdown),
        hold_time_distribution=buckets,
        roi_distribution=roi_buckets,
    )

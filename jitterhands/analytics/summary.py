"""Wallet summary — totals, best/worst performers and the jitter score.

Jitter score (0-100, higher = more paperhanded):
    40% share of tokens fully sold
    40% missed gains relative to total cost (capped at 1)
    20% short average hold time (30+ days scores 0)
"""

from collections.abc import Sequence

from loguru import logger

from jitterhands.analytics.numeric import finite
from jitterhands.models.token import TokenMetrics, TokenStatus
from jitterhands.models.wallet import WalletSummary

HOLD_DAYS_CAP = 30.0
PAPERHAND_WEIGHT = 40.0
MISSED_GAINS_WEIGHT = 40.0
HOLD_TIME_WEIGHT = 20.0


def summarize(tokens: Sequence[TokenMetrics]) -> WalletSummary:
    """Reduce per-token metrics to a single WalletSummary. Empty input -> all zeros."""
    if not tokens:
        return WalletSummary()

    n = len(tokens)
    summary = WalletSummary(
        token_count=n,
        sold_count=sum(1 for t in tokens if t.status == TokenStatus.SOLD),
        partial_count=sum(1 for t in tokens if t.status == TokenStatus.PARTIAL),
        never_sold_count=sum(1 for t in tokens if t.status == TokenStatus.NEVER_SOLD),
        total_cost=finite(sum(t.total_cost for t in tokens)),
        total_proceeds=finite(sum(t.actual_proceeds for t in tokens)),
        total_current_value=finite(sum(t.current_value for t in tokens)),
        total_what_if_current=finite(sum(t.what_if_current_value for t in tokens)),
        total_what_if_ath=finite(sum(t.what_if_ath_value for t in tokens)),
        total_missed_gains_current=finite(sum(t.missed_gains_current for t in tokens)),
        total_missed_gains_ath=finite(sum(t.missed_gains_ath for t in tokens)),
        avg_roi=finite(sum(t.roi for t in tokens) / n),
        avg_roi_if_held=finite(sum(t.roi_if_held_current for t in tokens) / n),
        avg_hold_days=finite(sum(t.time_held_days for t in tokens) / n),
    )

    best = worst = biggest = tokens[0]
    for t in tokens[1:]:
        # strict comparisons: ties keep the first token seen
        if t.roi_if_held_current > best.roi_if_held_current:
            best = t
        if t.roi_if_held_current < worst.roi_if_held_current:
            worst = t
        if t.missed_gains_current > biggest.missed_gains_current:
            biggest = t
    summary.best_performer = best
    summary.worst_performer = worst
    summary.biggest_miss = biggest

    summary.jitter_score = jitter_score(summary)

    logger.debug(
        f"[SUMMARY] {n} tokens, sold={summary.sold_count}, "
        f"missed=${summary.total_missed_gains_current:.2f}, jitter={summary.jitter_score}"
    )
    return summary


def jitter_score(summary: WalletSummary) -> int:
    if summary.token_count == 0:
        return 0

    paperhand_ratio = summary.sold_count / summary.token_count
    hold_time_score = min(1.0, summary.avg_hold_days / HOLD_DAYS_CAP)
    missed_ratio = 0.0
    if summary.total_cost > 0:
        missed_ratio = min(1.0, summary.total_missed_gains_current / summary.total_cost)

    raw = (
        paperhand_ratio * PAPERHAND_WEIGHT
        + missed_ratio * MISSED_GAINS_WEIGHT
        + (1 - hold_time_score) * HOLD_TIME_WEIGHT
    )
    return round(min(100.0, max(0.0, finite(raw))))

"""Per-token profitability and "what if I had held" metrics.

Inputs are re-validated (finite, non-negative) and every derived value is
forced finite: a zero cost basis or zero price yields 0, never NaN/Infinity.
"""

from datetime import UTC, datetime

from loguru import logger

from jitterhands.analytics.aggregator import status_for
from jitterhands.analytics.numeric import finite, to_non_negative
from jitterhands.models.token import TokenAggregate, TokenMetrics

SECONDS_PER_DAY = 86400


def compute_metrics(
    token: TokenAggregate,
    current_price: float,
    ath_price: float,
    *,
    now: datetime | None = None,
) -> TokenMetrics:
    """Derive cost basis, proceeds, ROI and missed gains for one token.

    Args:
        token: Finalized aggregate from ``aggregate()``.
        current_price: Current USD price, 0 if unknown.
        ath_price: All-time-high USD price, 0 if unknown (falls back to
            current price, then average buy price).
        now: Reference time for holding duration of unsold tokens.
    """
    now = now or datetime.now(UTC)

    total_bought = to_non_negative(token.total_bought)
    total_sold = to_non_negative(token.total_sold)
    current_held = to_non_negative(token.current_held)
    avg_buy = to_non_negative(token.avg_buy_price)
    avg_sell = to_non_negative(token.avg_sell_price)
    current_price = to_non_negative(current_price)
    ath_price = to_non_negative(ath_price)

    total_cost = finite(total_bought * avg_buy)
    actual_proceeds = finite(total_sold * avg_sell)
    current_value = finite(current_held * current_price)

    sold_cost = 0.0
    roi = 0.0
    if total_cost > 0 and total_sold > 0:
        sold_cost = finite(total_sold / total_bought * total_cost) if total_bought > 0 else 0.0
        if sold_cost > 0:
            roi = finite((actual_proceeds - sold_cost) / sold_cost * 100)
    elif total_cost > 0:
        # Never sold: unrealized performance
        roi = finite((current_value - total_cost) / total_cost * 100)

    what_if_current, missed_current, roi_if_held_current = _counterfactual(
        reference_price=current_price or avg_buy,
        total_bought=total_bought,
        total_sold=total_sold,
        total_cost=total_cost,
        actual_proceeds=actual_proceeds,
    )
    what_if_ath, missed_ath, roi_if_held_ath = _counterfactual(
        reference_price=ath_price or current_price or avg_buy,
        total_bought=total_bought,
        total_sold=total_sold,
        total_cost=total_cost,
        actual_proceeds=actual_proceeds,
    )

    price_change = 0.0
    if current_price > 0 and avg_buy > 0:
        price_change = finite((current_price - avg_buy) / avg_buy * 100)

    metrics = TokenMetrics(
        aggregate=token,
        current_price=current_price,
        ath_price=ath_price or current_price or avg_buy,
        total_cost=total_cost,
        actual_proceeds=actual_proceeds,
        current_value=current_value,
        sold_cost=sold_cost,
        roi=roi,
        what_if_current_value=what_if_current,
        missed_gains_current=missed_current,
        roi_if_held_current=roi_if_held_current,
        what_if_ath_value=what_if_ath,
        missed_gains_ath=missed_ath,
        roi_if_held_ath=roi_if_held_ath,
        time_held_days=_time_held_days(token, now),
        price_change=price_change,
        status=status_for(total_sold, current_held),
    )

    logger.debug(
        f"[METRICS] {token.symbol} ({token.mint[:8]}): status={metrics.status.value}, "
        f"cost=${total_cost:.2f}, proceeds=${actual_proceeds:.2f}, roi={roi:.1f}%, "
        f"missed=${missed_current:.2f}"
    )
    return metrics


def _counterfactual(
    *,
    reference_price: float,
    total_bought: float,
    total_sold: float,
    total_cost: float,
    actual_proceeds: float,
) -> tuple[float, float, float]:
    """Value, missed gains and ROI had every bought token been held to ``reference_price``."""
    what_if = finite(total_bought * reference_price)
    # Nothing sold -> nothing missed yet
    missed = finite(max(0.0, what_if - actual_proceeds)) if total_sold > 0 else 0.0
    roi_if_held = finite((what_if - total_cost) / total_cost * 100) if total_cost > 0 else 0.0
    return what_if, missed, roi_if_held


def _time_held_days(token: TokenAggregate, now: datetime) -> int:
    if token.first_buy_date is None:
        return 0
    end = token.last_sell_date or now
    try:
        days = (end - token.first_buy_date).total_seconds() / SECONDS_PER_DAY
    except TypeError:
        # naive vs aware datetimes from a hand-built aggregate
        return 0
    return max(0, round(finite(days)))

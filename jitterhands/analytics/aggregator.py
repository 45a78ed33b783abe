"""Transfer aggregation — rebuild per-token trade history from raw transfers.

Folds every TransferEvent of a wallet's transactions into one TokenAggregate
per mint: totals bought/sold, running average prices, best/worst execution
prices, buy/sell dates and the individual trade legs.

Average prices are the plain mean of per-transfer prices: each priced transfer
weighs the same regardless of size.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from loguru import logger

from jitterhands.analytics.numeric import to_datetime, to_non_negative
from jitterhands.models.token import TokenAggregate, TokenStatus, TradeLeg
from jitterhands.models.transfer import Transaction, TransferEvent

UNKNOWN_NAMES = frozenset({"", "unknown", "unknown token"})

# Float residue left after selling a whole position, relative to the amount bought
DUST_RATIO = 1e-9


def aggregate(
    transactions: Iterable[Transaction],
    *,
    now: datetime | None = None,
) -> dict[str, TokenAggregate]:
    """Group transfers by mint and accumulate position state.

    Never raises on bad data: malformed amounts/prices count as zero and
    missing or malformed timestamps count as ``now``.
    """
    now = now or datetime.now(UTC)
    tokens: dict[str, TokenAggregate] = {}
    tx_count = 0

    for tx in transactions:
        tx_count += 1
        if not tx.transfers:
            continue
        date = to_datetime(tx.timestamp, now)
        for transfer in tx.transfers:
            _fold_transfer(tokens, transfer, date)

    for token in tokens.values():
        _finalize(token)

    logger.debug(f"[AGG] {tx_count} transactions -> {len(tokens)} tokens")
    return tokens


def _is_plausible(value: str | None) -> bool:
    return bool(value) and value.strip().lower() not in UNKNOWN_NAMES


def _fold_transfer(
    tokens: dict[str, TokenAggregate], transfer: TransferEvent, date: datetime
) -> None:
    mint = transfer.mint or "unknown"
    token = tokens.get(mint)
    if token is None:
        token = TokenAggregate(mint=mint)
        tokens[mint] = token

    # First plausible identity wins
    if not _is_plausible(token.symbol) and _is_plausible(transfer.symbol):
        token.symbol = transfer.symbol
    if not _is_plausible(token.name) and _is_plausible(transfer.name):
        token.name = transfer.name

    token.total_transactions += 1

    amount = to_non_negative(transfer.amount)
    if amount <= 0:
        return
    price = to_non_negative(transfer.price_usd)

    if transfer.from_wallet:
        _record_sell(token, amount, price, date)
    else:
        _record_buy(token, amount, price, date)


def _running_average(avg: float, n: int, price: float) -> float:
    if n == 0:
        return price
    return (avg * n + price) / (n + 1)


def _record_buy(token: TokenAggregate, amount: float, price: float, date: datetime) -> None:
    token.total_bought += amount
    token.buy_count += 1
    token.buy_dates.append(date)
    token.legs.append(TradeLeg(date=date, side="buy", amount=amount, price_usd=price))

    if token.first_buy_date is None or date < token.first_buy_date:
        token.first_buy_date = date
    if token.last_buy_date is None or date > token.last_buy_date:
        token.last_buy_date = date

    # Zero price = unknown: excluded from averages and best price
    if price > 0:
        token.avg_buy_price = _running_average(
            token.avg_buy_price, token.priced_buy_count, price
        )
        token.priced_buy_count += 1
        if token.best_buy_price is None or price < token.best_buy_price:
            token.best_buy_price = price


def _record_sell(token: TokenAggregate, amount: float, price: float, date: datetime) -> None:
    token.total_sold += amount
    token.sell_count += 1
    token.sell_dates.append(date)
    token.legs.append(TradeLeg(date=date, side="sell", amount=amount, price_usd=price))

    if token.first_sell_date is None or date < token.first_sell_date:
        token.first_sell_date = date
    if token.last_sell_date is None or date > token.last_sell_date:
        token.last_sell_date = date

    if price > 0:
        token.avg_sell_price = _running_average(
            token.avg_sell_price, token.priced_sell_count, price
        )
        token.priced_sell_count += 1
        if token.worst_sell_price is None or price < token.worst_sell_price:
            token.worst_sell_price = price


def _finalize(token: TokenAggregate) -> None:
    held = token.total_bought - token.total_sold
    token.current_held = 0.0 if held <= DUST_RATIO * max(1.0, token.total_bought) else held
    token.total_volume_traded = token.total_bought + token.total_sold

    if token.best_buy_price is None:
        token.best_buy_price = token.avg_buy_price
    if token.worst_sell_price is None:
        token.worst_sell_price = token.avg_sell_price

    # Stable sorts keep arrival order for legs sharing a timestamp
    token.buy_dates.sort()
    token.sell_dates.sort()
    token.legs.sort(key=lambda leg: leg.date)

    token.status = status_for(token.total_sold, token.current_held)


def status_for(total_sold: float, current_held: float) -> TokenStatus:
    if total_sold == 0:
        return TokenStatus.NEVER_SOLD
    if current_held == 0:
        return TokenStatus.SOLD
    if current_held > 0:
        return TokenStatus.PARTIAL
    return TokenStatus.HELD

"""Provider payload -> canonical Transaction/TransferEvent mapping.

Helius, Solscan-style proxies and raw Solana RPC all describe token
movements differently (``fromUserAccount`` vs ``from``, ``priceUsd`` vs
``usdValue``, balances instead of transfers). Everything provider-specific
is resolved here so the aggregator only ever sees TransferEvent.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from loguru import logger

from jitterhands.models.transfer import Transaction, TransferEvent
from jitterhands.parsers.helius.models import (
    HeliusNativeTransfer,
    HeliusTokenTransfer,
    HeliusTransaction,
)

LAMPORTS_PER_SOL = Decimal("1000000000")
MIN_BALANCE_CHANGE = Decimal("0.000000001")


def extract_transaction_list(payload: Any) -> list:
    """Unwrap ``[...]``, ``{"transactions": [...]}``, ``{"data": [...]}`` or ``{"result": [...]}``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("transactions", "data", "result"):
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


def _decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return number if number.is_finite() else Decimal("0")


def _first(data: dict, *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def _timestamp(data: dict) -> int | None:
    for key in ("timestamp", "blockTime"):
        value = data.get(key)
        if value in (None, ""):
            continue
        try:
            return int(float(value))
        except (TypeError, ValueError):
            logger.debug(f"[NORMALIZE] Bad {key} {value!r}")
    date = data.get("date")
    if isinstance(date, (int, float)) and not isinstance(date, bool):
        return int(date)
    if isinstance(date, str) and date:
        try:
            return int(datetime.fromisoformat(date.replace("Z", "+00:00")).timestamp())
        except ValueError:
            logger.debug(f"[NORMALIZE] Bad date {date!r}")
    return None


def parse_helius_transaction(data: dict) -> HeliusTransaction:
    """Parse a raw Helius enhanced transaction, tolerating alternate field names."""
    token_transfers = []
    for t in data.get("tokenTransfers") or []:
        if not isinstance(t, dict):
            continue
        price = _first(t, "priceUsd", "usdValue", "price")
        token_transfers.append(HeliusTokenTransfer(
            from_user_account=str(_first(t, "fromUserAccount", "from") or ""),
            to_user_account=str(_first(t, "toUserAccount", "to") or ""),
            from_token_account=str(t.get("fromTokenAccount") or ""),
            to_token_account=str(t.get("toTokenAccount") or ""),
            token_amount=_decimal(_first(t, "tokenAmount", "amount")),
            mint=str(_first(t, "mint", "tokenAddress", "tokenMint") or ""),
            token_symbol=_first(t, "tokenSymbol", "symbol"),
            token_name=_first(t, "tokenName", "name"),
            price_usd=_decimal(price) if price is not None else None,
        ))

    native_transfers = []
    for t in data.get("nativeTransfers") or []:
        if not isinstance(t, dict):
            continue
        native_transfers.append(HeliusNativeTransfer(
            from_user_account=str(t.get("fromUserAccount") or ""),
            to_user_account=str(t.get("toUserAccount") or ""),
            amount=int(_decimal(t.get("amount"))),
        ))

    return HeliusTransaction(
        signature=str(data.get("signature") or ""),
        type=str(data.get("type") or ""),
        source=str(data.get("source") or ""),
        fee=int(_decimal(data.get("fee"))),
        fee_payer=str(data.get("feePayer") or ""),
        timestamp=_timestamp(data),
        description=str(data.get("description") or ""),
        token_transfers=token_transfers,
        native_transfers=native_transfers,
        transaction_error=data.get("transactionError"),
    )


def _estimate_price_from_native(
    tx: HeliusTransaction, transfer: HeliusTokenTransfer, wallet: str, sol_price: float
) -> Decimal:
    """USD per token implied by the wallet's SOL leg in the same transaction."""
    if transfer.token_amount <= 0:
        return Decimal("0")
    for native in tx.native_transfers:
        if wallet in (native.from_user_account.lower(), native.to_user_account.lower()):
            if native.amount <= 0:
                continue
            sol_amount = Decimal(native.amount) / LAMPORTS_PER_SOL
            return sol_amount * Decimal(str(sol_price)) / transfer.token_amount
    return Decimal("0")


def normalize_helius_transactions(
    transactions: list[HeliusTransaction | dict],
    wallet: str,
    *,
    sol_price: float | None = None,
) -> list[Transaction]:
    """Map Helius transactions onto canonical Transactions for ``wallet``.

    Direction is decided by comparing the transfer's owner accounts with the
    wallet (case-insensitive). Failed transactions are skipped. When a
    transfer carries no USD price and ``sol_price`` is given, the price is
    estimated from the wallet's native SOL transfer.
    """
    wallet_key = wallet.lower()
    result: list[Transaction] = []

    for item in transactions:
        tx = item if isinstance(item, HeliusTransaction) else parse_helius_transaction(item)
        if tx.transaction_error:
            continue

        events: list[TransferEvent] = []
        for t in tx.token_transfers:
            if not t.mint:
                continue
            price = t.price_usd or Decimal("0")
            if price <= 0 and sol_price:
                price = _estimate_price_from_native(tx, t, wallet_key, sol_price)
            events.append(TransferEvent(
                mint=t.mint,
                amount=t.token_amount,
                price_usd=price,
                symbol=t.token_symbol,
                name=t.token_name,
                from_wallet=bool(wallet_key) and t.from_user_account.lower() == wallet_key,
                to_wallet=bool(wallet_key) and t.to_user_account.lower() == wallet_key,
            ))

        result.append(Transaction(
            signature=tx.signature,
            timestamp=tx.timestamp,
            transfers=events,
            source="HELIUS",
        ))

    return result


def _ui_amount(balance: dict) -> Decimal:
    ui = balance.get("uiTokenAmount") or {}
    return _decimal(_first(ui, "uiAmountString", "amount"))


def _account_key(keys: list, index: Any) -> str:
    if not isinstance(index, int) or not 0 <= index < len(keys):
        return ""
    key = keys[index]
    if isinstance(key, dict):
        return str(key.get("pubkey", ""))
    return str(key)


def normalize_rpc_transaction(raw: dict, wallet: str) -> Transaction | None:
    """Rebuild token transfers from RPC pre/post token balances owned by ``wallet``.

    Positive balance change -> incoming (buy), negative -> outgoing (sell).
    An account present only in the pre balances was closed: its whole
    balance left the wallet. Prices are unknown at this level (0).
    Returns None when the wallet moved no tokens.
    """
    if not raw or not isinstance(raw.get("transaction"), dict):
        return None
    message = raw["transaction"].get("message") or {}
    meta = raw.get("meta") or {}
    account_keys = message.get("accountKeys") or []
    wallet_key = wallet.lower()

    pre_balances = meta.get("preTokenBalances") or []
    post_balances = meta.get("postTokenBalances") or []

    def _owned(balance: dict) -> bool:
        owner = balance.get("owner") or _account_key(account_keys, balance.get("accountIndex"))
        return str(owner).lower() == wallet_key

    # (mint, account_index) -> balance change
    changes: dict[tuple[str, Any], Decimal] = {}
    for post in post_balances:
        pre = next(
            (p for p in pre_balances
             if p.get("accountIndex") == post.get("accountIndex") and p.get("mint") == post.get("mint")),
            None,
        )
        if pre is None or not _owned(post):
            continue
        change = _ui_amount(post) - _ui_amount(pre)
        if abs(change) > MIN_BALANCE_CHANGE:
            changes.setdefault((post.get("mint", ""), post.get("accountIndex")), change)

    for pre in pre_balances:
        still_open = any(
            p.get("accountIndex") == pre.get("accountIndex") and p.get("mint") == pre.get("mint")
            for p in post_balances
        )
        if still_open or not _owned(pre):
            continue
        amount = _ui_amount(pre)
        if amount > MIN_BALANCE_CHANGE:
            changes.setdefault((pre.get("mint", ""), pre.get("accountIndex")), -amount)

    events = [
        TransferEvent(
            mint=mint,
            amount=abs(change),
            price_usd=Decimal("0"),
            from_wallet=change < 0,
            to_wallet=change > 0,
        )
        for (mint, _), change in changes.items()
        if mint
    ]
    if not events:
        return None

    signatures = raw["transaction"].get("signatures") or [""]
    return Transaction(
        signature=str(signatures[0]),
        timestamp=raw.get("blockTime"),
        transfers=events,
        source="RPC",
    )

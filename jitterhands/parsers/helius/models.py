"""Pydantic models for Helius Enhanced Transaction API responses."""

from decimal import Decimal

from pydantic import BaseModel


class HeliusTokenTransfer(BaseModel):
    """Token transfer within a transaction."""

    from_user_account: str = ""
    to_user_account: str = ""
    from_token_account: str = ""
    to_token_account: str = ""
    token_amount: Decimal = Decimal("0")
    mint: str = ""
    token_symbol: str | None = None
    token_name: str | None = None
    price_usd: Decimal | None = None  # rarely present; priceUsd / usdValue / price


class HeliusNativeTransfer(BaseModel):
    """SOL native transfer within a transaction."""

    from_user_account: str = ""
    to_user_account: str = ""
    amount: int = 0  # lamports


class HeliusTransaction(BaseModel):
    """Enhanced parsed transaction from Helius."""

    signature: str = ""
    type: str = ""  # "TRANSFER", "SWAP", ...
    source: str = ""  # "RAYDIUM", "JUPITER", ...
    fee: int = 0  # lamports
    fee_payer: str = ""
    timestamp: int | None = None  # unix; None when the payload carried none
    description: str = ""
    token_transfers: list[HeliusTokenTransfer] = []
    native_transfers: list[HeliusNativeTransfer] = []
    transaction_error: str | dict | None = None

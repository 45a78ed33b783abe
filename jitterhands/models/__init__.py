from jitterhands.models.token import TokenAggregate, TokenMetrics, TokenStatus, TradeLeg
from jitterhands.models.transfer import Transaction, TransferEvent
from jitterhands.models.wallet import (
    AdvancedAnalytics,
    HoldTimeBucket,
    RoiBucket,
    TradingInsight,
    WalletReport,
    WalletSummary,
)

__all__ = [
    "TransferEvent",
    "Transaction",
    "TradeLeg",
    "TokenAggregate",
    "TokenMetrics",
    "TokenStatus",
    "WalletSummary",
    "TradingInsight",
    "HoldTimeBucket",
    "RoiBucket",
    "AdvancedAnalytics",
    "WalletReport",
]

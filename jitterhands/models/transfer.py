"""Canonical transfer records fed into the aggregator.

Provider payloads (Helius enhanced transactions, raw RPC transactions) are
mapped onto these shapes by ``jitterhands.parsers.normalizer``. Numeric
fields stay loosely typed on purpose: the aggregator coerces them.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TransferEvent:
    """One token movement inside a transaction."""

    mint: str
    amount: Any = 0
    price_usd: Any = 0
    symbol: str | None = None
    name: str | None = None
    from_wallet: bool = False  # tokens left the analyzed wallet -> sell
    to_wallet: bool = False  # tokens entered the analyzed wallet -> buy


@dataclass
class Transaction:
    """A wallet transaction with zero or more token transfers."""

    signature: str = ""
    timestamp: Any = None  # unix seconds
    transfers: list[TransferEvent] = field(default_factory=list)
    source: str = ""  # "HELIUS", "RPC", ...

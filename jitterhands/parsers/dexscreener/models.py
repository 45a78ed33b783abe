"""DexScreener /latest/dex/tokens payloads."""

from decimal import Decimal

from pydantic import BaseModel


class DexScreenerToken(BaseModel):
    address: str
    name: str | None = None
    symbol: str | None = None

    model_config = {"extra": "ignore"}


class DexScreenerLiquidity(BaseModel):
    usd: Decimal | None = None

    model_config = {"extra": "ignore"}


class DexScreenerPair(BaseModel):
    chainId: str = ""
    dexId: str = ""
    pairAddress: str = ""
    baseToken: DexScreenerToken | None = None
    priceUsd: str | None = None
    liquidity: DexScreenerLiquidity | None = None
    athPrice: str | None = None  # only some pairs carry it

    model_config = {"extra": "ignore"}

    @property
    def liquidity_usd(self) -> Decimal:
        if self.liquidity and self.liquidity.usd:
            return self.liquidity.usd
        return Decimal("0")

    def is_for(self, mint: str) -> bool:
        """Pair lists the mint as base token (quote-side matches carry the wrong price)."""
        return self.baseToken is None or self.baseToken.address == mint


class DexScreenerTokenPairs(BaseModel):
    """Response envelope; ``pairs`` is null for unknown tokens."""

    pairs: list[DexScreenerPair] | None = None

    model_config = {"extra": "ignore"}

    def solana_pairs(self, mint: str) -> list[DexScreenerPair]:
        return [
            p for p in self.pairs or []
            if p.chainId in ("", "solana") and p.is_for(mint)
        ]

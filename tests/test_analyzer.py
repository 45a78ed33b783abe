"""End-to-end tests for the wallet analysis pipeline."""

import json
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from config.settings import Settings
from jitterhands.analyzer import (
    InvalidWalletError,
    WalletAnalyzer,
    analyze_transactions,
    validate_wallet,
)
from jitterhands.main import format_report
from jitterhands.models.token import TokenStatus
from jitterhands.models.transfer import Transaction, TransferEvent
from jitterhands.parsers.helius.client import HeliusApiError
from jitterhands.parsers.helius.models import HeliusTokenTransfer, HeliusTransaction
from jitterhands.parsers.price_sources import PriceSnapshot

T0 = 1_700_000_000
DAY = 86400


def _history() -> list[Transaction]:
    return [
        Transaction(signature="a", timestamp=T0, transfers=[
            TransferEvent(mint="X", amount=100, price_usd=1.0, to_wallet=True),
            TransferEvent(mint="Y", amount=10, price_usd=2.0, to_wallet=True, symbol="YY"),
        ]),
        Transaction(signature="b", timestamp=T0 + DAY, transfers=[
            TransferEvent(mint="X", amount=100, price_usd=0.5, from_wallet=True),
        ]),
    ]


class TestValidateWallet:
    def test_valid(self, wallet) -> None:
        assert validate_wallet(f"  {wallet} ") == wallet

    @pytest.mark.parametrize("address", ["", "short", "0OIl" * 10, "x" * 60, None])
    def test_invalid(self, address) -> None:
        with pytest.raises(InvalidWalletError):
            validate_wallet(address)


class TestAnalyzeTransactions:
    @pytest.mark.asyncio
    async def test_paperhanded_wallet(self, wallet, now, make_prices) -> None:
        prices = make_prices({
            "X": PriceSnapshot(current_price=2.0, ath_price=3.0, symbol="XX", name="Token X"),
            "Y": PriceSnapshot(current_price=4.0, symbol="OTHER", name="Token Y"),
        })

        report = await analyze_transactions(wallet, _history(), prices, now=now, source="HELIUS")

        assert sorted(prices.calls) == ["X", "Y"]
        assert report.transaction_count == 2
        assert report.source == "HELIUS"
        assert report.generated_at == now

        x, y = report.tokens
        assert x.symbol == "XX"
        assert x.name == "Token X"
        assert x.status == TokenStatus.SOLD
        assert x.roi == pytest.approx(-50)
        assert x.missed_gains_current == pytest.approx(150)
        assert x.missed_gains_ath == pytest.approx(250)
        assert x.time_held_days == 1

        # symbol from the transfer wins over provider metadata
        assert y.symbol == "YY"
        assert y.name == "Token Y"
        assert y.status == TokenStatus.NEVER_SOLD
        assert y.roi == pytest.approx(100)

        s = report.summary
        assert s.token_count == 2
        assert s.total_cost == pytest.approx(120)
        assert s.total_missed_gains_current == pytest.approx(150)
        assert s.biggest_miss.mint == "X"
        # 1/2 sold -> 20, missed >= cost -> 40, long average hold -> 0
        assert s.jitter_score == 60
        assert any(i.kind == "missed_opportunity" for i in report.insights)
        assert report.analytics.win_rate == pytest.approx(50)

    @pytest.mark.asyncio
    async def test_empty_wallet(self, wallet, now, stub_prices) -> None:
        report = await analyze_transactions(wallet, [], stub_prices, now=now)
        assert report.tokens == []
        assert report.summary.jitter_score == 0
        assert report.insights == []
        assert stub_prices.calls == []

    @pytest.mark.asyncio
    async def test_unpriced_tokens(self, wallet, now, stub_prices) -> None:
        report = await analyze_transactions(wallet, _history(), stub_prices, now=now)
        x = report.tokens[0]
        assert x.current_price == 0
        assert x.symbol == "Unknown"
        assert x.what_if_current_value == pytest.approx(100)

    @pytest.mark.asyncio
    async def test_report_serializable(self, wallet, now, make_prices) -> None:
        prices = make_prices({"X": PriceSnapshot(current_price=2.0)})
        report = await analyze_transactions(wallet, _history(), prices, now=now)

        data = json.loads(json.dumps(report.to_dict()))
        assert data["summary"]["biggest_miss"] == "X"
        assert data["tokens"][0]["status"] == "sold"
        assert data["analytics"]["hold_time_distribution"]["1-7 days"] == 1

        text = format_report(report)
        assert wallet in text
        assert "Jitter score:" in text


class TestWalletAnalyzer:
    @pytest.mark.asyncio
    async def test_helius_first(self, wallet) -> None:
        settings = Settings(helius_api_key_primary="key", birdeye_api_key="", enable_dexscreener=False)
        async with WalletAnalyzer(settings) as analyzer:
            analyzer._helius.get_address_transactions = AsyncMock(return_value=[
                HeliusTransaction(signature="s", timestamp=T0, token_transfers=[
                    HeliusTokenTransfer(to_user_account=wallet, token_amount=Decimal("5"), mint="X"),
                ]),
            ])
            analyzer._rpc.get_wallet_transactions = AsyncMock()

            txs, source = await analyzer.fetch_transactions(wallet)

        assert source == "HELIUS"
        assert txs[0].transfers[0].to_wallet
        analyzer._rpc.get_wallet_transactions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rpc_fallback(self, wallet, now) -> None:
        settings = Settings(helius_api_key_primary="key", birdeye_api_key="", enable_dexscreener=False)
        rpc_txs = [Transaction(signature="r", timestamp=T0, source="RPC", transfers=[
            TransferEvent(mint="X", amount=Decimal("5"), to_wallet=True),
        ])]
        async with WalletAnalyzer(settings) as analyzer:
            analyzer._helius.get_address_transactions = AsyncMock(
                side_effect=HeliusApiError("All Helius keys failed")
            )
            analyzer._rpc.get_wallet_transactions = AsyncMock(return_value=rpc_txs)

            report = await analyzer.analyze(wallet)

        assert report.source == "RPC"
        assert report.transaction_count == 1
        assert report.tokens[0].aggregate.total_bought == 5

    @pytest.mark.asyncio
    async def test_invalid_wallet_rejected(self) -> None:
        async with WalletAnalyzer(Settings(enable_dexscreener=False)) as analyzer:
            with pytest.raises(InvalidWalletError):
                await analyzer.analyze("not-a-wallet")

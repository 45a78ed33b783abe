"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

from jitterhands.parsers.price_sources import PriceSnapshot

NOW = datetime(2025, 6, 1, tzinfo=UTC)
WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


class StubPriceSource:
    """In-memory PriceSource keyed by mint."""

    def __init__(self, snapshots: dict[str, PriceSnapshot] | None = None) -> None:
        self.snapshots = snapshots or {}
        self.calls: list[str] = []

    async def get_snapshot(self, mint: str) -> PriceSnapshot:
        self.calls.append(mint)
        return self.snapshots.get(mint, PriceSnapshot())


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def wallet() -> str:
    return WALLET


@pytest.fixture
def stub_prices() -> StubPriceSource:
    return StubPriceSource()


@pytest.fixture
def make_prices() -> type[StubPriceSource]:
    return StubPriceSource

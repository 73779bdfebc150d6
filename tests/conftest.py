"""Shared test fixtures."""

# ruff: noqa: E402  -- JWT_SECRET must be set before settings are imported

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-prod")

from collections.abc import Callable

import pytest

from src.pm_account.infrastructure.collateral_book import CollateralBook
from src.pm_common.fixed_point import SCALE
from src.pm_market.domain.market import PredictionMarket
from src.pm_oracle.infrastructure.mock_oracle import MockEngagementOracle
from src.pm_registry.domain.registry import CurveConfig, MarketRegistry

START_TS = 1_700_000_000
OWNER = "owner"


class FakeClock:
    """Settable unix clock injected into registries and markets."""

    def __init__(self, now: int = START_TS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def default_curve() -> CurveConfig:
    return CurveConfig(
        curve_a=10**15,
        curve_b=10**12,
        trade_fee_rate=100,
        settle_rake_rate=500,
        fee_precision=10_000,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def oracle() -> MockEngagementOracle:
    return MockEngagementOracle()


@pytest.fixture
def book() -> CollateralBook:
    return CollateralBook()


@pytest.fixture
def registry(clock: FakeClock, oracle: MockEngagementOracle, book: CollateralBook) -> MarketRegistry:
    return MarketRegistry(
        owner=OWNER,
        oracle=oracle,
        collateral=book,
        default_alpha=8 * 10**17,
        curve=default_curve(),
        clock=clock,
    )


@pytest.fixture
def market(registry: MarketRegistry) -> PredictionMarket:
    """theta=1000, alpha=0.8 (threshold 800), deadline one hour out."""
    return registry.create_market("m-1", 1000 * SCALE, 3600)


@pytest.fixture
def fund(book: CollateralBook) -> Callable[..., None]:
    def _fund(account_id: str, amount: int = 1000 * SCALE) -> None:
        book.deposit(account_id, amount)

    return _fund

"""Process-wide registry — built from settings on first use.

Markets, custody balances and oracle scores live in memory for the lifetime
of the process. Tests override `get_registry` with their own instance.
"""

from config.settings import settings
from src.pm_account.infrastructure.collateral_book import CollateralBook
from src.pm_common.datetime_utils import Clock, unix_now
from src.pm_oracle.infrastructure.mock_oracle import MockEngagementOracle
from src.pm_registry.domain.registry import CurveConfig, MarketRegistry

_registry: MarketRegistry | None = None


def build_registry(clock: Clock = unix_now) -> MarketRegistry:
    return MarketRegistry(
        owner=settings.OWNER_ACCOUNT_ID,
        oracle=MockEngagementOracle(),
        collateral=CollateralBook(),
        default_alpha=settings.DEFAULT_ALPHA,
        curve=CurveConfig(
            curve_a=settings.DEFAULT_CURVE_A,
            curve_b=settings.DEFAULT_CURVE_B,
            trade_fee_rate=settings.DEFAULT_TRADE_FEE_RATE,
            settle_rake_rate=settings.DEFAULT_SETTLE_RAKE_RATE,
            fee_precision=settings.FEE_PRECISION,
        ),
        clock=clock,
    )


def get_registry() -> MarketRegistry:
    """FastAPI dependency: the shared registry, created lazily."""
    global _registry  # noqa: PLW0603
    if _registry is None:
        _registry = build_registry()
    return _registry


def reset_registry() -> None:
    global _registry  # noqa: PLW0603
    _registry = None

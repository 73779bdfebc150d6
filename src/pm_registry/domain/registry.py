"""MarketRegistry — creates and indexes markets by unique market id.

Holds the default alpha and curve/fee configuration applied to new markets,
the oracle handed to them, and relays protocol fee withdrawal (markets only
accept withdrawal from the registry identity).
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from src.pm_account.domain.repository import CollateralLedgerProtocol
from src.pm_common.datetime_utils import Clock, unix_now
from src.pm_common.errors import (
    DuplicateMarketError,
    InvalidMarketParamsError,
    MarketNotFoundError,
    UnauthorizedError,
)
from src.pm_market.domain import events
from src.pm_market.domain.events import MarketEvent
from src.pm_market.domain.market import (
    ESCROW_ACCOUNT_PREFIX,
    PredictionMarket,
    escrow_account_id,
)
from src.pm_market.domain.models import MarketParams
from src.pm_oracle.domain.oracle import ScoreOracle
from src.pm_token.domain.position_token import PositionToken

logger = logging.getLogger(__name__)

REGISTRY_ACCOUNT_ID = "REGISTRY"


def is_internal_account(account_id: str) -> bool:
    """True for custody accounts only the registry and its markets may move."""
    return account_id == REGISTRY_ACCOUNT_ID or account_id.startswith(ESCROW_ACCOUNT_PREFIX)


@dataclass(frozen=True)
class CurveConfig:
    curve_a: int
    curve_b: int
    trade_fee_rate: int
    settle_rake_rate: int
    fee_precision: int

    def __post_init__(self) -> None:
        if self.fee_precision <= 0:
            raise InvalidMarketParamsError("fee_precision must be positive")
        if self.curve_a < 0 or self.curve_b < 0:
            raise InvalidMarketParamsError("curve coefficients must be non-negative")
        for name in ("trade_fee_rate", "settle_rake_rate"):
            rate = getattr(self, name)
            if not (0 <= rate <= self.fee_precision):
                raise InvalidMarketParamsError(f"{name} must be within [0, fee_precision]")


class MarketRegistry:
    def __init__(
        self,
        owner: str,
        oracle: ScoreOracle,
        collateral: CollateralLedgerProtocol,
        *,
        default_alpha: int,
        curve: CurveConfig,
        clock: Clock = unix_now,
        registry_id: str = REGISTRY_ACCOUNT_ID,
    ) -> None:
        if default_alpha <= 0:
            raise InvalidMarketParamsError("alpha must be positive")
        self.owner = owner
        self.registry_id = registry_id
        self.default_alpha = default_alpha
        self.curve = curve
        self.events: list[MarketEvent] = []
        self._oracle = oracle
        self._collateral = collateral
        self._clock = clock
        self._markets: dict[str, PredictionMarket] = {}

    @property
    def oracle(self) -> ScoreOracle:
        return self._oracle

    @property
    def collateral(self) -> CollateralLedgerProtocol:
        return self._collateral

    def create_market(self, market_id: str, theta: int, duration_seconds: int) -> PredictionMarket:
        if not market_id:
            raise InvalidMarketParamsError("market_id must not be empty")
        if market_id in self._markets:
            raise DuplicateMarketError(market_id)
        if theta <= 0:
            raise InvalidMarketParamsError("theta must be positive")
        if duration_seconds <= 0:
            raise InvalidMarketParamsError("duration must be positive")

        now = self._clock()
        params = MarketParams(
            market_id=market_id,
            theta=theta,
            alpha=self.default_alpha,
            settlement_time=now + duration_seconds,
            curve_a=self.curve.curve_a,
            curve_b=self.curve.curve_b,
            trade_fee_rate=self.curve.trade_fee_rate,
            settle_rake_rate=self.curve.settle_rake_rate,
            fee_precision=self.curve.fee_precision,
            created_at=now,
        )
        minter = escrow_account_id(market_id)
        market = PredictionMarket(
            params,
            registry_id=self.registry_id,
            oracle=self._oracle,
            long_token=PositionToken(f"{market_id} LONG", "LONG", minter),
            short_token=PositionToken(f"{market_id} SHORT", "SHORT", minter),
            collateral=self._collateral,
            clock=self._clock,
        )
        self._markets[market_id] = market
        self.events.append(events.market_created(market_id, theta, params.settlement_time))
        logger.info(
            "Market created: market=%s theta=%d settles_at=%d",
            market_id, theta, params.settlement_time,
        )
        return market

    def get_market(self, market_id: str) -> PredictionMarket | None:
        return self._markets.get(market_id)

    def require_market(self, market_id: str) -> PredictionMarket:
        market = self._markets.get(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def list_all_markets(self) -> list[PredictionMarket]:
        """Markets in creation order."""
        return list(self._markets.values())

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Forget markets created inside the block, and their events, if it raises."""
        markets = dict(self._markets)
        event_count = len(self.events)
        try:
            yield
        except Exception:
            self._markets = markets
            del self.events[event_count:]
            raise

    # ------------------------------------------------------------------
    # Owner-gated administration
    # ------------------------------------------------------------------

    def set_oracle(self, caller: str, oracle: ScoreOracle) -> None:
        """Applies to markets created afterwards; existing ones keep theirs."""
        self._require_owner(caller, "set the oracle")
        self._oracle = oracle
        logger.info("Registry oracle replaced by %s", caller)

    def set_default_alpha(self, caller: str, alpha: int) -> None:
        self._require_owner(caller, "set the default alpha")
        if alpha <= 0:
            raise InvalidMarketParamsError("alpha must be positive")
        self.default_alpha = alpha
        logger.info("Default alpha set to %d by %s", alpha, caller)

    def withdraw_fees(self, caller: str, market_id: str) -> int:
        self._require_owner(caller, "withdraw protocol fees")
        return self.require_market(market_id).withdraw_fees(self.registry_id)

    def _require_owner(self, caller: str, action: str) -> None:
        if caller != self.owner:
            raise UnauthorizedError(caller, action)

"""Domain models for pm_market — pure dataclasses, no business logic."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MarketParams:
    """Immutable parameters fixed when the registry creates the market."""

    market_id: str
    theta: int               # target engagement score, 1e18 scale
    alpha: int               # threshold multiplier, 1e18 scale
    settlement_time: int     # unix seconds; trading open strictly before
    curve_a: int
    curve_b: int
    trade_fee_rate: int      # units of fee_precision
    settle_rake_rate: int    # units of fee_precision
    fee_precision: int
    created_at: int


@dataclass
class MarketState:
    long_supply: int = 0
    short_supply: int = 0
    long_reserve: int = 0        # net collateral attributed to LONG
    short_reserve: int = 0       # net collateral attributed to SHORT
    total_reserve: int = 0       # lifetime net collateral; the payout pool
    protocol_fees: int = 0
    settled: bool = False
    final_score: int | None = None
    long_won: bool | None = None

    @property
    def combined_supply(self) -> int:
        return self.long_supply + self.short_supply


@dataclass
class Holder:
    long_tokens: int = 0
    short_tokens: int = 0
    # Sum of tokens bought on both sides; only used to spot a first trade.
    total_activity: int = 0
    claimed: bool = False


@dataclass(frozen=True)
class PurchaseResult:
    account_id: str
    side: str
    token_amount: int
    cost: int
    fee: int
    refund: int


@dataclass(frozen=True)
class MarketInfo:
    """Read-only snapshot of one market."""

    market_id: str
    theta: int
    alpha: int
    threshold: int
    settlement_time: int
    curve_a: int
    curve_b: int
    trade_fee_rate: int
    settle_rake_rate: int
    fee_precision: int
    status: str
    long_supply: int
    short_supply: int
    long_reserve: int
    short_reserve: int
    total_reserve: int
    protocol_fees: int
    current_price: int
    settled: bool
    final_score: int | None
    long_won: bool | None
    holder_count: int

"""Pydantic schemas for pm_market API requests and responses.

Fixed-point amounts (1e18 scale) are returned as raw ints plus a
`*_display` decimal string for humans.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.pm_common.enums import Side
from src.pm_common.fixed_point import fixed_to_display
from src.pm_market.domain.events import MarketEvent, event_as_dict
from src.pm_market.domain.models import Holder, MarketInfo, PurchaseResult

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    market_id: str = Field(..., min_length=1, max_length=64)
    theta: int = Field(..., gt=0, description="Target engagement score, 1e18 scale")
    duration_seconds: int = Field(..., gt=0, description="Trading window from now")


class BuyRequest(BaseModel):
    side: Side
    # Zero is rejected by the engine with InvalidAmountError, not by validation
    token_amount: int = Field(..., ge=0, description="Position tokens to mint, 1e18 scale")
    payment_amount: int = Field(..., ge=0, description="Collateral offered; excess is refunded")


# ---------------------------------------------------------------------------
# Market views
# ---------------------------------------------------------------------------


class MarketListItem(BaseModel):
    market_id: str
    status: str
    theta: int
    settlement_time: int
    long_supply: int
    short_supply: int
    total_reserve: int
    total_reserve_display: str
    current_price: int
    current_price_display: str

    @classmethod
    def from_domain(cls, info: MarketInfo) -> "MarketListItem":
        return cls(
            market_id=info.market_id,
            status=info.status,
            theta=info.theta,
            settlement_time=info.settlement_time,
            long_supply=info.long_supply,
            short_supply=info.short_supply,
            total_reserve=info.total_reserve,
            total_reserve_display=fixed_to_display(info.total_reserve),
            current_price=info.current_price,
            current_price_display=fixed_to_display(info.current_price),
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]
    total: int


class MarketDetail(BaseModel):
    market_id: str
    status: str
    theta: int
    alpha: int
    threshold: int
    threshold_display: str
    settlement_time: int
    curve_a: int
    curve_b: int
    trade_fee_rate: int
    settle_rake_rate: int
    fee_precision: int
    long_supply: int
    short_supply: int
    long_reserve: int
    short_reserve: int
    total_reserve: int
    total_reserve_display: str
    protocol_fees: int
    protocol_fees_display: str
    current_price: int
    current_price_display: str
    settled: bool
    final_score: int | None
    long_won: bool | None
    holder_count: int

    @classmethod
    def from_domain(cls, info: MarketInfo) -> "MarketDetail":
        return cls(
            market_id=info.market_id,
            status=info.status,
            theta=info.theta,
            alpha=info.alpha,
            threshold=info.threshold,
            threshold_display=fixed_to_display(info.threshold),
            settlement_time=info.settlement_time,
            curve_a=info.curve_a,
            curve_b=info.curve_b,
            trade_fee_rate=info.trade_fee_rate,
            settle_rake_rate=info.settle_rake_rate,
            fee_precision=info.fee_precision,
            long_supply=info.long_supply,
            short_supply=info.short_supply,
            long_reserve=info.long_reserve,
            short_reserve=info.short_reserve,
            total_reserve=info.total_reserve,
            total_reserve_display=fixed_to_display(info.total_reserve),
            protocol_fees=info.protocol_fees,
            protocol_fees_display=fixed_to_display(info.protocol_fees),
            current_price=info.current_price,
            current_price_display=fixed_to_display(info.current_price),
            settled=info.settled,
            final_score=info.final_score,
            long_won=info.long_won,
            holder_count=info.holder_count,
        )


class QuoteResponse(BaseModel):
    market_id: str
    supply: int
    tokens: int
    cost: int
    cost_display: str
    current_price: int


# ---------------------------------------------------------------------------
# Operation results
# ---------------------------------------------------------------------------


class BuyResponse(BaseModel):
    market_id: str
    account_id: str
    side: str
    token_amount: int
    cost: int
    cost_display: str
    fee: int
    refund: int

    @classmethod
    def from_result(cls, market_id: str, result: PurchaseResult) -> "BuyResponse":
        return cls(
            market_id=market_id,
            account_id=result.account_id,
            side=result.side,
            token_amount=result.token_amount,
            cost=result.cost,
            cost_display=fixed_to_display(result.cost),
            fee=result.fee,
            refund=result.refund,
        )


class SettleResponse(BaseModel):
    market_id: str
    final_score: int
    threshold: int
    long_won: bool
    long_reserve: int
    short_reserve: int
    total_reserve: int
    protocol_fees: int


class PositionResponse(BaseModel):
    market_id: str
    account_id: str
    long_tokens: int
    short_tokens: int
    claimed: bool
    payout: int
    payout_display: str

    @classmethod
    def build(
        cls,
        market_id: str,
        account_id: str,
        long_tokens: int,
        short_tokens: int,
        holder: Holder | None,
        payout: int,
    ) -> "PositionResponse":
        return cls(
            market_id=market_id,
            account_id=account_id,
            long_tokens=long_tokens,
            short_tokens=short_tokens,
            claimed=holder.claimed if holder else False,
            payout=payout,
            payout_display=fixed_to_display(payout),
        )


class ClaimResponse(BaseModel):
    market_id: str
    account_id: str
    amount: int
    amount_display: str


class MarketEventOut(BaseModel):
    market_id: str
    event_type: str
    payload: dict[str, Any]

    @classmethod
    def from_domain(cls, event: MarketEvent) -> "MarketEventOut":
        return cls(**event_as_dict(event))

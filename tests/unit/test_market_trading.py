"""Unit tests for PredictionMarket.buy."""

import random

import pytest

from src.pm_common.enums import MarketEventType, MarketStatus, Side
from src.pm_common.errors import (
    InsufficientBalanceError,
    InsufficientPaymentError,
    InvalidAmountError,
    MarketClosedError,
)
from src.pm_common.fixed_point import SCALE

COST_FIRST_100 = 105 * 10**15  # cost(0, 100)
FEE_FIRST_100 = COST_FIRST_100 // 100


class TestBuySuccess:
    def test_updates_supply_reserve_and_fees(self, market, fund) -> None:
        fund("alice")
        result = market.buy("alice", Side.LONG, 100 * SCALE, SCALE)

        assert result.cost == COST_FIRST_100
        assert result.fee == FEE_FIRST_100
        s = market.state
        assert s.long_supply == 100 * SCALE
        assert s.short_supply == 0
        assert s.long_reserve == COST_FIRST_100 - FEE_FIRST_100
        assert s.total_reserve == COST_FIRST_100 - FEE_FIRST_100
        assert s.protocol_fees == FEE_FIRST_100

    def test_mints_tokens_to_caller(self, market, fund) -> None:
        fund("alice")
        market.buy("alice", Side.SHORT, 100 * SCALE, SCALE)
        assert market.short_balance_of("alice") == 100 * SCALE
        assert market.long_balance_of("alice") == 0
        assert market.short_token.total_supply == 100 * SCALE

    def test_excess_payment_refunded(self, market, fund, book) -> None:
        fund("alice", 10 * SCALE)
        result = market.buy("alice", Side.LONG, 100 * SCALE, 5 * SCALE)
        assert result.refund == 5 * SCALE - COST_FIRST_100
        assert book.balance_of("alice") == 10 * SCALE - COST_FIRST_100
        assert market.escrow_balance() == COST_FIRST_100

    def test_exact_payment_has_no_refund(self, market, fund) -> None:
        fund("alice")
        result = market.buy("alice", Side.LONG, 100 * SCALE, COST_FIRST_100)
        assert result.refund == 0

    def test_side_accepts_wire_string(self, market, fund) -> None:
        fund("alice")
        result = market.buy("alice", "SHORT", SCALE, SCALE)
        assert result.side == "SHORT"

    def test_emits_purchase_event(self, market, fund) -> None:
        fund("alice")
        market.buy("alice", Side.LONG, 100 * SCALE, SCALE)
        event = market.events[-1]
        assert event.event_type is MarketEventType.TOKENS_PURCHASED
        assert event.payload == {
            "account_id": "alice",
            "side": "LONG",
            "tokens": 100 * SCALE,
            "cost": COST_FIRST_100,
        }

    def test_first_trade_registers_holder_once(self, market, fund) -> None:
        fund("alice")
        fund("bob")
        market.buy("alice", Side.LONG, SCALE, SCALE)
        market.buy("bob", Side.SHORT, SCALE, SCALE)
        market.buy("alice", Side.SHORT, SCALE, SCALE)
        assert market.holders() == ["alice", "bob"]
        holder = market.holder("alice")
        assert holder.long_tokens == SCALE
        assert holder.short_tokens == SCALE
        assert holder.total_activity == 2 * SCALE

    def test_both_sides_share_one_curve(self, market, fund) -> None:
        fund("alice")
        fund("bob")
        market.buy("alice", Side.LONG, 100 * SCALE, SCALE)
        result = market.buy("bob", Side.SHORT, 200 * SCALE, SCALE)
        assert result.cost == market.calculate_mint_cost(100 * SCALE, 200 * SCALE)
        assert market.current_price() == 10**15 + 300 * 10**12

    def test_reserves_sum_to_total_after_every_trade(self, market, fund) -> None:
        rng = random.Random(7)
        for i in range(30):
            account = f"trader-{i % 5}"
            fund(account, 100 * SCALE)
            side = rng.choice([Side.LONG, Side.SHORT])
            tokens = rng.randint(1, 50) * SCALE
            market.buy(account, side, tokens, 100 * SCALE)
            s = market.state
            assert s.long_reserve + s.short_reserve == s.total_reserve
            assert market.escrow_balance() == s.total_reserve + s.protocol_fees


class TestBuyRejections:
    def test_underpayment(self, market, fund, book) -> None:
        fund("alice")
        with pytest.raises(InsufficientPaymentError):
            market.buy("alice", Side.LONG, 100 * SCALE, COST_FIRST_100 - 1)
        assert market.state.long_supply == 0
        assert book.balance_of("alice") == 1000 * SCALE

    def test_zero_tokens(self, market, fund) -> None:
        fund("alice")
        with pytest.raises(InvalidAmountError):
            market.buy("alice", Side.LONG, 0, SCALE)

    def test_at_deadline(self, market, fund, clock) -> None:
        fund("alice")
        clock.advance(3600)
        assert market.status is MarketStatus.CLOSED
        with pytest.raises(MarketClosedError):
            market.buy("alice", Side.LONG, SCALE, SCALE)

    def test_one_second_before_deadline_is_open(self, market, fund, clock) -> None:
        fund("alice")
        clock.advance(3599)
        market.buy("alice", Side.LONG, SCALE, SCALE)
        assert market.status is MarketStatus.ACTIVE

    def test_after_settlement(self, market, fund, clock, oracle) -> None:
        fund("alice")
        clock.advance(3600)
        oracle.set_score("m-1", 0)
        market.settle()
        with pytest.raises(MarketClosedError):
            market.buy("alice", Side.LONG, SCALE, SCALE)

    def test_unfunded_caller_changes_nothing(self, market) -> None:
        with pytest.raises(InsufficientBalanceError):
            market.buy("pauper", Side.LONG, 100 * SCALE, SCALE)
        assert market.state.total_reserve == 0
        assert market.holders() == []
        assert market.events == []
        assert market.long_token.total_supply == 0

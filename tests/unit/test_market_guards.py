"""Reentrancy and all-or-nothing tests using custody and oracle fakes."""

from collections.abc import Callable

import pytest

from src.pm_account.infrastructure.collateral_book import CollateralBook
from src.pm_common.enums import LedgerEntryType, Side
from src.pm_common.errors import InvalidAmountError, ReentrantCallError
from src.pm_common.fixed_point import SCALE
from src.pm_oracle.infrastructure.mock_oracle import MockEngagementOracle
from src.pm_registry.domain.registry import REGISTRY_ACCOUNT_ID, CurveConfig, MarketRegistry

_REFUND = LedgerEntryType.TRADE_REFUND.value
_PAYOUT = LedgerEntryType.REWARD_PAYOUT.value
_FEES = LedgerEntryType.FEE_WITHDRAWAL.value


class CallbackBook(CollateralBook):
    """Runs `on_transfer` once after the next transfer of `trigger_type`."""

    def __init__(self) -> None:
        super().__init__()
        self.on_transfer: Callable[[], object] | None = None
        self.trigger_type: str | None = None
        self.raised: list[Exception] = []

    def transfer(self, from_account, to_account, amount, entry_type, reference_type, reference_id):
        super().transfer(from_account, to_account, amount, entry_type, reference_type, reference_id)
        hook = self.on_transfer
        if hook is not None and entry_type == self.trigger_type:
            self.on_transfer = None
            try:
                hook()
            except ReentrantCallError as e:
                self.raised.append(e)


class FailingBook(CollateralBook):
    """Raises on every transfer of `fail_on` type."""

    def __init__(self, fail_on: str) -> None:
        super().__init__()
        self.fail_on = fail_on

    def transfer(self, from_account, to_account, amount, entry_type, reference_type, reference_id):
        if entry_type == self.fail_on:
            raise RuntimeError(f"custody outage on {entry_type}")
        super().transfer(from_account, to_account, amount, entry_type, reference_type, reference_id)


class CallbackOracle(MockEngagementOracle):
    def __init__(self) -> None:
        super().__init__()
        self.on_get: Callable[[], object] | None = None
        self.raised: list[Exception] = []

    def get_score(self, market_id: str) -> int:
        if self.on_get is not None:
            try:
                self.on_get()
            except ReentrantCallError as e:
                self.raised.append(e)
        return super().get_score(market_id)


def _make_registry(clock, collateral, oracle) -> MarketRegistry:
    return MarketRegistry(
        owner="owner",
        oracle=oracle,
        collateral=collateral,
        default_alpha=8 * 10**17,
        curve=CurveConfig(
            curve_a=10**15,
            curve_b=10**12,
            trade_fee_rate=100,
            settle_rake_rate=500,
            fee_precision=10_000,
        ),
        clock=clock,
    )


@pytest.fixture
def callback_book() -> CallbackBook:
    return CallbackBook()


@pytest.fixture
def callback_oracle() -> CallbackOracle:
    return CallbackOracle()


@pytest.fixture
def guarded(clock, callback_book, callback_oracle):
    market = _make_registry(clock, callback_book, callback_oracle).create_market(
        "m-1", 1000 * SCALE, 3600
    )
    callback_book.deposit("alice", 1000 * SCALE)
    callback_book.deposit("mallory", 1000 * SCALE)
    return market


class TestReentrancy:
    def test_refund_callback_cannot_reenter_buy(self, guarded, callback_book) -> None:
        callback_book.trigger_type = _REFUND
        callback_book.on_transfer = lambda: guarded.buy("mallory", Side.LONG, SCALE, SCALE)

        guarded.buy("alice", Side.LONG, 100 * SCALE, SCALE)

        assert len(callback_book.raised) == 1
        assert guarded.state.long_supply == 100 * SCALE
        assert guarded.holders() == ["alice"]

    def test_oracle_callback_cannot_reenter_buy(
        self, guarded, clock, callback_oracle
    ) -> None:
        clock.advance(3600)
        callback_oracle.set_score("m-1", 900 * SCALE)
        callback_oracle.on_get = lambda: guarded.buy("mallory", Side.LONG, SCALE, SCALE)

        guarded.settle()

        assert len(callback_oracle.raised) == 1
        assert guarded.state.long_supply == 0

    def test_payout_callback_cannot_claim_twice(
        self, guarded, clock, callback_book, callback_oracle
    ) -> None:
        guarded.buy("alice", Side.LONG, 100 * SCALE, SCALE)
        clock.advance(3600)
        callback_oracle.set_score("m-1", 900 * SCALE)
        guarded.settle()
        callback_book.trigger_type = _PAYOUT
        callback_book.on_transfer = lambda: guarded.claim_reward("alice")

        paid = guarded.claim_reward("alice")

        assert len(callback_book.raised) == 1
        assert callback_book.balance_of("alice") == 1000 * SCALE - 105 * 10**15 + paid

    def test_fee_callback_cannot_reenter_buy(self, guarded, callback_book) -> None:
        guarded.buy("alice", Side.LONG, 100 * SCALE, SCALE)
        callback_book.trigger_type = _FEES
        callback_book.on_transfer = lambda: guarded.buy("mallory", Side.SHORT, SCALE, SCALE)

        guarded.withdraw_fees(REGISTRY_ACCOUNT_ID)

        assert len(callback_book.raised) == 1
        assert guarded.state.short_supply == 0

    def test_guard_released_after_failure(self, guarded) -> None:
        with pytest.raises(InvalidAmountError):
            guarded.buy("alice", Side.LONG, 0, SCALE)
        guarded.buy("alice", Side.LONG, SCALE, SCALE)
        assert guarded.state.long_supply == SCALE


class TestAtomicity:
    def test_failed_refund_rolls_back_whole_buy(self, clock) -> None:
        book = FailingBook(fail_on=_REFUND)
        market = _make_registry(clock, book, MockEngagementOracle()).create_market(
            "m-1", 1000 * SCALE, 3600
        )
        book.deposit("alice", 10 * SCALE)

        with pytest.raises(RuntimeError):
            market.buy("alice", Side.LONG, 100 * SCALE, 5 * SCALE)

        s = market.state
        assert (s.long_supply, s.total_reserve, s.protocol_fees) == (0, 0, 0)
        assert market.holders() == []
        assert market.holder("alice") is None
        assert market.events == []
        assert market.long_token.total_supply == 0
        assert book.balance_of("alice") == 10 * SCALE
        assert market.escrow_balance() == 0

    def test_failed_payout_keeps_claim_open(self, clock) -> None:
        book = FailingBook(fail_on=_PAYOUT)
        oracle = MockEngagementOracle()
        market = _make_registry(clock, book, oracle).create_market("m-1", 1000 * SCALE, 3600)
        book.deposit("alice", 10 * SCALE)
        market.buy("alice", Side.LONG, 100 * SCALE, SCALE)
        clock.advance(3600)
        oracle.set_score("m-1", 900 * SCALE)
        market.settle()
        events_before = len(market.events)

        with pytest.raises(RuntimeError):
            market.claim_reward("alice")

        assert market.holder("alice").claimed is False
        assert len(market.events) == events_before

    def test_failed_fee_transfer_restores_fees(self, clock) -> None:
        book = FailingBook(fail_on=_FEES)
        market = _make_registry(clock, book, MockEngagementOracle()).create_market(
            "m-1", 1000 * SCALE, 3600
        )
        book.deposit("alice", 10 * SCALE)
        market.buy("alice", Side.LONG, 100 * SCALE, SCALE)
        fees = market.state.protocol_fees

        with pytest.raises(RuntimeError):
            market.withdraw_fees(REGISTRY_ACCOUNT_ID)

        assert market.state.protocol_fees == fees

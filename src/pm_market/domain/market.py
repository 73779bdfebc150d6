"""PredictionMarket — one binary engagement market.

Lifecycle: ACTIVE (trading) -> CLOSED (deadline passed) -> SETTLED (terminal).

Every state-mutating entry point (buy, settle, claim_reward, withdraw_fees)
runs under a per-instance reentrancy flag and inside a rollback scope: a
failure at any step restores the market exactly as it was before the call.
Callers that chain more work after a mutating call (the audit journal)
wrap both in `with market.transaction():` to extend that guarantee.
Collaborators (oracle, position tokens, collateral custody) are injected.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

from src.pm_account.domain.repository import CollateralLedgerProtocol
from src.pm_common.datetime_utils import Clock, unix_now
from src.pm_common.enums import LedgerEntryType, MarketStatus, Side
from src.pm_common.errors import (
    AlreadyClaimedError,
    AlreadySettledError,
    InsufficientPaymentError,
    InvalidAmountError,
    MarketClosedError,
    NoFeesError,
    NoWinningsError,
    NotSettledError,
    ReentrantCallError,
    TooEarlyError,
    UnauthorizedError,
)
from src.pm_common.fixed_point import SCALE, mul_div
from src.pm_market.domain import events
from src.pm_market.domain.curve import mint_cost, spot_price
from src.pm_market.domain.events import MarketEvent
from src.pm_market.domain.invariants import verify_invariants_after_trade
from src.pm_market.domain.models import (
    Holder,
    MarketInfo,
    MarketParams,
    MarketState,
    PurchaseResult,
)
from src.pm_oracle.domain.oracle import ScoreOracle
from src.pm_token.domain.position_token import PositionToken

logger = logging.getLogger(__name__)

_REFERENCE_TYPE = "MARKET"

ESCROW_ACCOUNT_PREFIX = "market:"


def escrow_account_id(market_id: str) -> str:
    """Custody account holding a market's collateral; also its minter identity."""
    return f"{ESCROW_ACCOUNT_PREFIX}{market_id}"


class PredictionMarket:
    def __init__(
        self,
        params: MarketParams,
        *,
        registry_id: str,
        oracle: ScoreOracle,
        long_token: PositionToken,
        short_token: PositionToken,
        collateral: CollateralLedgerProtocol,
        clock: Clock = unix_now,
    ) -> None:
        self.params = params
        self.registry_id = registry_id
        self.account_id = escrow_account_id(params.market_id)
        self.long_token = long_token
        self.short_token = short_token
        self.state = MarketState()
        self.events: list[MarketEvent] = []
        self._oracle = oracle
        self._collateral = collateral
        self._clock = clock
        self._holders: dict[str, Holder] = {}
        self._holder_list: list[str] = []
        self._entered = False

    @property
    def market_id(self) -> str:
        return self.params.market_id

    @property
    def oracle(self) -> ScoreOracle:
        return self._oracle

    def request_score(self) -> None:
        """Ask the oracle to publish this market's score; no state change."""
        self._oracle.request_score(self.market_id)

    # ------------------------------------------------------------------
    # Read-only surface
    # ------------------------------------------------------------------

    @property
    def threshold(self) -> int:
        return mul_div(self.params.alpha, self.params.theta, SCALE)

    @property
    def status(self) -> MarketStatus:
        if self.state.settled:
            return MarketStatus.SETTLED
        if self._clock() >= self.params.settlement_time:
            return MarketStatus.CLOSED
        return MarketStatus.ACTIVE

    def calculate_mint_cost(self, supply: int, tokens: int) -> int:
        return mint_cost(supply, tokens, self.params.curve_a, self.params.curve_b)

    def quote(self, tokens: int) -> int:
        """Cost of `tokens` at the current combined supply."""
        return self.calculate_mint_cost(self.state.combined_supply, tokens)

    def current_price(self) -> int:
        return spot_price(self.state.combined_supply, self.params.curve_a, self.params.curve_b)

    def escrow_balance(self) -> int:
        return self._collateral.balance_of(self.account_id)

    def holder(self, account_id: str) -> Holder | None:
        found = self._holders.get(account_id)
        return replace(found) if found else None

    def holders(self) -> list[str]:
        return list(self._holder_list)

    def long_balance_of(self, account_id: str) -> int:
        return self.long_token.balance_of(account_id)

    def short_balance_of(self, account_id: str) -> int:
        return self.short_token.balance_of(account_id)

    def info(self) -> MarketInfo:
        p, s = self.params, self.state
        return MarketInfo(
            market_id=p.market_id,
            theta=p.theta,
            alpha=p.alpha,
            threshold=self.threshold,
            settlement_time=p.settlement_time,
            curve_a=p.curve_a,
            curve_b=p.curve_b,
            trade_fee_rate=p.trade_fee_rate,
            settle_rake_rate=p.settle_rake_rate,
            fee_precision=p.fee_precision,
            status=self.status.value,
            long_supply=s.long_supply,
            short_supply=s.short_supply,
            long_reserve=s.long_reserve,
            short_reserve=s.short_reserve,
            total_reserve=s.total_reserve,
            protocol_fees=s.protocol_fees,
            current_price=self.current_price(),
            settled=s.settled,
            final_score=s.final_score,
            long_won=s.long_won,
            holder_count=len(self._holder_list),
        )

    def payout_of(self, account_id: str) -> int:
        """Pro-rata share of total_reserve for a winning-side holder; 0 otherwise."""
        s = self.state
        if not s.settled:
            return 0
        holder = self._holders.get(account_id)
        if holder is None:
            return 0
        if s.long_won:
            tokens, winning_supply = holder.long_tokens, s.long_supply
        else:
            tokens, winning_supply = holder.short_tokens, s.short_supply
        if tokens == 0 or winning_supply == 0:
            return 0
        return mul_div(s.total_reserve, tokens, winning_supply)

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def buy(
        self, caller: str, side: Side | str, token_amount: int, payment_amount: int
    ) -> PurchaseResult:
        side = Side(side)
        with self._non_reentrant():
            if self.state.settled or self._clock() >= self.params.settlement_time:
                raise MarketClosedError(self.market_id)
            if token_amount <= 0:
                raise InvalidAmountError(token_amount)
            cost = self.quote(token_amount)
            if payment_amount < cost:
                raise InsufficientPaymentError(cost, payment_amount)
            fee = mul_div(cost, self.params.trade_fee_rate, self.params.fee_precision)
            net = cost - fee
            refund = payment_amount - cost

            with self._collateral.savepoint(), self._rollback_on_error():
                self._collateral.transfer(
                    caller, self.account_id, payment_amount,
                    LedgerEntryType.TRADE_PAYMENT.value, _REFERENCE_TYPE, self.market_id,
                )
                s = self.state
                s.protocol_fees += fee
                if side is Side.LONG:
                    s.long_supply += token_amount
                    s.long_reserve += net
                else:
                    s.short_supply += token_amount
                    s.short_reserve += net
                s.total_reserve += net
                self._record_trade(caller, side, token_amount)
                self._collateral.transfer(
                    self.account_id, caller, refund,
                    LedgerEntryType.TRADE_REFUND.value, _REFERENCE_TYPE, self.market_id,
                )
                verify_invariants_after_trade(self)
                token = self.long_token if side is Side.LONG else self.short_token
                token.mint(self.account_id, caller, token_amount)
                self.events.append(
                    events.tokens_purchased(self.market_id, caller, side.value, token_amount, cost)
                )

        logger.info(
            "Tokens purchased: market=%s account=%s side=%s tokens=%d cost=%d fee=%d",
            self.market_id, caller, side.value, token_amount, cost, fee,
        )
        return PurchaseResult(
            account_id=caller,
            side=side.value,
            token_amount=token_amount,
            cost=cost,
            fee=fee,
            refund=refund,
        )

    def _record_trade(self, account_id: str, side: Side, token_amount: int) -> None:
        holder = self._holders.setdefault(account_id, Holder())
        if holder.total_activity == 0:
            self._holder_list.append(account_id)
        if side is Side.LONG:
            holder.long_tokens += token_amount
        else:
            holder.short_tokens += token_amount
        holder.total_activity += token_amount

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def settle(self) -> bool:
        """Resolve the outcome once the deadline has passed. Returns long_won."""
        with self._non_reentrant():
            if self.state.settled:
                raise AlreadySettledError(self.market_id)
            now = self._clock()
            if now < self.params.settlement_time:
                raise TooEarlyError(self.market_id, self.params.settlement_time)

            # Raises ScoreUnavailableError before anything is touched
            final_score = self._oracle.get_score(self.market_id)
            long_won = final_score >= self.threshold

            with self._rollback_on_error():
                self._redistribute(long_won)
                self.state.final_score = final_score
                self.state.long_won = long_won
                self.state.settled = True
                self.events.append(events.market_settled(self.market_id, final_score, long_won))

        logger.info(
            "Market settled: market=%s score=%d threshold=%d long_won=%s",
            self.market_id, final_score, self.threshold, long_won,
        )
        return long_won

    def _redistribute(self, long_won: bool) -> None:
        """Move the losing reserve to the winners net of rake.

        The two branches are independent. With no winning holders the
        winning reserve is swept to fees, while the losing reserve stays
        where it is (the rake transfer needs winning supply > 0).
        """
        s = self.state
        rake_rate, precision = self.params.settle_rake_rate, self.params.fee_precision
        if long_won:
            if s.short_reserve > 0 and s.long_supply > 0:
                rake = mul_div(s.short_reserve, rake_rate, precision)
                s.protocol_fees += rake
                s.long_reserve += s.short_reserve - rake
                s.short_reserve = 0
            if s.long_supply == 0:
                s.protocol_fees += s.long_reserve
                s.long_reserve = 0
        else:
            if s.long_reserve > 0 and s.short_supply > 0:
                rake = mul_div(s.long_reserve, rake_rate, precision)
                s.protocol_fees += rake
                s.short_reserve += s.long_reserve - rake
                s.long_reserve = 0
            if s.short_supply == 0:
                s.protocol_fees += s.short_reserve
                s.short_reserve = 0

    # ------------------------------------------------------------------
    # Claims and fees
    # ------------------------------------------------------------------

    def claim_reward(self, caller: str) -> int:
        with self._non_reentrant():
            if not self.state.settled:
                raise NotSettledError(self.market_id)
            holder = self._holders.get(caller)
            if holder is not None and holder.claimed:
                raise AlreadyClaimedError(caller)
            payout = self.payout_of(caller)
            if payout == 0:
                raise NoWinningsError(caller)

            with self._rollback_on_error():
                holder = self._holders[caller]
                holder.claimed = True
                self._collateral.transfer(
                    self.account_id, caller, payout,
                    LedgerEntryType.REWARD_PAYOUT.value, _REFERENCE_TYPE, self.market_id,
                )
                self.events.append(events.rewards_claimed(self.market_id, caller, payout))

        logger.info("Rewards claimed: market=%s account=%s amount=%d", self.market_id, caller, payout)
        return payout

    def withdraw_fees(self, caller: str) -> int:
        with self._non_reentrant():
            if caller != self.registry_id:
                raise UnauthorizedError(caller, f"withdraw fees of market {self.market_id}")
            amount = self.state.protocol_fees
            if amount == 0:
                raise NoFeesError(self.market_id)

            with self._rollback_on_error():
                self.state.protocol_fees = 0
                self._collateral.transfer(
                    self.account_id, self.registry_id, amount,
                    LedgerEntryType.FEE_WITHDRAWAL.value, _REFERENCE_TYPE, self.market_id,
                )
                self.events.append(events.fees_withdrawn(self.market_id, self.registry_id, amount))

        logger.info("Protocol fees withdrawn: market=%s amount=%d", self.market_id, amount)
        return amount

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    @contextmanager
    def _non_reentrant(self) -> Iterator[None]:
        if self._entered:
            raise ReentrantCallError(self.market_id)
        self._entered = True
        try:
            yield
        finally:
            self._entered = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Undo scope around a mutating call and the work chained after it.

        If the block raises, market state, holders, events, minted positions
        and this market's custody transfers are put back as they were on
        entry. Custody is reversed entry by entry, so transfers other
        callers make while the block awaits are kept.
        """
        mark = self._collateral.ledger_mark()
        with self._rollback_on_error(), self.long_token.savepoint(), self.short_token.savepoint():
            try:
                yield
            except Exception:
                self._collateral.reverse_since(mark, _REFERENCE_TYPE, self.market_id)
                raise

    @contextmanager
    def _rollback_on_error(self) -> Iterator[None]:
        state = replace(self.state)
        holders = {k: replace(h) for k, h in self._holders.items()}
        holder_list = list(self._holder_list)
        event_count = len(self.events)
        try:
            yield
        except Exception:
            self.state = state
            self._holders = holders
            self._holder_list = holder_list
            del self.events[event_count:]
            raise

"""MarketApplicationService — composition layer over the registry.

Mutating calls run under one asyncio.Lock, since custody is shared by every
market. Each runs the synchronous domain operation and journals the events
it produced inside the market's `transaction()`, so a failed journal write
undoes the in-memory effect as well as the SQL. Read-only calls touch
neither the lock nor the database.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Side
from src.pm_common.fixed_point import fixed_to_display
from src.pm_market.application.schemas import (
    BuyResponse,
    ClaimResponse,
    MarketDetail,
    MarketEventOut,
    MarketListItem,
    MarketListResponse,
    PositionResponse,
    QuoteResponse,
    SettleResponse,
)
from src.pm_market.domain.events import MarketEvent
from src.pm_market.infrastructure.event_journal import write_market_events
from src.pm_registry.domain.registry import MarketRegistry

logger = logging.getLogger(__name__)


class MarketApplicationService:
    def __init__(self) -> None:
        self._write_lock = asyncio.Lock()

    async def _journal(self, db: AsyncSession, batch: list[MarketEvent]) -> None:
        if not batch:
            return
        try:
            await write_market_events(batch, db)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error(
                "Journal write failed for %d event(s) of market %s",
                len(batch), batch[0].market_id,
            )
            raise

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_markets(self, registry: MarketRegistry) -> MarketListResponse:
        items = [MarketListItem.from_domain(m.info()) for m in registry.list_all_markets()]
        return MarketListResponse(items=items, total=len(items))

    def get_market(self, registry: MarketRegistry, market_id: str) -> MarketDetail:
        return MarketDetail.from_domain(registry.require_market(market_id).info())

    def quote(self, registry: MarketRegistry, market_id: str, tokens: int) -> QuoteResponse:
        market = registry.require_market(market_id)
        cost = market.quote(tokens)
        return QuoteResponse(
            market_id=market_id,
            supply=market.state.combined_supply,
            tokens=tokens,
            cost=cost,
            cost_display=fixed_to_display(cost),
            current_price=market.current_price(),
        )

    def get_position(
        self, registry: MarketRegistry, market_id: str, account_id: str
    ) -> PositionResponse:
        market = registry.require_market(market_id)
        return PositionResponse.build(
            market_id=market_id,
            account_id=account_id,
            long_tokens=market.long_balance_of(account_id),
            short_tokens=market.short_balance_of(account_id),
            holder=market.holder(account_id),
            payout=market.payout_of(account_id),
        )

    def list_events(self, registry: MarketRegistry, market_id: str) -> list[MarketEventOut]:
        market = registry.require_market(market_id)
        return [MarketEventOut.from_domain(e) for e in market.events]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_market(
        self,
        db: AsyncSession,
        registry: MarketRegistry,
        market_id: str,
        theta: int,
        duration_seconds: int,
    ) -> MarketDetail:
        async with self._write_lock:
            with registry.transaction():
                start = len(registry.events)
                market = registry.create_market(market_id, theta, duration_seconds)
                await self._journal(db, registry.events[start:])
        return MarketDetail.from_domain(market.info())

    async def buy(
        self,
        db: AsyncSession,
        registry: MarketRegistry,
        market_id: str,
        caller: str,
        side: Side,
        token_amount: int,
        payment_amount: int,
    ) -> BuyResponse:
        market = registry.require_market(market_id)
        async with self._write_lock:
            with market.transaction():
                start = len(market.events)
                result = market.buy(caller, side, token_amount, payment_amount)
                await self._journal(db, market.events[start:])
        return BuyResponse.from_result(market_id, result)

    async def settle(
        self, db: AsyncSession, registry: MarketRegistry, market_id: str
    ) -> SettleResponse:
        market = registry.require_market(market_id)
        async with self._write_lock:
            with market.transaction():
                start = len(market.events)
                long_won = market.settle()
                await self._journal(db, market.events[start:])
        s = market.state
        return SettleResponse(
            market_id=market_id,
            final_score=s.final_score if s.final_score is not None else 0,
            threshold=market.threshold,
            long_won=long_won,
            long_reserve=s.long_reserve,
            short_reserve=s.short_reserve,
            total_reserve=s.total_reserve,
            protocol_fees=s.protocol_fees,
        )

    async def claim(
        self, db: AsyncSession, registry: MarketRegistry, market_id: str, caller: str
    ) -> ClaimResponse:
        market = registry.require_market(market_id)
        async with self._write_lock:
            with market.transaction():
                start = len(market.events)
                amount = market.claim_reward(caller)
                await self._journal(db, market.events[start:])
        return ClaimResponse(
            market_id=market_id,
            account_id=caller,
            amount=amount,
            amount_display=fixed_to_display(amount),
        )

    async def withdraw_fees(
        self, db: AsyncSession, registry: MarketRegistry, caller: str, market_id: str
    ) -> int:
        market = registry.require_market(market_id)
        async with self._write_lock:
            with market.transaction():
                start = len(market.events)
                amount = registry.withdraw_fees(caller, market_id)
                await self._journal(db, market.events[start:])
        return amount

    def request_score(self, registry: MarketRegistry, market_id: str) -> None:
        registry.require_market(market_id).request_score()


# Shared by every router so per-market locks are process-wide
market_service = MarketApplicationService()

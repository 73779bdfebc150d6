"""Market invariant verification after each trade and on demand."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.pm_market.domain.market import PredictionMarket

logger = logging.getLogger(__name__)


def verify_invariants_after_trade(market: "PredictionMarket") -> None:
    """Verify critical market invariants after a trade. Raises AssertionError if violated.

    INV-1: total_reserve == long_reserve + short_reserve
    INV-2: escrow balance == total_reserve + protocol_fees

    Exact equality holds because only the market moves its escrow account:
    the gateway refuses callers whose id is an internal custody account, so
    nobody can deposit into or trade as `market:<id>`.
    """
    state = market.state
    reserves = state.long_reserve + state.short_reserve
    assert state.total_reserve == reserves, (
        f"INV-1 violated: total_reserve={state.total_reserve} "
        f"!= long_reserve + short_reserve = {reserves}"
    )
    escrow = market.escrow_balance()
    owed = state.total_reserve + state.protocol_fees
    assert escrow == owed, (
        f"INV-2 violated: escrow={escrow} != total_reserve + protocol_fees = {owed}"
    )
    logger.debug(
        "Invariants OK: market=%s, total_reserve=%d, supply=%d",
        market.market_id, state.total_reserve, state.combined_supply,
    )


def check_market_invariants(market: "PredictionMarket") -> list[str]:
    """Return violation strings instead of raising; safe on settled markets.

    After settlement only supply bookkeeping is checked: reserves are
    redistributed and payouts drain escrow independently of them.
    """
    violations: list[str] = []
    state = market.state
    if state.long_supply != market.long_token.total_supply:
        violations.append(
            f"INV-S violated on {market.market_id}: long_supply={state.long_supply} "
            f"!= minted={market.long_token.total_supply}"
        )
    if state.short_supply != market.short_token.total_supply:
        violations.append(
            f"INV-S violated on {market.market_id}: short_supply={state.short_supply} "
            f"!= minted={market.short_token.total_supply}"
        )
    if not state.settled:
        try:
            verify_invariants_after_trade(market)
        except AssertionError as e:
            violations.append(f"{market.market_id}: {e}")
    for msg in violations:
        logger.error(msg)
    return violations

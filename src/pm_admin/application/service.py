# src/pm_admin/application/service.py
"""Admin application service — owner-only registry operations."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import OracleNotWritableError
from src.pm_market.application.service import MarketApplicationService, market_service
from src.pm_market.domain.invariants import check_market_invariants
from src.pm_oracle.infrastructure.mock_oracle import MockEngagementOracle
from src.pm_registry.domain.registry import MarketRegistry


class AdminService:
    def __init__(self, markets: MarketApplicationService | None = None) -> None:
        self._markets = markets or market_service

    async def withdraw_fees(
        self, caller: str, market_id: str, registry: MarketRegistry, db: AsyncSession
    ) -> dict[str, Any]:
        amount = await self._markets.withdraw_fees(db, registry, caller, market_id)
        return {
            "market_id": market_id,
            "recipient": registry.registry_id,
            "amount": amount,
        }

    def set_default_alpha(
        self, caller: str, alpha: int, registry: MarketRegistry
    ) -> dict[str, Any]:
        registry.set_default_alpha(caller, alpha)
        return {"default_alpha": registry.default_alpha}

    def set_score(
        self, market_id: str, score: int, registry: MarketRegistry
    ) -> dict[str, Any]:
        """Publish a score to the market's oracle; only the mock accepts manual scores."""
        oracle = registry.require_market(market_id).oracle
        if not isinstance(oracle, MockEngagementOracle):
            raise OracleNotWritableError()
        oracle.set_score(market_id, score)
        return {"market_id": market_id, "score": score}

    def verify_all_invariants(self, registry: MarketRegistry) -> dict[str, object]:
        """Run per-market supply, reserve and escrow checks across the registry."""
        violations: list[str] = []
        for market in registry.list_all_markets():
            violations.extend(check_market_invariants(market))
        return {"ok": len(violations) == 0, "violations": violations}

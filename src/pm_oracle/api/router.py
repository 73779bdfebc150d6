"""Read-only oracle endpoint: the score a market would settle against."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.pm_common.fixed_point import fixed_to_display
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_account
from src.pm_registry.application.runtime import get_registry
from src.pm_registry.domain.registry import MarketRegistry

router = APIRouter(prefix="/oracle", tags=["oracle"])


@router.get("/scores/{market_id}")
async def get_score(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    market = registry.require_market(market_id)
    score = market.oracle.get_score(market_id)
    resp = success_response(
        {
            "market_id": market_id,
            "score": score,
            "score_display": fixed_to_display(score),
            "threshold": market.threshold,
        }
    )
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp

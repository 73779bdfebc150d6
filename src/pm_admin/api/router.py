# src/pm_admin/api/router.py
"""Admin REST API — every route requires the registry owner."""
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_admin.application.service import AdminService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import require_owner
from src.pm_registry.application.runtime import get_registry
from src.pm_registry.domain.registry import MarketRegistry

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class DefaultAlphaRequest(BaseModel):
    alpha: int = Field(..., gt=0, description="Threshold multiplier for new markets, 1e18 scale")


class SetScoreRequest(BaseModel):
    score: int = Field(..., ge=0, description="Final engagement score, 1e18 scale")


@router.post("/markets/{market_id}/withdraw-fees")
async def withdraw_fees(
    market_id: str,
    owner: Annotated[str, Depends(require_owner)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.withdraw_fees(owner, market_id, registry, db)
    return success_response(result)


@router.put("/default-alpha")
async def set_default_alpha(
    body: DefaultAlphaRequest,
    owner: Annotated[str, Depends(require_owner)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    return success_response(_service.set_default_alpha(owner, body.alpha, registry))


@router.put("/oracle/scores/{market_id}")
async def set_score(
    market_id: str,
    body: SetScoreRequest,
    owner: Annotated[str, Depends(require_owner)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    return success_response(_service.set_score(market_id, body.score, registry))


@router.get("/invariants")
async def verify_invariants(
    owner: Annotated[str, Depends(require_owner)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    return success_response(_service.verify_all_invariants(registry))

"""pm_market REST endpoints.

GET  /markets                                   — list all markets
POST /markets                                   — create a market
GET  /markets/{market_id}                       — full detail
GET  /markets/{market_id}/quote                 — mint cost for `tokens`
POST /markets/{market_id}/buy                   — buy LONG or SHORT tokens
POST /markets/{market_id}/settle                — permissionless settlement
POST /markets/{market_id}/claim                 — claim winnings
POST /markets/{market_id}/request-score         — nudge the oracle
GET  /markets/{market_id}/positions/{account_id}
GET  /markets/{market_id}/events                — in-memory event log
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_account
from src.pm_market.application.schemas import BuyRequest, CreateMarketRequest
from src.pm_market.application.service import market_service as _service
from src.pm_registry.application.runtime import get_registry
from src.pm_registry.domain.registry import MarketRegistry

router = APIRouter(prefix="/markets", tags=["markets"])


def _wrap(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_markets(
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    result = _service.list_markets(registry)
    return _wrap(request, result.model_dump())


@router.post("")
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_market(
        db, registry, body.market_id, body.theta, body.duration_seconds
    )
    return _wrap(request, result.model_dump())


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    result = _service.get_market(registry, market_id)
    return _wrap(request, result.model_dump())


@router.get("/{market_id}/quote")
async def quote(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    tokens: int = Query(..., ge=0, description="Tokens to mint, 1e18 scale"),
) -> ApiResponse:
    result = _service.quote(registry, market_id, tokens)
    return _wrap(request, result.model_dump())


@router.post("/{market_id}/buy")
async def buy(
    market_id: str,
    body: BuyRequest,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.buy(
        db, registry, market_id, caller, body.side, body.token_amount, body.payment_amount
    )
    return _wrap(request, result.model_dump())


@router.post("/{market_id}/settle")
async def settle(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.settle(db, registry, market_id)
    return _wrap(request, result.model_dump())


@router.post("/{market_id}/claim")
async def claim(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.claim(db, registry, market_id, caller)
    return _wrap(request, result.model_dump())


@router.post("/{market_id}/request-score")
async def request_score(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    _service.request_score(registry, market_id)
    return _wrap(request, {"market_id": market_id, "requested": True})


@router.get("/{market_id}/positions/{account_id}")
async def get_position(
    market_id: str,
    account_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    result = _service.get_position(registry, market_id, account_id)
    return _wrap(request, result.model_dump())


@router.get("/{market_id}/events")
async def list_events(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
) -> ApiResponse:
    items = _service.list_events(registry, market_id)
    return _wrap(request, {"items": [e.model_dump() for e in items], "total": len(items)})

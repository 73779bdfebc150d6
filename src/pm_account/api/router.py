"""pm_account REST API — 3 endpoints, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.pm_account.application.schemas import DepositRequest
from src.pm_account.application.service import AccountApplicationService
from src.pm_common.enums import LedgerEntryType
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_account
from src.pm_registry.application.runtime import get_registry
from src.pm_registry.domain.registry import MarketRegistry

router = APIRouter(prefix="/account", tags=["account"])

_service = AccountApplicationService()


@router.get("/balance")
async def get_balance(
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    request: Request,
) -> ApiResponse:
    data = _service.get_balance(registry.collateral, caller)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/deposit")
async def deposit(
    body: DepositRequest,
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    request: Request,
) -> ApiResponse:
    data = _service.deposit(registry.collateral, caller, body.amount)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/ledger")
async def list_ledger(
    caller: Annotated[str, Depends(get_current_account)],
    registry: Annotated[MarketRegistry, Depends(get_registry)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    entry_type: LedgerEntryType | None = Query(None, description="Filter by entry type"),
) -> ApiResponse:
    data = _service.list_ledger(
        registry.collateral,
        caller,
        cursor,
        limit,
        entry_type.value if entry_type else None,
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp

"""Balance adjustment endpoints — 2 endpoints, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.application.adjustment_service import AdjustmentApplicationService
from src.pf_account.application.schemas import CreateAdjustmentRequest
from src.pf_common.database import get_db_session
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user_id

router = APIRouter(prefix="/adjustments", tags=["adjustments"])

_service = AdjustmentApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    body: CreateAdjustmentRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    response: Response,
) -> ApiResponse:
    data = await _service.create_adjustment(db, user_id, body)
    if data.adjusted:
        resp = success_response(data.model_dump(), "Balance adjusted")
    else:
        response.status_code = status.HTTP_200_OK
        resp = success_response(data.model_dump(), "No balance change detected")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_adjustments(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    account_id: str | None = Query(None, description="Only adjustments of this account"),
) -> ApiResponse:
    data = await _service.list_adjustments(db, user_id, account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp

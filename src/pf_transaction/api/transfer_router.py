"""Transfer endpoint — moves money between two of the caller's accounts."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user_id
from src.pf_transaction.application.schemas import CreateTransferRequest
from src.pf_transaction.application.transfer_service import TransferApplicationService

router = APIRouter(prefix="/transfers", tags=["transfers"])

_service = TransferApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transfer(
    body: CreateTransferRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_transfer(db, user_id, body)
    resp = success_response(data.model_dump(), "Transfer completed")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp

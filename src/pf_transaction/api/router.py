"""pf_transaction REST API — 6 endpoints, all require JWT authentication."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.enums import TransactionType
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user_id
from src.pf_transaction.application.schemas import (
    CreateTransactionRequest,
    UpdateTransactionRequest,
)
from src.pf_transaction.application.service import TransactionApplicationService
from src.pf_transaction.domain.models import TransactionFilter

router = APIRouter(prefix="/transactions", tags=["transactions"])

_service = TransactionApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: CreateTransactionRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_transaction(db, user_id, body)
    resp = success_response(data.model_dump(), "Transaction created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_transactions(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    account_id: str | None = Query(None),
    type: TransactionType | None = Query(None, description="Filter by TransactionType"),
    category: str | None = Query(None, description="Case-insensitive substring"),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(50, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    filters = TransactionFilter(
        account_id=account_id,
        type=type.value if type else None,
        category=category,
        date_from=date_from,
        date_to=date_to,
    )
    data = await _service.list_transactions(db, user_id, filters, cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# Declared before /{transaction_id} so "tags" is not taken as an id
@router.get("/tags")
async def list_tags(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_tags(db, user_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_transaction(db, user_id, transaction_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    body: UpdateTransactionRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_transaction(db, user_id, transaction_id, body)
    resp = success_response(data.model_dump(), "Transaction updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_transaction(db, user_id, transaction_id)
    resp = success_response(data.model_dump(), "Transaction deleted")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp

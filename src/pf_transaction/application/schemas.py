"""Pydantic schemas and cursor utilities for pf_transaction API."""

import base64
import json
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field

from src.pf_common.enums import PaymentMode, TransactionType
from src.pf_common.money import format_money
from src.pf_transaction.domain.models import NOTE_MAX_LENGTH, Transaction

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_date: datetime, last_id: str) -> str:
    """Encode the (date, id) of the last row into an opaque Base64 cursor string."""
    payload = json.dumps({"date": last_date.isoformat(), "id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime, str] | None:
    """Decode a cursor string back to (date, id). Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(payload["date"]), str(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

Tag = Annotated[str, Field(min_length=1, max_length=30)]


class CreateTransactionRequest(BaseModel):
    account_id: str = Field(..., min_length=1)
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=50)
    amount_cents: int = Field(..., gt=0, description="Positive magnitude in cents")
    currency: str | None = Field(
        None, min_length=3, max_length=3, description="Defaults to the account currency"
    )
    date: datetime | None = Field(None, description="Defaults to now (UTC)")
    merchant: str | None = Field(None, max_length=100)
    note: str | None = Field(None, max_length=NOTE_MAX_LENGTH)
    tags: list[Tag] = Field(default_factory=list, max_length=20)
    payment_mode: PaymentMode | None = None


class UpdateTransactionRequest(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    account_id: str | None = Field(None, min_length=1)
    type: TransactionType | None = None
    category: str | None = Field(None, min_length=1, max_length=50)
    amount_cents: int | None = Field(None, gt=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    date: datetime | None = None
    merchant: str | None = Field(None, max_length=100)
    note: str | None = Field(None, max_length=NOTE_MAX_LENGTH)
    tags: list[Tag] | None = Field(None, max_length=20)
    payment_mode: PaymentMode | None = None


class CreateTransferRequest(BaseModel):
    from_account_id: str = Field(..., min_length=1)
    to_account_id: str = Field(..., min_length=1)
    amount_cents: int = Field(..., gt=0)
    date: datetime | None = None
    note: str | None = Field(None, max_length=NOTE_MAX_LENGTH)
    category: str = Field("Transfer", max_length=50)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountRef(BaseModel):
    id: str
    name: str | None
    type: str | None


class TransactionResponse(BaseModel):
    id: str
    account: AccountRef
    type: str
    category: str
    amount_cents: int
    amount_display: str
    signed_amount_cents: int
    currency: str
    date: str
    merchant: str | None
    note: str | None
    tags: list[str]
    payment_mode: str | None
    transfer_id: str | None
    transfer_to_account_id: str | None
    transfer_from_account_id: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionResponse":
        return cls(
            id=tx.id,
            account=AccountRef(id=tx.account_id, name=tx.account_name, type=tx.account_type),
            type=tx.type,
            category=tx.category,
            amount_cents=tx.amount_cents,
            amount_display=format_money(tx.amount_cents, tx.currency),
            signed_amount_cents=tx.signed_amount_cents,
            currency=tx.currency,
            date=tx.date.isoformat(),
            merchant=tx.merchant,
            note=tx.note,
            tags=list(tx.tags),
            payment_mode=tx.payment_mode,
            transfer_id=tx.transfer_id,
            transfer_to_account_id=tx.transfer_to_account_id,
            transfer_from_account_id=tx.transfer_from_account_id,
            created_at=tx.created_at.isoformat() if tx.created_at else None,
            updated_at=tx.updated_at.isoformat() if tx.updated_at else None,
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    next_cursor: str | None
    has_more: bool


class DeleteTransactionResponse(BaseModel):
    deleted_ids: list[str]
    transfer_id: str | None


class TransferResponse(BaseModel):
    transfer_id: str
    transactions: list[TransactionResponse]   # [expense leg, income leg]


class TagCount(BaseModel):
    tag: str
    count: int


class TagListResponse(BaseModel):
    items: list[TagCount]

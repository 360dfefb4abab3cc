"""TransactionApplicationService — record mutations and their balance impact.

Every mutation runs in one UnitOfWork: the transaction row and the balance
delta it implies commit together or not at all.

    create:  balance += delta(new)
    update:  balance(old account) -= delta(old); balance(new account) += delta(new)
    delete:  balance -= delta(old)

Deleting either leg of a transfer deletes both legs; editing the category or
date of one leg applies the same value to the other.
"""

import logging
from dataclasses import replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.ledger import BalanceLedger
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.database import UnitOfWork
from src.pf_common.enums import WRITABLE_TRANSACTION_TYPES, TransactionType
from src.pf_common.errors import (
    AccountNotFoundError,
    InvalidAmountError,
    TransactionNotFoundError,
    TransferLegImmutableError,
    UnsupportedTransactionTypeError,
    ValidationError,
)
from src.pf_common.money import is_positive_cents, normalize_currency
from src.pf_transaction.application.schemas import (
    CreateTransactionRequest,
    DeleteTransactionResponse,
    TagCount,
    TagListResponse,
    TransactionListResponse,
    TransactionResponse,
    UpdateTransactionRequest,
    cursor_decode,
    cursor_encode,
)
from src.pf_transaction.domain.models import NewTransaction, TransactionFilter
from src.pf_transaction.domain.repository import TransactionRepositoryProtocol
from src.pf_transaction.domain.sign import signed_delta
from src.pf_transaction.infrastructure.persistence import TransactionRepository

logger = logging.getLogger(__name__)

TAG_LIST_LIMIT = 100

# Fields that define a transfer leg's balance impact.
_TRANSFER_LOCKED_FIELDS = ("account_id", "type", "amount_cents")

# Fields both legs of a transfer always share; an edit on one leg applies to both.
_TRANSFER_SHARED_FIELDS = ("category", "date")

# Columns that can never be cleared by an explicit null.
_REQUIRED_FIELDS = ("account_id", "type", "category", "amount_cents", "currency", "date")


def _require_writable_type(tx_type: TransactionType) -> None:
    if tx_type in WRITABLE_TRANSACTION_TYPES:
        return
    if tx_type == TransactionType.TRANSFER:
        raise UnsupportedTransactionTypeError(tx_type.value, "use the transfer endpoint")
    raise UnsupportedTransactionTypeError(tx_type.value, "use the adjustment endpoint")


def _require_positive_amount(amount_cents: int) -> None:
    if not is_positive_cents(amount_cents):
        raise InvalidAmountError(amount_cents)


def _clean_category(category: str) -> str:
    cleaned = category.strip()
    if not cleaned:
        raise ValidationError("Category is required", 3006)
    return cleaned


def _clean_tags(tags: list[str]) -> list[str]:
    seen: list[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class TransactionApplicationService:
    def __init__(
        self,
        repo: TransactionRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        ledger: BalanceLedger | None = None,
    ) -> None:
        self._repo: TransactionRepositoryProtocol = repo or TransactionRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._ledger = ledger or BalanceLedger(self._accounts)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_transaction(
        self, db: AsyncSession, user_id: str, request: CreateTransactionRequest
    ) -> TransactionResponse:
        _require_writable_type(request.type)
        _require_positive_amount(request.amount_cents)
        category = _clean_category(request.category)

        async with UnitOfWork(db) as uow:
            account = await self._accounts.get_account(
                uow.session, user_id, request.account_id, for_update=True
            )
            if account is None:
                raise AccountNotFoundError(request.account_id)

            tx = await self._repo.insert_transaction(
                uow.session,
                NewTransaction(
                    user_id=user_id,
                    account_id=account.id,
                    type=request.type.value,
                    category=category,
                    amount_cents=request.amount_cents,
                    currency=normalize_currency(request.currency or account.currency),
                    date=request.date or datetime.now(UTC),
                    merchant=request.merchant,
                    note=request.note,
                    tags=_clean_tags(request.tags),
                    payment_mode=_column_value(request.payment_mode),
                ),
            )
            delta = signed_delta(tx.type, tx.amount_cents)
            updated = await self._ledger.apply_delta(uow, user_id, account.id, delta)

        logger.info(
            "Transaction created: id=%s account=%s type=%s delta=%d balance=%d",
            tx.id, account.id, tx.type, delta, updated.current_balance_cents,
        )
        return TransactionResponse.from_domain(
            replace(tx, account_name=account.name, account_type=account.type)
        )

    async def update_transaction(
        self,
        db: AsyncSession,
        user_id: str,
        transaction_id: str,
        request: UpdateTransactionRequest,
    ) -> TransactionResponse:
        fields = request.model_dump(exclude_unset=True)
        for name in _REQUIRED_FIELDS:
            if name in fields and fields[name] is None:
                raise ValidationError(f"Field '{name}' cannot be null", 3007, {"field": name})
        if "type" in fields:
            _require_writable_type(fields["type"])
        if "amount_cents" in fields:
            _require_positive_amount(fields["amount_cents"])
        if "category" in fields:
            fields["category"] = _clean_category(fields["category"])
        if "currency" in fields:
            fields["currency"] = normalize_currency(fields["currency"])
        if fields.get("tags") is not None:
            fields["tags"] = _clean_tags(fields["tags"])
        elif "tags" in fields:
            fields["tags"] = []
        fields = {name: _column_value(value) for name, value in fields.items()}

        async with UnitOfWork(db) as uow:
            existing = await self._repo.get_transaction(
                uow.session, user_id, transaction_id, for_update=True
            )
            if existing is None:
                raise TransactionNotFoundError(transaction_id)

            if existing.is_transfer_leg:
                changed = [
                    name for name in _TRANSFER_LOCKED_FIELDS
                    if name in fields and fields[name] != getattr(existing, name)
                ]
                if changed:
                    raise TransferLegImmutableError(transaction_id, changed)

            new_account_id = fields.get("account_id", existing.account_id)
            if new_account_id != existing.account_id:
                target = await self._accounts.get_account(
                    uow.session, user_id, new_account_id, for_update=True
                )
                if target is None:
                    raise AccountNotFoundError(new_account_id)

            old_delta = signed_delta(existing.type, existing.amount_cents)
            new_delta = signed_delta(
                fields.get("type", existing.type),
                fields.get("amount_cents", existing.amount_cents),
            )
            if new_account_id != existing.account_id or new_delta != old_delta:
                await self._ledger.apply_delta(uow, user_id, existing.account_id, -old_delta)
                await self._ledger.apply_delta(uow, user_id, new_account_id, new_delta)

            if fields:
                await self._repo.update_transaction(uow.session, user_id, transaction_id, fields)
            shared = {name: fields[name] for name in _TRANSFER_SHARED_FIELDS if name in fields}
            if existing.transfer_id is not None and shared:
                await self._sync_transfer_legs(
                    uow, user_id, existing.transfer_id, transaction_id, shared
                )
            tx = await self._repo.get_transaction(uow.session, user_id, transaction_id)
            if tx is None:
                raise TransactionNotFoundError(transaction_id)

        logger.info(
            "Transaction updated: id=%s account=%s->%s delta=%d->%d",
            transaction_id, existing.account_id, new_account_id, old_delta, new_delta,
        )
        return TransactionResponse.from_domain(tx)

    async def _sync_transfer_legs(
        self,
        uow: UnitOfWork,
        user_id: str,
        transfer_id: str,
        edited_id: str,
        shared: dict[str, Any],
    ) -> None:
        legs = await self._repo.get_transfer_legs(
            uow.session, user_id, transfer_id, for_update=True
        )
        for leg in legs:
            if leg.id != edited_id:
                await self._repo.update_transaction(uow.session, user_id, leg.id, shared)

    async def delete_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str
    ) -> DeleteTransactionResponse:
        async with UnitOfWork(db) as uow:
            existing = await self._repo.get_transaction(
                uow.session, user_id, transaction_id, for_update=True
            )
            if existing is None:
                raise TransactionNotFoundError(transaction_id)

            legs = [existing]
            if existing.transfer_id is not None:
                legs = await self._repo.get_transfer_legs(
                    uow.session, user_id, existing.transfer_id, for_update=True
                )

            for leg in legs:
                delta = signed_delta(leg.type, leg.amount_cents)
                if delta:
                    await self._ledger.apply_delta(uow, user_id, leg.account_id, -delta)
                await self._repo.delete_transaction(uow.session, user_id, leg.id)

        deleted_ids = [leg.id for leg in legs]
        logger.info(
            "Transaction deleted: ids=%s transfer=%s", deleted_ids, existing.transfer_id
        )
        return DeleteTransactionResponse(
            deleted_ids=deleted_ids, transfer_id=existing.transfer_id
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str
    ) -> TransactionResponse:
        tx = await self._repo.get_transaction(db, user_id, transaction_id)
        if tx is None:
            raise TransactionNotFoundError(transaction_id)
        return TransactionResponse.from_domain(tx)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        filters: TransactionFilter,
        cursor: str | None,
        limit: int,
    ) -> TransactionListResponse:
        decoded = cursor_decode(cursor)
        cursor_date, cursor_id = decoded if decoded else (None, None)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        rows = await self._repo.list_transactions(
            db, user_id, filters, cursor_date, cursor_id, limit + 1
        )
        has_more = len(rows) > limit
        page = rows[:limit]

        next_cursor = cursor_encode(page[-1].date, page[-1].id) if has_more and page else None
        return TransactionListResponse(
            items=[TransactionResponse.from_domain(tx) for tx in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def list_tags(self, db: AsyncSession, user_id: str) -> TagListResponse:
        rows = await self._repo.list_tags(db, user_id, TAG_LIST_LIMIT)
        return TagListResponse(items=[TagCount(tag=tag, count=count) for tag, count in rows])

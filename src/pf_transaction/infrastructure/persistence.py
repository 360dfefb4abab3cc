"""TransactionRepository — concrete implementation of TransactionRepositoryProtocol.

Reads join the owning account so responses can carry its name and type.
Row locks (FOR UPDATE OF t) cover the transaction row only; account rows are
locked separately through the account repository.

Transaction ownership: the CALLER opens the UnitOfWork. Nothing here commits.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import func, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_transaction.domain.models import NewTransaction, Transaction, TransactionFilter
from src.pf_transaction.infrastructure.db_models import TransactionORM

_TX_COLUMNS = """
    t.id, t.user_id, t.account_id, t.type, t.category, t.amount_cents, t.currency,
    t.date, t.merchant, t.note, t.tags, t.payment_mode,
    t.transfer_id, t.transfer_to_account_id, t.transfer_from_account_id,
    t.created_at, t.updated_at,
    a.name AS account_name, a.type AS account_type
"""

_GET_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions t
    JOIN accounts a ON a.id = t.account_id
    WHERE t.id = :transaction_id AND t.user_id = :user_id
""")

_GET_TX_FOR_UPDATE_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions t
    JOIN accounts a ON a.id = t.account_id
    WHERE t.id = :transaction_id AND t.user_id = :user_id
    FOR UPDATE OF t
""")

_GET_TRANSFER_LEGS_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions t
    JOIN accounts a ON a.id = t.account_id
    WHERE t.transfer_id = :transfer_id AND t.user_id = :user_id
    ORDER BY t.id
""")

_GET_TRANSFER_LEGS_FOR_UPDATE_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions t
    JOIN accounts a ON a.id = t.account_id
    WHERE t.transfer_id = :transfer_id AND t.user_id = :user_id
    ORDER BY t.id
    FOR UPDATE OF t
""")

_INSERT_TX_SQL = text("""
    INSERT INTO transactions
        (user_id, account_id, type, category, amount_cents, currency, date,
         merchant, note, tags, payment_mode,
         transfer_id, transfer_to_account_id, transfer_from_account_id)
    VALUES
        (:user_id, :account_id, :type, :category, :amount_cents, :currency, :date,
         :merchant, :note, :tags, :payment_mode,
         :transfer_id, :transfer_to_account_id, :transfer_from_account_id)
    RETURNING id, user_id, account_id, type, category, amount_cents, currency,
              date, merchant, note, tags, payment_mode,
              transfer_id, transfer_to_account_id, transfer_from_account_id,
              created_at, updated_at
""")

_DELETE_TX_SQL = text("""
    DELETE FROM transactions
    WHERE id = :transaction_id AND user_id = :user_id
    RETURNING id
""")

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions t
    JOIN accounts a ON a.id = t.account_id
    WHERE t.user_id = :user_id
        AND (CAST(:account_id AS TEXT) IS NULL OR t.account_id = CAST(:account_id AS TEXT))
        AND (CAST(:type AS TEXT) IS NULL OR t.type = CAST(:type AS TEXT))
        AND (
            CAST(:category AS TEXT) IS NULL
            OR t.category ILIKE '%' || CAST(:category AS TEXT) || '%'
        )
        AND (CAST(:date_from AS TIMESTAMPTZ) IS NULL OR t.date >= CAST(:date_from AS TIMESTAMPTZ))
        AND (CAST(:date_to AS TIMESTAMPTZ) IS NULL OR t.date <= CAST(:date_to AS TIMESTAMPTZ))
        AND (
            CAST(:cursor_date AS TIMESTAMPTZ) IS NULL
            OR t.date < CAST(:cursor_date AS TIMESTAMPTZ)
            OR (
                t.date = CAST(:cursor_date AS TIMESTAMPTZ)
                AND t.id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY t.date DESC, t.id DESC
    LIMIT :limit
""")

_LIST_TAGS_SQL = text("""
    SELECT tag, COUNT(*) AS tag_count
    FROM transactions, unnest(tags) AS tag
    WHERE user_id = :user_id
    GROUP BY tag
    ORDER BY tag_count DESC, tag ASC
    LIMIT :limit
""")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        account_id=str(row.account_id),  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        date=row.date,  # type: ignore[attr-defined]
        merchant=row.merchant,  # type: ignore[attr-defined]
        note=row.note,  # type: ignore[attr-defined]
        tags=list(row.tags or []),  # type: ignore[attr-defined]
        payment_mode=row.payment_mode,  # type: ignore[attr-defined]
        transfer_id=row.transfer_id,  # type: ignore[attr-defined]
        transfer_to_account_id=row.transfer_to_account_id,  # type: ignore[attr-defined]
        transfer_from_account_id=row.transfer_from_account_id,  # type: ignore[attr-defined]
        account_name=getattr(row, "account_name", None),
        account_type=getattr(row, "account_type", None),
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class TransactionRepository:
    """Concrete repository — every statement is filtered by owner."""

    async def get_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str, for_update: bool = False
    ) -> Transaction | None:
        sql = _GET_TX_FOR_UPDATE_SQL if for_update else _GET_TX_SQL
        result = await db.execute(sql, {"transaction_id": transaction_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def get_transfer_legs(
        self, db: AsyncSession, user_id: str, transfer_id: str, for_update: bool = False
    ) -> list[Transaction]:
        sql = _GET_TRANSFER_LEGS_FOR_UPDATE_SQL if for_update else _GET_TRANSFER_LEGS_SQL
        result = await db.execute(sql, {"transfer_id": transfer_id, "user_id": user_id})
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def insert_transaction(self, db: AsyncSession, new: NewTransaction) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": new.user_id,
                "account_id": new.account_id,
                "type": new.type,
                "category": new.category,
                "amount_cents": new.amount_cents,
                "currency": new.currency,
                "date": new.date,
                "merchant": new.merchant,
                "note": new.note,
                "tags": list(new.tags),
                "payment_mode": new.payment_mode,
                "transfer_id": new.transfer_id,
                "transfer_to_account_id": new.transfer_to_account_id,
                "transfer_from_account_id": new.transfer_from_account_id,
            },
        )
        return _row_to_transaction(result.fetchone())

    async def update_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str, fields: dict[str, Any]
    ) -> bool:
        stmt = (
            update(TransactionORM)
            .where(TransactionORM.id == transaction_id, TransactionORM.user_id == user_id)
            .values(**fields, updated_at=func.now())
            .returning(TransactionORM.id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def delete_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str
    ) -> bool:
        result = await db.execute(
            _DELETE_TX_SQL, {"transaction_id": transaction_id, "user_id": user_id}
        )
        return result.fetchone() is not None

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        filters: TransactionFilter,
        cursor_date: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {
                "user_id": user_id,
                "account_id": filters.account_id,
                "type": filters.type,
                "category": _escape_like(filters.category) if filters.category else None,
                "date_from": filters.date_from,
                "date_to": filters.date_to,
                "cursor_date": cursor_date,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def list_tags(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[tuple[str, int]]:
        result = await db.execute(_LIST_TAGS_SQL, {"user_id": user_id, "limit": limit})
        return [(row.tag, int(row.tag_count)) for row in result.fetchall()]

"""AccountRepository — concrete implementation of AccountRepositoryProtocol.

Balance mutations are single atomic UPDATE ... RETURNING statements scoped by
(id, user_id). A result of 0 rows means the account does not exist for this
owner; the caller decides which error that is.

Transaction ownership: the CALLER opens the UnitOfWork. Nothing here commits.
"""

from typing import Any

from sqlalchemy import func, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.models import Account, Adjustment
from src.pf_account.infrastructure.db_models import AccountORM, AdjustmentORM

# ---------------------------------------------------------------------------
# SQL: accounts
# ---------------------------------------------------------------------------

_ACCOUNT_COLUMNS = """
    id, user_id, name, type, currency, color, icon,
    opening_balance_cents, current_balance_cents, created_at, updated_at
"""

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :account_id AND user_id = :user_id
""")

_GET_ACCOUNT_FOR_UPDATE_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :account_id AND user_id = :user_id
    FOR UPDATE
""")

_LIST_ACCOUNTS_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
    ORDER BY created_at DESC, id DESC
""")

_INSERT_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts
        (user_id, name, type, currency, color, icon,
         opening_balance_cents, current_balance_cents)
    VALUES
        (:user_id, :name, :type, :currency, :color, :icon,
         :opening_balance_cents, :opening_balance_cents)
    RETURNING {_ACCOUNT_COLUMNS}
""")

_DELETE_ACCOUNT_SQL = text("""
    DELETE FROM accounts
    WHERE id = :account_id AND user_id = :user_id
    RETURNING id
""")

_INCREMENT_BALANCE_SQL = text(f"""
    UPDATE accounts
    SET current_balance_cents = current_balance_cents + :delta,
        updated_at = NOW()
    WHERE id = :account_id AND user_id = :user_id
    RETURNING {_ACCOUNT_COLUMNS}
""")

_SET_BALANCE_SQL = text(f"""
    UPDATE accounts
    SET current_balance_cents = :new_balance,
        updated_at = NOW()
    WHERE id = :account_id AND user_id = :user_id
    RETURNING {_ACCOUNT_COLUMNS}
""")

_COUNT_TRANSACTIONS_SQL = text("""
    SELECT COUNT(*)
    FROM transactions
    WHERE account_id = :account_id AND user_id = :user_id
""")

_SUM_TRANSACTIONS_BY_TYPE_SQL = text("""
    SELECT type, COALESCE(SUM(amount_cents), 0) AS total
    FROM transactions
    WHERE account_id = :account_id AND user_id = :user_id
    GROUP BY type
""")

# ---------------------------------------------------------------------------
# SQL: adjustments
# ---------------------------------------------------------------------------

_INSERT_ADJUSTMENT_SQL = text("""
    INSERT INTO adjustments
        (user_id, account_id, previous_balance_cents, new_balance_cents,
         adjustment_amount_cents, reason)
    VALUES
        (:user_id, :account_id, :previous_balance_cents, :new_balance_cents,
         :adjustment_amount_cents, :reason)
    RETURNING id, user_id, account_id, previous_balance_cents, new_balance_cents,
              adjustment_amount_cents, reason, created_at
""")

_SUM_ADJUSTMENTS_SQL = text("""
    SELECT COALESCE(SUM(adjustment_amount_cents), 0)
    FROM adjustments
    WHERE account_id = :account_id AND user_id = :user_id
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        color=row.color,  # type: ignore[attr-defined]
        icon=row.icon,  # type: ignore[attr-defined]
        opening_balance_cents=row.opening_balance_cents,  # type: ignore[attr-defined]
        current_balance_cents=row.current_balance_cents,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_adjustment(row: object) -> Adjustment:
    return Adjustment(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        account_id=str(row.account_id),  # type: ignore[attr-defined]
        previous_balance_cents=row.previous_balance_cents,  # type: ignore[attr-defined]
        new_balance_cents=row.new_balance_cents,  # type: ignore[attr-defined]
        adjustment_amount_cents=row.adjustment_amount_cents,  # type: ignore[attr-defined]
        reason=row.reason,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository — every statement is filtered by owner."""

    async def get_account(
        self, db: AsyncSession, user_id: str, account_id: str, for_update: bool = False
    ) -> Account | None:
        sql = _GET_ACCOUNT_FOR_UPDATE_SQL if for_update else _GET_ACCOUNT_SQL
        result = await db.execute(sql, {"account_id": account_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def list_accounts(self, db: AsyncSession, user_id: str) -> list[Account]:
        result = await db.execute(_LIST_ACCOUNTS_SQL, {"user_id": user_id})
        return [_row_to_account(row) for row in result.fetchall()]

    async def create_account(
        self,
        db: AsyncSession,
        user_id: str,
        name: str,
        account_type: str,
        currency: str,
        opening_balance_cents: int,
        color: str | None,
        icon: str | None,
    ) -> Account:
        result = await db.execute(
            _INSERT_ACCOUNT_SQL,
            {
                "user_id": user_id,
                "name": name,
                "type": account_type,
                "currency": currency,
                "color": color,
                "icon": icon,
                "opening_balance_cents": opening_balance_cents,
            },
        )
        return _row_to_account(result.fetchone())

    async def update_account(
        self, db: AsyncSession, user_id: str, account_id: str, fields: dict[str, Any]
    ) -> Account | None:
        stmt = (
            update(AccountORM)
            .where(AccountORM.id == account_id, AccountORM.user_id == user_id)
            .values(**fields, updated_at=func.now())
            .returning(AccountORM)
        )
        result = await db.execute(stmt)
        orm = result.scalar_one_or_none()
        return _row_to_account(orm) if orm else None

    async def delete_account(self, db: AsyncSession, user_id: str, account_id: str) -> bool:
        result = await db.execute(
            _DELETE_ACCOUNT_SQL, {"account_id": account_id, "user_id": user_id}
        )
        return result.fetchone() is not None

    async def count_transactions(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> int:
        result = await db.execute(
            _COUNT_TRANSACTIONS_SQL, {"account_id": account_id, "user_id": user_id}
        )
        return int(result.scalar_one())

    async def increment_balance(
        self, db: AsyncSession, user_id: str, account_id: str, delta_cents: int
    ) -> Account | None:
        result = await db.execute(
            _INCREMENT_BALANCE_SQL,
            {"account_id": account_id, "user_id": user_id, "delta": delta_cents},
        )
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def set_balance(
        self, db: AsyncSession, user_id: str, account_id: str, new_balance_cents: int
    ) -> Account | None:
        result = await db.execute(
            _SET_BALANCE_SQL,
            {"account_id": account_id, "user_id": user_id, "new_balance": new_balance_cents},
        )
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def insert_adjustment(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: str,
        previous_balance_cents: int,
        new_balance_cents: int,
        reason: str,
    ) -> Adjustment:
        result = await db.execute(
            _INSERT_ADJUSTMENT_SQL,
            {
                "user_id": user_id,
                "account_id": account_id,
                "previous_balance_cents": previous_balance_cents,
                "new_balance_cents": new_balance_cents,
                "adjustment_amount_cents": new_balance_cents - previous_balance_cents,
                "reason": reason,
            },
        )
        return _row_to_adjustment(result.fetchone())

    async def list_adjustments(
        self, db: AsyncSession, user_id: str, account_id: str | None, limit: int
    ) -> list[Adjustment]:
        stmt = select(AdjustmentORM).where(AdjustmentORM.user_id == user_id)
        if account_id is not None:
            stmt = stmt.where(AdjustmentORM.account_id == account_id)
        stmt = stmt.order_by(AdjustmentORM.created_at.desc(), AdjustmentORM.id.desc()).limit(limit)
        result = await db.execute(stmt)
        return [_row_to_adjustment(orm) for orm in result.scalars().all()]

    async def sum_adjustments(self, db: AsyncSession, user_id: str, account_id: str) -> int:
        result = await db.execute(
            _SUM_ADJUSTMENTS_SQL, {"account_id": account_id, "user_id": user_id}
        )
        return int(result.scalar_one())

    async def sum_transactions_by_type(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> list[tuple[str, int]]:
        result = await db.execute(
            _SUM_TRANSACTIONS_BY_TYPE_SQL, {"account_id": account_id, "user_id": user_id}
        )
        return [(row.type, int(row.total)) for row in result.fetchall()]

"""Repository Protocol — dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
Every method is scoped by user_id: a row owned by someone else is reported
exactly like a missing row (None / False / 0).
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.models import Account, Adjustment


class AccountRepositoryProtocol(Protocol):
    async def get_account(
        self, db: AsyncSession, user_id: str, account_id: str, for_update: bool = False
    ) -> Account | None: ...

    async def list_accounts(self, db: AsyncSession, user_id: str) -> list[Account]: ...

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
    ) -> Account: ...

    async def update_account(
        self, db: AsyncSession, user_id: str, account_id: str, fields: dict[str, Any]
    ) -> Account | None: ...

    async def delete_account(self, db: AsyncSession, user_id: str, account_id: str) -> bool: ...

    async def count_transactions(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> int: ...

    async def increment_balance(
        self, db: AsyncSession, user_id: str, account_id: str, delta_cents: int
    ) -> Account | None: ...

    async def set_balance(
        self, db: AsyncSession, user_id: str, account_id: str, new_balance_cents: int
    ) -> Account | None: ...

    async def insert_adjustment(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: str,
        previous_balance_cents: int,
        new_balance_cents: int,
        reason: str,
    ) -> Adjustment: ...

    async def list_adjustments(
        self, db: AsyncSession, user_id: str, account_id: str | None, limit: int
    ) -> list[Adjustment]: ...

    async def sum_adjustments(self, db: AsyncSession, user_id: str, account_id: str) -> int: ...

    async def sum_transactions_by_type(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> list[tuple[str, int]]: ...

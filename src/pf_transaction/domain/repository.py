"""Repository Protocol — dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_transaction.domain.models import NewTransaction, Transaction, TransactionFilter


class TransactionRepositoryProtocol(Protocol):
    async def get_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str, for_update: bool = False
    ) -> Transaction | None: ...

    async def get_transfer_legs(
        self, db: AsyncSession, user_id: str, transfer_id: str, for_update: bool = False
    ) -> list[Transaction]: ...

    async def insert_transaction(self, db: AsyncSession, new: NewTransaction) -> Transaction: ...

    async def update_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str, fields: dict[str, Any]
    ) -> bool: ...

    async def delete_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str
    ) -> bool: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        filters: TransactionFilter,
        cursor_date: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Transaction]: ...

    async def list_tags(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[tuple[str, int]]: ...

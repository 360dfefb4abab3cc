"""AccountApplicationService — account lifecycle and balance reconciliation.

Writes run inside a UnitOfWork. get/list are read-only and run without one.
Balances are never edited here: opening balance is fixed at creation and the
current balance only moves through the balance ledger.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pf_account.application.schemas import (
    AccountListResponse,
    AccountResponse,
    CreateAccountRequest,
    ReconciliationResponse,
    UpdateAccountRequest,
)
from src.pf_account.domain.models import BalanceCheck
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.database import UnitOfWork
from src.pf_common.enums import normalize_account_type
from src.pf_common.errors import (
    AccountHasTransactionsError,
    AccountNotFoundError,
    ValidationError,
)
from src.pf_common.money import normalize_currency
from src.pf_transaction.domain.sign import calculate_balance

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Account name is required", 2005)
    return cleaned


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def create_account(
        self, db: AsyncSession, user_id: str, request: CreateAccountRequest
    ) -> AccountResponse:
        name = _clean_name(request.name)
        account_type = normalize_account_type(request.type)
        currency = normalize_currency(request.currency or settings.DEFAULT_CURRENCY)

        async with UnitOfWork(db) as uow:
            account = await self._repo.create_account(
                uow.session,
                user_id,
                name,
                account_type.value,
                currency,
                request.opening_balance_cents,
                request.color,
                request.icon,
            )
        logger.info(
            "Account created: id=%s user=%s opening=%d %s",
            account.id, user_id, account.opening_balance_cents, currency,
        )
        return AccountResponse.from_domain(account)

    async def list_accounts(self, db: AsyncSession, user_id: str) -> AccountListResponse:
        accounts = await self._repo.list_accounts(db, user_id)
        return AccountListResponse(items=[AccountResponse.from_domain(a) for a in accounts])

    async def get_account(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> AccountResponse:
        account = await self._repo.get_account(db, user_id, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return AccountResponse.from_domain(account)

    async def update_account(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: str,
        request: UpdateAccountRequest,
    ) -> AccountResponse:
        fields = request.model_dump(exclude_unset=True)
        if "name" in fields:
            if fields["name"] is None:
                raise ValidationError("Account name is required", 2005)
            fields["name"] = _clean_name(fields["name"])
        if "type" in fields:
            if fields["type"] is None:
                raise ValidationError("Account type is required", 2004)
            fields["type"] = normalize_account_type(fields["type"]).value

        if not fields:
            return await self.get_account(db, user_id, account_id)

        async with UnitOfWork(db) as uow:
            account = await self._repo.update_account(uow.session, user_id, account_id, fields)
            if account is None:
                raise AccountNotFoundError(account_id)
        return AccountResponse.from_domain(account)

    async def delete_account(self, db: AsyncSession, user_id: str, account_id: str) -> None:
        async with UnitOfWork(db) as uow:
            # Row lock keeps a concurrent create_transaction from slipping in
            # between the count and the delete.
            account = await self._repo.get_account(
                uow.session, user_id, account_id, for_update=True
            )
            if account is None:
                raise AccountNotFoundError(account_id)
            count = await self._repo.count_transactions(uow.session, user_id, account_id)
            if count > 0:
                raise AccountHasTransactionsError(account_id, count)
            await self._repo.delete_account(uow.session, user_id, account_id)
        logger.info("Account deleted: id=%s user=%s", account_id, user_id)

    async def reconcile_account(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> ReconciliationResponse:
        """Recompute the balance from history and compare with the stored one.

        The account row is locked for the duration so no writer can land
        between reading the balance and summing its history.
        """
        async with UnitOfWork(db) as uow:
            account = await self._repo.get_account(
                uow.session, user_id, account_id, for_update=True
            )
            if account is None:
                raise AccountNotFoundError(account_id)
            totals = await self._repo.sum_transactions_by_type(uow.session, user_id, account_id)
            adjustments = await self._repo.sum_adjustments(uow.session, user_id, account_id)

        check = BalanceCheck(
            account_id=account.id,
            opening_balance_cents=account.opening_balance_cents,
            transactions_impact_cents=calculate_balance(0, totals),
            adjustments_impact_cents=adjustments,
            current_balance_cents=account.current_balance_cents,
        )
        if not check.consistent:
            logger.error(
                "Balance drift: account=%s stored=%d expected=%d drift=%d",
                account.id, check.current_balance_cents,
                check.expected_balance_cents, check.drift_cents,
            )
        return ReconciliationResponse.from_check(check)

"""Adjustment protocol — reconcile an account to a user-declared balance.

The correction is recorded as an immutable Adjustment audit row and the
account balance is overwritten (not delta-applied) in the same UnitOfWork.
A zero difference writes nothing.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.application.schemas import (
    AdjustmentItem,
    AdjustmentListResponse,
    AdjustmentResponse,
    CreateAdjustmentRequest,
)
from src.pf_account.domain.ledger import BalanceLedger
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.database import UnitOfWork
from src.pf_common.errors import AccountNotFoundError, AdjustmentReasonRequiredError

logger = logging.getLogger(__name__)

ADJUSTMENT_LIST_LIMIT = 50


class AdjustmentApplicationService:
    def __init__(
        self,
        repo: AccountRepositoryProtocol | None = None,
        ledger: BalanceLedger | None = None,
    ) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()
        self._ledger = ledger or BalanceLedger(self._repo)

    async def create_adjustment(
        self, db: AsyncSession, user_id: str, request: CreateAdjustmentRequest
    ) -> AdjustmentResponse:
        reason = request.reason.strip()
        if not reason:
            raise AdjustmentReasonRequiredError()

        async with UnitOfWork(db) as uow:
            account = await self._repo.get_account(
                uow.session, user_id, request.account_id, for_update=True
            )
            if account is None:
                raise AccountNotFoundError(request.account_id)

            previous = account.current_balance_cents
            if request.new_balance_cents == previous:
                return AdjustmentResponse.no_change(account)

            adjustment = await self._repo.insert_adjustment(
                uow.session,
                user_id,
                account.id,
                previous,
                request.new_balance_cents,
                reason,
            )
            await self._ledger.set_absolute(
                uow, user_id, account.id, request.new_balance_cents
            )

        logger.info(
            "Balance adjusted: account=%s previous=%d new=%d delta=%d",
            account.id, previous, request.new_balance_cents,
            adjustment.adjustment_amount_cents,
        )
        return AdjustmentResponse.from_adjustment(adjustment, account.currency)

    async def list_adjustments(
        self, db: AsyncSession, user_id: str, account_id: str | None
    ) -> AdjustmentListResponse:
        adjustments = await self._repo.list_adjustments(
            db, user_id, account_id, ADJUSTMENT_LIST_LIMIT
        )
        return AdjustmentListResponse(items=[AdjustmentItem.from_domain(a) for a in adjustments])

"""Transfer protocol — move money between two accounts of the same owner.

A transfer is two linked transaction rows sharing one transfer_id: an expense
leg on the source and an income leg on the destination, for the same amount.
Both legs and both balance deltas commit in one UnitOfWork.

Account rows are locked in ascending id order so two opposite transfers
between the same pair cannot deadlock each other.
"""

import logging
import uuid
from dataclasses import replace
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.ledger import BalanceLedger
from src.pf_account.domain.models import Account
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.database import UnitOfWork
from src.pf_common.enums import TransactionType
from src.pf_common.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    SameAccountTransferError,
)
from src.pf_common.money import is_positive_cents
from src.pf_transaction.application.schemas import (
    CreateTransferRequest,
    TransactionResponse,
    TransferResponse,
)
from src.pf_transaction.domain.models import NewTransaction
from src.pf_transaction.domain.repository import TransactionRepositoryProtocol
from src.pf_transaction.infrastructure.persistence import TransactionRepository

logger = logging.getLogger(__name__)

DEFAULT_TRANSFER_CATEGORY = "Transfer"


def _leg_note(prefix: str, counterpart: str, note: str | None) -> str:
    base = f"{prefix} {counterpart}"
    note = (note or "").strip()
    return f"{base}: {note}" if note else base


class TransferApplicationService:
    def __init__(
        self,
        repo: TransactionRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        ledger: BalanceLedger | None = None,
    ) -> None:
        self._repo: TransactionRepositoryProtocol = repo or TransactionRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._ledger = ledger or BalanceLedger(self._accounts)

    async def create_transfer(
        self, db: AsyncSession, user_id: str, request: CreateTransferRequest
    ) -> TransferResponse:
        amount = request.amount_cents
        if not is_positive_cents(amount):
            raise InvalidAmountError(amount)
        if request.from_account_id == request.to_account_id:
            raise SameAccountTransferError(request.from_account_id)

        category = request.category.strip() or DEFAULT_TRANSFER_CATEGORY
        date = request.date or datetime.now(UTC)
        transfer_id = str(uuid.uuid4())

        async with UnitOfWork(db) as uow:
            locked: dict[str, Account | None] = {}
            for account_id in sorted((request.from_account_id, request.to_account_id)):
                locked[account_id] = await self._accounts.get_account(
                    uow.session, user_id, account_id, for_update=True
                )
            source = locked[request.from_account_id]
            if source is None:
                raise AccountNotFoundError(request.from_account_id)
            dest = locked[request.to_account_id]
            if dest is None:
                raise AccountNotFoundError(request.to_account_id)

            if source.current_balance_cents < amount:
                raise InsufficientFundsError(
                    source.current_balance_cents, amount, source.currency
                )

            outgoing = await self._repo.insert_transaction(
                uow.session,
                NewTransaction(
                    user_id=user_id,
                    account_id=source.id,
                    type=TransactionType.EXPENSE.value,
                    category=category,
                    amount_cents=amount,
                    currency=source.currency,
                    date=date,
                    note=_leg_note("Transfer to", dest.name, request.note),
                    transfer_id=transfer_id,
                    transfer_to_account_id=dest.id,
                ),
            )
            incoming = await self._repo.insert_transaction(
                uow.session,
                NewTransaction(
                    user_id=user_id,
                    account_id=dest.id,
                    type=TransactionType.INCOME.value,
                    category=category,
                    amount_cents=amount,
                    currency=dest.currency,
                    date=date,
                    note=_leg_note("Transfer from", source.name, request.note),
                    transfer_id=transfer_id,
                    transfer_from_account_id=source.id,
                ),
            )
            await self._ledger.apply_delta(uow, user_id, source.id, -amount)
            await self._ledger.apply_delta(uow, user_id, dest.id, amount)

        logger.info(
            "Transfer committed: id=%s from=%s to=%s amount=%d",
            transfer_id, source.id, dest.id, amount,
        )
        return TransferResponse(
            transfer_id=transfer_id,
            transactions=[
                TransactionResponse.from_domain(
                    replace(outgoing, account_name=source.name, account_type=source.type)
                ),
                TransactionResponse.from_domain(
                    replace(incoming, account_name=dest.name, account_type=dest.type)
                ),
            ],
        )

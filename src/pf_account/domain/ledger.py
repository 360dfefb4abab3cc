"""Balance ledger — the only writer of accounts.current_balance_cents.

Both operations must run inside an open UnitOfWork so the balance write
commits or rolls back together with the record that justifies it
(transaction row, transfer leg, adjustment). Overdraft is allowed here; the
transfer protocol is the one place that enforces sufficient funds.
"""

import logging

from src.pf_account.domain.models import Account
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_common.database import UnitOfWork
from src.pf_common.errors import AccountNotFoundError, InternalError

logger = logging.getLogger(__name__)


class BalanceLedger:
    def __init__(self, repo: AccountRepositoryProtocol) -> None:
        self._repo = repo

    async def apply_delta(
        self, uow: UnitOfWork, user_id: str, account_id: str, delta_cents: int
    ) -> Account:
        """Add delta_cents (may be negative) to the owner's account balance."""
        _require_active(uow)
        account = await self._repo.increment_balance(
            uow.session, user_id, account_id, delta_cents
        )
        if account is None:
            raise AccountNotFoundError(account_id)
        logger.debug(
            "Balance delta: account=%s delta=%d balance=%d",
            account_id, delta_cents, account.current_balance_cents,
        )
        return account

    async def set_absolute(
        self, uow: UnitOfWork, user_id: str, account_id: str, new_balance_cents: int
    ) -> Account:
        """Overwrite the balance. Reserved for the adjustment protocol."""
        _require_active(uow)
        account = await self._repo.set_balance(
            uow.session, user_id, account_id, new_balance_cents
        )
        if account is None:
            raise AccountNotFoundError(account_id)
        return account


def _require_active(uow: UnitOfWork) -> None:
    if not uow.active:
        raise InternalError("Balance ledger used outside an open UnitOfWork")

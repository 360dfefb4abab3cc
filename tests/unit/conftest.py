"""Fixtures wiring the in-memory fakes (tests/unit/fakes.py) into the services."""

import pytest

from src.pf_account.application.adjustment_service import AdjustmentApplicationService
from src.pf_account.application.service import AccountApplicationService
from src.pf_transaction.application.service import TransactionApplicationService
from src.pf_transaction.application.transfer_service import TransferApplicationService
from tests.unit.fakes import FakeAccountRepository, FakeSession, FakeTransactionRepository

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def account_repo() -> FakeAccountRepository:
    return FakeAccountRepository()


@pytest.fixture
def tx_repo() -> FakeTransactionRepository:
    return FakeTransactionRepository()


@pytest.fixture
def account_service(account_repo: FakeAccountRepository) -> AccountApplicationService:
    return AccountApplicationService(repo=account_repo)


@pytest.fixture
def adjustment_service(account_repo: FakeAccountRepository) -> AdjustmentApplicationService:
    return AdjustmentApplicationService(repo=account_repo)


@pytest.fixture
def tx_service(
    tx_repo: FakeTransactionRepository, account_repo: FakeAccountRepository
) -> TransactionApplicationService:
    return TransactionApplicationService(repo=tx_repo, account_repo=account_repo)


@pytest.fixture
def transfer_service(
    tx_repo: FakeTransactionRepository, account_repo: FakeAccountRepository
) -> TransferApplicationService:
    return TransferApplicationService(repo=tx_repo, account_repo=account_repo)

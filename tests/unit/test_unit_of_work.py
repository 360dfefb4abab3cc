"""Tests for UnitOfWork commit/rollback semantics and abort translation."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import DBAPIError

from src.pf_common.database import UnitOfWork
from src.pf_common.errors import AccountNotFoundError, TransactionAbortedError


class _PgError(Exception):
    def __init__(self, sqlstate: str) -> None:
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


def _db_error(sqlstate: str) -> DBAPIError:
    return DBAPIError("UPDATE accounts ...", {}, _PgError(sqlstate))


class TestCommitAndRollback:
    async def test_clean_exit_commits(self) -> None:
        db = AsyncMock()
        async with UnitOfWork(db) as uow:
            assert uow.active is True
        assert uow.active is False
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    async def test_app_error_rolls_back_and_propagates(self) -> None:
        db = AsyncMock()
        with pytest.raises(AccountNotFoundError):
            async with UnitOfWork(db):
                raise AccountNotFoundError("acc-1")
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_unexpected_error_propagates_unchanged(self) -> None:
        db = AsyncMock()
        with pytest.raises(RuntimeError, match="boom"):
            async with UnitOfWork(db):
                raise RuntimeError("boom")
        db.rollback.assert_awaited_once()


class TestAbortTranslation:
    @pytest.mark.parametrize("sqlstate", ["40001", "40P01"])
    async def test_contention_inside_scope(self, sqlstate: str) -> None:
        db = AsyncMock()
        with pytest.raises(TransactionAbortedError) as exc_info:
            async with UnitOfWork(db):
                raise _db_error(sqlstate)
        assert exc_info.value.retryable is True
        db.rollback.assert_awaited_once()

    async def test_contention_on_commit(self) -> None:
        db = AsyncMock()
        db.commit.side_effect = _db_error("40001")
        with pytest.raises(TransactionAbortedError):
            async with UnitOfWork(db):
                pass
        db.rollback.assert_awaited_once()

    async def test_other_db_errors_are_not_translated(self) -> None:
        db = AsyncMock()
        with pytest.raises(DBAPIError):
            async with UnitOfWork(db):
                raise _db_error("23505")

    async def test_other_commit_errors_are_not_translated(self) -> None:
        db = AsyncMock()
        db.commit.side_effect = _db_error("23503")
        with pytest.raises(DBAPIError):
            async with UnitOfWork(db):
                pass
        db.rollback.assert_awaited_once()

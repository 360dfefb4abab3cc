import logging
from collections.abc import AsyncGenerator
from types import TracebackType

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.pf_common.errors import TransactionAbortedError

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


def _aborted_error(exc: DBAPIError) -> TransactionAbortedError | None:
    """Map a driver error to TransactionAbortedError when the database aborted on contention."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return TransactionAbortedError()
    return None


class UnitOfWork:
    """One atomic write scope over an AsyncSession.

    Everything executed on ``session`` since the session's (auto-)begin is
    committed when the block exits cleanly and rolled back when any exception
    escapes it. Repositories never commit; ledger and protocol code receive the
    UnitOfWork explicitly so a write outside the scope is a visible mistake.

        async with UnitOfWork(db) as uow:
            await ledger.apply_delta(uow, user_id, account_id, -5000)
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    async def __aenter__(self) -> "UnitOfWork":
        self._active = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._active = False
        if exc is None:
            try:
                await self.session.commit()
            except DBAPIError as err:
                await self.session.rollback()
                aborted = _aborted_error(err)
                if aborted is None:
                    raise
                logger.warning("Commit aborted by database: %s", err.orig)
                raise aborted from err
            return

        await self.session.rollback()
        if isinstance(exc, DBAPIError):
            aborted = _aborted_error(exc)
            if aborted is not None:
                logger.warning("Write aborted by database: %s", exc.orig)
                raise aborted from exc

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from payslip_service.db.base import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Storage handle shared by the repositories.

    Acquire with ``connect()`` at process start and release with
    ``dispose()`` at shutdown; every operation takes its own scoped
    ``session()``.
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
    ):
        self.url = url
        self._engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}

        if url.startswith("sqlite"):
            if url.endswith(":memory:") or url.endswith("://"):
                self._engine_kwargs["poolclass"] = StaticPool
        else:
            self._engine_kwargs["pool_size"] = pool_size
            self._engine_kwargs["max_overflow"] = max_overflow

        self.engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def connected(self) -> bool:
        return self.engine is not None

    def connect(self) -> None:
        if self.engine is not None:
            return
        self.engine = create_async_engine(self.url, **self._engine_kwargs)
        self._sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        logger.info("Storage engine created for %s", self.engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self._sessionmaker = None
        logger.info("Storage engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected")
        async with self._sessionmaker() as session:
            yield session

    async def create_all(self) -> None:
        import payslip_service.models  # noqa: F401

        if self.engine is None:
            raise RuntimeError("Database is not connected")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Open a fresh connection and run a trivial query."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Storage ping failed: %s", exc)
            return False
        return True

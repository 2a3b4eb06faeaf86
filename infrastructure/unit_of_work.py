"""SQLAlchemy Unit of Work 实现"""
from __future__ import annotations

import asyncio
from typing import Optional, Callable
import inspect

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.common.exceptions import StorageConnectionException
from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.database import AsyncSessionLocal
from infrastructure.repositories.errors import describe_db_error, translate_db_errors
from infrastructure.repositories.task_repository import SQLAlchemyTaskRepository
from infrastructure.repositories.task_list_repository import SQLAlchemyTaskListRepository


logger = get_logger(__name__)


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """基于SQLAlchemy的Unit of Work

    进入上下文时立即获取连接，连接失败统一抛出 StorageConnectionException。
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        session: Optional[AsyncSession] = None,
        *,
        readonly: bool = False,
    ) -> None:
        super().__init__(readonly=readonly)
        self._session_factory = session_factory
        self._external_session = session
        self.session: Optional[AsyncSession] = session
        self._transaction = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self.session is None:
            self.session = self._session_factory()
        try:
            # 仅在非只读模式下显式开启事务
            if not self._readonly:
                self._transaction = await self.session.begin()
            await self.session.connection()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            reason = describe_db_error(exc)
            logger.error("db_connect_failed", error=reason)
            await self._release()
            raise StorageConnectionException(reason) from exc
        self.task_repository = SQLAlchemyTaskRepository(self.session)
        self.list_repository = SQLAlchemyTaskListRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self._release()

    async def _release(self) -> None:
        # 事务在 commit/rollback 后通常会结束，这里仅在仍然活动时做安全关闭
        tx = self._transaction
        if tx is not None and getattr(tx, "is_active", False):
            close = getattr(tx, "close", None)
            if callable(close):
                res = close()
                if inspect.isawaitable(res):
                    await res
        self._transaction = None
        if self._external_session is None and self.session is not None:
            await self.session.close()
            self.session = None
        self.task_repository = None  # type: ignore[assignment]
        self.list_repository = None  # type: ignore[assignment]

    async def commit(self) -> None:
        if self._readonly:
            # 只读情况下不提交
            self._committed = True
            return
        if self.session and self.session.in_transaction():
            with translate_db_errors("Failed to commit"):
                await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session and self.session.in_transaction():
            await self.session.rollback()
        self._committed = False

"""SQLite 连接池 + 作用域事务

- transaction() / within_transaction(): BEGIN IMMEDIATE 开启写事务，
  成功提交，任何异常（含 CancelledError）回滚。
- 事务连接绑定到 ContextVar，调用栈深处的代码通过 current_transaction()
  或 connection() 自动参与外层事务；已有事务时嵌套调用直接复用，不再 BEGIN。

BEGIN IMMEDIATE 在事务开始即取得 SQLite 写锁，相当于对所有写入目标
加了 FOR UPDATE：同一时刻只有一个写事务，读者在 WAL 下只看到已提交快照。
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import TypeVar

import aiosqlite
import structlog

from .sqlite_init import configure_connection

log = structlog.get_logger()

T = TypeVar("T")

Initializer = Callable[[aiosqlite.Connection], Awaitable[None]]


class SqliteDatabase:
    """aiosqlite 连接池，所有写操作都经过 transaction()"""

    def __init__(self, path: str, pool_size: int = 4) -> None:
        self._path = path
        self._pool_size = pool_size
        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._connections: list[aiosqlite.Connection] = []
        # 每个库实例独立的事务槽，主库与分析库互不串扰
        self._tx: ContextVar[aiosqlite.Connection | None] = ContextVar(
            f"sqlite_tx_{id(self)}", default=None
        )

    @property
    def path(self) -> str:
        return self._path

    async def open(self, initializer: Initializer | None = None) -> "SqliteDatabase":
        """建立连接池；initializer 在第一个连接上执行（建表）

        Returns:
            self，便于链式调用
        """
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)

        for i in range(self._pool_size):
            # isolation_level=None：事务边界完全由 transaction() 显式控制
            conn = await aiosqlite.connect(self._path, isolation_level=None)
            await configure_connection(conn)
            if i == 0 and initializer is not None:
                await initializer(conn)
            self._connections.append(conn)
            self._pool.put_nowait(conn)

        log.info("sqlite_pool_opened", path=self._path, pool_size=self._pool_size)
        return self

    async def close(self) -> None:
        """关闭全部连接"""
        for conn in self._connections:
            await conn.close()
        self._connections.clear()
        log.info("sqlite_pool_closed", path=self._path)

    @asynccontextmanager
    async def _acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = await self._pool.get()
        try:
            yield conn
        finally:
            self._pool.put_nowait(conn)

    def current_transaction(self) -> aiosqlite.Connection | None:
        """返回当前上下文绑定的事务连接；无事务时返回 None"""
        return self._tx.get()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """优先复用当前事务连接，否则从连接池借出一个"""
        current = self._tx.get()
        if current is not None:
            yield current
            return

        async with self._acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """作用域写事务

        Raises:
            Exception: body 抛出的任何异常，回滚后原样向上传播
        """
        current = self._tx.get()
        if current is not None:
            # 参与外层事务，由外层负责提交/回滚
            yield current
            return

        async with self._acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            token = self._tx.set(conn)
            try:
                yield conn
                await conn.commit()
            except BaseException:
                await self._rollback(conn)
                raise
            finally:
                self._tx.reset(token)

    async def within_transaction(
        self,
        body: Callable[[aiosqlite.Connection], Awaitable[T]],
    ) -> T:
        """在作用域事务内执行 body(conn) 并返回其结果"""
        async with self.transaction() as conn:
            return await body(conn)

    @staticmethod
    async def _rollback(conn: aiosqlite.Connection) -> None:
        try:
            await conn.rollback()
        except Exception as e:
            log.warning("transaction_rollback_failed", error=str(e))

    async def ping(self) -> None:
        """连通性检查"""
        async with self.connection() as conn:
            cursor = await conn.execute("SELECT 1")
            await cursor.fetchone()

    async def truncate(self, *tables: str) -> None:
        """清空指定表（测试辅助）"""
        async with self.transaction() as conn:
            for table in tables:
                await conn.execute(f"DELETE FROM {table}")

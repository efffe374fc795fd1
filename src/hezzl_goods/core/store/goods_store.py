"""GoodsStore SQLite 实现

goods 表是商品的唯一权威来源。
写操作全部经过 SqliteDatabase.transaction()（BEGIN IMMEDIATE），
优先级相关的读-改-写因此天然串行，不会出现重复优先级。

带 RETURNING 的语句一律 fetchall()，语句执行完毕后才提交。
"""

from datetime import datetime

import aiosqlite

from ..exceptions import GoodNotFoundError, SamePriorityError
from ..models.good import (
    Good,
    GoodCreateRequest,
    GoodDeleteReceipt,
    GoodPriority,
    GoodUpdateRequest,
    ListMeta,
    ListRequest,
)
from .database import SqliteDatabase

_GOOD_COLUMNS = (
    "id, project_id, name, COALESCE(description, '') AS description, "
    "priority, removed, created_at"
)


class SqliteGoodsStore:
    """GoodsStore 的 SQLite 实现"""

    def __init__(self, db: SqliteDatabase) -> None:
        self._db = db

    async def create_good(self, project_id: int, request: GoodCreateRequest) -> Good:
        """创建商品

        MAX(priority) 与 INSERT 在同一写事务内执行，
        并发创建者不会观察到相同的 MAX。
        """
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                "SELECT COALESCE(MAX(priority), 0) + 1 FROM goods WHERE removed = 0"
            )
            row = await cursor.fetchone()
            priority = row[0]

            cursor = await conn.execute(
                f"""
                INSERT INTO goods (project_id, name, description, priority)
                VALUES (?, ?, ?, ?)
                RETURNING {_GOOD_COLUMNS}
                """,
                (project_id, request.name, request.description or "", priority),
            )
            (row,) = await cursor.fetchall()
            return self._row_to_good(row)

    async def get_good(self, good_id: int, project_id: int) -> Good:
        """按 (id, project_id) 查询；软删除的商品照常返回"""
        async with self._db.connection() as conn:
            cursor = await conn.execute(
                f"SELECT {_GOOD_COLUMNS} FROM goods WHERE id = ? AND project_id = ?",
                (good_id, project_id),
            )
            row = await cursor.fetchone()

        if row is None:
            raise GoodNotFoundError(good_id, project_id)
        return self._row_to_good(row)

    async def update_good(
        self,
        good_id: int,
        project_id: int,
        request: GoodUpdateRequest,
    ) -> Good:
        """更新 name，description 为 None 时保留原值

        priority / removed / created_at 不在此处修改。
        """
        async with self._db.transaction() as conn:
            await self._lock_live_good(conn, good_id, project_id)

            cursor = await conn.execute(
                f"""
                UPDATE goods
                SET name = ?,
                    description = COALESCE(?, description)
                WHERE id = ? AND project_id = ?
                RETURNING {_GOOD_COLUMNS}
                """,
                (request.name, request.description, good_id, project_id),
            )
            (row,) = await cursor.fetchall()
            return self._row_to_good(row)

    async def delete_good(self, good_id: int, project_id: int) -> GoodDeleteReceipt:
        """软删除；已删除的商品再次删除视为不存在"""
        async with self._db.transaction() as conn:
            await self._lock_live_good(conn, good_id, project_id)

            cursor = await conn.execute(
                """
                UPDATE goods
                SET removed = 1
                WHERE id = ? AND project_id = ?
                RETURNING id, project_id, removed
                """,
                (good_id, project_id),
            )
            (row,) = await cursor.fetchall()
            return GoodDeleteReceipt(
                id=row["id"],
                project_id=row["project_id"],
                removed=bool(row["removed"]),
            )

    async def list_goods(self, request: ListRequest) -> tuple[list[Good], ListMeta]:
        """分页列表，计数与分页在同一事务快照内完成"""
        effective = request.normalized()

        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*), COALESCE(SUM(removed), 0) FROM goods"
            )
            total, removed = await cursor.fetchone()

            cursor = await conn.execute(
                f"""
                SELECT {_GOOD_COLUMNS} FROM goods
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (effective.limit, effective.offset),
            )
            rows = await cursor.fetchall()

        meta = ListMeta(
            total=total,
            removed=removed,
            limit=effective.limit,
            offset=effective.offset,
        )
        return [self._row_to_good(row) for row in rows], meta

    async def reprioritize(
        self,
        good_id: int,
        project_id: int,
        new_priority: int,
    ) -> list[GoodPriority]:
        """重排优先级

        提升（new < current）：[new, current) 区间内其他商品 +1
        下调（new > current）：(current, new] 区间内其他商品 -1
        随后目标商品设为 new。只挪动未删除的商品。

        Returns:
            目标与所有被挪动的商品，按新优先级升序（同优先级按 id）

        Raises:
            GoodNotFoundError: 目标不存在或已删除
            SamePriorityError: new 与当前优先级相同
        """
        async with self._db.transaction() as conn:
            current = await self._lock_live_good(conn, good_id, project_id)

            if new_priority == current:
                raise SamePriorityError(good_id, new_priority)

            if new_priority < current:
                shift_sql = """
                    UPDATE goods
                    SET priority = priority + 1
                    WHERE removed = 0 AND id != ?
                      AND priority >= ? AND priority < ?
                    RETURNING id, project_id, priority
                """
                params = (good_id, new_priority, current)
            else:
                shift_sql = """
                    UPDATE goods
                    SET priority = priority - 1
                    WHERE removed = 0 AND id != ?
                      AND priority > ? AND priority <= ?
                    RETURNING id, project_id, priority
                """
                params = (good_id, current, new_priority)

            cursor = await conn.execute(shift_sql, params)
            shifted = [
                GoodPriority(
                    id=row["id"],
                    project_id=row["project_id"],
                    priority=row["priority"],
                )
                for row in await cursor.fetchall()
            ]

            await conn.execute(
                "UPDATE goods SET priority = ? WHERE id = ? AND project_id = ?",
                (new_priority, good_id, project_id),
            )

        shifted.append(
            GoodPriority(id=good_id, project_id=project_id, priority=new_priority)
        )
        return sorted(shifted, key=lambda p: (p.priority, p.id))

    async def get_max_priority(self) -> int:
        """当前未删除商品的最大优先级（无商品时为 0）"""
        async with self._db.connection() as conn:
            cursor = await conn.execute(
                "SELECT COALESCE(MAX(priority), 0) FROM goods WHERE removed = 0"
            )
            row = await cursor.fetchone()
        return row[0]

    @staticmethod
    async def _lock_live_good(
        conn: aiosqlite.Connection,
        good_id: int,
        project_id: int,
    ) -> int:
        """在当前写事务内确认目标存在且未删除，返回其当前优先级"""
        cursor = await conn.execute(
            "SELECT priority FROM goods WHERE id = ? AND project_id = ? AND removed = 0",
            (good_id, project_id),
        )
        row = await cursor.fetchone()
        if row is None:
            raise GoodNotFoundError(good_id, project_id)
        return row["priority"]

    @staticmethod
    def _row_to_good(row: aiosqlite.Row) -> Good:
        """将数据库行转换为 Good 模型"""
        return Good(
            id=row["id"],
            project_id=row["project_id"],
            name=row["name"],
            description=row["description"],
            priority=row["priority"],
            removed=bool(row["removed"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

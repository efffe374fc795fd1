"""AuditSink SQLite 实现 -- goods_logs 分析表

goods_logs 只追加：批量写入在单个事务内完成，任一行失败则整批回滚，
由调用方（AuditBatcher）保留事件等待下一次触发重试。
"""

from ..models.audit import AuditEvent
from .database import SqliteDatabase

_INSERT_SQL = """
INSERT INTO goods_logs (
    id, project_id, name, description, priority, removed, operation, event_time
) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


class SqliteAuditStore:
    """AuditSink 的 SQLite 实现"""

    def __init__(self, db: SqliteDatabase) -> None:
        self._db = db

    async def write_batch(self, events: list[AuditEvent]) -> int:
        """批量写入审计事件

        Returns:
            写入的行数

        Raises:
            Exception: 任一行执行失败或提交失败，整批回滚
        """
        if not events:
            return 0

        rows = [
            (
                e.good_id,
                e.project_id,
                e.name,
                e.description,
                e.priority,
                int(e.removed),
                e.operation.value,
                e.event_time.isoformat(),
            )
            for e in events
        ]
        async with self._db.transaction() as conn:
            await conn.executemany(_INSERT_SQL, rows)
        return len(rows)

    async def count(
        self,
        operation: str | None = None,
        project_id: int | None = None,
        good_id: int | None = None,
    ) -> int:
        """按条件统计 goods_logs 行数"""
        clauses: list[str] = []
        params: list = []
        if operation is not None:
            clauses.append("operation = ?")
            params.append(operation)
        if project_id is not None:
            clauses.append("project_id = ?")
            params.append(project_id)
        if good_id is not None:
            clauses.append("id = ?")
            params.append(good_id)

        sql = "SELECT COUNT(*) FROM goods_logs"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)

        async with self._db.connection() as conn:
            cursor = await conn.execute(sql, params)
            row = await cursor.fetchone()
        return row[0]

    async def truncate(self) -> None:
        """清空 goods_logs（测试辅助）"""
        await self._db.truncate("goods_logs")

"""SQLite 数据库初始化

PRAGMA 配置 + 主库（goods / projects）与分析库（goods_logs）的 DDL 和索引。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# goods 表 DDL；created_at 为毫秒精度 UTC ISO 字符串，保证列表排序稳定
_GOODS_DDL = """
CREATE TABLE IF NOT EXISTS goods (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id   INTEGER NOT NULL,
    name         TEXT NOT NULL,
    description  TEXT,
    priority     INTEGER NOT NULL CHECK (priority >= 1),
    removed      INTEGER NOT NULL DEFAULT 0,
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_GOODS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_goods_project_id ON goods(project_id);",
    "CREATE INDEX IF NOT EXISTS idx_goods_priority ON goods(priority);",
    "CREATE INDEX IF NOT EXISTS idx_goods_created_at ON goods(created_at DESC, id DESC);",
]

# projects 表 DDL（预留）
_PROJECTS_DDL = """
CREATE TABLE IF NOT EXISTS projects (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT NOT NULL,
    created_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

# goods_logs 表 DDL（分析库，只追加）
_GOODS_LOGS_DDL = """
CREATE TABLE IF NOT EXISTS goods_logs (
    id           INTEGER NOT NULL,
    project_id   INTEGER NOT NULL,
    name         TEXT NOT NULL DEFAULT '',
    description  TEXT NOT NULL DEFAULT '',
    priority     INTEGER NOT NULL DEFAULT 0,
    removed      INTEGER NOT NULL DEFAULT 0,
    event_time   TEXT NOT NULL,
    operation    TEXT NOT NULL
);
"""

_GOODS_LOGS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_goods_logs_event_time ON goods_logs(event_time, id);",
    "CREATE INDEX IF NOT EXISTS idx_goods_logs_operation ON goods_logs(operation, project_id);",
]


async def configure_connection(conn: aiosqlite.Connection) -> None:
    """设置连接级 PRAGMA 与行工厂"""
    conn.row_factory = aiosqlite.Row
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")


async def init_goods_db(conn: aiosqlite.Connection) -> None:
    """初始化主库：创建 goods / projects 表 + 索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute(_GOODS_DDL)
    await conn.execute(_PROJECTS_DDL)

    for idx_sql in _GOODS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def init_goods_logs_db(conn: aiosqlite.Connection) -> None:
    """初始化分析库：创建 goods_logs 表 + 索引"""
    await conn.execute(_GOODS_LOGS_DDL)

    for idx_sql in _GOODS_LOGS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"

"""hezzl-goods Core Store -- SQLite 持久化实现

提供工厂函数创建主库（goods）与分析库（goods_logs）的 Store 实例组。
"""

from .audit_store import SqliteAuditStore
from .database import SqliteDatabase
from .goods_store import SqliteGoodsStore
from .protocols import AuditSink, GoodsStore
from .sqlite_init import init_goods_db, init_goods_logs_db


class StoreGroup:
    """Store 实例组 -- 主库连接池 + 分析库连接池"""

    def __init__(self, goods_db: SqliteDatabase, logs_db: SqliteDatabase) -> None:
        self.goods_db = goods_db
        self.logs_db = logs_db
        self.goods_store = SqliteGoodsStore(goods_db)
        self.audit_store = SqliteAuditStore(logs_db)

    async def close(self) -> None:
        """关闭两个连接池"""
        await self.logs_db.close()
        await self.goods_db.close()


async def create_store_group(
    goods_db_path: str,
    goods_logs_db_path: str,
    pool_size: int = 4,
) -> StoreGroup:
    """创建 Store 实例组（建表幂等）

    Args:
        goods_db_path: 主库 SQLite 文件路径
        goods_logs_db_path: 分析库 SQLite 文件路径
        pool_size: 主库连接池大小；分析库只有批量写入者，固定 1 个连接

    Returns:
        StoreGroup 实例
    """
    goods_db = await SqliteDatabase(goods_db_path, pool_size).open(init_goods_db)
    logs_db = await SqliteDatabase(goods_logs_db_path, 1).open(init_goods_logs_db)
    return StoreGroup(goods_db=goods_db, logs_db=logs_db)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteDatabase",
    "SqliteGoodsStore",
    "SqliteAuditStore",
    "GoodsStore",
    "AuditSink",
    "init_goods_db",
    "init_goods_logs_db",
]

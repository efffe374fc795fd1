"""CLI 入口模块 -- python -m hezzl_goods.core <command>

支持的命令：
  init-db     创建主库与分析库表结构
  count-logs  统计 goods_logs 行数（可选按 operation 过滤）
"""

import asyncio
import sys

from .config import load_settings


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m hezzl_goods.core <command> [args]")
        print("命令:")
        print("  init-db                 创建主库与分析库表结构")
        print("  count-logs [operation]  统计 goods_logs 行数")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_db())
    elif command == "count-logs":
        operation = sys.argv[2] if len(sys.argv) > 2 else None
        asyncio.run(count_logs(operation))
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, count-logs")
        sys.exit(1)


async def init_db() -> None:
    """建表（幂等）"""
    from .store import create_store_group

    settings = load_settings()
    print(f"主库路径: {settings.goods_db_path}")
    print(f"分析库路径: {settings.goods_logs_db_path}")

    store_group = await create_store_group(
        settings.goods_db_path,
        settings.goods_logs_db_path,
        pool_size=1,
    )
    await store_group.close()
    print("初始化完成")


async def count_logs(operation: str | None) -> None:
    """打印 goods_logs 行数"""
    from .store import create_store_group

    settings = load_settings()
    store_group = await create_store_group(
        settings.goods_db_path,
        settings.goods_logs_db_path,
        pool_size=1,
    )
    try:
        total = await store_group.audit_store.count(operation=operation)
        print(f"goods_logs 行数: {total}")
    finally:
        await store_group.close()


if __name__ == "__main__":
    main()

"""Cache Protocol 接口定义

字符串键值 + 每键 TTL。缓存不是权威数据源：调用方把任何异常都视为未命中。
列表键没有通配删除，改为把每个列表键登记到索引集合，失效时枚举删除并移出索引。
"""

from __future__ import annotations

from typing import Protocol


class Cache(Protocol):
    """缓存接口"""

    async def get(self, key: str) -> str | None:
        """读取；未命中或已过期返回 None"""
        ...

    async def set(self, key: str, value: str, ttl: int) -> None:
        """写入并设置 TTL（秒）"""
        ...

    async def delete(self, *keys: str) -> None:
        """删除若干键，不存在的键忽略"""
        ...

    async def add_to_index(self, index_key: str, member: str, ttl: int) -> None:
        """把 member 登记到索引集合，并刷新集合 TTL"""
        ...

    async def index_members(self, index_key: str) -> set[str]:
        """读取索引集合的全部成员"""
        ...

    async def remove_from_index(self, index_key: str, *members: str) -> None:
        """从索引集合移除若干成员，不存在的成员忽略"""
        ...

    async def ping(self) -> None:
        """连通性检查，失败抛异常"""
        ...

    async def close(self) -> None:
        """释放连接"""
        ...

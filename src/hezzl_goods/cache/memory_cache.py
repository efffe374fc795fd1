"""MemoryCache -- 进程内 TTL 缓存

供本地开发（CACHE_BACKEND=memory）与测试使用，语义与 RedisCache 一致：
字符串值、每键 TTL、读取时惰性过期。所有方法内部不 await，
在单个事件循环内天然原子。
"""

from __future__ import annotations

import time
from collections.abc import Callable


class MemoryCache:
    """基于 dict 的 TTL 缓存"""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """
        Args:
            clock: 单调时钟，测试可注入假时钟推进时间
        """
        self._clock = clock
        self._values: dict[str, tuple[str, float]] = {}
        self._sets: dict[str, tuple[set[str], float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._values.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._values[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._values[key] = (value, self._clock() + ttl)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._values.pop(key, None)
            self._sets.pop(key, None)

    async def add_to_index(self, index_key: str, member: str, ttl: int) -> None:
        members = self._live_members(index_key) or set()
        members.add(member)
        self._sets[index_key] = (members, self._clock() + ttl)

    async def index_members(self, index_key: str) -> set[str]:
        return set(self._live_members(index_key) or ())

    async def remove_from_index(self, index_key: str, *members: str) -> None:
        live = self._live_members(index_key)
        if live is None:
            return
        live.difference_update(members)
        if not live:
            del self._sets[index_key]

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self._values.clear()
        self._sets.clear()

    def ttl(self, key: str) -> float | None:
        """剩余 TTL（秒）；键不存在或已过期返回 None"""
        entry = self._values.get(key)
        if entry is None:
            return None
        remaining = entry[1] - self._clock()
        return remaining if remaining > 0 else None

    def _live_members(self, index_key: str) -> set[str] | None:
        entry = self._sets.get(index_key)
        if entry is None:
            return None
        members, expires_at = entry
        if expires_at <= self._clock():
            del self._sets[index_key]
            return None
        return members

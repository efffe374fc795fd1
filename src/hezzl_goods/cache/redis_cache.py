"""RedisCache -- 基于 redis.asyncio 的缓存实现

GET / SET EX / DEL；列表键索引使用 SADD + EXPIRE / SMEMBERS / SREM。
连接失败等异常原样抛出，由 GoodsService 记录日志后降级。
"""

from __future__ import annotations

import redis.asyncio as redis
import structlog

log = structlog.get_logger()


class RedisCache:
    """Cache 的 Redis 实现"""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_settings(
        cls,
        host: str,
        port: int,
        password: str = "",
        db: int = 0,
    ) -> "RedisCache":
        """按连接参数创建客户端（惰性连接，首次命令时才建立）"""
        client = redis.Redis(
            host=host,
            port=port,
            password=password or None,
            db=db,
            decode_responses=True,
        )
        return cls(client)

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self._client.set(key, value, ex=ttl)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._client.delete(*keys)

    async def add_to_index(self, index_key: str, member: str, ttl: int) -> None:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.sadd(index_key, member)
            pipe.expire(index_key, ttl)
            await pipe.execute()

    async def index_members(self, index_key: str) -> set[str]:
        return set(await self._client.smembers(index_key))

    async def remove_from_index(self, index_key: str, *members: str) -> None:
        if members:
            await self._client.srem(index_key, *members)

    async def ping(self) -> None:
        await self._client.ping()

    async def close(self) -> None:
        await self._client.aclose()
        log.info("redis_cache_closed")

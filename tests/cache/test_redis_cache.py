"""RedisCache 单元测试 -- mock redis.asyncio 客户端"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from hezzl_goods.cache import RedisCache, create_cache
from hezzl_goods.core.config import Settings


@pytest.fixture
def client() -> MagicMock:
    mock = MagicMock()
    mock.get = AsyncMock(return_value="cached")
    mock.set = AsyncMock()
    mock.delete = AsyncMock()
    mock.smembers = AsyncMock(return_value={"goods:list:10:0"})
    mock.srem = AsyncMock(return_value=1)
    mock.ping = AsyncMock(return_value=True)
    mock.aclose = AsyncMock()

    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, True])
    mock.pipeline.return_value.__aenter__.return_value = pipe
    mock.pipe = pipe
    return mock


class TestRedisCache:
    """命令映射"""

    async def test_get(self, client):
        cache = RedisCache(client)
        assert await cache.get("good:1:1") == "cached"
        client.get.assert_awaited_once_with("good:1:1")

    async def test_set_with_expiry(self, client):
        cache = RedisCache(client)
        await cache.set("good:1:1", "{}", 60)
        client.set.assert_awaited_once_with("good:1:1", "{}", ex=60)

    async def test_delete_many(self, client):
        cache = RedisCache(client)
        await cache.delete("a", "b")
        client.delete.assert_awaited_once_with("a", "b")

    async def test_delete_nothing_skips_command(self, client):
        cache = RedisCache(client)
        await cache.delete()
        client.delete.assert_not_awaited()

    async def test_add_to_index_uses_pipeline(self, client):
        """SADD + EXPIRE 在同一个事务管道中执行"""
        cache = RedisCache(client)
        await cache.add_to_index("goods:list:index", "goods:list:10:0", 60)

        client.pipeline.assert_called_once_with(transaction=True)
        client.pipe.sadd.assert_called_once_with("goods:list:index", "goods:list:10:0")
        client.pipe.expire.assert_called_once_with("goods:list:index", 60)
        client.pipe.execute.assert_awaited_once()

    async def test_index_members(self, client):
        cache = RedisCache(client)
        assert await cache.index_members("goods:list:index") == {"goods:list:10:0"}

    async def test_remove_from_index(self, client):
        cache = RedisCache(client)
        await cache.remove_from_index("goods:list:index", "goods:list:10:0", "goods:list:5:0")
        client.srem.assert_awaited_once_with(
            "goods:list:index", "goods:list:10:0", "goods:list:5:0"
        )

    async def test_remove_from_index_without_members_skips(self, client):
        await RedisCache(client).remove_from_index("goods:list:index")
        client.srem.assert_not_awaited()

    async def test_errors_propagate(self, client):
        """连接错误原样抛出，由服务层降级处理"""
        client.get.side_effect = ConnectionError("redis down")
        cache = RedisCache(client)
        with pytest.raises(ConnectionError):
            await cache.get("k")

    async def test_close(self, client):
        cache = RedisCache(client)
        await cache.close()
        client.aclose.assert_awaited_once()


class TestCreateCache:
    def test_memory_backend(self):
        from hezzl_goods.cache import MemoryCache

        cache = create_cache(Settings(cache_backend="memory"))
        assert isinstance(cache, MemoryCache)

    def test_redis_backend(self):
        cache = create_cache(Settings(cache_backend="redis", redis_addr="localhost:6390"))
        assert isinstance(cache, RedisCache)

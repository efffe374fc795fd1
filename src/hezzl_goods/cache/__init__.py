"""hezzl-goods Cache -- 读穿透缓存层

公开接口导出 + 按配置选择后端的工厂函数。
"""

import structlog

from ..core.config import Settings
from .keys import GOODS_LIST_INDEX_KEY, good_key, goods_list_key
from .memory_cache import MemoryCache
from .protocols import Cache
from .redis_cache import RedisCache

log = structlog.get_logger()


def create_cache(settings: Settings) -> Cache:
    """根据 CACHE_BACKEND 创建缓存实例"""
    if settings.cache_backend == "memory":
        log.info("cache_initialized", backend="memory")
        return MemoryCache()

    host, port = settings.redis_host_port
    log.info("cache_initialized", backend="redis", host=host, port=port, db=settings.redis_db)
    return RedisCache.from_settings(
        host=host,
        port=port,
        password=settings.redis_password.get_secret_value(),
        db=settings.redis_db,
    )


__all__ = [
    "Cache",
    "MemoryCache",
    "RedisCache",
    "create_cache",
    "GOODS_LIST_INDEX_KEY",
    "good_key",
    "goods_list_key",
]

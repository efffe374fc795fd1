"""gateway 测试共享 fixture"""

import pytest
import pytest_asyncio

from hezzl_goods.cache import MemoryCache
from hezzl_goods.core.models import AuditEvent
from hezzl_goods.gateway.services.goods_service import GoodsService


class RecordingPublisher:
    """记录所有发布的审计事件"""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    async def publish(self, event: AuditEvent) -> None:
        self.events.append(event)

    def operations(self) -> list[str]:
        return [e.operation.value for e in self.events]


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest_asyncio.fixture
async def service(store_group, memory_cache, publisher) -> GoodsService:
    """真实 SQLite 存储 + 进程内缓存 + 记录型发布者"""
    return GoodsService(
        store=store_group.goods_store,
        cache=memory_cache,
        publisher=publisher,
        timeout_s=2.0,
    )

"""GoodsService -- 商品业务编排

每个操作的固定流程：
1. 参数校验（任何 I/O 之前），失败抛 InvalidInputError
2. 在 asyncio.timeout 内调用 GoodsStore（单事务）
3. 成功后维护缓存：读穿透写入，或按受影响商品 + 全部列表键失效
4. 发布审计事件

缓存与审计都是 best-effort：失败只记日志，不影响响应。
存储层的 GoodNotFoundError / SamePriorityError 原样透传，
超时与其他存储异常统一包装为 InternalError。
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog
from pydantic import ValidationError

from ...audit.protocols import AuditPublisher
from ...cache.keys import GOODS_LIST_INDEX_KEY, good_key, goods_list_key
from ...cache.protocols import Cache
from ...core.config import CACHE_TTL_SECONDS
from ...core.exceptions import GoodsError, InternalError, InvalidInputError
from ...core.models import (
    AuditEvent,
    AuditOperation,
    Good,
    GoodCreateRequest,
    GoodDeleteReceipt,
    GoodPriority,
    GoodsListResponse,
    GoodUpdateRequest,
    ListRequest,
)
from ...core.store.protocols import GoodsStore

log = structlog.get_logger()

T = TypeVar("T")


class GoodsService:
    """商品业务服务"""

    def __init__(
        self,
        store: GoodsStore,
        cache: Cache,
        publisher: AuditPublisher,
        timeout_s: float = 5.0,
    ) -> None:
        self._store = store
        self._cache = cache
        self._publisher = publisher
        self._timeout_s = timeout_s

    # ============================================================
    # 操作
    # ============================================================

    async def create_good(self, project_id: int, request: GoodCreateRequest) -> Good:
        """创建商品；新商品不影响任何已缓存的条目"""
        _require_positive("projectId", project_id)
        _require_name(request.name)

        good = await self._call_store(
            "create", self._store.create_good(project_id, request)
        )
        log.info("good_created", good_id=good.id, priority=good.priority)

        await self._publish(AuditEvent.from_good(AuditOperation.CREATE, good))
        return good

    async def get_good(self, good_id: int, project_id: int) -> Good:
        """读穿透：先查缓存，未命中回源并写入缓存（TTL 60s）"""
        _require_positive("id", good_id)
        _require_positive("projectId", project_id)

        key = good_key(good_id, project_id)
        good = None
        cached = await self._cache_get(key)
        if cached is not None:
            try:
                good = Good.model_validate_json(cached)
            except ValidationError as e:
                log.warning("cache_entry_decode_failed", key=key, error=str(e))

        if good is None:
            good = await self._call_store(
                "get", self._store.get_good(good_id, project_id)
            )
            await self._cache_set(key, good.to_json())

        await self._publish(AuditEvent.from_good(AuditOperation.GET, good))
        return good

    async def update_good(
        self,
        good_id: int,
        project_id: int,
        request: GoodUpdateRequest,
    ) -> Good:
        """更新名称/描述，随后失效该商品与全部列表缓存"""
        _require_positive("id", good_id)
        _require_positive("projectId", project_id)
        _require_name(request.name)

        good = await self._call_store(
            "update", self._store.update_good(good_id, project_id, request)
        )

        await self._invalidate([good_key(good_id, project_id)])
        await self._publish(AuditEvent.from_good(AuditOperation.UPDATE, good))
        return good

    async def delete_good(self, good_id: int, project_id: int) -> GoodDeleteReceipt:
        """软删除"""
        _require_positive("id", good_id)
        _require_positive("projectId", project_id)

        receipt = await self._call_store(
            "delete", self._store.delete_good(good_id, project_id)
        )
        log.info("good_removed", good_id=good_id)

        await self._invalidate([good_key(good_id, project_id)])
        await self._publish(AuditEvent.from_receipt(receipt))
        return receipt

    async def list_goods(self, request: ListRequest) -> GoodsListResponse:
        """分页列表（读穿透），列表读取不产生审计事件"""
        effective = request.normalized()
        key = goods_list_key(effective.limit, effective.offset)

        cached = await self._cache_get(key)
        if cached is not None:
            try:
                return GoodsListResponse.model_validate_json(cached)
            except ValidationError as e:
                log.warning("cache_entry_decode_failed", key=key, error=str(e))

        goods, meta = await self._call_store("list", self._store.list_goods(effective))
        response = GoodsListResponse(meta=meta, goods=goods)

        await self._cache_set(key, response.to_json())
        await self._cache_index(key)
        return response

    async def reprioritize(
        self,
        good_id: int,
        project_id: int,
        new_priority: int,
    ) -> list[GoodPriority]:
        """重排优先级

        被挪动的每个商品都失效其缓存并各自产生一条审计事件。
        """
        _require_positive("id", good_id)
        _require_positive("projectId", project_id)
        _require_positive("newPriority", new_priority)

        priorities = await self._call_store(
            "reprioritize",
            self._store.reprioritize(good_id, project_id, new_priority),
        )
        log.info(
            "good_reprioritized",
            good_id=good_id,
            new_priority=new_priority,
            affected=len(priorities),
        )

        await self._invalidate([good_key(p.id, p.project_id) for p in priorities])
        for item in priorities:
            await self._publish(AuditEvent.from_priority(item))
        return priorities

    # ============================================================
    # 内部辅助
    # ============================================================

    async def _call_store(self, operation: str, call: Awaitable[T]) -> T:
        try:
            async with asyncio.timeout(self._timeout_s):
                return await call
        except GoodsError:
            raise
        except TimeoutError as e:
            log.warning(
                "store_call_timeout",
                operation=operation,
                timeout_s=self._timeout_s,
            )
            raise InternalError(f"{operation}: store call timed out") from e
        except Exception as e:
            log.warning("store_call_failed", operation=operation, error=str(e))
            raise InternalError(f"{operation}: {e}") from e

    async def _cache_get(self, key: str) -> str | None:
        try:
            return await self._cache.get(key)
        except Exception as e:
            log.warning("cache_get_failed", key=key, error=str(e))
            return None

    async def _cache_set(self, key: str, value: str) -> None:
        try:
            await self._cache.set(key, value, CACHE_TTL_SECONDS)
        except Exception as e:
            log.warning("cache_set_failed", key=key, error=str(e))

    async def _cache_index(self, list_key: str) -> None:
        try:
            await self._cache.add_to_index(
                GOODS_LIST_INDEX_KEY, list_key, CACHE_TTL_SECONDS
            )
        except Exception as e:
            log.warning("cache_index_failed", key=list_key, error=str(e))

    async def _invalidate(self, good_keys: list[str]) -> None:
        """删除给定商品键与索引中登记的全部列表键，并把这些列表键移出索引

        先移出索引再删除：读者先写值后登记，删除之后写入的列表键必然重新登记。
        只移除本次读到的成员。
        """
        try:
            list_keys = await self._cache.index_members(GOODS_LIST_INDEX_KEY)
        except Exception as e:
            log.warning("cache_index_read_failed", error=str(e))
            list_keys = set()

        if list_keys:
            try:
                await self._cache.remove_from_index(
                    GOODS_LIST_INDEX_KEY, *sorted(list_keys)
                )
            except Exception as e:
                log.warning("cache_index_prune_failed", error=str(e))

        try:
            await self._cache.delete(*good_keys, *sorted(list_keys))
        except Exception as e:
            log.warning("cache_invalidate_failed", keys=good_keys, error=str(e))

    async def _publish(self, event: AuditEvent) -> None:
        try:
            await self._publisher.publish(event)
        except Exception as e:
            log.warning(
                "audit_publish_failed",
                operation=event.operation.value,
                good_id=event.good_id,
                error=str(e),
            )


def _require_positive(field: str, value: int) -> None:
    if value <= 0:
        raise InvalidInputError(f"{field} must be a positive integer")


def _require_name(name: str) -> None:
    if not name.strip():
        raise InvalidInputError("name must not be empty")

"""Store Protocol 接口定义

定义 GoodsStore（主库）与 AuditSink（分析库）的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing），测试可替换为内存实现。
"""

from typing import Protocol

from ..models.audit import AuditEvent
from ..models.good import (
    Good,
    GoodCreateRequest,
    GoodDeleteReceipt,
    GoodPriority,
    GoodUpdateRequest,
    ListMeta,
    ListRequest,
)


class GoodsStore(Protocol):
    """商品存储接口

    所有写操作在单个事务内完成；不存在时抛出 GoodNotFoundError。
    """

    async def create_good(self, project_id: int, request: GoodCreateRequest) -> Good:
        """创建商品，priority = 当前最大值 + 1"""
        ...

    async def get_good(self, good_id: int, project_id: int) -> Good:
        """按 (id, project_id) 查询"""
        ...

    async def update_good(
        self,
        good_id: int,
        project_id: int,
        request: GoodUpdateRequest,
    ) -> Good:
        """更新名称；description 为 None 时保留原值"""
        ...

    async def delete_good(self, good_id: int, project_id: int) -> GoodDeleteReceipt:
        """软删除"""
        ...

    async def list_goods(self, request: ListRequest) -> tuple[list[Good], ListMeta]:
        """分页列表（created_at 倒序）+ 统计信息"""
        ...

    async def reprioritize(
        self,
        good_id: int,
        project_id: int,
        new_priority: int,
    ) -> list[GoodPriority]:
        """移动目标优先级并级联 ±1 挪动区间内的其他商品"""
        ...


class AuditSink(Protocol):
    """审计事件落库接口 -- 一次调用一个事务"""

    async def write_batch(self, events: list[AuditEvent]) -> int:
        """批量写入，返回写入行数；失败时整批回滚并抛出异常"""
        ...

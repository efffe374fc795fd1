"""AuditEvent Domain Model

每次成功的变更（以及单条读取）都会产生一条审计事件，
经消息总线（subject: goods.logs）投递，批量写入 goods_logs 分析表。
事件一经产生即不可变。
"""

from datetime import UTC, datetime

from pydantic import Field

from .enums import AuditOperation
from .good import CamelModel, Good, GoodDeleteReceipt, GoodPriority


class AuditEvent(CamelModel):
    """审计事件 -- event_time 由生产者在发布时刻赋值（UTC）"""

    operation: AuditOperation = Field(description="操作类型")
    good_id: int = Field(description="商品 ID")
    project_id: int = Field(description="项目 ID")
    name: str = Field(default="", description="商品名称快照")
    description: str = Field(default="", description="描述快照")
    priority: int = Field(default=0, description="优先级快照")
    removed: bool = Field(default=False, description="软删除标记快照")
    event_time: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="事件时间",
    )

    @classmethod
    def from_good(cls, operation: AuditOperation, good: Good) -> "AuditEvent":
        """由完整商品快照构造事件"""
        return cls(
            operation=operation,
            good_id=good.id,
            project_id=good.project_id,
            name=good.name,
            description=good.description,
            priority=good.priority,
            removed=good.removed,
        )

    @classmethod
    def from_receipt(cls, receipt: GoodDeleteReceipt) -> "AuditEvent":
        """删除事件：回执只含 id / project_id / removed"""
        return cls(
            operation=AuditOperation.DELETE,
            good_id=receipt.id,
            project_id=receipt.project_id,
            removed=receipt.removed,
        )

    @classmethod
    def from_priority(cls, item: GoodPriority) -> "AuditEvent":
        """重排事件：每个受影响的商品一条"""
        return cls(
            operation=AuditOperation.REPRIORITIZE,
            good_id=item.id,
            project_id=item.project_id,
            priority=item.priority,
        )

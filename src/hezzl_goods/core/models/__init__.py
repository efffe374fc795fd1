"""hezzl-goods Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .audit import AuditEvent
from .enums import AuditOperation
from .good import (
    DEFAULT_LIST_LIMIT,
    Good,
    GoodCreateRequest,
    GoodDeleteReceipt,
    GoodPriority,
    GoodsListResponse,
    GoodUpdateRequest,
    ListMeta,
    ListRequest,
    PriorityResponse,
    Project,
    ReprioritizeRequest,
)
from .user import UserInfo

__all__ = [
    # 枚举
    "AuditOperation",
    # Good
    "Good",
    "Project",
    "GoodCreateRequest",
    "GoodUpdateRequest",
    "GoodDeleteReceipt",
    "ReprioritizeRequest",
    "GoodPriority",
    "PriorityResponse",
    # 列表
    "DEFAULT_LIST_LIMIT",
    "ListRequest",
    "ListMeta",
    "GoodsListResponse",
    # 审计
    "AuditEvent",
    # 身份
    "UserInfo",
]

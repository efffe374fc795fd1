"""枚举定义

审计事件的操作类型。值即写入 goods_logs.operation 列的字符串。
"""

from enum import StrEnum


class AuditOperation(StrEnum):
    """审计操作类型"""

    CREATE = "create"
    GET = "get"
    UPDATE = "update"
    DELETE = "delete"
    REPRIORITIZE = "reprioritize"

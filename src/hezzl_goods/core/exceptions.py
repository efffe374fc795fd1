"""hezzl-goods 异常体系

每个异常携带对外错误码与 HTTP 状态码，由 gateway 的异常处理器统一渲染为
{"error": {"code": ..., "message": ...}}。
"""


class GoodsError(Exception):
    """基础异常"""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(GoodsError):
    """请求参数非法（空名称、非正 id / projectId / newPriority）"""

    code = "INVALID_INPUT"
    status_code = 400


class GoodNotFoundError(GoodsError):
    """商品在所属项目中不存在（或已被软删除，对写操作而言）"""

    code = "GOOD_NOT_FOUND"
    status_code = 404

    def __init__(self, good_id: int, project_id: int) -> None:
        super().__init__(
            f"Good with id {good_id} does not exist in project {project_id}"
        )
        self.good_id = good_id
        self.project_id = project_id


class SamePriorityError(GoodsError):
    """重排目标优先级与当前值相同 -- 按客户端错误处理"""

    code = "PRIORITY_CONFLICT"
    status_code = 400

    def __init__(self, good_id: int, priority: int) -> None:
        super().__init__(
            f"New priority {priority} equals the current priority of good {good_id}"
        )
        self.good_id = good_id
        self.priority = priority


class UnauthorizedError(GoodsError):
    """令牌缺失、格式错误、过期或签名算法不符"""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, reason: str = "invalid token") -> None:
        super().__init__(f"authorization failed: {reason}")
        self.reason = reason


class InternalError(GoodsError):
    """与客户端输入无关的失败（事务、超时、编码等）

    对外只返回通用信息，原始异常通过 __cause__ 保留用于日志。
    """

    code = "INTERNAL_ERROR"
    status_code = 500

"""TraceMiddleware -- 把商品寻址参数绑定到日志上下文

/api/v1/good/* 请求的查询参数 id / projectId 作为 good_id / project_id
贯穿该请求的全部日志。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_GOOD_PATH_PREFIX = "/api/v1/good/"


class TraceMiddleware(BaseHTTPMiddleware):
    """商品级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(_GOOD_PATH_PREFIX):
            params = request.query_params
            trace: dict[str, str] = {}
            if good_id := params.get("id"):
                trace["good_id"] = good_id
            if project_id := params.get("projectId"):
                trace["project_id"] = project_id
            if trace:
                structlog.contextvars.bind_contextvars(**trace)

        return await call_next(request)

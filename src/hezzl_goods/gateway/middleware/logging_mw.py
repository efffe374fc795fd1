"""LoggingMiddleware -- 请求级日志

每个请求一个 ULID request_id：上游网关传入合法的 X-Request-ID 时沿用，
否则新生成。request_id 与 method / path 绑定到 structlog contextvars，
并通过 X-Request-ID 响应头返回。5xx 以 warning 级别记录，
未处理异常记录 request_failed 后继续上抛给异常处理器。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"


def resolve_request_id(inbound: str | None) -> str:
    """沿用合法的上游 ULID，否则生成新的"""
    if inbound:
        try:
            return str(ULID.from_str(inbound))
        except ValueError:
            pass
    return str(ULID())


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        log = structlog.get_logger()
        await log.adebug("request_started")
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            await log.aexception("request_failed", duration_ms=_elapsed_ms(started))
            raise

        status_code = response.status_code
        emit = log.awarning if status_code >= 500 else log.ainfo
        await emit(
            "request_completed",
            status_code=status_code,
            duration_ms=_elapsed_ms(started),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

"""异常处理器 -- 统一错误响应格式

{"error": {"code": "...", "message": "..."}}

500 只返回固定文案，真实原因写日志。
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from ..core.exceptions import GoodsError, InternalError

log = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


async def goods_error_handler(request: Request, exc: GoodsError) -> JSONResponse:
    if exc.status_code >= 500:
        log.warning(
            "request_failed",
            code=exc.code,
            error=exc.message,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
        return error_response(exc.status_code, exc.code, INTERNAL_ERROR_MESSAGE)

    log.info("request_rejected", code=exc.code, error=exc.message)
    return error_response(exc.status_code, exc.code, exc.message)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """查询参数或请求体格式错误 -> 400 INVALID_INPUT"""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    log.info("request_invalid", details=details)
    return error_response(400, "INVALID_INPUT", details or "invalid request")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_error", error=str(exc))
    return error_response(500, InternalError.code, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GoodsError, goods_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

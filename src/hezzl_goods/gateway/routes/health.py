"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，主库 / 分析库 / 缓存 / 消息总线任一不可用返回 503。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证核心依赖可用性

    检查项：
    1. goods_db: 主库连通性
    2. goods_logs_db: 分析库连通性
    3. cache: 缓存 PING
    4. bus: 消息总线连接状态
    5. audit_pending: 审计缓冲积压数（仅展示，不影响结果）
    """
    state = request.app.state
    checks: dict[str, str | int] = {}
    all_ok = True

    try:
        await state.store_group.goods_db.ping()
        checks["goods_db"] = "ok"
    except Exception as e:
        checks["goods_db"] = f"error: {e}"
        all_ok = False

    try:
        await state.store_group.logs_db.ping()
        checks["goods_logs_db"] = "ok"
    except Exception as e:
        checks["goods_logs_db"] = f"error: {e}"
        all_ok = False

    try:
        await state.cache.ping()
        checks["cache"] = "ok"
    except Exception as e:
        log.warning("cache_ping_failed", error=str(e))
        checks["cache"] = f"error: {e}"
        all_ok = False

    if state.bus.is_connected:
        checks["bus"] = "ok"
    else:
        checks["bus"] = "error: disconnected"
        all_ok = False

    batcher = getattr(state, "audit_batcher", None)
    if batcher is not None:
        checks["audit_pending"] = batcher.pending

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )

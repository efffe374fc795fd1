"""FastAPI 应用主文件

app 创建 + lifespan 管理：
启动：Store 组 -> 缓存 -> 消息总线 -> 审计批量消费者 -> 生产者 -> GoodsService
关闭：停止批量消费者（最后一次刷新）-> 关闭总线 -> 缓存 -> Store 组
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from fastapi import FastAPI

from .. import __version__
from ..audit import AuditBatcher, AuditProducer, create_bus
from ..cache import create_cache
from ..core.config import Settings, load_settings
from ..core.store import create_store_group
from .auth import load_public_key
from .errors import register_exception_handlers
from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import goods, health
from .services.goods_service import GoodsService

log = structlog.get_logger()


async def startup(app: FastAPI) -> None:
    """按依赖顺序初始化组件并挂到 app.state"""
    settings: Settings = app.state.settings

    store_group = await create_store_group(
        settings.goods_db_path,
        settings.goods_logs_db_path,
        pool_size=settings.db_pool_size,
    )
    app.state.store_group = store_group

    app.state.cache = create_cache(settings)
    app.state.bus = await create_bus(settings)

    batcher = AuditBatcher(
        bus=app.state.bus,
        sink=store_group.audit_store,
        subject=settings.nats_subject,
        batch_size=settings.audit_batch_size,
        flush_interval=settings.audit_flush_interval_s,
    )
    await batcher.start()
    app.state.audit_batcher = batcher

    producer = AuditProducer(app.state.bus, settings.nats_subject)
    app.state.goods_service = GoodsService(
        store=store_group.goods_store,
        cache=app.state.cache,
        publisher=producer,
        timeout_s=settings.request_timeout_s,
    )
    log.info("gateway_started", bind_address=settings.bind_address)


async def shutdown(app: FastAPI) -> None:
    """逆序释放资源；单个组件关闭失败不影响其余组件"""
    state = app.state

    batcher = getattr(state, "audit_batcher", None)
    if batcher is not None:
        await batcher.stop()

    for name in ("bus", "cache", "store_group"):
        component = getattr(state, name, None)
        if component is None:
            continue
        try:
            await component.close()
        except Exception as e:
            log.warning("component_close_failed", component=name, error=str(e))

    log.info("gateway_stopped")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理"""
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)


def create_app(
    settings: Settings | None = None,
    public_key: RSAPublicKey | None = None,
) -> FastAPI:
    """创建 FastAPI 应用实例

    Args:
        settings: 服务配置，None 时从环境变量加载
        public_key: JWT 验签公钥，None 时按 AUTH_PUBLIC_KEY_PATH / 包内置公钥加载
    """
    settings = settings or load_settings()

    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="hezzl-goods",
        version=__version__,
        description="商品目录服务 API",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.public_key = public_key or load_public_key(settings.auth_public_key_path)

    # 注册中间件（顺序：先 Trace 后 Logging，Logging 在最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(goods.router, tags=["goods"])
    app.include_router(health.router, tags=["health"])

    return app

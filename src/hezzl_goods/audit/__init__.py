"""hezzl-goods Audit -- 审计事件生产、传输与批量落库"""

import structlog

from ..core.config import Settings
from .batcher import AuditBatcher
from .bus import InProcessBus, NatsBus
from .producer import AuditProducer
from .protocols import AuditPublisher, MessageBus, MessageHandler, Subscription

log = structlog.get_logger()


async def create_bus(settings: Settings) -> MessageBus:
    """按配置创建消息总线

    Raises:
        ValueError: 未知的 BUS_BACKEND
    """
    if settings.bus_backend == "memory":
        bus: MessageBus = InProcessBus()
    elif settings.bus_backend == "nats":
        bus = await NatsBus.connect(settings.nats_url)
    else:
        raise ValueError(f"unknown bus backend: {settings.bus_backend}")

    log.info("bus_initialized", backend=settings.bus_backend)
    return bus


__all__ = [
    "AuditBatcher",
    "AuditProducer",
    "AuditPublisher",
    "InProcessBus",
    "MessageBus",
    "MessageHandler",
    "NatsBus",
    "Subscription",
    "create_bus",
]

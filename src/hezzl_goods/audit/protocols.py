"""Audit Protocol 接口定义

MessageBus: 按 subject 发布/订阅字节消息
AuditPublisher: GoodsService 依赖的唯一审计能力
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from ..core.models.audit import AuditEvent

MessageHandler = Callable[[bytes], Awaitable[None]]


class Subscription(Protocol):
    """订阅句柄"""

    async def drain(self) -> None:
        """停止接收新消息，等待已投递的消息处理完毕后退订"""
        ...

    async def unsubscribe(self) -> None:
        """立即退订，未处理的消息丢弃"""
        ...


class MessageBus(Protocol):
    """消息总线接口 -- 每进程共享一个连接"""

    @property
    def is_connected(self) -> bool:
        ...

    async def publish(self, subject: str, payload: bytes) -> None:
        """发布消息"""
        ...

    async def subscribe(self, subject: str, handler: MessageHandler) -> Subscription:
        """订阅 subject，每条消息回调 handler(payload)"""
        ...

    async def close(self) -> None:
        """排空并关闭连接"""
        ...


class AuditPublisher(Protocol):
    """审计事件发布接口；实现不得向调用方抛出异常"""

    async def publish(self, event: AuditEvent) -> None:
        ...

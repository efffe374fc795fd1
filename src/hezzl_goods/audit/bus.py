"""消息总线实现

InProcessBus: 进程内广播器，每个订阅持有一个 asyncio.Queue + 分发任务，
              用于本地开发（BUS_BACKEND=memory）与测试。
NatsBus:      基于 nats-py 的生产实现，单连接、线程安全发布。
"""

import asyncio
from collections import defaultdict

import nats
import structlog
from nats.aio.client import Client as NatsClient
from nats.aio.msg import Msg

from .protocols import MessageHandler, Subscription

log = structlog.get_logger()


class InProcessSubscription:
    """进程内订阅 -- 队列 + 分发任务"""

    def __init__(
        self,
        bus: "InProcessBus",
        subject: str,
        handler: MessageHandler,
        queue_maxsize: int,
    ) -> None:
        self._bus = bus
        self.subject = subject
        self.queue: asyncio.Queue[bytes] = asyncio.Queue(maxsize=queue_maxsize)
        self._handler = handler
        self._task = asyncio.create_task(self._dispatch())

    async def _dispatch(self) -> None:
        while True:
            payload = await self.queue.get()
            try:
                await self._handler(payload)
            except Exception:
                log.exception("bus_handler_failed", subject=self.subject)
            finally:
                self.queue.task_done()

    async def join(self) -> None:
        """等待队列中已投递的消息全部处理完"""
        await self.queue.join()

    async def drain(self) -> None:
        """停止接收新消息，处理完队列中剩余消息后退订"""
        self._bus._remove(self)
        await self.queue.join()
        await self._stop_dispatch()

    async def unsubscribe(self) -> None:
        """立即退订，队列中未处理的消息丢弃"""
        self._bus._remove(self)
        await self._stop_dispatch()

    async def _stop_dispatch(self) -> None:
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class InProcessBus:
    """进程内发布/订阅 -- 基于 asyncio.Queue

    队列满时丢弃消息并记录告警（发布方永不阻塞）。
    """

    def __init__(self, queue_maxsize: int = 10_000) -> None:
        # subject -> set of subscription
        self._subscribers: dict[str, set[InProcessSubscription]] = defaultdict(set)
        self._queue_maxsize = queue_maxsize
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return not self._closed

    async def publish(self, subject: str, payload: bytes) -> None:
        if self._closed:
            raise ConnectionError("in-process bus is closed")

        for sub in list(self._subscribers.get(subject, ())):
            try:
                sub.queue.put_nowait(payload)
            except asyncio.QueueFull:
                log.warning("bus_queue_full_message_dropped", subject=subject)

    async def subscribe(self, subject: str, handler: MessageHandler) -> Subscription:
        sub = InProcessSubscription(self, subject, handler, self._queue_maxsize)
        self._subscribers[subject].add(sub)
        return sub

    async def drain(self) -> None:
        """等待所有订阅的在途消息处理完毕（测试辅助）"""
        for subs in list(self._subscribers.values()):
            for sub in list(subs):
                await sub.join()

    async def close(self) -> None:
        await self.drain()
        for subs in list(self._subscribers.values()):
            for sub in list(subs):
                await sub.unsubscribe()
        self._closed = True

    def _remove(self, sub: InProcessSubscription) -> None:
        subs = self._subscribers.get(sub.subject)
        if subs is None:
            return
        subs.discard(sub)
        if not subs:
            del self._subscribers[sub.subject]


class NatsBus:
    """MessageBus 的 NATS 实现"""

    def __init__(self, client: NatsClient) -> None:
        self._nc = client

    @classmethod
    async def connect(cls, url: str, name: str = "hezzl-goods") -> "NatsBus":
        """连接 NATS 服务器

        Raises:
            Exception: 连接失败（由 lifespan 处理）
        """
        client = await nats.connect(servers=[url], name=name)
        log.info("nats_connected", url=url)
        return cls(client)

    @property
    def is_connected(self) -> bool:
        return self._nc.is_connected

    async def publish(self, subject: str, payload: bytes) -> None:
        await self._nc.publish(subject, payload)

    async def subscribe(self, subject: str, handler: MessageHandler) -> Subscription:
        async def _callback(msg: Msg) -> None:
            try:
                await handler(msg.data)
            except Exception:
                log.exception("bus_handler_failed", subject=msg.subject)

        return await self._nc.subscribe(subject, cb=_callback)

    async def close(self) -> None:
        if self._nc.is_closed:
            return
        await self._nc.drain()
        log.info("nats_closed")

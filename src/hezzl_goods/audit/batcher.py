"""审计批量消费者 -- 订阅 goods.logs，攒批写入 goods_logs

刷新触发：缓冲达到 batch_size，或距上次刷新满 flush_interval 秒。
刷新时在锁内取走整段缓冲后立即释放锁，慢速写入不阻塞新事件入队。
写入失败时整批放回缓冲头部，暂停数量触发，由定时器或手动刷新重试，
写入恢复后数量触发随之恢复；缓冲上限 max_buffer，溢出时丢弃最旧的事件并告警。
"""

import asyncio
import contextlib

import structlog
from pydantic import ValidationError

from ..core.config import DEFAULT_AUDIT_SUBJECT
from ..core.models.audit import AuditEvent
from ..core.store.protocols import AuditSink
from .protocols import MessageBus, Subscription

log = structlog.get_logger()

DEFAULT_BATCH_SIZE = 30
DEFAULT_FLUSH_INTERVAL_S = 5.0
DEFAULT_MAX_BUFFER = 10_000


class AuditBatcher:
    """审计事件批量写入器"""

    def __init__(
        self,
        bus: MessageBus,
        sink: AuditSink,
        subject: str = DEFAULT_AUDIT_SUBJECT,
        batch_size: int = DEFAULT_BATCH_SIZE,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL_S,
        max_buffer: int = DEFAULT_MAX_BUFFER,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if max_buffer < batch_size:
            raise ValueError("max_buffer must be >= batch_size")

        self._bus = bus
        self._sink = sink
        self._subject = subject
        self._batch_size = batch_size
        self._flush_interval = flush_interval
        self._max_buffer = max_buffer

        self._buffer: list[AuditEvent] = []
        # 保护 _buffer
        self._lock = asyncio.Lock()
        # 串行化写入，保证重试批次的顺序
        self._flush_lock = asyncio.Lock()
        self._flush_scheduled = False
        # 上次写入失败；期间只由定时器重试
        self._write_failing = False
        self._flush_tasks: set[asyncio.Task[int]] = set()

        self._subscription: Subscription | None = None
        self._timer_task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        """缓冲中尚未落库的事件数"""
        return len(self._buffer)

    @property
    def running(self) -> bool:
        return self._subscription is not None

    async def start(self) -> None:
        """订阅 subject 并启动定时刷新"""
        if self._subscription is not None:
            return
        self._subscription = await self._bus.subscribe(self._subject, self._on_message)
        self._timer_task = asyncio.create_task(self._run_timer())
        log.info(
            "audit_batcher_started",
            subject=self._subject,
            batch_size=self._batch_size,
            flush_interval=self._flush_interval,
        )

    async def stop(self) -> None:
        """处理完已投递的消息后退订，停止定时器，等待在途刷新后做最后一次刷新"""
        if self._subscription is not None:
            await self._subscription.drain()
            self._subscription = None

        if self._timer_task is not None:
            self._timer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer_task
            self._timer_task = None

        if self._flush_tasks:
            await asyncio.gather(*self._flush_tasks, return_exceptions=True)

        await self.flush()
        if self._buffer:
            log.warning("audit_batcher_stopped_with_pending", pending=len(self._buffer))
        log.info("audit_batcher_stopped")

    async def flush(self) -> int:
        """把当前缓冲整体写入 sink

        Returns:
            写入行数；缓冲为空或写入失败时为 0
        """
        async with self._flush_lock:
            async with self._lock:
                self._flush_scheduled = False
                if not self._buffer:
                    return 0
                batch = self._buffer
                self._buffer = []

            try:
                written = await self._sink.write_batch(batch)
            except Exception as e:
                async with self._lock:
                    self._buffer = batch + self._buffer
                    self._trim_buffer()
                    if not self._write_failing:
                        self._write_failing = True
                        log.warning("audit_size_trigger_suspended")
                log.warning(
                    "audit_batch_write_failed",
                    batch_size=len(batch),
                    pending=len(self._buffer),
                    error=str(e),
                )
                return 0

            if self._write_failing:
                self._write_failing = False
                log.info("audit_size_trigger_resumed")

        log.debug("audit_batch_written", rows=written)
        return written

    async def _on_message(self, payload: bytes) -> None:
        try:
            event = AuditEvent.model_validate_json(payload)
        except ValidationError as e:
            log.warning("audit_event_decode_failed", error=str(e))
            return

        async with self._lock:
            self._buffer.append(event)
            self._trim_buffer()
            should_flush = (
                len(self._buffer) >= self._batch_size
                and not self._flush_scheduled
                and not self._write_failing
            )
            if should_flush:
                self._flush_scheduled = True

        if should_flush:
            task = asyncio.create_task(self.flush())
            self._flush_tasks.add(task)
            task.add_done_callback(self._flush_tasks.discard)

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self._flush_interval)
            await self.flush()

    def _trim_buffer(self) -> None:
        """调用方须持有 _lock"""
        overflow = len(self._buffer) - self._max_buffer
        if overflow > 0:
            del self._buffer[:overflow]
            log.warning("audit_buffer_overflow", dropped=overflow)

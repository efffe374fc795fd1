"""审计事件生产者 -- 变更成功后异步发布到 goods.logs

发布失败只记日志，绝不影响主业务响应（审计是 best-effort）。
"""

import structlog

from ..core.config import DEFAULT_AUDIT_SUBJECT
from ..core.models.audit import AuditEvent
from .protocols import MessageBus

log = structlog.get_logger()


class AuditProducer:
    """AuditPublisher 实现：AuditEvent -> JSON -> MessageBus"""

    def __init__(self, bus: MessageBus, subject: str = DEFAULT_AUDIT_SUBJECT) -> None:
        self._bus = bus
        self._subject = subject

    @property
    def subject(self) -> str:
        return self._subject

    async def publish(self, event: AuditEvent) -> None:
        try:
            await self._bus.publish(self._subject, event.to_json().encode("utf-8"))
        except Exception as e:
            log.warning(
                "audit_publish_failed",
                subject=self._subject,
                operation=event.operation.value,
                good_id=event.good_id,
                error=str(e),
            )

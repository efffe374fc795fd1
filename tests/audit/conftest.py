"""audit 测试共享 fixture 与辅助"""

import asyncio
from collections.abc import Callable

import pytest

from hezzl_goods.core.models import AuditEvent, AuditOperation


class FakeSink:
    """内存 AuditSink；fail_times > 0 时前若干次写入抛异常"""

    def __init__(self, fail_times: int = 0) -> None:
        self.batches: list[list[AuditEvent]] = []
        self.fail_times = fail_times
        self.calls = 0

    async def write_batch(self, events: list[AuditEvent]) -> int:
        self.calls += 1
        if self.fail_times:
            self.fail_times -= 1
            raise RuntimeError("analytical store unavailable")
        self.batches.append(list(events))
        return len(events)

    @property
    def rows(self) -> list[AuditEvent]:
        return [event for batch in self.batches for event in batch]


def _make_event(
    good_id: int, operation: AuditOperation = AuditOperation.CREATE
) -> AuditEvent:
    return AuditEvent(
        operation=operation,
        good_id=good_id,
        project_id=1,
        name=f"g{good_id}",
        priority=good_id,
    )


async def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """轮询直到 predicate 为真，超时则断言失败"""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def make_event() -> Callable[..., AuditEvent]:
    return _make_event


@pytest.fixture
def wait_for():
    return _wait_for

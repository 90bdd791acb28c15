# plpgen/generation/progress.py
"""
Best-effort progress reporting for long-running batches.
"""
from typing import Awaitable, Callable, List, Optional

from plpgen.core.logging import log

ProgressSink = Callable[[str], Awaitable[None]]


def progress_step(total: int) -> int:
    return max(1, total // 10)


def should_report(index: int, total: int) -> bool:
    """First unit, last unit, and every progress_step(total)-th unit."""
    return index == 1 or index == total or index % progress_step(total) == 0


def report_indices(total: int) -> List[int]:
    return [i for i in range(1, total + 1) if should_report(i, total)]


def generating_message(index: int, total: int) -> str:
    return f"✨ Generating… {index}/{total}"


def packing_message(archive_name: str = "outputs.zip") -> str:
    return f"📦 Packing {archive_name}…"


class ProgressReporter:
    """
    Wraps a sink so that a failing sink never breaks the batch.

    A None sink turns reporting into a no-op.
    """

    def __init__(self, sink: Optional[ProgressSink] = None):
        self.sink = sink
        self.sent = 0
        self.failed = 0

    async def notify(self, message: str) -> None:
        log("PROGRESS", message)
        if self.sink is None:
            return
        try:
            await self.sink(message)
            self.sent += 1
        except Exception as e:
            self.failed += 1
            log("PROGRESS", f"⚠️ Progress sink failed (ignored): {type(e).__name__}: {e}")

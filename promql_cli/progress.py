"""Spinning progress mark shown while a query is in flight."""

import asyncio
import contextlib

PROGRESS_MARKS = ("-", "\\", "|", "/")


class ProgressMark:
    """Writes "\\r<mark>" to ``out`` on a fixed interval until stopped.

    ``stop()`` waits for the writer task to finish and clears the mark, so
    nothing written afterwards can interleave with it.
    """

    def __init__(self, out, interval: float = 0.1):
        self.out = out
        self.interval = interval
        self._stop = asyncio.Event()
        self._task: asyncio.Task | None = None

    async def _spin(self):
        i = 0
        while not self._stop.is_set():
            self.out.write(f"\r{PROGRESS_MARKS[i % len(PROGRESS_MARKS)]}")
            self.out.flush()
            i += 1
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

    def start(self) -> None:
        self._stop.clear()
        self._task = asyncio.create_task(self._spin())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        self.out.write("\r \r")
        self.out.flush()


@contextlib.asynccontextmanager
async def progress(out, interval: float = 0.1):
    mark = ProgressMark(out, interval)
    mark.start()
    try:
        yield mark
    finally:
        await mark.stop()

import asyncio
from typing import Optional

from .cloudwatch import LogStreamSession
from .config import Settings, make_logs_client
from .diagnostics import log
from .events import ERROR, INFO, LogEvent, build_event


class LogShipper:
    """
    Fire-and-forget front end for a LogStreamSession.

    Callers enqueue events and return at once; a single worker task drains
    the queue and appends one event at a time, in submission order.
    """

    def __init__(self, session: LogStreamSession, queue_size: int = 1000, drain_timeout: float = 5.0):
        self.session = session
        self.drain_timeout = drain_timeout
        self.delivered = 0
        self.dropped = 0
        # maxsize 0 would mean unbounded
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max(1, queue_size))
        self._worker: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings: Settings, client=None) -> "LogShipper":
        client = client or make_logs_client(settings)
        session = LogStreamSession(client, settings.log_group, settings.log_stream)
        return cls(session, queue_size=settings.queue_size, drain_timeout=settings.drain_timeout)

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self):
        if self.running:
            return
        # setup happens on the worker, not here
        self._worker = asyncio.create_task(self._drain(), name="log-shipper")

    async def stop(self):
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=self.drain_timeout)
        except asyncio.TimeoutError:
            log("log shipper stopped with", self._queue.qsize(), "events undelivered")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    async def flush(self):
        await self._queue.join()

    # ========= Public logging API =========
    def log_info(self, message, context=None, extra=None) -> LogEvent:
        return self.submit(build_event(INFO, message, context, extra))

    def log_error(self, message, context=None, error=None, extra=None) -> LogEvent:
        return self.submit(build_event(ERROR, message, context, extra, error))

    def submit(self, event: LogEvent) -> LogEvent:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            log("log queue full, dropping:", event.serialize())
        return event

    # ========= Worker =========
    async def _drain(self):
        try:
            await self.session.ensure_setup()
        except Exception as e:
            log("log shipper setup error:", e)
        while True:
            event = await self._queue.get()
            try:
                if not self.session.ready:
                    await self.session.ensure_setup()
                if await self.session.put_event(event):
                    self.delivered += 1
                else:
                    self.dropped += 1
            except Exception as e:
                self.dropped += 1
                log("log shipper error:", e)
            finally:
                self._queue.task_done()

import asyncio
import logging
from typing import Optional

import httpx

log = logging.getLogger(__name__)


class KeepAlivePinger:
    """Periodically GETs ``url`` so a hosted instance is not idled down."""

    def __init__(
        self,
        url: str,
        interval_seconds: float,
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.interval_seconds = interval_seconds
        self.timeout = timeout
        self.transport = transport
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def ping_once(self) -> Optional[int]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(self.url)
        except httpx.HTTPError as e:
            log.warning("Keep-alive ping to %s failed: %s", self.url, e)
            return None
        log.info("Keep-alive ping %s → %s", self.url, r.status_code)
        return r.status_code

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.ping_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        log.info("Keep-alive started: %s every %ss", self.url, self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info("Keep-alive stopped")

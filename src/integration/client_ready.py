import asyncio
import logging
from typing import Optional

from integration.calendar_integration import CalendarIntegration
from shift_sync.errors import CalendarNotReadyError

logger = logging.getLogger(__name__)


class CalendarClientGate:
    """Single "calendar client ready" capability.

    Resolved once credentials are available (startup or OAuth callback),
    reset on disconnect. Callers await it with a bounded wait instead of
    polling for the client to appear.
    """

    def __init__(self):
        self._client: Optional[CalendarIntegration] = None
        self._ready = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def is_ready(self) -> bool:
        return self._client is not None

    def _event(self) -> asyncio.Event:
        # asyncio.Event binds to the first loop that waits on it.
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self._ready = asyncio.Event()
            if self._client is not None:
                self._ready.set()
            self._loop = loop
        return self._ready

    def resolve(self, client: CalendarIntegration) -> None:
        self._client = client
        self._ready.set()
        logger.info("Calendar client ready")

    def reset(self) -> None:
        self._client = None
        self._ready.clear()

    async def wait(self, timeout: float = 5.0) -> CalendarIntegration:
        try:
            await asyncio.wait_for(self._event().wait(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise CalendarNotReadyError() from e
        if self._client is None:
            raise CalendarNotReadyError()
        return self._client

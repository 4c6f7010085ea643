"""Hosts the polling controller's event loop on a background thread.

The Streamlit script thread never touches the loop; it only reads
``snapshot()``, which returns the controller's current immutable state.
"""

from __future__ import annotations

import asyncio
import logging
import threading

from blockdash.polling import PollingController
from blockdash.view_state import ViewState

logger = logging.getLogger(__name__)


class DashboardRuntime:
    def __init__(self, controller: PollingController, join_timeout: float = 5.0):
        self.controller = controller
        self.join_timeout = join_timeout
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop: asyncio.Event | None = None
        self._started = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="block-poller", daemon=True)
        self._thread.start()
        self._started.wait()

    def _run(self) -> None:
        asyncio.run(self._main())

    async def _main(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()
        self._started.set()
        try:
            async with self.controller.running():
                await self._stop.wait()
            await self.controller.drain()
        except Exception:
            logger.exception("Polling loop stopped unexpectedly")
        finally:
            await self.controller.client.close()

    def stop(self) -> None:
        if self._thread is None:
            return
        if self._loop is not None and self._stop is not None:
            try:
                self._loop.call_soon_threadsafe(self._stop.set)
            except RuntimeError:
                # loop already finished
                logger.debug("Polling loop already closed")
        self._thread.join(self.join_timeout)
        if self._thread.is_alive():
            logger.warning("Polling thread did not stop within %.1fs", self.join_timeout)
        self._thread = None

    def snapshot(self) -> ViewState:
        return self.controller.state

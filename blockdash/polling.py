"""Timer-driven refresh of the dashboard view state.

One fetch cycle runs immediately on activation and then every ``interval``
seconds. Ticks are not held back by slow cycles, so cycles may overlap; each
cycle carries a sequence number and only a result newer than the last one
applied reaches the view state.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol

from blockdash.chain_client import Block
from blockdash.view_state import (
    DEFAULT_ERROR_MESSAGE,
    Idle,
    Loading,
    ViewState,
    apply_failure,
    apply_success,
    begin_fetch,
)

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 15.0
LATEST = "latest"


class BlockSource(Protocol):
    async def get_block_number(self) -> int: ...

    async def get_block_by_tag(self, tag: str) -> Block: ...

    async def close(self) -> None: ...


class PollingController:
    def __init__(
        self,
        client: BlockSource,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        error_message: str = DEFAULT_ERROR_MESSAGE,
    ):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.client = client
        self.interval = interval
        self.error_message = error_message
        self._state: ViewState = Idle()
        self._active = False
        self._epoch = 0
        self._next_seq = 0
        self._applied_seq = 0
        self._schedule: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def active(self) -> bool:
        return self._active

    def activate(self) -> None:
        """Start polling on the running event loop."""
        if self._active:
            return
        loop = asyncio.get_running_loop()
        self._active = True
        self._epoch += 1
        self._applied_seq = self._next_seq
        self._state = Loading()
        self._schedule = loop.create_task(self._tick_forever(), name="block-poll-schedule")
        logger.info("Polling activated, interval %.1fs", self.interval)

    def deactivate(self) -> None:
        """Cancel the schedule. In-flight cycles finish but their results are dropped."""
        if not self._active:
            return
        self._active = False
        if self._schedule is not None:
            self._schedule.cancel()
            self._schedule = None
        logger.info("Polling deactivated, %d cycle(s) still in flight", len(self._in_flight))

    @asynccontextmanager
    async def running(self) -> AsyncIterator[PollingController]:
        self.activate()
        try:
            yield self
        finally:
            self.deactivate()

    async def drain(self) -> None:
        while self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    def dispatch(self) -> asyncio.Task:
        self._next_seq += 1
        task = asyncio.get_running_loop().create_task(
            self.run_cycle(self._next_seq, self._epoch), name=f"block-fetch-{self._next_seq}"
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _tick_forever(self) -> None:
        while True:
            self.dispatch()
            await asyncio.sleep(self.interval)

    def _is_current(self, seq: int, epoch: int) -> bool:
        return self._active and epoch == self._epoch and seq > self._applied_seq

    async def run_cycle(self, seq: int, epoch: int) -> None:
        if not self._is_current(seq, epoch):
            return
        self._state = begin_fetch(self._state)

        number, block = await asyncio.gather(
            self.client.get_block_number(),
            self.client.get_block_by_tag(LATEST),
            return_exceptions=True,
        )
        error = next((r for r in (number, block) if isinstance(r, BaseException)), None)
        if isinstance(error, asyncio.CancelledError):
            raise error

        if not self._is_current(seq, epoch):
            logger.debug("Discarding result of fetch cycle %d", seq)
            return
        self._applied_seq = seq

        if error is not None:
            logger.error("Error fetching blockchain data", exc_info=error)
            self._state = apply_failure(self._state, self.error_message)
            return

        logger.info("Fetched block %s", number)
        logger.debug("Block payload: %r", block)
        self._state = apply_success(self._state, number, block)

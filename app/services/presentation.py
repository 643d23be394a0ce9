# app/services/presentation.py
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, List, Optional

from app.schemas.market import Snapshot
from app.services.coingecko import FetchError

logger = logging.getLogger("crypto_prices.presentation")

Fetcher = Callable[[], Awaitable[Snapshot]]
Listener = Callable[["Phase", "PresentationState"], None]


class Phase(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class PresentationState:
    """
    Owns the fetched snapshot and drives what the table shows.

    Lifecycle:
      IDLE --begin--> LOADING --succeed--> LOADED
                              --fail-----> FAILED

    LOADING is the only phase that accepts a result, so at most one request is
    in flight and a late response (after teardown, or once the phase moved on)
    is dropped instead of overwriting newer state. There is no refresh: LOADED
    and FAILED are final for the lifetime of this object.
    """

    def __init__(self) -> None:
        self._phase = Phase.IDLE
        self._snapshot: Optional[Snapshot] = None
        self._error: Optional[FetchError] = None
        self._listeners: List[Listener] = []
        self._task: Optional[asyncio.Task] = None
        self._torn_down = False

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def snapshot(self) -> Optional[Snapshot]:
        return self._snapshot if self._phase is Phase.LOADED else None

    @property
    def error(self) -> Optional[FetchError]:
        return self._error if self._phase is Phase.FAILED else None

    @property
    def message(self) -> Optional[str]:
        err = self.error
        return err.message if err is not None else None

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    # ----------------------------
    # observers
    # ----------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _transition(self, phase: Phase) -> None:
        previous = self._phase
        self._phase = phase
        logger.info("presentation state | %s -> %s", previous.value, phase.value)
        for listener in list(self._listeners):
            listener(previous, self)

    # ----------------------------
    # transitions
    # ----------------------------
    def begin(self) -> bool:
        if self._phase is not Phase.IDLE or self._torn_down:
            logger.debug("begin ignored | phase=%s | torn_down=%s", self._phase.value, self._torn_down)
            return False
        self._snapshot = None
        self._error = None
        self._transition(Phase.LOADING)
        return True

    def _accepting(self) -> bool:
        if self._torn_down or self._phase is not Phase.LOADING:
            logger.info(
                "discarding stale response | phase=%s | torn_down=%s",
                self._phase.value,
                self._torn_down,
            )
            return False
        return True

    def succeed(self, snapshot: Snapshot) -> bool:
        if not self._accepting():
            return False
        self._snapshot = tuple(snapshot)
        self._error = None
        self._transition(Phase.LOADED)
        return True

    def fail(self, error: FetchError) -> bool:
        if not self._accepting():
            return False
        self._snapshot = None
        self._error = error
        self._transition(Phase.FAILED)
        return True

    # ----------------------------
    # driving the fetch
    # ----------------------------
    async def load(self, fetcher: Fetcher) -> None:
        if not self.begin():
            return
        try:
            snapshot = await fetcher()
        except FetchError as exc:
            self.fail(exc)
            return
        self.succeed(snapshot)

    def start(self, fetcher: Fetcher) -> Optional[asyncio.Task]:
        """Schedule ``load`` on the running loop; only the first call does anything."""
        if self._task is not None or self._phase is not Phase.IDLE:
            logger.warning("presentation state already started | phase=%s", self._phase.value)
            return None
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self.load(fetcher))
        self._task.add_done_callback(self._log_task_failure)
        return self._task

    def _log_task_failure(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "market snapshot load crashed | phase=%s | err=%r",
                self._phase.value,
                exc,
                exc_info=exc,
            )

    def teardown(self) -> None:
        # No cancellation: an outstanding request finishes and its result is dropped.
        self._torn_down = True
        self._listeners.clear()

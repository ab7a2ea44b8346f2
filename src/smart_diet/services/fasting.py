"""Fasting session lifecycle and the periodic timer that drives it."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Protocol

from smart_diet.domain.fasting import (
    OPEN_ENDED_TARGET_HOURS,
    FastingSession,
    FastingSnapshot,
)
from smart_diet.errors import InvalidInputError
from smart_diet.services.clock import now_millis
from smart_diet.services.fasting_stages import (
    current_stage,
    elapsed_hours_between,
    format_elapsed,
    next_stage,
    stage_progress,
)
from smart_diet.services.feeds import ChangeFeed

_logger = logging.getLogger(__name__)


class FastingRepository(Protocol):
    """Persistence interface for fasting sessions."""

    def upsert_latest(self, session: FastingSession) -> None:
        """Insert a new session, replacing any row with the same id."""

    def update_latest(self, session: FastingSession) -> None:
        """Persist changes to an existing session."""

    def latest(self) -> FastingSession | None:
        """Return the most recent session by start time, if any."""


@dataclass
class FastingSessionTracker:
    """Two-state (idle/active) tracker for a single user's fast."""

    repository: FastingRepository
    clock: Callable[[], int] = now_millis
    _session: FastingSession | None = field(default=None, init=False)
    _feed: ChangeFeed[FastingSession | None] = field(
        default_factory=lambda: ChangeFeed(None), init=False
    )

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def load(self) -> FastingSession | None:
        """Refresh state from storage and return the open session, if any."""
        latest = self.repository.latest()
        session = latest if latest is not None and latest.is_active else None
        if session != self._session:
            self._session = session
            self._feed.publish(session)
        return session

    def start(
        self, target_duration_hours: int = OPEN_ENDED_TARGET_HOURS
    ) -> FastingSession:
        """Open a new session; returns the existing one if a fast is running."""
        if target_duration_hours < 0:
            raise InvalidInputError("Target duration must not be negative.")
        open_session = self.load()
        if open_session is not None:
            return open_session
        return self._start(target_duration_hours)

    def stop(self) -> FastingSession | None:
        """Close the open session; returns None when idle."""
        open_session = self.load()
        if open_session is None:
            return None
        return self._stop(open_session)

    def toggle(self) -> FastingSession:
        """Stop the running fast, or start an open-ended one."""
        open_session = self.load()
        if open_session is not None:
            return self._stop(open_session)
        return self._start(OPEN_ENDED_TARGET_HOURS)

    def tick(self, now: int | None = None) -> FastingSnapshot:
        """Compute elapsed time and stage information for the open session."""
        session = self._session
        if session is None:
            return FastingSnapshot(
                is_fasting=False,
                start_time=None,
                target_hours=OPEN_ENDED_TARGET_HOURS,
                elapsed_hours=0.0,
                elapsed_time=format_elapsed(0),
                current_stage=None,
                next_stage=None,
                progress=0.0,
            )
        current_time = self.clock() if now is None else now
        elapsed_ms = max(current_time - session.start_time, 0)
        hours = max(elapsed_hours_between(session.start_time, current_time), 0.0)
        return FastingSnapshot(
            is_fasting=True,
            start_time=session.start_time,
            target_hours=session.target_duration_hours,
            elapsed_hours=hours,
            elapsed_time=format_elapsed(elapsed_ms),
            current_stage=current_stage(hours),
            next_stage=next_stage(hours),
            progress=stage_progress(hours),
        )

    def current(self) -> FastingSnapshot:
        """Return a snapshot for the present moment."""
        return self.tick()

    def subscribe(self) -> AsyncIterator[FastingSession | None]:
        """Yield the open session now and again after every start or stop."""
        return self._feed.subscribe()

    def _start(self, target_duration_hours: int) -> FastingSession:
        session = FastingSession(
            start_time=self.clock(),
            target_duration_hours=target_duration_hours,
        )
        self.repository.upsert_latest(session)
        stored = self.repository.latest() or session
        self._session = stored
        self._feed.publish(stored)
        _logger.info(
            "Fast started: start_time=%s target_hours=%s",
            stored.start_time,
            target_duration_hours,
        )
        return stored

    def _stop(self, session: FastingSession) -> FastingSession:
        end_time = max(self.clock(), session.start_time)
        finished = FastingSession(
            id=session.id,
            start_time=session.start_time,
            end_time=end_time,
            target_duration_hours=session.target_duration_hours,
        )
        self.repository.update_latest(finished)
        self._session = None
        self._feed.publish(None)
        _logger.info(
            "Fast stopped: elapsed=%s",
            format_elapsed(end_time - session.start_time),
        )
        return finished


@dataclass
class FastingTicker:
    """Cancellable repeating task that feeds tracker snapshots to a callback.

    Errors raised by ``on_tick`` are logged and the loop keeps running.
    """

    tracker: FastingSessionTracker
    on_tick: Callable[[FastingSnapshot], None]
    interval_seconds: float = 1.0
    _task: asyncio.Task[None] | None = field(default=None, init=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the loop and wait until it has exited."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def __aenter__(self) -> "FastingTicker":
        self.start()
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.stop()

    async def _run(self) -> None:
        while True:
            try:
                self.on_tick(self.tracker.tick())
            except Exception:
                _logger.exception("Fasting tick handler failed")
            await asyncio.sleep(self.interval_seconds)

#!/usr/bin/env python3
"""
Scheduled refreshes at fixed local times of day.

The loop sleeps in short slices and compares wall-clock time against the
schedule on every wake-up, so a process suspended across one or more
trigger times fires exactly once when it resumes.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from goldrate_tracker.exceptions import TrackerError
from goldrate_tracker.models import utc_now

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_HOURS = (9, 12, 18)


class RefreshScheduler:
    """Cancellable recurring task firing at configured local hours."""

    def __init__(
        self,
        callback: Callable[[], object],
        update_hours: Iterable[int] = DEFAULT_UPDATE_HOURS,
        utc_offset_hours: int = 5,
        poll_interval: float = 60.0,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Args:
            callback: Called once per due trigger
            update_hours: Local hours (0-23) at which to fire
            utc_offset_hours: Offset of the local clock from UTC
            poll_interval: Longest sleep between schedule checks, in seconds
            clock: Source of the current aware time
        """
        hours = sorted(set(update_hours))
        if not hours:
            raise ValueError("update_hours must not be empty")
        self.callback = callback
        self.update_hours = tuple(hours)
        self.tz = timezone(timedelta(hours=utc_offset_hours))
        self.poll_interval = poll_interval
        self.clock = clock
        self._last_checked: Optional[datetime] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _local(self, now: datetime) -> datetime:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(self.tz)

    def next_fire_time(self, now: Optional[datetime] = None) -> datetime:
        """
        Next scheduled time strictly after ``now``.

        Args:
            now: Reference time (defaults to the clock)

        Returns:
            Aware datetime in the local timezone
        """
        local = self._local(now or self.clock())
        for hour in self.update_hours:
            candidate = local.replace(hour=hour, minute=0, second=0, microsecond=0)
            if candidate > local:
                return candidate
        tomorrow = local + timedelta(days=1)
        return tomorrow.replace(hour=self.update_hours[0], minute=0, second=0, microsecond=0)

    def last_due_time(self, now: Optional[datetime] = None) -> datetime:
        """Most recent scheduled time at or before ``now``."""
        local = self._local(now or self.clock())
        for hour in reversed(self.update_hours):
            candidate = local.replace(hour=hour, minute=0, second=0, microsecond=0)
            if candidate <= local:
                return candidate
        yesterday = local - timedelta(days=1)
        return yesterday.replace(hour=self.update_hours[-1], minute=0, second=0, microsecond=0)

    def run_pending(self, now: Optional[datetime] = None) -> bool:
        """
        Fire the callback once if a scheduled time passed since the last check.

        However many trigger times were missed, the callback runs at most once.
        The first call only records the reference time.

        Args:
            now: Reference time (defaults to the clock)

        Returns:
            True if the callback was invoked
        """
        now = self._local(now or self.clock())
        last_checked = self._last_checked
        self._last_checked = now

        if last_checked is None:
            return False

        due = self.last_due_time(now)
        if due <= last_checked:
            return False

        if now - due > timedelta(seconds=self.poll_interval * 2):
            logger.info("Missed scheduled refresh at %s, running now", due.strftime('%Y-%m-%d %H:%M'))
        else:
            logger.info("Running scheduled refresh for %s", due.strftime('%H:%M'))

        try:
            self.callback()
        except TrackerError as e:
            logger.error("Scheduled refresh failed: %s", e)
        except Exception as e:
            logger.exception("Unexpected error in scheduled refresh: %s", e)
        return True

    def _seconds_until_next(self) -> float:
        now = self.clock()
        remaining = (self.next_fire_time(now) - self._local(now)).total_seconds()
        return max(0.0, min(self.poll_interval, remaining))

    def _run(self) -> None:
        self.run_pending()
        logger.info("Next scheduled refresh at %s", self.next_fire_time().strftime('%Y-%m-%d %H:%M'))
        while not self._stop.wait(self._seconds_until_next()):
            if self.run_pending():
                logger.info("Next scheduled refresh at %s",
                            self.next_fire_time().strftime('%Y-%m-%d %H:%M'))

    def start(self) -> None:
        """Start the background loop."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="refresh-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the loop and wait for the thread to exit."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

"""Cancellation signal checked at every remote call boundary"""
import logging
import threading
import time
from typing import Optional

from taste_profile.errors import AnalysisCancelled

logger = logging.getLogger(__name__)


class Cancellation:
    """Explicit cancel flag plus an optional time budget for one analysis run"""

    def __init__(self, time_limit: Optional[float] = None):
        self._event = threading.Event()
        self.start_time = time.monotonic()
        self.deadline = self.start_time + time_limit if time_limit else None

    def cancel(self) -> None:
        """Request that the pipeline stop before its next remote call"""
        self._event.set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def wait(self, seconds: float) -> bool:
        """Block for up to `seconds`, returning early on cancel or at the deadline.

        Returns True when the analysis is cancelled by the time the wait ends.
        """
        end = time.monotonic() + seconds
        if self.deadline is not None:
            end = min(end, self.deadline)
        while not self._event.is_set():
            remaining = end - time.monotonic()
            if remaining <= 0:
                break
            self._event.wait(remaining)
        return self.cancelled

    def raise_if_cancelled(self, action: str) -> None:
        """Raise AnalysisCancelled instead of starting `action`"""
        if self._event.is_set():
            logger.warning(f"Analysis cancelled before {action}.")
            raise AnalysisCancelled(f"Cancelled before {action}")
        if self.expired:
            elapsed = time.monotonic() - self.start_time
            logger.warning(f"Time limit reached ({elapsed:.2f}s). Not starting {action}.")
            raise AnalysisCancelled(f"Time limit reached before {action}")


def check(cancellation: Optional[Cancellation], action: str) -> None:
    """No-op when no cancellation signal was supplied"""
    if cancellation is not None:
        cancellation.raise_if_cancelled(action)

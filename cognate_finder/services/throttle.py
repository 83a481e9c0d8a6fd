"""Submission rate limiting.

Guards against double submission (e.g. Enter pressed while an autocomplete
option is being picked): a resubmission within the interval is dropped,
not queued.
"""

import time
from typing import Awaitable, Callable, Optional, TypeVar

from cognate_finder.observ import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class SubmitThrottle:
    """Accepts at most one submission per ``interval`` seconds."""

    def __init__(
        self,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._interval = interval
        self._clock = clock
        self._last_accepted: Optional[float] = None

    @property
    def interval(self) -> float:
        return self._interval

    def retry_after(self) -> float:
        """Seconds until a submission would be accepted again."""
        if self._last_accepted is None:
            return 0.0
        return max(0.0, self._interval - (self._clock() - self._last_accepted))

    def try_acquire(self) -> bool:
        """Record and accept a submission, or refuse it if too soon."""
        now = self._clock()
        if self._last_accepted is not None and now - self._last_accepted <= self._interval:
            logger.debug("submission_dropped", since_last=round(now - self._last_accepted, 3))
            return False
        self._last_accepted = now
        return True

    async def submit(
        self,
        fn: Callable[..., Awaitable[T]],
        *args,
        **kwargs,
    ) -> Optional[T]:
        """Run ``fn`` if the submission is accepted; None when dropped."""
        if not self.try_acquire():
            return None
        return await fn(*args, **kwargs)

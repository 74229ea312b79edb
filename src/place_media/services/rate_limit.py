"""Client-side rate limiting for photo providers."""

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from place_media.domain.photos import RateLimitStatus


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` within a rolling window.

    Each provider adapter owns one instance for the life of the process.
    """

    max_requests: int
    window_seconds: int
    clock: Callable[[], datetime] = _utcnow
    _requests: deque[datetime] = field(default_factory=deque)

    def allows(self) -> bool:
        """Return True if another request fits in the current window."""
        self._prune()
        return len(self._requests) < self.max_requests

    def record(self) -> None:
        """Record a request made now."""
        self._requests.append(self.clock())

    def status(self) -> RateLimitStatus:
        """Return remaining quota and when the oldest request expires."""
        self._prune()
        remaining = max(0, self.max_requests - len(self._requests))
        if self._requests:
            reset_at = self._requests[0] + timedelta(seconds=self.window_seconds)
        else:
            reset_at = self.clock()
        return RateLimitStatus(
            remaining=remaining, total=self.max_requests, reset_at=reset_at
        )

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests.clear()

    def _prune(self) -> None:
        cutoff = self.clock() - timedelta(seconds=self.window_seconds)
        while self._requests and self._requests[0] <= cutoff:
            self._requests.popleft()

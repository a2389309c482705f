"""
In-memory fixed-window rate limiting shared by the contact form and login.

Each process keeps its own record map, so the limits are advisory when the app
runs on several instances. The map is bounded: expired records are swept
periodically and, at capacity, the record closest to expiry is forgotten.
"""

import math
import time
from dataclasses import dataclass, replace
from threading import Lock
from typing import Callable, Dict, Optional

from fastapi import Request

DEFAULT_MAX_ENTRIES = 10_000
DEFAULT_SWEEP_INTERVAL_SECONDS = 300


@dataclass
class RateLimitRecord:
    """Request count for one identifier within its current window."""
    count: int
    reset_time: float


@dataclass
class RateLimitResult:
    """Outcome of a rate limit check; retry_after is set only when rejected."""
    allowed: bool
    retry_after: Optional[int] = None


class InMemoryRateLimiter:
    """
    Fixed-window counter keyed by client identifier.

    The first request from an identifier (or the first after its window has
    passed) opens a window of `window_seconds`. Up to `max_requests` requests
    are allowed within it; later ones are rejected with the number of seconds
    until the window resets.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_entries = max_entries
        self.sweep_interval_seconds = sweep_interval_seconds
        self.clock = clock
        self._records: Dict[str, RateLimitRecord] = {}
        self._lock = Lock()
        self._next_sweep = clock() + sweep_interval_seconds

    def check(self, identifier: str) -> RateLimitResult:
        """Count one request for `identifier` and decide whether it is allowed."""
        now = self.clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)

            record = self._records.get(identifier)
            if record is None or now > record.reset_time:
                if record is None and len(self._records) >= self.max_entries:
                    self._make_room(now)
                self._records[identifier] = RateLimitRecord(count=1, reset_time=now + self.window_seconds)
                return RateLimitResult(allowed=True)

            if record.count >= self.max_requests:
                retry_after = math.ceil(record.reset_time - now)
                return RateLimitResult(allowed=False, retry_after=max(retry_after, 1))

            record.count += 1
            return RateLimitResult(allowed=True)

    def get_record(self, identifier: str) -> Optional[RateLimitRecord]:
        """Snapshot of the current record for `identifier`, if any."""
        with self._lock:
            record = self._records.get(identifier)
            return replace(record) if record is not None else None

    def reset(self) -> None:
        """Forget every record."""
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _sweep(self, now: float) -> None:
        expired = [key for key, record in self._records.items() if now > record.reset_time]
        for key in expired:
            del self._records[key]
        self._next_sweep = now + self.sweep_interval_seconds

    def _make_room(self, now: float) -> None:
        self._sweep(now)
        if len(self._records) >= self.max_entries:
            oldest = min(self._records, key=lambda key: self._records[key].reset_time)
            del self._records[oldest]


def get_client_ip(request: Request) -> str:
    """
    Best-effort client identifier for rate limiting.

    Uses the first X-Forwarded-For hop, then X-Real-IP, then "anonymous".
    Both headers are client-controlled unless a trusted proxy overwrites them.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return "anonymous"

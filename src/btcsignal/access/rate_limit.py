"""Fixed-window request limiter for premium endpoints.

State lives in process memory and is lost on restart; entries are never
evicted. Each key gets ``limit`` requests per window, and the window starts
at the key's first request (not on a wall-clock boundary).
"""

import time
from dataclasses import dataclass, field

from btcsignal.access.models import RateLimitResult


@dataclass
class _Window:
    count: int
    reset_at_ms: int


@dataclass
class RateLimitState:
    """Per-key counters shared by every request handled by this process."""

    windows: dict[str, _Window] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.windows)

    def clear(self) -> None:
        self.windows.clear()


def check_rate_limit(
    state: RateLimitState,
    key: str,
    limit: int = 30,
    window_ms: int = 60_000,
    now_ms: int | None = None,
) -> RateLimitResult:
    """Count one request against ``key`` and report whether it is allowed.

    A new key, or one whose window has passed (``now > reset_at``), starts a
    fresh window with this request as its first. A denied request does not
    consume quota.
    """
    now = int(time.time() * 1000) if now_ms is None else now_ms
    window = state.windows.get(key)

    if window is None or now > window.reset_at_ms:
        state.windows[key] = _Window(count=1, reset_at_ms=now + window_ms)
        return RateLimitResult(allowed=True, remaining=limit - 1)

    if window.count >= limit:
        return RateLimitResult(allowed=False, remaining=0)

    window.count += 1
    return RateLimitResult(allowed=True, remaining=limit - window.count)

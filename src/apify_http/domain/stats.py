"""Call statistics shared by every call made through one client."""

import threading
import typing as t
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class CallStatsSnapshot:
    """Read-only view of the counters at one point in time."""

    calls: int
    requests: int
    rate_limit_errors: t.Mapping[int, int] = field(
        default_factory=lambda: MappingProxyType({})
    )


class CallStats:
    """Mutable counters for calls, HTTP attempts and rate-limit responses.

    ``rate_limit_errors`` maps the 1-based attempt ordinal to the number of
    429 responses seen at that ordinal, across all calls. Increments are
    guarded by a lock so one instance can be shared between concurrent calls,
    including calls running on different threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls = 0
        self._requests = 0
        self._rate_limit_errors: dict[int, int] = {}

    @property
    def calls(self) -> int:
        return self._calls

    @property
    def requests(self) -> int:
        return self._requests

    @property
    def rate_limit_errors(self) -> t.Mapping[int, int]:
        with self._lock:
            return MappingProxyType(dict(self._rate_limit_errors))

    def record_call(self) -> None:
        with self._lock:
            self._calls += 1

    def record_attempt(self) -> None:
        with self._lock:
            self._requests += 1

    def record_rate_limit(self, attempt: int) -> None:
        if attempt < 1:
            raise ValueError(f"Attempt ordinal must be >= 1, got {attempt}")
        with self._lock:
            self._rate_limit_errors[attempt] = self._rate_limit_errors.get(attempt, 0) + 1

    def snapshot(self) -> CallStatsSnapshot:
        with self._lock:
            return CallStatsSnapshot(
                calls=self._calls,
                requests=self._requests,
                rate_limit_errors=MappingProxyType(dict(self._rate_limit_errors)),
            )

    def __repr__(self) -> str:
        snap = self.snapshot()
        return (
            f"CallStats(calls={snap.calls}, requests={snap.requests}, "
            f"rate_limit_errors={dict(snap.rate_limit_errors)})"
        )

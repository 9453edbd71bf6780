"""Domain models for attempts, classifier verdicts and backoff timing."""

import random
import typing as t
from dataclasses import dataclass, field

from .call import (
    EXP_BACKOFF_MAX_REPEATS,
    EXP_BACKOFF_MILLIS,
    RATE_LIMIT_EXCEEDED_STATUS_CODE,
    CallDescriptor,
)


@dataclass
class Attempt:
    """Outcome of one network try.

    An attempt that failed before a response arrived has ``status_code``
    set to None and ``error`` set. A response whose body failed to decode
    keeps its status code and also carries the decode ``error``.
    """

    ordinal: int
    status_code: int | None = None
    headers: t.Mapping[str, str] = field(default_factory=dict)
    body: t.Any = None
    error: BaseException | None = None

    @property
    def failed_in_transport(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class Success:
    attempt: Attempt


@dataclass(frozen=True)
class Terminal:
    attempt: Attempt


@dataclass(frozen=True)
class Retryable:
    attempt: Attempt


Verdict = Success | Terminal | Retryable


@dataclass(frozen=True)
class BackoffConfig:
    """Configuration for attempts with exponential backoff."""

    base_delay: float = EXP_BACKOFF_MILLIS / 1000  # seconds
    max_attempts: int = EXP_BACKOFF_MAX_REPEATS
    retry_status_codes: frozenset[int] = frozenset({RATE_LIMIT_EXCEEDED_STATUS_CODE})
    jitter: bool = True  # Randomise to avoid synchronised retries

    @classmethod
    def from_descriptor(
        cls, descriptor: CallDescriptor, jitter: bool = True
    ) -> "BackoffConfig":
        return cls(
            base_delay=descriptor.exp_backoff_millis / 1000,
            max_attempts=descriptor.exp_backoff_max_repeats,
            retry_status_codes=descriptor.retry_on_status_codes,
            jitter=jitter,
        )

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate the wait after the given failed attempt.

        Formula: base_delay * 2 ^ (attempt - 1), multiplied by a random
        factor in [1, 2) when jitter is enabled.

        Args:
            attempt: Ordinal of the attempt that just failed (1-indexed)

        Returns:
            Delay in seconds

        Examples:
            >>> config = BackoffConfig(base_delay=0.5, jitter=False)
            >>> config.calculate_delay(1)
            0.5
            >>> config.calculate_delay(3)
            2.0
        """
        delay = self.base_delay * (2 ** (attempt - 1))
        if self.jitter:
            delay *= 1 + random.random()
        return delay

    def max_total_delay(self) -> float:
        """Upper bound of the time spent backing off during one call."""
        factor = 2 if self.jitter else 1
        return sum(
            self.base_delay * (2 ** (attempt - 1)) * factor
            for attempt in range(1, self.max_attempts)
        )

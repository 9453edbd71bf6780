"""Maps an attempt to a retry verdict."""

from ..domain.call import RATE_LIMIT_EXCEEDED_STATUS_CODE
from ..domain.retry import Attempt, Retryable, Success, Terminal, Verdict
from ..domain.stats import CallStats


class ResponseClassifier:
    """Decides whether an attempt succeeded, failed for good, or may be retried.

    - Success: no error and status below 300
    - Terminal: status in [300, 500) that is not in the retryable set
    - Retryable: everything else (transport errors, 5xx, listed statuses)

    Every 429 is counted per attempt ordinal, whether or not it is retryable.
    """

    def __init__(self, stats: CallStats) -> None:
        self.stats = stats

    def classify(
        self, attempt: Attempt, retry_status_codes: frozenset[int]
    ) -> Verdict:
        status = attempt.status_code

        if status == RATE_LIMIT_EXCEEDED_STATUS_CODE:
            self.stats.record_rate_limit(attempt.ordinal)

        if attempt.error is None and status is not None and status < 300:
            return Success(attempt)

        if status is not None and 300 <= status < 500 and status not in retry_status_codes:
            return Terminal(attempt)

        return Retryable(attempt)

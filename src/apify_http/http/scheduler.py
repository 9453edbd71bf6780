"""Drives attempts with exponential backoff until a terminal outcome."""

import asyncio
import typing as t

from ..domain.call import CallDescriptor
from ..domain.retry import BackoffConfig, Retryable, Success, Terminal
from ..infrastructure.logging import get_logger
from .classifier import ResponseClassifier
from .errors import CallContext, api_error_from_response, request_failed_error
from .transport import Response, Transport

if t.TYPE_CHECKING:
    import loguru


class BackoffScheduler:
    """Runs one call as a sequential chain of attempts.

    Each attempt goes through the transport and the classifier. Successful
    attempts resolve the call, terminal ones raise an ApiError straight away,
    and retryable ones are repeated after an exponentially growing delay
    until the descriptor's attempt ceiling is reached.
    """

    def __init__(
        self,
        transport: Transport,
        classifier: ResponseClassifier,
        logger: "loguru.Logger" = get_logger(__name__),
        sleep: t.Callable[[float], t.Awaitable[t.Any]] = asyncio.sleep,
        jitter: bool = True,
    ) -> None:
        """
        Initialise the scheduler.

        Args:
            transport: Performs single HTTP exchanges
            classifier: Turns attempts into verdicts
            logger: Logger for retry and failure messages
            sleep: Awaitable used to wait between attempts
            jitter: Randomise backoff delays
        """
        self.transport = transport
        self.classifier = classifier
        self.logger = logger
        self._sleep = sleep
        self._jitter = jitter

    async def run(self, descriptor: CallDescriptor) -> t.Any:
        """
        Execute the call described by ``descriptor``.

        Returns:
            The decoded payload, or a Response envelope when
            ``resolve_with_full_response`` is set

        Raises:
            ApiError: On a non-retryable 3xx/4xx response
            RequestFailedError: When every allowed attempt failed retryably
        """
        config = BackoffConfig.from_descriptor(descriptor, jitter=self._jitter)
        url = descriptor.request_url
        ordinal = 0

        while True:
            ordinal += 1
            attempt = await self.transport.send(descriptor, ordinal)
            verdict = self.classifier.classify(attempt, config.retry_status_codes)

            match verdict:
                case Success(attempt=attempt):
                    if descriptor.resolve_with_full_response:
                        return Response(
                            status_code=t.cast(int, attempt.status_code),
                            headers=attempt.headers,
                            body=attempt.body,
                            url=url,
                        )
                    return attempt.body

                case Terminal(attempt=attempt):
                    context = CallContext.from_attempt(descriptor, attempt)
                    self.logger.debug(
                        f"Non-retryable status {attempt.status_code}, "
                        f"not retrying {descriptor.method.value} {url}"
                    )
                    raise api_error_from_response(attempt.body, context)

                case Retryable(attempt=attempt):
                    context = CallContext.from_attempt(descriptor, attempt)
                    if ordinal >= config.max_attempts:
                        self.logger.error(
                            f"API request failed after {ordinal} attempts: "
                            f"{descriptor.method.value} {url}"
                        )
                        cause = attempt.error
                        if cause is None:
                            cause = api_error_from_response(attempt.body, context)
                        raise request_failed_error(context, cause)

                    delay = config.calculate_delay(ordinal)
                    reason = (
                        f"{type(attempt.error).__name__}: {attempt.error}"
                        if attempt.error is not None
                        else f"status {attempt.status_code}"
                    )
                    self.logger.warning(
                        f"Retrying API request (attempt {ordinal + 1}/"
                        f"{config.max_attempts}) in {delay:.2f}s after {reason}: "
                        f"{descriptor.method.value} {url}"
                    )
                    await self._sleep(delay)

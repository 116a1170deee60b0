"""
Retry with exponential backoff for simulated server calls.

``RetryController.execute_with_retry`` keeps calling an operation while it
fails with a transient error, waiting ``backoff_delay`` between attempts, and
hands back the last envelope. Ordinary failures never raise; cancellation
and genuine bugs do.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from cardwar.config import WarConfig
from cardwar.network.response import ServerResponse

logger = logging.getLogger(__name__)

RETRYABLE_KEYWORDS = ("timeout", "network", "connection", "unavailable")

# Jitter is drawn from +/- this fraction of the un-jittered delay
JITTER_FRACTION = 0.2


def backoff_delay(
    attempt: int,
    base: float = 1.0,
    cap: float = 10.0,
    rng: Optional[random.Random] = None,
) -> float:
    """
    Compute the wait before the next attempt.

    Args:
        attempt: The attempt that just failed, starting at 1
        base: Delay after the first failure, before jitter
        cap: Upper bound of the returned delay
        rng: Random source for the jitter

    Returns:
        ``min(base * 2**(attempt - 1) + jitter, cap)``, never negative
    """
    if attempt < 1:
        raise ValueError(f"attempt must be at least 1, got {attempt}")

    delay = base * 2 ** (attempt - 1)
    jitter = (rng or random).uniform(-JITTER_FRACTION, JITTER_FRACTION) * delay
    return max(0.0, min(delay + jitter, cap))


def is_retryable_error(error_message: Optional[str]) -> bool:
    """Whether a failure message describes a transient condition."""
    if not error_message:
        return False
    lowered = error_message.lower()
    return any(keyword in lowered for keyword in RETRYABLE_KEYWORDS)


class RetryController:
    """
    Runs server operations with a fixed attempt budget.

    Attributes:
        max_attempts: Default attempt budget per operation
        base_delay: Base of the exponential backoff, in seconds
        max_delay: Cap of a single backoff wait, in seconds
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        rng: Optional[random.Random] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._rng = rng or random.Random()

    @classmethod
    def from_config(
        cls, config: WarConfig, rng: Optional[random.Random] = None
    ) -> "RetryController":
        return cls(
            max_attempts=config.max_retry_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
            rng=rng,
        )

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[ServerResponse]],
        operation_name: str = "operation",
        max_attempts: Optional[int] = None,
    ) -> ServerResponse:
        """
        Call ``operation`` until it succeeds, fails for good, or the budget runs out.

        Args:
            operation: Zero-argument coroutine function returning an envelope
            operation_name: Name used in log messages
            max_attempts: Override of the default attempt budget

        Returns:
            The successful envelope, the first non-retryable failure, or the
            last failure once every attempt is used. ``attempts`` on the
            returned envelope says how many calls were made.

        Raises:
            ValueError: If the override budget is below 1
            asyncio.CancelledError: If the caller cancels during a call or a wait
        """
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        budget = self.max_attempts if max_attempts is None else max_attempts
        response = None

        for attempt in range(1, budget + 1):
            logger.debug("Executing %s (attempt %d/%d)", operation_name, attempt, budget)

            try:
                response = await operation()
            except asyncio.CancelledError:
                logger.info("%s was cancelled", operation_name)
                raise

            response = response.with_attempts(attempt)

            if response.success:
                if attempt > 1:
                    logger.info("%s succeeded after %d attempts", operation_name, attempt)
                return response

            if not is_retryable_error(response.error_message):
                logger.warning(
                    "Non-retryable error from %s: %s",
                    operation_name,
                    response.error_message,
                )
                return response

            if attempt < budget:
                delay = backoff_delay(attempt, self.base_delay, self.max_delay, self._rng)
                logger.info(
                    "Retrying %s in %.1fs after: %s",
                    operation_name,
                    delay,
                    response.error_message,
                )
                try:
                    await asyncio.sleep(delay)
                except asyncio.CancelledError:
                    logger.info("%s was cancelled during backoff", operation_name)
                    raise

        logger.error("%s failed after %d attempts", operation_name, budget)
        return response

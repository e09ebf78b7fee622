# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Retry Policy - Exponential backoff for Lambda API calls.

Only errors the platform marks as throttling or transient are retried.
Anything else (ResourceNotFoundException, AccessDeniedException, ...)
is raised on the first attempt, unchanged.

When retryable errors outlast the budget, the last one is wrapped in
RetryExhaustedError: it is the exception's ``__cause__`` and its
``last_error`` attribute, and the attempt count is in ``details``.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

import structlog
from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from lambdagc.config import LambdaGCConfig
from lambdagc.exceptions import RetryExhaustedError

logger = structlog.get_logger()

T = TypeVar("T")

RETRYABLE_ERROR_CODES = frozenset(
    {
        "TooManyRequestsException",
        "ThrottlingException",
        "Throttling",
        "ServiceException",
        "ServiceUnavailableException",
        "RequestLimitExceeded",
        "EC2ThrottledException",
        "InternalFailure",
    }
)

_TRANSPORT_ERRORS = (
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)


def is_retryable(exc: BaseException) -> bool:
    """
    Decide whether an error may be retried.

    Args:
        exc: The exception raised by a remote call

    Returns:
        True for throttling, 5xx and connection errors, or for any
        exception carrying a truthy ``retryable`` attribute
    """
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        if error.get("Code") in RETRYABLE_ERROR_CODES:
            return True
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 0
        return status == 429 or status >= 500

    if isinstance(exc, _TRANSPORT_ERRORS):
        return True

    return bool(getattr(exc, "retryable", False))


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff.

    A call is attempted at most ``retries + 1`` times. The n-th retry waits
    ``min(min_backoff * factor ** (n - 1), max_backoff)`` seconds.
    """

    retries: int = 5
    min_backoff: float = 5.0
    max_backoff: float = 60.0
    factor: float = 2.0
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, compare=False)

    @classmethod
    def from_config(cls, config: LambdaGCConfig, **overrides: Any) -> "RetryPolicy":
        """Build a policy from the millisecond settings in a config."""
        values = {
            "retries": config.max_retries,
            "min_backoff": config.min_backoff_ms / 1000,
            "max_backoff": config.max_backoff_ms / 1000,
            "factor": config.backoff_factor,
        }
        values.update(overrides)
        return cls(**values)

    def backoff(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (1-based)."""
        return min(self.min_backoff * self.factor ** (attempt - 1), self.max_backoff)

    async def call(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        description: str = "lambda_call",
        **log_context: Any,
    ) -> T:
        """
        Await ``operation()`` until it succeeds or fails for good.

        Args:
            operation: Zero-argument coroutine function performing one remote call
            description: Name used in retry log events
            **log_context: Extra fields for retry log events

        Returns:
            Whatever the operation returns

        Raises:
            RetryExhaustedError: If retryable errors outlast the retry budget
            Exception: Any non-retryable error, unchanged
        """
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as e:
                if not is_retryable(e):
                    raise

                attempt += 1
                if attempt > self.retries:
                    raise RetryExhaustedError(
                        f"{description} failed after {attempt} attempts: {e}",
                        last_error=e,
                        details={"call": description, "attempts": attempt, **log_context},
                    ) from e

                delay = self.backoff(attempt)
                logger.warning(
                    "retrying_call",
                    call=description,
                    attempt=attempt,
                    retries=self.retries,
                    delay=delay,
                    error=str(e),
                    **log_context,
                )
                await self.sleep(delay)

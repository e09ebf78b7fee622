# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Exceptions - Custom exceptions for the lambdagc package.
"""


class LambdaGCError(Exception):
    """Base exception for all lambdagc errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(LambdaGCError):
    """Raised when configuration is invalid."""

    pass


class VersionParseError(LambdaGCError):
    """Raised when a version identifier is not an integer."""

    pass


class RetryExhaustedError(LambdaGCError):
    """Raised when a retryable call keeps failing past the retry budget."""

    def __init__(self, message: str, last_error: BaseException, details: dict | None = None):
        self.last_error = last_error
        super().__init__(message, details)


class PlatformError(LambdaGCError):
    """Raised when the Lambda API returns something unusable."""

    pass

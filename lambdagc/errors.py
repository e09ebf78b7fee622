# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for lambdagc.

These helpers centralize wording for common configuration errors so that
all modules present consistent, actionable messages.
"""


def explain_invalid_count_env(name: str, value: str | None) -> str:
    """
    Explain that a keep-count or retry-count variable is invalid.
    """

    return (
        f"Invalid {name} value: {value!r}. "
        "It must be a non-negative integer."
    )


def explain_invalid_duration_env(name: str, value: str | None) -> str:
    """
    Explain that a millisecond duration variable is invalid.
    """

    return (
        f"Invalid {name} value: {value!r}. "
        "It must be a non-negative integer number of milliseconds."
    )


def explain_invalid_flag_env(name: str, value: str | None) -> str:
    """
    Explain that a boolean flag variable is invalid.
    """

    return (
        f"Invalid {name} value: {value!r}. "
        "Expected one of: 'true', 'false', '1', '0', 'yes', 'no'."
    )


def explain_invalid_version(value: object) -> str:
    """
    Explain that a version identifier returned by the Lambda API is not numeric.
    """

    return (
        f"Version identifier {value!r} is not an integer. "
        "Refusing to pick deletion candidates from an ambiguous ordering."
    )

# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Configuration - Immutable configuration data structures.

All configuration is frozen (immutable) after creation to prevent
accidental modification between cleanup runs.
"""

from dataclasses import dataclass
from typing import List
import re


def _validate_region(region: str) -> bool:
    """Validate an AWS region name such as 'us-gov-east-1' or 'eusc-de-east-1'."""
    if not region:
        return False
    return bool(re.match(r"^[a-z]{2,}(-[a-z]+)+-\d$", region))


def _validate_cron_time(time_str: str) -> bool:
    """Validate HH:MM time format."""
    if not time_str:
        return False
    try:
        parts = time_str.split(":")
        if len(parts) != 2:
            return False
        hour, minute = int(parts[0]), int(parts[1])
        return 0 <= hour <= 23 and 0 <= minute <= 59
    except (ValueError, AttributeError):
        return False


@dataclass(frozen=True)
class LambdaGCConfig:
    """
    Immutable configuration for Lambda version cleanup.

    This configuration is frozen after creation so that a warm process
    running many cleanup passes always sees the same policy.
    """

    # AWS region (default: us-east-1)
    region: str = "us-east-1"

    # Most recent function versions always retained, aliased or not
    versions_to_keep: int = 3

    # Most recent layer versions always retained, attached or not
    layer_versions_to_keep: int = 3

    # Retries after the first attempt for throttled/transient API errors
    max_retries: int = 5

    # Exponential backoff bounds in milliseconds
    min_backoff_ms: int = 5000
    max_backoff_ms: int = 60000
    backoff_factor: float = 2.0

    # Log intended deletions without calling the API
    dry_run: bool = False

    # Pause before every API call to stay under the Lambda rate limits
    call_delay_ms: int = 0

    # Clean layer versions after functions
    clean_layers: bool = True

    # MaxItems hint for list calls
    page_size: int = 50

    # Schedule time in HH:MM format (UTC), used by the FastAPI integration
    schedule_cron: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        if not _validate_region(self.region):
            errors.append(f"Invalid region: {self.region}")

        if self.versions_to_keep < 0:
            errors.append(f"versions_to_keep must be >= 0, got {self.versions_to_keep}")

        if self.layer_versions_to_keep < 0:
            errors.append(
                f"layer_versions_to_keep must be >= 0, got {self.layer_versions_to_keep}"
            )

        if self.max_retries < 0:
            errors.append(f"max_retries must be >= 0, got {self.max_retries}")

        if self.min_backoff_ms < 0:
            errors.append(f"min_backoff_ms must be >= 0, got {self.min_backoff_ms}")

        if self.max_backoff_ms < self.min_backoff_ms:
            errors.append(
                f"max_backoff_ms ({self.max_backoff_ms}) must be >= "
                f"min_backoff_ms ({self.min_backoff_ms})"
            )

        if self.backoff_factor < 1:
            errors.append(f"backoff_factor must be >= 1, got {self.backoff_factor}")

        if self.call_delay_ms < 0:
            errors.append(f"call_delay_ms must be >= 0, got {self.call_delay_ms}")

        # ListFunctions and ListVersionsByFunction cap MaxItems at 50
        if self.page_size < 1 or self.page_size > 50:
            errors.append(f"page_size must be 1-50, got {self.page_size}")

        if self.schedule_cron and not _validate_cron_time(self.schedule_cron):
            errors.append(f"Invalid schedule_cron format: {self.schedule_cron}, expected HH:MM")

        # Raise all errors at once
        if errors:
            from lambdagc.exceptions import ConfigurationError

            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

    def with_updates(self, **kwargs) -> "LambdaGCConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import asdict

        current = asdict(self)
        current.update(kwargs)
        return LambdaGCConfig(**current)

# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Builder - Functional builder pattern for configuration.

This module provides pure functions for building LambdaGCConfig objects.
Each function takes a config dict and returns a new dict with the
modification applied (immutable updates).
"""

from typing import Any, Callable, Dict

from lambdagc.config import LambdaGCConfig


# Type alias for builder functions
ConfigDict = Dict[str, Any]
BuilderFunc = Callable[[ConfigDict], ConfigDict]


def create_empty_config() -> ConfigDict:
    """
    Create an initial configuration dictionary.

    Returns:
        Dict with default values for all configuration fields
    """
    return {
        "region": "us-east-1",
        "versions_to_keep": 3,
        "layer_versions_to_keep": 3,
        "max_retries": 5,
        "min_backoff_ms": 5000,
        "max_backoff_ms": 60000,
        "backoff_factor": 2.0,
        "dry_run": False,
        "call_delay_ms": 0,
        "clean_layers": True,
        "page_size": 50,
        "schedule_cron": None,
    }


def with_region(config: ConfigDict, region: str) -> ConfigDict:
    """
    Set the AWS region.

    Args:
        config: Current configuration dictionary
        region: AWS region (e.g., 'us-east-1', 'eu-west-1')

    Returns:
        New configuration dictionary with region set
    """
    return {**config, "region": region}


def keep_versions(config: ConfigDict, count: int) -> ConfigDict:
    """
    Set how many of the most recent function versions are always kept.

    Args:
        config: Current configuration dictionary
        count: Number of versions kept regardless of aliases

    Returns:
        New configuration dictionary with the function keep-count set
    """
    if count < 0:
        raise ValueError(f"versions to keep must be >= 0, got {count}")
    return {**config, "versions_to_keep": count}


def keep_layer_versions(config: ConfigDict, count: int) -> ConfigDict:
    """
    Set how many of the most recent layer versions are always kept.

    Args:
        config: Current configuration dictionary
        count: Number of layer versions kept regardless of attachments

    Returns:
        New configuration dictionary with the layer keep-count set
    """
    if count < 0:
        raise ValueError(f"layer versions to keep must be >= 0, got {count}")
    return {**config, "layer_versions_to_keep": count}


def with_retries(config: ConfigDict, retries: int) -> ConfigDict:
    """
    Set how many times a throttled or transient API call is retried.

    Args:
        config: Current configuration dictionary
        retries: Retries after the first attempt

    Returns:
        New configuration dictionary with max_retries set
    """
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")
    return {**config, "max_retries": retries}


def with_backoff(
    config: ConfigDict,
    min_ms: int,
    max_ms: int,
    factor: float = 2.0,
) -> ConfigDict:
    """
    Set the exponential backoff used between retries.

    Args:
        config: Current configuration dictionary
        min_ms: Delay before the first retry, in milliseconds
        max_ms: Upper bound on any single delay, in milliseconds
        factor: Multiplier applied per attempt

    Returns:
        New configuration dictionary with backoff set
    """
    if min_ms < 0 or max_ms < min_ms:
        raise ValueError(f"Invalid backoff bounds: min={min_ms}ms max={max_ms}ms")
    return {
        **config,
        "min_backoff_ms": min_ms,
        "max_backoff_ms": max_ms,
        "backoff_factor": factor,
    }


def dry_run_mode(config: ConfigDict) -> ConfigDict:
    """
    Log the versions that would be deleted without deleting anything.

    Args:
        config: Current configuration dictionary

    Returns:
        New configuration dictionary with dry-run enabled
    """
    return {**config, "dry_run": True}


def execute_mode(config: ConfigDict) -> ConfigDict:
    """
    Actually delete versions.

    WARNING: Deleted Lambda versions cannot be restored!

    Args:
        config: Current configuration dictionary

    Returns:
        New configuration dictionary with dry-run disabled
    """
    import sys

    print(
        "⚠️  WARNING: Execute mode will be enabled. Deletions will occur.",
        file=sys.stderr,
    )
    return {**config, "dry_run": False}


def with_call_delay(config: ConfigDict, delay_ms: int) -> ConfigDict:
    """
    Pause before every Lambda API call.

    Useful for large accounts where the control plane throttles
    aggressively (TooManyRequestsException).

    Args:
        config: Current configuration dictionary
        delay_ms: Delay in milliseconds

    Returns:
        New configuration dictionary with call_delay_ms set
    """
    if delay_ms < 0:
        raise ValueError(f"call delay must be >= 0, got {delay_ms}")
    return {**config, "call_delay_ms": delay_ms}


def skip_layers(config: ConfigDict) -> ConfigDict:
    """
    Only clean function versions; leave layer versions alone.

    Args:
        config: Current configuration dictionary

    Returns:
        New configuration dictionary with layer cleaning disabled
    """
    return {**config, "clean_layers": False}


def with_page_size(config: ConfigDict, page_size: int) -> ConfigDict:
    """
    Set the MaxItems hint for list operations.

    Args:
        config: Current configuration dictionary
        page_size: Number of items to request per page

    Returns:
        New configuration dictionary with page size set
    """
    if page_size < 1 or page_size > 50:
        raise ValueError(f"page_size must be 1-50, got {page_size}")
    return {**config, "page_size": page_size}


def run_daily_at(config: ConfigDict, time: str) -> ConfigDict:
    """
    Set the daily schedule time (UTC).

    Args:
        config: Current configuration dictionary
        time: Time in HH:MM format (e.g., '02:30' for 2:30 AM UTC)

    Returns:
        New configuration dictionary with schedule set
    """
    parts = time.split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {time}, expected HH:MM")
    try:
        hour, minute = int(parts[0]), int(parts[1])
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Invalid time: {time}")
    except ValueError:
        raise ValueError(f"Invalid time format: {time}, expected HH:MM")

    return {**config, "schedule_cron": time}


def build_config(config_dict: ConfigDict) -> LambdaGCConfig:
    """
    Validate and build an immutable LambdaGCConfig from a configuration dictionary.

    Args:
        config_dict: Configuration dictionary built using builder functions

    Returns:
        Validated, immutable LambdaGCConfig instance

    Raises:
        ConfigurationError: If validation fails
    """
    return LambdaGCConfig(**config_dict)


def pipe(*funcs: BuilderFunc) -> BuilderFunc:
    """
    Compose multiple builder functions into a single function.

        config = pipe(
            lambda c: keep_versions(c, 5),
            skip_layers,
            dry_run_mode,
        )(create_empty_config())

    Args:
        *funcs: Builder functions to compose

    Returns:
        A single function that applies all functions in sequence
    """

    def composed(config: ConfigDict) -> ConfigDict:
        result = config
        for func in funcs:
            result = func(result)
        return result

    return composed


def build_from_steps(*steps: BuilderFunc) -> LambdaGCConfig:
    """
    Build config by applying a sequence of builder functions.

    Example:
        config = build_from_steps(
            lambda c: with_region(c, "eu-west-1"),
            lambda c: keep_versions(c, 5),
            dry_run_mode,
        )

    Args:
        *steps: Builder functions to apply in sequence

    Returns:
        Validated, immutable LambdaGCConfig instance
    """
    return build_config(pipe(*steps)(create_empty_config()))


def create_config(
    *,
    region: str = "us-east-1",
    versions_to_keep: int = 3,
    layer_versions_to_keep: int = 3,
    max_retries: int = 5,
    min_backoff_ms: int = 5000,
    max_backoff_ms: int = 60000,
    dry_run: bool = False,
    call_delay_ms: int = 0,
    clean_layers: bool = True,
    schedule_cron: str | None = None,
    **kwargs: Any,
) -> LambdaGCConfig:
    """
    Create lambdagc configuration from simple parameters.

    This is the recommended user-facing API for creating configurations.

    Args:
        region: AWS region (default: "us-east-1")
        versions_to_keep: Most recent function versions always kept (default: 3)
        layer_versions_to_keep: Most recent layer versions always kept (default: 3)
        max_retries: Retries for throttled/transient API errors (default: 5)
        min_backoff_ms: First retry delay (default: 5000)
        max_backoff_ms: Maximum retry delay (default: 60000)
        dry_run: Log deletions instead of performing them (default: False)
        call_delay_ms: Pause before every API call (default: 0)
        clean_layers: Also clean layer versions (default: True)
        schedule_cron: Daily schedule in HH:MM format (optional, e.g., "02:30")
        **kwargs: Additional configuration options

    Returns:
        Validated, immutable LambdaGCConfig instance

    Example:
        config = create_config(
            region="eu-west-1",
            versions_to_keep=5,
            layer_versions_to_keep=2,
            dry_run=True,
        )
    """
    config_dict = create_empty_config()
    config_dict = with_region(config_dict, region)
    config_dict = keep_versions(config_dict, versions_to_keep)
    config_dict = keep_layer_versions(config_dict, layer_versions_to_keep)
    config_dict = with_retries(config_dict, max_retries)
    config_dict = with_backoff(config_dict, min_backoff_ms, max_backoff_ms)
    config_dict = with_call_delay(config_dict, call_delay_ms)

    if dry_run:
        config_dict = dry_run_mode(config_dict)

    if not clean_layers:
        config_dict = skip_layers(config_dict)

    if schedule_cron:
        config_dict = run_daily_at(config_dict, schedule_cron)

    # Apply any additional kwargs
    for key, value in kwargs.items():
        if key in config_dict:
            config_dict[key] = value

    return build_config(config_dict)

# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration helpers and safety profiles.

These helpers are small, convenient wrappers around create_config() and
LambdaGCConfig.with_updates(). They make it easy to:

- Build a configuration from environment variables (the Lambda handler's way)
- Apply ready-made safety profiles
"""

from __future__ import annotations

import os

from lambdagc.builder import create_config
from lambdagc.config import LambdaGCConfig
from lambdagc.errors import (
    explain_invalid_count_env,
    explain_invalid_duration_env,
    explain_invalid_flag_env,
)
from lambdagc.exceptions import ConfigurationError

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _parse_int(name: str, value: str | None, default: int, explain) -> int:
    if value is None or not value.strip():
        return default
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain(name, value)) from exc
    if number < 0:
        raise ConfigurationError(explain(name, value))
    return number


def _parse_count(name: str, default: int) -> int:
    return _parse_int(name, os.getenv(name), default, explain_invalid_count_env)


def _parse_duration_ms(name: str, default: int) -> int:
    return _parse_int(name, os.getenv(name), default, explain_invalid_duration_env)


def _parse_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(explain_invalid_flag_env(name, value))


def create_config_from_env() -> LambdaGCConfig:
    """
    Create a LambdaGCConfig from environment variables.

    Every variable is optional:
        - AWS_REGION: AWS region (default: us-east-1)
        - VERSIONS_TO_KEEP: Most recent function versions kept (default: 3)
        - LAYER_VERSIONS_TO_KEEP: Most recent layer versions kept (default: 3)
        - MAX_RETRIES: Retries for throttled/transient errors (default: 5)
        - MIN_BACKOFF_MS / MAX_BACKOFF_MS: Retry delay bounds (default: 5000 / 60000)
        - DRY_RUN: 'true' to only log deletions (default: false)
        - CALL_DELAY_MS: Pause before every API call (default: 0)
        - CLEAN_LAYERS: 'false' to skip layer versions (default: true)
        - LAMBDAGC_SCHEDULE_CRON: Daily schedule in HH:MM (UTC)
    """

    return create_config(
        region=os.getenv("AWS_REGION") or "us-east-1",
        versions_to_keep=_parse_count("VERSIONS_TO_KEEP", 3),
        layer_versions_to_keep=_parse_count("LAYER_VERSIONS_TO_KEEP", 3),
        max_retries=_parse_count("MAX_RETRIES", 5),
        min_backoff_ms=_parse_duration_ms("MIN_BACKOFF_MS", 5000),
        max_backoff_ms=_parse_duration_ms("MAX_BACKOFF_MS", 60000),
        dry_run=_parse_flag("DRY_RUN", False),
        call_delay_ms=_parse_duration_ms("CALL_DELAY_MS", 0),
        clean_layers=_parse_flag("CLEAN_LAYERS", True),
        schedule_cron=os.getenv("LAMBDAGC_SCHEDULE_CRON") or None,
    )


# ============================================================================
# Profiles
# ============================================================================

def safe_defaults(config: LambdaGCConfig) -> LambdaGCConfig:
    """
    Apply conservative, safety-first defaults.

    - Always dry-run
    - Keep at least 3 function versions and 3 layer versions
    """

    return config.with_updates(
        dry_run=True,
        versions_to_keep=max(config.versions_to_keep, 3),
        layer_versions_to_keep=max(config.layer_versions_to_keep, 3),
    )


def aggressive_cleanup(config: LambdaGCConfig) -> LambdaGCConfig:
    """
    Apply a more aggressive cleanup profile.

    - Deletions enabled
    - Keep at most 1 unaliased version per function and layer
    - Slow down calls a little to compensate for the larger delete volume
    """

    return config.with_updates(
        dry_run=False,
        versions_to_keep=min(config.versions_to_keep, 1),
        layer_versions_to_keep=min(config.layer_versions_to_keep, 1),
        call_delay_ms=max(config.call_delay_ms, 100),
    )

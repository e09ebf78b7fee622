# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
AWS Lambda entry point.

Deploy with handler ``lambdagc.handler.handler`` on a schedule (e.g. an
EventBridge rule). The cleanup state lives at module level so a warm
container keeps its worklist: when an invocation fails and Lambda retries
it, the retry resumes where the failed one stopped.
"""

import asyncio
from typing import Any

import structlog

from lambdagc.config import LambdaGCConfig
from lambdagc.core import CleanupState, initialize_cleanup_state, run_cleanup
from lambdagc.env import create_config_from_env

logger = structlog.get_logger()

_config: LambdaGCConfig | None = None
_state: CleanupState | None = None


def _container_state() -> tuple[LambdaGCConfig, CleanupState]:
    global _config, _state

    if _config is None:
        _config = create_config_from_env()
    if _state is None:
        _state = initialize_cleanup_state(_config)
    return _config, _state


def reset_container_state() -> None:
    """Forget the cached config and worklist, as a cold start would."""
    global _config, _state

    _config = None
    _state = None


def handler(event: Any, context: Any) -> dict:
    config, state = _container_state()

    result = asyncio.run(run_cleanup(config, state))

    logger.info("all_done", run_id=result.run_id)
    return {
        "run_id": result.run_id,
        "dry_run": result.dry_run,
        "functions_cleaned": result.functions_cleaned,
        "layers_cleaned": result.layers_cleaned,
        "deleted_versions": len(result.deleted_versions),
        "deleted_layer_versions": len(result.deleted_layer_versions),
    }

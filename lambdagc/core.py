# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Core - Main orchestrator functions for a cleanup run.

A run drains the function worklist first, then the layer worklist.
Layer in-use information is resolved from the whole function inventory
right before layers are cleaned.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, List, TypedDict

from lambdagc.config import LambdaGCConfig
from lambdagc.platform import LambdaPlatform
from lambdagc.worklist import Worklist


@dataclass
class CleanupResult:
    """Result of a cleanup run."""

    run_id: str  # ULID
    dry_run: bool
    functions_cleaned: int
    layers_cleaned: int
    duration_seconds: float
    deleted_versions: List[str] = field(default_factory=list)
    deleted_layer_versions: List[str] = field(default_factory=list)


@dataclass
class CleanupMetrics:
    """Metrics accumulated over the life of the process."""

    total_runs: int
    failed_runs: int
    last_run_at: datetime | None
    total_deleted: int
    total_layers_deleted: int
    pending_functions: int | None
    pending_layers: int | None
    last_error: str | None


class CleanupState(TypedDict):
    """Runtime state for cleanup runs."""

    session: Any  # aiobotocore session
    worklist: Worklist
    run_lock: asyncio.Lock
    last_run_at: datetime | None
    total_runs: int
    failed_runs: int
    total_deleted: int
    total_layers_deleted: int
    last_error: str | None


def initialize_cleanup_state(config: LambdaGCConfig) -> CleanupState:
    """
    Initialize runtime state for cleanup runs.

    Args:
        config: lambdagc configuration

    Returns:
        Initialized CleanupState dictionary with an empty worklist
    """
    from aiobotocore.session import get_session

    return CleanupState(
        session=get_session(),
        worklist=Worklist(),
        run_lock=asyncio.Lock(),
        last_run_at=None,
        total_runs=0,
        failed_runs=0,
        total_deleted=0,
        total_layers_deleted=0,
        last_error=None,
    )


def create_lambda_client(config: LambdaGCConfig, state: CleanupState):
    """
    Create an aiobotocore Lambda client context manager.

    botocore's own retries are disabled; RetryPolicy owns retrying.
    """
    from aiobotocore.config import AioConfig

    return state["session"].create_client(
        "lambda",
        region_name=config.region,
        config=AioConfig(max_pool_connections=50, retries={"max_attempts": 0}),
    )


async def run_cleanup(
    config: LambdaGCConfig,
    state: CleanupState,
    platform: LambdaPlatform | None = None,
) -> CleanupResult:
    """
    Run a cleanup pass, resuming any pass a previous run left unfinished.

    This is the main entry point. It:
    1. Loads the function inventory (once per pass)
    2. Cleans each pending function, removing it from the worklist when done
    3. Resolves which layer versions aliased functions still attach
    4. Cleans each pending layer the same way

    Runs on the same state are serialized by ``state["run_lock"]``; a
    caller arriving while another run is active waits for it to finish.

    Args:
        config: lambdagc configuration
        state: Runtime state holding the worklist
        platform: Platform to use; a client is created from the session if omitted

    Returns:
        CleanupResult with run details

    Raises:
        Exception: The first unretryable error; the worklist keeps what is left
    """
    async with state["run_lock"]:
        if platform is None:
            async with create_lambda_client(config, state) as client:
                return await _run_pass(
                    config, state, LambdaPlatform.from_config(client, config)
                )
        return await _run_pass(config, state, platform)


async def _run_pass(
    config: LambdaGCConfig,
    state: CleanupState,
    platform: LambdaPlatform,
) -> CleanupResult:
    import structlog
    from ulid import ULID

    from lambdagc.executor import clean_function, clean_layer
    from lambdagc.resolver import in_use_layer_versions

    logger = structlog.get_logger()
    run_id = str(ULID())
    start_time = datetime.now(UTC)
    worklist = state["worklist"]

    logger.info(
        "cleanup_run_started",
        run_id=run_id,
        dry_run=config.dry_run,
        resuming=worklist.in_progress,
    )

    deleted_versions: List[str] = []
    deleted_layer_versions: List[str] = []

    try:
        # Step 1-2: Functions
        pending_functions = await worklist.load_functions(platform.list_functions)
        logger.info("functions_to_clean", count=len(pending_functions))

        async def clean_one_function(function_arn: str) -> None:
            deleted = await clean_function(platform, config, function_arn)
            deleted_versions.extend(f"{function_arn}:{v}" for v in deleted)
            state["total_deleted"] += 0 if config.dry_run else len(deleted)

        functions_cleaned = await worklist.drain(pending_functions, clean_one_function)

        # Step 3-4: Layers
        layers_cleaned = 0
        if config.clean_layers:
            pending_layers = await worklist.load_layers(platform.list_layers)
            logger.info("layers_to_clean", count=len(pending_layers))

            if pending_layers:
                in_use = await in_use_layer_versions(platform, worklist.functions or ())

                async def clean_one_layer(layer_arn: str) -> None:
                    deleted = await clean_layer(platform, config, layer_arn, in_use)
                    deleted_layer_versions.extend(f"{layer_arn}:{v}" for v in deleted)
                    state["total_layers_deleted"] += 0 if config.dry_run else len(deleted)

                layers_cleaned = await worklist.drain(pending_layers, clean_one_layer)

        worklist.complete()

        duration = (datetime.now(UTC) - start_time).total_seconds()

        state["last_run_at"] = datetime.now(UTC)
        state["total_runs"] += 1
        state["last_error"] = None

        result = CleanupResult(
            run_id=run_id,
            dry_run=config.dry_run,
            functions_cleaned=functions_cleaned,
            layers_cleaned=layers_cleaned,
            duration_seconds=duration,
            deleted_versions=deleted_versions,
            deleted_layer_versions=deleted_layer_versions,
        )

        logger.info(
            "cleanup_run_completed",
            run_id=run_id,
            functions=functions_cleaned,
            layers=layers_cleaned,
            deleted=len(deleted_versions),
            deleted_layers=len(deleted_layer_versions),
            duration=duration,
        )
        return result

    except Exception as e:
        state["last_run_at"] = datetime.now(UTC)
        state["failed_runs"] += 1
        state["last_error"] = str(e)
        logger.error(
            "cleanup_run_failed",
            run_id=run_id,
            error=str(e),
            **worklist.snapshot(),
        )
        raise


def get_metrics(state: CleanupState) -> CleanupMetrics:
    """Get current cleanup metrics."""
    pending = state["worklist"].snapshot()

    return CleanupMetrics(
        total_runs=state["total_runs"],
        failed_runs=state["failed_runs"],
        last_run_at=state["last_run_at"],
        total_deleted=state["total_deleted"],
        total_layers_deleted=state["total_layers_deleted"],
        pending_functions=pending["pending_functions"],
        pending_layers=pending["pending_layers"],
        last_error=state["last_error"],
    )


async def shutdown_cleanup_state(state: CleanupState) -> None:
    """Log the final worklist position; the worklist itself is not persisted."""
    import structlog

    logger = structlog.get_logger()
    logger.info("cleanup_state_shutdown_complete", **state["worklist"].snapshot())

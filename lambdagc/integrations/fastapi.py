# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc FastAPI Integration - Plugin for FastAPI applications.

A long-running app is the other natural home for lambdagc: the process
keeps its worklist between runs, just like a warm Lambda container.

This module provides:
- Lifespan management (startup/shutdown)
- Protected admin endpoints
- Scheduled cleanup runs
- Health checks
"""

import os
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, UTC

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from lambdagc.config import LambdaGCConfig
from lambdagc.core import (
    CleanupState,
    create_lambda_client,
    get_metrics,
    initialize_cleanup_state,
    run_cleanup,
    shutdown_cleanup_state,
)

logger = structlog.get_logger()

DEFAULT_PREFIX = "/admin/lambdagc"

# Security
security = HTTPBearer(auto_error=False)


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> bool:
    """
    Verify API key from Authorization header.

    The API key is read from the LAMBDAGC_ADMIN_API_KEY environment variable.
    Requests must include: Authorization: Bearer <api_key>

    Raises:
        HTTPException: If API key is missing or invalid
    """
    api_key = os.getenv("LAMBDAGC_ADMIN_API_KEY")

    if not api_key:
        raise HTTPException(
            status_code=500,
            detail="LAMBDAGC_ADMIN_API_KEY environment variable not set",
        )

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Authorization header required",
        )

    if credentials.credentials != api_key:
        raise HTTPException(
            status_code=403,
            detail="Invalid API key",
        )

    return True


def register_lambdagc_routes(
    app: FastAPI,
    config: LambdaGCConfig,
    state: CleanupState,
    prefix: str = DEFAULT_PREFIX,
) -> None:
    """
    Register lambdagc admin endpoints on a FastAPI app.

    All endpoints require Bearer token authentication.

    Args:
        app: FastAPI application
        config: lambdagc configuration
        state: Runtime state
        prefix: URL prefix for endpoints (default: /admin/lambdagc)
    """
    @app.post(f"{prefix}/run", dependencies=[Depends(verify_api_key)])
    async def trigger_cleanup() -> dict:
        """
        Manually trigger a cleanup run.

        Resumes an unfinished pass if the previous run failed. Refused
        while another run (manual or scheduled) holds the state's run lock.
        """
        if state["run_lock"].locked():
            raise HTTPException(status_code=409, detail="A cleanup run is already in progress")

        try:
            result = await run_cleanup(config, state)
        except Exception as e:
            raise HTTPException(status_code=502, detail=f"Cleanup run failed: {e}") from e
        return asdict(result)

    @app.get(f"{prefix}/status", dependencies=[Depends(verify_api_key)])
    async def get_status() -> dict:
        """
        Get current cleanup status.

        Returns last run time, run counts and worklist position.
        """
        return {
            "last_run_at": (
                state["last_run_at"].isoformat() if state["last_run_at"] else None
            ),
            "total_runs": state["total_runs"],
            "failed_runs": state["failed_runs"],
            "total_deleted": state["total_deleted"],
            "total_layers_deleted": state["total_layers_deleted"],
            "dry_run": config.dry_run,
            "in_progress": state["worklist"].in_progress,
            **state["worklist"].snapshot(),
        }

    @app.get(f"{prefix}/metrics", dependencies=[Depends(verify_api_key)])
    async def get_cleanup_metrics() -> dict:
        """Get detailed cleanup metrics."""
        metrics = get_metrics(state)
        data = asdict(metrics)
        data["last_run_at"] = (
            metrics.last_run_at.isoformat() if metrics.last_run_at else None
        )
        return data

    @app.get(f"{prefix}/health", dependencies=[Depends(verify_api_key)])
    async def health_check() -> dict:
        """
        Health check endpoint.

        Verifies the Lambda API is reachable with the current credentials.
        """
        lambda_ok = False
        lambda_error = None
        try:
            async with create_lambda_client(config, state) as client:
                await client.get_account_settings()
                lambda_ok = True
        except Exception as e:
            lambda_error = str(e)

        return {
            "status": "healthy" if lambda_ok else "unhealthy",
            "lambda_reachable": lambda_ok,
            "lambda_error": lambda_error,
            "last_error": state["last_error"],
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get(f"{prefix}/config", dependencies=[Depends(verify_api_key)])
    async def get_config() -> dict:
        """
        Get current configuration.
        """
        return asdict(config)


def setup_lambdagc_plugin(
    app: FastAPI,
    config: LambdaGCConfig,
    prefix: str = DEFAULT_PREFIX,
) -> None:
    """
    Set up lambdagc plugin with lifespan management.

    This is the main entry point for integrating lambdagc with a FastAPI app.
    It sets up:
    - Startup/shutdown lifecycle events
    - Admin endpoints
    - Scheduled runs if configured

    Args:
        app: FastAPI application
        config: lambdagc configuration
        prefix: URL prefix for admin endpoints
    """
    app.state.lambdagc_config = config
    app.state.lambdagc_state = None

    @app.on_event("startup")
    async def startup():
        """Initialize lambdagc on app startup."""
        logger.info("lambdagc_plugin_starting", region=config.region, dry_run=config.dry_run)

        state = initialize_cleanup_state(config)
        app.state.lambdagc_state = state

        register_lambdagc_routes(app, config, state, prefix)

        if config.schedule_cron:
            app.state.lambdagc_scheduler = _setup_scheduled_task(config, state)

        logger.info("lambdagc_plugin_started")

    @app.on_event("shutdown")
    async def shutdown():
        """Cleanup lambdagc on app shutdown."""
        logger.info("lambdagc_plugin_stopping")

        scheduler = getattr(app.state, "lambdagc_scheduler", None)
        if scheduler:
            scheduler.shutdown(wait=False)

        state = app.state.lambdagc_state
        if state:
            await shutdown_cleanup_state(state)

        logger.info("lambdagc_plugin_stopped")


def _setup_scheduled_task(config: LambdaGCConfig, state: CleanupState):
    """Set up APScheduler for daily cleanup runs."""
    try:
        from apscheduler.schedulers.asyncio import AsyncIOScheduler
        from apscheduler.triggers.cron import CronTrigger
    except ImportError:
        logger.warning(
            "apscheduler_not_installed",
            message="Install lambdagc[scheduler] for scheduled cleanup runs",
        )
        return None

    scheduler = AsyncIOScheduler()

    # Parse HH:MM format
    hour, minute = map(int, config.schedule_cron.split(":"))

    async def scheduled_cleanup():
        """Run scheduled cleanup; a failure leaves the worklist for tomorrow."""
        logger.info("scheduled_cleanup_starting")
        try:
            result = await run_cleanup(config, state)
            logger.info(
                "scheduled_cleanup_completed",
                deleted=len(result.deleted_versions),
                deleted_layers=len(result.deleted_layer_versions),
            )
        except Exception as e:
            logger.error("scheduled_cleanup_failed", error=str(e))

    scheduler.add_job(
        scheduled_cleanup,
        trigger=CronTrigger(hour=hour, minute=minute, timezone="UTC"),
        id="lambdagc_scheduled",
        replace_existing=True,
        max_instances=1,
    )
    scheduler.start()

    logger.info("scheduler_started", schedule=config.schedule_cron)
    return scheduler


@asynccontextmanager
async def lambdagc_lifespan(app: FastAPI, config: LambdaGCConfig):
    """
    Alternative lifespan context manager for FastAPI.

    Use this instead of setup_lambdagc_plugin if you prefer the
    lifespan pattern:

        app = FastAPI(lifespan=lambda app: lambdagc_lifespan(app, config))

    Args:
        app: FastAPI application
        config: lambdagc configuration
    """
    logger.info("lambdagc_lifespan_starting")

    state = initialize_cleanup_state(config)
    app.state.lambdagc_state = state
    app.state.lambdagc_config = config

    register_lambdagc_routes(app, config, state)

    scheduler = _setup_scheduled_task(config, state) if config.schedule_cron else None

    logger.info("lambdagc_lifespan_started")

    try:
        yield
    finally:
        logger.info("lambdagc_lifespan_stopping")
        if scheduler:
            scheduler.shutdown(wait=False)
        await shutdown_cleanup_state(state)
        logger.info("lambdagc_lifespan_stopped")


def get_lambdagc_state(app: FastAPI) -> CleanupState:
    """
    Get lambdagc state from a FastAPI app.

    Raises:
        RuntimeError: If lambdagc is not initialized
    """
    state = getattr(app.state, "lambdagc_state", None)
    if not state:
        raise RuntimeError("lambdagc not initialized. Call setup_lambdagc_plugin first.")
    return state

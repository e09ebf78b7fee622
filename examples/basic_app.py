# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Example FastAPI Application with lambdagc Integration.

This example runs Lambda version cleanup inside a long-lived service,
once a day and on demand through the admin endpoints.

Run with:
    uvicorn examples.basic_app:app --reload

Environment variables:
    AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY: AWS credentials
    AWS_REGION: Region to clean
    LAMBDAGC_ADMIN_API_KEY: API key for admin endpoints
    LAMBDAGC_EXECUTE_MODE: 'true' to really delete (default: dry run)
"""

import os

from fastapi import FastAPI

from lambdagc.builder import (
    build_config,
    create_empty_config,
    dry_run_mode,
    execute_mode,
    keep_layer_versions,
    keep_versions,
    run_daily_at,
    with_call_delay,
    with_region,
)
from lambdagc.integrations.fastapi import setup_lambdagc_plugin

app = FastAPI(
    title="Lambda housekeeping",
    description="Example application running lambdagc on a schedule",
    version="1.0.0",
)


def create_lambdagc_config():
    """
    Create lambdagc configuration using the functional builder pattern.
    """
    config = create_empty_config()
    config = with_region(config, os.getenv("AWS_REGION", "us-east-1"))

    # Keep the five newest function versions for quick rollbacks
    config = keep_versions(config, 5)
    config = keep_layer_versions(config, 3)

    # Large accounts get throttled on the control plane
    config = with_call_delay(config, 100)

    # Daily at 03:15 UTC
    config = run_daily_at(config, "03:15")

    # IMPORTANT: Only enable execute mode explicitly in production
    if os.getenv("LAMBDAGC_EXECUTE_MODE", "false").lower() == "true":
        config = execute_mode(config)
    else:
        config = dry_run_mode(config)

    return build_config(config)


setup_lambdagc_plugin(app, create_lambdagc_config())


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Lambda housekeeping service",
        "docs": "/docs",
        "lambdagc_admin": "/admin/lambdagc/health",
    }


# ============================================================================
# lambdagc Admin Endpoints (auto-registered by plugin)
# ============================================================================
#
# GET  /admin/lambdagc/health   - Lambda API reachability
# GET  /admin/lambdagc/status   - Run counts and worklist position
# GET  /admin/lambdagc/metrics  - Cleanup metrics
# GET  /admin/lambdagc/config   - Active configuration
# POST /admin/lambdagc/run      - Trigger (or resume) a cleanup run
#
# All admin endpoints require: Authorization: Bearer <LAMBDAGC_ADMIN_API_KEY>


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

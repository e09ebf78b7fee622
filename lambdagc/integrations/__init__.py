# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Framework Integrations - FastAPI plugin and other framework integrations.
"""

from lambdagc.integrations.fastapi import (
    setup_lambdagc_plugin,
    register_lambdagc_routes,
    lambdagc_lifespan,
    verify_api_key,
)

__all__ = [
    "setup_lambdagc_plugin",
    "register_lambdagc_routes",
    "lambdagc_lifespan",
    "verify_api_key",
]

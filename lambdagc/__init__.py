# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc - Prune stale AWS Lambda function and layer versions.

Keeps the most recent versions plus every version still reachable
through an alias (including weighted canary routing) or attached to an
aliased function version, and deletes the rest through a resumable,
retry-protected worklist.
"""

__version__ = "0.1.0"

# Configuration creation (user-facing API)
from lambdagc.builder import create_config

# Core functions
from lambdagc.core import (
    initialize_cleanup_state,
    run_cleanup,
    get_metrics,
    shutdown_cleanup_state,
)

# Environment-based configuration and profiles (additional helpers)
from lambdagc.env import (
    create_config_from_env,
    safe_defaults,
    aggressive_cleanup,
)

from lambdagc.platform import LambdaPlatform
from lambdagc.retention import deletion_candidates
from lambdagc.retry import RetryPolicy
from lambdagc.worklist import Worklist

__all__ = [
    # Version
    "__version__",
    # Configuration creation (primary user-facing APIs)
    "create_config",
    "create_config_from_env",
    "safe_defaults",
    "aggressive_cleanup",
    # Core orchestration functions
    "initialize_cleanup_state",
    "run_cleanup",
    "get_metrics",
    "shutdown_cleanup_state",
    # Building blocks
    "LambdaPlatform",
    "RetryPolicy",
    "Worklist",
    "deletion_candidates",
]

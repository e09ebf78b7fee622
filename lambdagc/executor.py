# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Deletion Executor - Clean one function or one layer.

Deletes run one at a time in the order the retention policy returns
them. The first error stops the entity and propagates; nothing here
catches it.
"""

from typing import AbstractSet, List

import structlog

from lambdagc.config import LambdaGCConfig
from lambdagc.platform import LambdaPlatform
from lambdagc.resolver import in_use_versions, layer_versions_in_use_for
from lambdagc.retention import deletion_candidates

logger = structlog.get_logger()


async def clean_function(
    platform: LambdaPlatform,
    config: LambdaGCConfig,
    function_arn: str,
) -> List[str]:
    """
    Delete the stale versions of one function.

    Args:
        platform: Lambda platform wrapper
        config: Cleanup configuration (keep-count, dry-run)
        function_arn: Function to clean

    Returns:
        Versions deleted (or, in dry-run mode, that would have been)
    """
    logger.info("function_cleaning", function=function_arn)

    versions = await platform.list_versions(function_arn)
    if not versions:
        logger.debug("function_has_no_versions", function=function_arn)
        return []

    aliased = await in_use_versions(platform, function_arn)
    candidates = deletion_candidates(versions, aliased, config.versions_to_keep)

    logger.info(
        "function_candidates",
        function=function_arn,
        total=len(versions),
        in_use=len(aliased),
        candidates=len(candidates),
    )

    for version in candidates:
        await platform.delete_version(function_arn, version, dry_run=config.dry_run)

    return candidates


async def clean_layer(
    platform: LambdaPlatform,
    config: LambdaGCConfig,
    layer_arn: str,
    in_use_layers: AbstractSet[str],
) -> List[str]:
    """
    Delete the stale versions of one layer.

    Args:
        platform: Lambda platform wrapper
        config: Cleanup configuration (layer keep-count, dry-run)
        layer_arn: Unversioned layer ARN
        in_use_layers: Account-wide in-use layer version ARNs for this run

    Returns:
        Layer versions deleted (or, in dry-run mode, that would have been)
    """
    logger.info("layer_cleaning", layer=layer_arn)

    versions = await platform.list_layer_versions(layer_arn)
    if not versions:
        logger.debug("layer_has_no_versions", layer=layer_arn)
        return []

    attached = layer_versions_in_use_for(layer_arn, in_use_layers)
    candidates = deletion_candidates(versions, attached, config.layer_versions_to_keep)

    logger.info(
        "layer_candidates",
        layer=layer_arn,
        total=len(versions),
        in_use=len(attached),
        candidates=len(candidates),
    )

    for version in candidates:
        await platform.delete_layer_version(layer_arn, version, dry_run=config.dry_run)

    return candidates

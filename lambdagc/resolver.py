# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Reference Resolver - What is still in use.

A function version is in use when an alias points at it, either as the
alias target or as a weighted routing target. A layer version is in use
when an in-use function version attaches it.
"""

from typing import Iterable, Set

import structlog

from lambdagc.platform import LambdaPlatform, split_layer_version_arn

logger = structlog.get_logger()


async def in_use_versions(platform: LambdaPlatform, function_arn: str) -> Set[str]:
    """
    Versions of a function reachable through its aliases.

    Args:
        platform: Lambda platform wrapper
        function_arn: Function to inspect

    Returns:
        Set of version numbers (as strings)
    """
    return set(await platform.list_aliased_versions(function_arn))


async def in_use_layer_versions(
    platform: LambdaPlatform,
    function_arns: Iterable[str],
) -> Set[str]:
    """
    Layer version ARNs attached to an aliased version of any function.

    Args:
        platform: Lambda platform wrapper
        function_arns: Full function inventory

    Returns:
        Set of layer version ARNs (``<layer arn>:<version>``)
    """
    in_use: Set[str] = set()
    for function_arn in function_arns:
        in_use.update(await platform.list_layer_versions_by_function(function_arn))

    logger.info("layer_versions_in_use", count=len(in_use))
    return in_use


def layer_versions_in_use_for(layer_arn: str, in_use: Iterable[str]) -> Set[str]:
    """
    Narrow the account-wide set of in-use layer version ARNs to one layer.

    Args:
        layer_arn: Unversioned layer ARN (or name, if attachments use names)
        in_use: Layer version ARNs from in_use_layer_versions()

    Returns:
        Version numbers of ``layer_arn`` that are in use
    """
    versions: Set[str] = set()
    for arn in in_use:
        attached_layer, version = split_layer_version_arn(arn)
        if attached_layer == layer_arn:
            versions.add(version)
    return versions

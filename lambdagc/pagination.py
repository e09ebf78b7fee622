# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Pagination - Marker-following list loop for the Lambda API.

The Marker/NextMarker cursor is driven by hand so that every page
request goes through the retry policy on its own.
"""

from typing import Any, Awaitable, Callable, Dict, Hashable, Iterable, List, TypeVar

from lambdagc.retry import RetryPolicy

LATEST = "$LATEST"

Page = Dict[str, Any]
H = TypeVar("H", bound=Hashable)


async def collect_pages(
    call: Callable[..., Awaitable[Page]],
    extract: Callable[[Page], Iterable[str]],
    *,
    retry: RetryPolicy,
    page_size: int,
    description: str,
    **params: Any,
) -> List[str]:
    """
    Fetch every page of a list call and concatenate the extracted items.

    Args:
        call: Client method, e.g. ``client.list_versions_by_function``
        extract: Turns one response page into flat identifiers
        retry: Policy wrapped around each page request
        page_size: MaxItems hint
        description: Name used in retry log events
        **params: Extra request parameters (FunctionName, LayerName, ...)

    Returns:
        Identifiers from all pages, in page order
    """
    items: List[str] = []
    marker: str | None = None

    while True:
        request = {**params, "MaxItems": page_size}
        if marker:
            request["Marker"] = marker

        page = await retry.call(
            lambda: call(**request),
            description=description,
            marker=marker,
        )
        items.extend(extract(page))

        marker = page.get("NextMarker")
        if not marker:
            return items


def unique(items: Iterable[H]) -> List[H]:
    """Deduplicate while keeping first-seen order."""
    return list(dict.fromkeys(items))


# ============================================================================
# Extractors
# ============================================================================

def function_arns(page: Page) -> List[str]:
    return [fn["FunctionArn"] for fn in page.get("Functions", [])]


def layer_arns(page: Page) -> List[str]:
    return [layer["LayerArn"] for layer in page.get("Layers", [])]


def published_versions(page: Page) -> List[str]:
    """Version numbers from ListVersionsByFunction, without $LATEST."""
    return [
        v["Version"] for v in page.get("Versions", []) if v["Version"] != LATEST
    ]


def layer_version_numbers(page: Page) -> List[str]:
    return [str(v["Version"]) for v in page.get("LayerVersions", [])]


def aliased_versions(page: Page) -> List[str]:
    """
    Every version an alias routes traffic to.

    That is the alias target plus the keys of its weighted routing
    config (canary versions).
    """
    versions: List[str] = []
    for alias in page.get("Aliases", []):
        versions.append(alias["FunctionVersion"])
        routing = alias.get("RoutingConfig") or {}
        versions.extend((routing.get("AdditionalVersionWeights") or {}).keys())
    return versions


def attached_layer_arns(configuration: Page) -> List[str]:
    """Layer version ARNs from a GetFunctionConfiguration response."""
    return [layer["Arn"] for layer in configuration.get("Layers") or []]

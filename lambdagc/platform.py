# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Platform - Thin async wrapper over the AWS Lambda API.

Every call is retry-protected and optionally preceded by a fixed delay
to stay below the Lambda control-plane rate limits. Inventories are
returned in random order so that repeatedly interrupted runs do not
always spend their budget on the same functions.
"""

import random
from typing import Any, Awaitable, Callable, Iterable, List, MutableSequence, Protocol, Tuple

import structlog

from lambdagc.config import LambdaGCConfig
from lambdagc.exceptions import PlatformError
from lambdagc.pagination import (
    Page,
    aliased_versions,
    attached_layer_arns,
    collect_pages,
    function_arns,
    layer_arns,
    layer_version_numbers,
    published_versions,
    unique,
)
from lambdagc.retry import RetryPolicy

logger = structlog.get_logger()


class LambdaClient(Protocol):
    """The subset of the aiobotocore Lambda client used by lambdagc."""

    async def list_functions(self, **kwargs: Any) -> dict: ...

    async def list_layers(self, **kwargs: Any) -> dict: ...

    async def list_versions_by_function(self, **kwargs: Any) -> dict: ...

    async def list_layer_versions(self, **kwargs: Any) -> dict: ...

    async def list_aliases(self, **kwargs: Any) -> dict: ...

    async def get_function_configuration(self, **kwargs: Any) -> dict: ...

    async def delete_function(self, **kwargs: Any) -> dict: ...

    async def delete_layer_version(self, **kwargs: Any) -> dict: ...


def split_layer_version_arn(arn: str) -> Tuple[str, str]:
    """
    Split ``arn:aws:lambda:<region>:<account>:layer:<name>:<version>``.

    Returns:
        Tuple of (layer ARN without version, version number as string)
    """
    layer_arn, sep, version = arn.rpartition(":")
    if not sep or not layer_arn or not version:
        raise PlatformError(
            f"Not a layer version ARN: {arn}",
            details={"arn": arn},
        )
    return layer_arn, version


def layer_version_arn(layer_arn: str, version: str | int) -> str:
    """Inverse of split_layer_version_arn()."""
    return f"{layer_arn}:{version}"


class LambdaPlatform:
    """
    Inventory, alias, attachment and delete operations for one account/region.

    Args:
        client: aiobotocore Lambda client (or anything shaped like LambdaClient)
        retry: Policy applied to every remote call
        page_size: MaxItems hint for list calls
        call_delay: Seconds to pause before every remote call
        shuffle: In-place shuffler for inventories
    """

    def __init__(
        self,
        client: LambdaClient,
        *,
        retry: RetryPolicy | None = None,
        page_size: int = 50,
        call_delay: float = 0.0,
        shuffle: Callable[[MutableSequence[Any]], None] = random.shuffle,
    ) -> None:
        self.client = client
        self.retry = retry or RetryPolicy()
        self.page_size = page_size
        self.call_delay = call_delay
        self._shuffle = shuffle

    @classmethod
    def from_config(cls, client: LambdaClient, config: LambdaGCConfig, **kwargs: Any) -> "LambdaPlatform":
        return cls(
            client,
            retry=kwargs.pop("retry", None) or RetryPolicy.from_config(config),
            page_size=config.page_size,
            call_delay=config.call_delay_ms / 1000,
            **kwargs,
        )

    def _throttled(self, method: Callable[..., Awaitable[dict]]) -> Callable[..., Awaitable[dict]]:
        """Wrap a client method so each invocation waits call_delay first."""
        if self.call_delay <= 0:
            return method

        async def delayed(**kwargs: Any) -> dict:
            await self.retry.sleep(self.call_delay)
            return await method(**kwargs)

        return delayed

    async def _list(
        self,
        method_name: str,
        extract: Callable[[Page], Iterable[str]],
        **params: Any,
    ) -> List[str]:
        return await collect_pages(
            self._throttled(getattr(self.client, method_name)),
            extract,
            retry=self.retry,
            page_size=self.page_size,
            description=method_name,
            **params,
        )

    async def _call(self, method_name: str, **params: Any) -> dict:
        method = self._throttled(getattr(self.client, method_name))
        return await self.retry.call(
            lambda: method(**params),
            description=method_name,
        )

    # ------------------------------------------------------------------
    # Inventories
    # ------------------------------------------------------------------

    async def list_functions(self) -> List[str]:
        logger.info("listing_functions")
        arns = await self._list("list_functions", function_arns)
        self._shuffle(arns)
        logger.info("functions_found", count=len(arns))
        return arns

    async def list_layers(self) -> List[str]:
        logger.info("listing_layers")
        arns = await self._list("list_layers", layer_arns)
        self._shuffle(arns)
        logger.info("layers_found", count=len(arns))
        return arns

    # ------------------------------------------------------------------
    # Per-entity lookups
    # ------------------------------------------------------------------

    async def list_versions(self, function_arn: str) -> List[str]:
        versions = await self._list(
            "list_versions_by_function",
            published_versions,
            FunctionName=function_arn,
        )
        logger.debug("versions_found", function=function_arn, versions=",".join(versions))
        return versions

    async def list_layer_versions(self, layer_arn: str) -> List[str]:
        versions = await self._list(
            "list_layer_versions",
            layer_version_numbers,
            LayerName=layer_arn,
        )
        logger.debug("layer_versions_found", layer=layer_arn, versions=",".join(versions))
        return versions

    async def list_aliased_versions(self, function_arn: str) -> List[str]:
        versions = unique(
            await self._list("list_aliases", aliased_versions, FunctionName=function_arn)
        )
        logger.debug(
            "aliased_versions_found",
            function=function_arn,
            count=len(versions),
            versions=",".join(versions),
        )
        return versions

    async def list_attached_layers(self, function_arn: str, version: str) -> List[str]:
        configuration = await self._call(
            "get_function_configuration",
            FunctionName=function_arn,
            Qualifier=version,
        )
        return attached_layer_arns(configuration)

    async def list_layer_versions_by_function(self, function_arn: str) -> List[str]:
        """
        Layer version ARNs attached to any aliased version of a function.

        Unaliased versions are skipped: they are deletion candidates
        themselves, so what they attach does not keep a layer alive.
        """
        attached: List[str] = []
        for version in await self.list_aliased_versions(function_arn):
            attached.extend(await self.list_attached_layers(function_arn, version))
        layers = unique(attached)
        logger.debug("attached_layers_found", function=function_arn, layers=",".join(layers))
        return layers

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    async def delete_version(self, function_arn: str, version: str, dry_run: bool = False) -> None:
        if dry_run:
            logger.info("dry_run_skip_delete", function=function_arn, version=version)
            return

        logger.info("deleting_version", function=function_arn, version=version)
        await self._call("delete_function", FunctionName=function_arn, Qualifier=version)

    async def delete_layer_version(self, layer_arn: str, version: str, dry_run: bool = False) -> None:
        if dry_run:
            logger.info("dry_run_skip_delete", layer=layer_arn, version=version)
            return

        logger.info("deleting_layer_version", layer=layer_arn, version=version)
        await self._call(
            "delete_layer_version",
            LayerName=layer_arn,
            VersionNumber=int(version),
        )

# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Lambda platform tests against a mocked aiobotocore client.

These cover paging, $LATEST filtering, alias flattening, attachment
lookup, retries per page, and the delete calls.
"""

from unittest.mock import call

import pytest

from lambdagc.exceptions import PlatformError
from lambdagc.platform import LambdaPlatform, layer_version_arn, split_layer_version_arn

from tests.conftest import not_found, page, throttled


# ============================================================================
# Inventories
# ============================================================================

@pytest.mark.asyncio
async def test_list_functions_follows_next_marker(lambda_platform, lambda_client):
    functions = lambda n: [{"FunctionArn": f"arn-{i}"} for i in range(n)]
    lambda_client.list_functions.side_effect = [
        page("Functions", functions(10), "more.."),
        page("Functions", functions(10), "even more.."),
        page("Functions", functions(1)),
    ]

    arns = await lambda_platform.list_functions()

    assert len(arns) == 21
    assert lambda_client.list_functions.await_args_list == [
        call(MaxItems=10),
        call(MaxItems=10, Marker="more.."),
        call(MaxItems=10, Marker="even more.."),
    ]


@pytest.mark.asyncio
async def test_inventories_are_shuffled(lambda_client, retry):
    lambda_client.list_layers.return_value = page(
        "Layers", [{"LayerArn": "a"}, {"LayerArn": "b"}, {"LayerArn": "c"}]
    )
    platform = LambdaPlatform(lambda_client, retry=retry, shuffle=lambda items: items.reverse())

    assert await platform.list_layers() == ["c", "b", "a"]


@pytest.mark.asyncio
async def test_list_versions_excludes_latest(lambda_platform, lambda_client):
    lambda_client.list_versions_by_function.side_effect = [
        page("Versions", [{"Version": str(i)} for i in range(1, 11)], "more.."),
        page("Versions", [{"Version": "11"}, {"Version": "$LATEST"}]),
    ]

    versions = await lambda_platform.list_versions("some-arn")

    assert versions == [str(i) for i in range(1, 12)]
    assert "$LATEST" not in versions
    lambda_client.list_versions_by_function.assert_any_await(
        FunctionName="some-arn", MaxItems=10
    )


@pytest.mark.asyncio
async def test_list_layer_versions_returns_strings(lambda_platform, lambda_client):
    lambda_client.list_layer_versions.return_value = page(
        "LayerVersions", [{"Version": 3}, {"Version": 2}, {"Version": 1}]
    )

    assert await lambda_platform.list_layer_versions("some-layer") == ["3", "2", "1"]


@pytest.mark.asyncio
async def test_list_aliased_versions_includes_weighted_routing(lambda_platform, lambda_client):
    lambda_client.list_aliases.side_effect = [
        page(
            "Aliases",
            [
                {"Name": "live", "FunctionVersion": "7",
                 "RoutingConfig": {"AdditionalVersionWeights": {"8": 0.1}}},
                {"Name": "staging", "FunctionVersion": "8"},
            ],
            "more..",
        ),
        page("Aliases", [{"Name": "old", "FunctionVersion": "3", "RoutingConfig": {}}]),
    ]

    versions = await lambda_platform.list_aliased_versions("some-arn")

    assert versions == ["7", "8", "3"]


# ============================================================================
# Attachments
# ============================================================================

@pytest.mark.asyncio
async def test_layers_only_looked_up_for_aliased_versions(lambda_platform, lambda_client):
    lambda_client.list_aliases.return_value = page(
        "Aliases",
        [{"FunctionVersion": "2", "RoutingConfig": {"AdditionalVersionWeights": {"3": 0.5}}}],
    )
    lambda_client.get_function_configuration.side_effect = [
        {"Layers": [{"Arn": "some-layer:1"}, {"Arn": "other-layer:4"}]},
        {"Layers": [{"Arn": "some-layer:1"}]},
    ]

    layers = await lambda_platform.list_layer_versions_by_function("a")

    assert layers == ["some-layer:1", "other-layer:4"]
    assert lambda_client.get_function_configuration.await_args_list == [
        call(FunctionName="a", Qualifier="2"),
        call(FunctionName="a", Qualifier="3"),
    ]
    lambda_client.list_versions_by_function.assert_not_awaited()


@pytest.mark.asyncio
async def test_function_without_layers(lambda_platform, lambda_client):
    lambda_client.get_function_configuration.return_value = {"FunctionName": "a"}

    assert await lambda_platform.list_attached_layers("a", "1") == []


def test_layer_version_arn_round_trip():
    arn = "arn:aws:lambda:eu-west-1:123456789012:layer:shared-libs:12"

    assert split_layer_version_arn(arn) == (
        "arn:aws:lambda:eu-west-1:123456789012:layer:shared-libs",
        "12",
    )
    assert layer_version_arn(*split_layer_version_arn(arn)) == arn


def test_split_layer_version_arn_rejects_garbage():
    with pytest.raises(PlatformError):
        split_layer_version_arn("no-version-here")


# ============================================================================
# Retries and delays
# ============================================================================

@pytest.mark.asyncio
async def test_throttled_page_is_retried_without_losing_items(lambda_platform, lambda_client, sleep):
    lambda_client.list_functions.side_effect = [
        page("Functions", [{"FunctionArn": "a"}], "more.."),
        throttled(),
        page("Functions", [{"FunctionArn": "b"}]),
    ]

    assert await lambda_platform.list_functions() == ["a", "b"]
    assert lambda_client.list_functions.await_count == 3
    sleep.assert_awaited_once_with(1.0)


@pytest.mark.asyncio
async def test_permanent_error_aborts_listing(lambda_platform, lambda_client):
    lambda_client.list_versions_by_function.side_effect = [
        page("Versions", [{"Version": "1"}], "more.."),
        not_found(),
    ]

    with pytest.raises(Exception) as exc_info:
        await lambda_platform.list_versions("gone")

    assert exc_info.value.response["Error"]["Code"] == "ResourceNotFoundException"


@pytest.mark.asyncio
async def test_call_delay_applied_before_every_call(lambda_client, retry, sleep):
    platform = LambdaPlatform(lambda_client, retry=retry, call_delay=0.2)

    await platform.list_versions("a")
    await platform.delete_version("a", "1")

    assert [c.args[0] for c in sleep.await_args_list] == [0.2, 0.2]


# ============================================================================
# Deletes
# ============================================================================

@pytest.mark.asyncio
async def test_delete_version_does_what_it_says_on_the_tin(lambda_platform, lambda_client):
    await lambda_platform.delete_version("some-arn", "some-version")

    lambda_client.delete_function.assert_awaited_once_with(
        FunctionName="some-arn", Qualifier="some-version"
    )


@pytest.mark.asyncio
async def test_delete_layer_version_sends_version_number(lambda_platform, lambda_client):
    await lambda_platform.delete_layer_version("some-layer", "4")

    lambda_client.delete_layer_version.assert_awaited_once_with(
        LayerName="some-layer", VersionNumber=4
    )


@pytest.mark.asyncio
async def test_dry_run_deletes_nothing(lambda_platform, lambda_client):
    await lambda_platform.delete_version("some-arn", "1", dry_run=True)
    await lambda_platform.delete_layer_version("some-layer", "1", dry_run=True)

    lambda_client.delete_function.assert_not_awaited()
    lambda_client.delete_layer_version.assert_not_awaited()

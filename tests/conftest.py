# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for lambdagc tests.

Provides a mocked Lambda client, a mocked platform, and helpers for
building Lambda API responses and errors.
"""

import os
from typing import Any, Dict, List
from unittest.mock import AsyncMock

import pytest
from botocore.exceptions import ClientError

# Set test environment variables
os.environ["LAMBDAGC_ADMIN_API_KEY"] = "test-api-key-12345"


def client_error(code: str, status: int = 400, operation: str = "DeleteFunction") -> ClientError:
    """Build a botocore ClientError the way the Lambda API returns one."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} raised by test"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


def throttled() -> ClientError:
    return client_error("TooManyRequestsException", 429)


def not_found() -> ClientError:
    return client_error("ResourceNotFoundException", 404)


def page(key: str, items: List[Dict[str, Any]], next_marker: str | None = None) -> Dict[str, Any]:
    """One page of a Lambda list response."""
    response: Dict[str, Any] = {key: items}
    if next_marker:
        response["NextMarker"] = next_marker
    return response


@pytest.fixture
def sleep() -> AsyncMock:
    """Stand-in for asyncio.sleep that records delays without waiting."""
    return AsyncMock(return_value=None)


@pytest.fixture
def retry(sleep):
    """Fast retry policy: two retries, recorded sleeps."""
    from lambdagc.retry import RetryPolicy

    return RetryPolicy(retries=2, min_backoff=1.0, max_backoff=4.0, factor=2.0, sleep=sleep)


@pytest.fixture
def lambda_client() -> AsyncMock:
    """Mocked aiobotocore Lambda client with every list call empty."""
    client = AsyncMock()
    client.list_functions.return_value = page("Functions", [])
    client.list_layers.return_value = page("Layers", [])
    client.list_versions_by_function.return_value = page("Versions", [])
    client.list_layer_versions.return_value = page("LayerVersions", [])
    client.list_aliases.return_value = page("Aliases", [])
    client.get_function_configuration.return_value = {}
    client.delete_function.return_value = {}
    client.delete_layer_version.return_value = {}
    return client


@pytest.fixture
def lambda_platform(lambda_client, retry):
    """Real LambdaPlatform over the mocked client, with stable ordering."""
    from lambdagc.platform import LambdaPlatform

    return LambdaPlatform(lambda_client, retry=retry, page_size=10, shuffle=lambda items: None)


@pytest.fixture
def platform() -> AsyncMock:
    """Mocked LambdaPlatform for orchestration tests."""
    from lambdagc.platform import LambdaPlatform

    mock = AsyncMock(spec=LambdaPlatform)
    mock.list_functions.return_value = []
    mock.list_layers.return_value = []
    mock.list_versions.return_value = []
    mock.list_layer_versions.return_value = []
    mock.list_aliased_versions.return_value = []
    mock.list_layer_versions_by_function.return_value = []
    mock.delete_version.return_value = None
    mock.delete_layer_version.return_value = None
    return mock


@pytest.fixture
def test_config():
    """Configuration that keeps nothing by recency and skips layers."""
    from lambdagc.config import LambdaGCConfig

    return LambdaGCConfig(versions_to_keep=0, layer_versions_to_keep=0, clean_layers=False)


@pytest.fixture
def cleanup_state(test_config):
    """Fresh runtime state (and so a fresh worklist) per test."""
    from lambdagc.core import initialize_cleanup_state

    return initialize_cleanup_state(test_config)

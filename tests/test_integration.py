# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Integration Tests for lambdagc.

These tests verify the FastAPI admin endpoints on top of a real
cleanup state, with the Lambda client mocked.
"""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from lambdagc.core import initialize_cleanup_state
from lambdagc.integrations.fastapi import register_lambdagc_routes

from tests.conftest import client_error, page

AUTH = {"Authorization": "Bearer test-api-key-12345"}


@pytest.fixture
def admin_app(monkeypatch, test_config, lambda_client):
    """FastAPI app with lambdagc routes and a mocked Lambda client."""

    @asynccontextmanager
    async def fake_client(config, state):
        yield lambda_client

    monkeypatch.setattr("lambdagc.core.create_lambda_client", fake_client)
    monkeypatch.setattr("lambdagc.integrations.fastapi.create_lambda_client", fake_client)

    app = FastAPI()
    state = initialize_cleanup_state(test_config)
    register_lambdagc_routes(app, test_config, state)
    app.state.lambdagc_state = state
    return app


@asynccontextmanager
async def admin_client(app: FastAPI):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_status_endpoint_before_any_run(admin_app):
    async with admin_client(admin_app) as client:
        response = await client.get("/admin/lambdagc/status", headers=AUTH)

    assert response.status_code == 200
    data = response.json()
    assert data["total_runs"] == 0
    assert data["in_progress"] is False
    assert data["pending_functions"] is None


@pytest.mark.asyncio
async def test_run_endpoint_cleans_functions(admin_app, lambda_client):
    lambda_client.list_functions.return_value = page("Functions", [{"FunctionArn": "a"}])
    lambda_client.list_versions_by_function.return_value = page(
        "Versions", [{"Version": "1"}, {"Version": "2"}]
    )

    async with admin_client(admin_app) as client:
        response = await client.post("/admin/lambdagc/run", headers=AUTH)
        status = (await client.get("/admin/lambdagc/status", headers=AUTH)).json()

    assert response.status_code == 200
    data = response.json()
    assert data["functions_cleaned"] == 1
    assert sorted(data["deleted_versions"]) == ["a:1", "a:2"]
    assert status["total_runs"] == 1
    assert status["total_deleted"] == 2


@pytest.mark.asyncio
async def test_failed_run_reports_pending_work(admin_app, lambda_client):
    lambda_client.list_functions.return_value = page(
        "Functions", [{"FunctionArn": "a"}, {"FunctionArn": "b"}]
    )
    lambda_client.list_versions_by_function.return_value = page("Versions", [{"Version": "1"}])
    lambda_client.delete_function.side_effect = client_error("AccessDeniedException", 403)

    async with admin_client(admin_app) as client:
        response = await client.post("/admin/lambdagc/run", headers=AUTH)
        metrics = (await client.get("/admin/lambdagc/metrics", headers=AUTH)).json()

    assert response.status_code == 502
    assert metrics["failed_runs"] == 1
    assert metrics["pending_functions"] == 2
    assert "AccessDeniedException" in metrics["last_error"]


@pytest.mark.asyncio
async def test_run_endpoint_refused_while_another_run_holds_the_lock(admin_app, lambda_client):
    state = admin_app.state.lambdagc_state

    async with state["run_lock"]:
        async with admin_client(admin_app) as client:
            response = await client.post("/admin/lambdagc/run", headers=AUTH)

    assert response.status_code == 409
    lambda_client.list_functions.assert_not_awaited()
    assert state["total_runs"] == 0


@pytest.mark.asyncio
async def test_config_endpoint(admin_app):
    async with admin_client(admin_app) as client:
        response = await client.get("/admin/lambdagc/config", headers=AUTH)

    assert response.status_code == 200
    data = response.json()
    assert data["versions_to_keep"] == 0
    assert data["clean_layers"] is False


@pytest.mark.asyncio
async def test_health_endpoint(admin_app, lambda_client):
    lambda_client.get_account_settings.return_value = {"AccountLimit": {}}

    async with admin_client(admin_app) as client:
        response = await client.get("/admin/lambdagc/health", headers=AUTH)

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_unauthorized_access(admin_app):
    async with admin_client(admin_app) as client:
        missing = await client.get("/admin/lambdagc/status")
        wrong = await client.get(
            "/admin/lambdagc/status",
            headers={"Authorization": "Bearer wrong-key"},
        )

    assert missing.status_code == 401
    assert wrong.status_code == 403

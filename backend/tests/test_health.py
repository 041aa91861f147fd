"""Health check and basic app tests."""
import pytest

pytestmark = pytest.mark.anyio


async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_request_id_generated(client):
    response = await client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 32


async def test_request_id_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "trace-abc"})
    assert response.headers["X-Request-ID"] == "trace-abc"


async def test_openapi_schema(client):
    response = await client.get("/openapi.json")
    assert response.status_code == 200
    schema = response.json()
    assert schema["info"]["title"] == "Social Hub API"
    assert schema["info"]["version"] == "0.1.0"
    paths = schema["paths"]
    assert "/api/v1/comments/ingest" in paths
    assert "/api/v1/easy-reply/swipe" in paths
    assert "/api/v1/stats/collect" in paths
    assert "/api/v1/stats/collect/account" in paths


async def test_unknown_route(client):
    response = await client.get("/api/v1/nothing-here")
    assert response.status_code == 404

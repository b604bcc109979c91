"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"
    assert data.get("version")


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    """A well-formed X-Request-ID is returned unchanged."""
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "trace-abc_1"})
    assert response.headers["x-request-id"] == "trace-abc_1"


async def test_request_id_is_generated_for_bad_input(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "no spaces allowed"})
    assert response.headers["x-request-id"] != "no spaces allowed"
    assert len(response.headers["x-request-id"]) == 32


async def test_security_headers_on_api_responses(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert "default-src 'none'" in response.headers["content-security-policy"]


async def test_docs_get_relaxed_csp(client: AsyncClient) -> None:
    response = await client.get("/docs")
    assert response.status_code == 200
    assert "cdn.jsdelivr.net" in response.headers["content-security-policy"]


async def test_unknown_route_returns_json_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nowhere")
    assert response.status_code == 404
    assert response.json()["error"] == "HTTP_ERROR"

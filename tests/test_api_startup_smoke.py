from fastapi.testclient import TestClient


REQUIRED_ROUTES = {
    "/api/customers",
    "/api/customers/{customer_id}",
    "/api/customers/{customer_id}/addresses",
    "/api/addresses/{address_id}",
    "/api/customers/{customer_id}/orders",
    "/api/customers/{customer_id}/payments",
    "/api/internal/metrics",
    "/health",
}


def test_api_startup_and_router_registration(monkeypatch):
    from crm import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        response = client.get("/")
        health_response = client.get("/health")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert health_response.json() == {"status": "healthy"}
    assert openapi_response.status_code == 200

    paths = {getattr(route, "path", None) for route in main.app.routes}
    paths |= set(openapi_response.json()["paths"])
    assert REQUIRED_ROUTES.issubset(paths)


def test_requests_carry_request_id_and_feed_metrics(monkeypatch):
    from crm import main
    from crm.core.metrics import request_metrics

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)
    request_metrics.reset()

    with TestClient(main.app) as client:
        response = client.get("/health", headers={"X-Request-ID": "smoke-1"})
        client.get("/does-not-exist")
        metrics = client.get("/api/internal/metrics").json()["endpoints"]

    assert response.headers["X-Request-ID"] == "smoke-1"
    assert metrics["GET /health"]["total_requests"] == 1
    assert metrics["GET /health"]["error_count"] == 0
    assert metrics["GET /does-not-exist"]["error_count"] == 1

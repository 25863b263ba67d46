"""App wiring: health endpoint, CORS and mounted routers."""

from config import settings


def test_health_reports_ok(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_cors_preflight_allows_frontend_origin(client):
    origin = settings.CORS_ORIGINS[0]

    response = client.options(
        "/health",
        headers={"Origin": origin, "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == origin


def test_link_routes_are_mounted(client):
    paths = client.get("/openapi.json").json()["paths"]

    assert "/api/users/{user_id}/link-token" in paths
    assert "/api/users/{user_id}/accounts/refresh" in paths

from fastapi.testclient import TestClient


def _get_client() -> TestClient:
    from app.main import app

    return TestClient(app)


def test_health_endpoint_returns_ok() -> None:
    client = _get_client()
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_and_timing_headers() -> None:
    client = _get_client()
    response = client.get("/health")

    assert response.headers.get("X-Request-Id")
    assert float(response.headers["X-Response-Time-Ms"]) >= 0


def test_request_id_echoed_from_header() -> None:
    client = _get_client()
    req_id = "planner-request-42"
    response = client.get("/health", headers={"X-Request-Id": req_id})

    assert response.headers.get("X-Request-Id") == req_id


def test_request_log_level_depends_on_path_and_status() -> None:
    import logging

    from app.core.middleware import _level_for

    assert _level_for("/health", 200) == logging.DEBUG
    assert _level_for("/goals", 201) == logging.INFO
    assert _level_for("/goals/abc/plan", 502) == logging.WARNING

import logging
from datetime import datetime

import pytest


def test_health_endpoint_reports_model(configured_app):
    """Given a running app, /api/health should report ok, a timestamp and the configured model."""
    response = configured_app.get("/api/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["model"] == "claude-test-model"
    datetime.fromisoformat(payload["timestamp"].replace("Z", "+00:00"))


def test_root_endpoint_is_not_rate_limited(configured_app):
    """Given the root path, it should answer without rate limit headers."""
    response = configured_app.get("/")
    assert response.status_code == 200
    assert "X-RateLimit-Limit" not in response.headers


def test_api_responses_carry_rate_limit_headers(configured_app):
    """Given an /api/ request, the response should carry rate limit headers."""
    response = configured_app.get("/api/health")
    assert response.headers["X-RateLimit-Limit"] == "100"
    assert response.headers["X-RateLimit-Remaining"] == "99"


def test_feedback_endpoint_acknowledges_and_logs(configured_app, caplog):
    """Given feedback, /api/feedback should acknowledge it and log the payload."""
    caplog.set_level(logging.INFO, logger="llm_relay")

    response = configured_app.post(
        "/api/feedback",
        json={"messageId": "msg-1", "rating": 5, "comment": "Great answer"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert "msg-1" in caplog.text
    assert "Great answer" in caplog.text


def test_feedback_endpoint_accepts_empty_body(configured_app):
    """Given no body, /api/feedback should still acknowledge."""
    response = configured_app.post("/api/feedback")
    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.parametrize("body", [
    {"comment": "x" * 2001},
    {"comment": {"nested": True}},
    {"messageId": {"id": 1}, "rating": [5]},
    {"messageId": None, "rating": "thumbs-up", "comment": 42},
])
def test_feedback_endpoint_accepts_any_json_values(configured_app, body):
    """Given feedback fields of any JSON type or length, /api/feedback should still acknowledge."""
    response = configured_app.post("/api/feedback", json=body)
    assert response.status_code == 200
    assert response.json() == {"success": True}


def test_feedback_endpoint_rejects_non_object_body_with_400(configured_app):
    """Given a JSON body that is not an object, /api/feedback should return a 400 error body."""
    response = configured_app.post("/api/feedback", json=[1, 2])
    assert response.status_code == 400
    assert "error" in response.json()


def test_cors_preflight_is_answered(configured_app):
    """Given a CORS preflight, the app should answer it without hitting the route."""
    response = configured_app.options(
        "/api/chat",
        headers={"Origin": "https://app.example", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://app.example"

TEST_API_KEY = "sk-ant-REDACTED"


def assert_error_response(response, status_code, error_message=None):
    """Assert an error response has the expected status and a caller-safe body."""
    assert response.status_code == status_code, response.text
    payload = response.json()
    assert "error" in payload, f"'error' is missing from the response: {payload}"
    assert "success" not in payload
    if error_message is not None:
        assert payload["error"] == error_message
    assert_no_credential(response.text)
    return payload


def assert_no_credential(text):
    """Assert the upstream credential does not leak into text."""
    assert TEST_API_KEY not in text, "Upstream credential leaked"
    assert "0123456789-secret" not in text, "Upstream credential leaked"

import pytest
from unittest.mock import AsyncMock, MagicMock

from tests.helpers import TEST_API_KEY


@pytest.fixture
def test_config():
    """Production-posture configuration with a fake credential."""
    from config import Config
    return Config(
        ANTHROPIC_API_KEY=TEST_API_KEY,
        ANTHROPIC_API_URL="https://upstream.test/v1/messages",
        MODEL="claude-test-model",
        MAX_TOKENS=512,
        ENVIRONMENT="production",
    )


@pytest.fixture
def dev_config(test_config):
    """Same configuration in development posture."""
    from dataclasses import replace
    return replace(test_config, ENVIRONMENT="development")


@pytest.fixture
def upstream():
    """Scripted upstream; queue responses with respond()/fail_with()."""
    from tests.fixtures.mock_clients import UpstreamTransportBuilder
    return UpstreamTransportBuilder()


@pytest.fixture
def mock_http_client():
    """Mock httpx client for relay unit tests."""
    client = AsyncMock()
    client.post = AsyncMock()
    return client


@pytest.fixture
def mock_response():
    """Build a MagicMock standing in for an httpx.Response."""
    def _build(status_code=200, json_body=None, text=""):
        response = MagicMock()
        response.status_code = status_code
        response.is_success = 200 <= status_code < 300
        response.text = text
        if isinstance(json_body, Exception):
            response.json.side_effect = json_body
        else:
            response.json.return_value = json_body
        return response
    return _build


@pytest.fixture
def relay(test_config, upstream):
    """UpstreamRelay wired to the scripted upstream."""
    from services.relay import UpstreamRelay
    return UpstreamRelay(test_config, client=upstream.build())


@pytest.fixture
def app_factory(upstream):
    """Build an app for a given configuration, talking to the scripted upstream."""
    from main import create_app
    from services.relay import UpstreamRelay

    def _build(config):
        return create_app(config, relay=UpstreamRelay(config, client=upstream.build()))
    return _build


@pytest.fixture
def app(app_factory, test_config):
    return app_factory(test_config)


@pytest.fixture
def configured_app(app):
    """Test client for the production-posture app."""
    from fastapi.testclient import TestClient

    with TestClient(app) as client:
        yield client


@pytest.fixture
def dev_app(app_factory, dev_config):
    """Test client for the development-posture app."""
    from fastapi.testclient import TestClient

    with TestClient(app_factory(dev_config)) as client:
        yield client

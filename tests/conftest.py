import inspect
import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from clx_xms import ApiConnection  # noqa: E402

BASE_URL = "https://xms.test/xms/v1"
PLAN = "my-plan"
TOKEN = "tok"


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set the environment variables read by Settings.

    Every test starts from the same configuration regardless of the
    environment the suite runs in.
    """
    monkeypatch.setenv("XMS_ENDPOINT", BASE_URL)
    monkeypatch.setenv("XMS_SERVICE_PLAN_ID", PLAN)
    monkeypatch.setenv("XMS_TOKEN", TOKEN)
    monkeypatch.setenv("XMS_LOG_LEVEL", "INFO")
    yield


class MockApi:
    """Records every request and answers it with ``handler``.

    The handler may be a plain function or a coroutine function; it runs
    on the connection's event loop thread.
    """

    def __init__(self, handler):
        self.handler = handler
        self.requests = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response


def json_response(status_code, payload):
    return httpx.Response(status_code, json=payload)


@pytest.fixture
def connection_factory():
    """Create connections backed by ``httpx.MockTransport``.

    Returns ``(connection, api)``; every connection is closed at teardown.
    """
    connections = []

    def factory(handler, start=True, **kwargs):
        api = MockApi(handler)
        conn = ApiConnection(
            PLAN,
            TOKEN,
            endpoint=BASE_URL,
            transport=httpx.MockTransport(api),
            **kwargs,
        )
        if start:
            conn.start()
        connections.append(conn)
        return conn, api

    yield factory
    for conn in connections:
        conn.close()


@pytest.fixture
def text_batch_json():
    """A text batch as returned by the server."""
    return {
        "type": "mt_text",
        "id": "5Z8QsIRsk86f-jHB",
        "from": "12345",
        "to": ["987654321", "123456789"],
        "body": "Hello, world!",
        "canceled": False,
        "delivery_report": "none",
        "created_at": "2016-10-02T09:34:28.542Z",
        "modified_at": "2016-10-02T09:34:28.542Z",
    }


@pytest.fixture
def binary_batch_json():
    """A binary batch as returned by the server."""
    return {
        "type": "mt_binary",
        "id": "5Z8QsIRsk86f-jHC",
        "from": "12345",
        "to": ["987654321"],
        "body": "AAECAw==",
        "udh": "fffefd",
        "canceled": True,
        "created_at": "2016-10-02T09:34:28.542Z",
        "modified_at": "2016-10-02T09:34:28.542Z",
    }


@pytest.fixture
def group_json():
    """A group as returned by the server."""
    return {
        "id": "4cldmgEdAcBfcHW3",
        "name": "rah-test",
        "size": 1,
        "child_groups": [],
        "created_at": "2016-12-08T12:38:19.962Z",
        "modified_at": "2016-12-08T12:38:19.962Z",
    }


# Rely on pytest-asyncio for async test handling; no custom hook needed.

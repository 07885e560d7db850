"""
AirTwitch Test Configuration

Shared fixtures and configuration for all tests.
"""

import os
import random
from typing import Any, Callable, Generator, Optional

import httpx
import pytest

# Add project root to path
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import airtwitch.config as config_module
from airtwitch.twitch.api import TwitchClient
from airtwitch.twitch.resolver import StreamResolver
from airtwitch.utils.http_gateway import HttpGateway


Handler = Callable[[httpx.Request], httpx.Response]


class MockHttp:
    """
    Routing handler for ``httpx.MockTransport``.

    Routes are keyed by method and URL without query string. Every request
    is recorded in ``requests``; unrouted requests get a 404.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list[Handler]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        response: Optional[Handler] = None,
        *,
        status: int = 200,
        json: Any = None,
        text: Optional[str] = None,
    ) -> None:
        """Queue a response; the last queued response for a route repeats."""
        if response is None:
            # A fresh Response per request; httpx binds each one to its request
            if json is not None:
                response = lambda request: httpx.Response(status, json=json)
            elif text is not None:
                response = lambda request: httpx.Response(
                    status,
                    content=text.encode("utf-8"),
                    headers={"Content-Type": "application/vnd.apple.mpegurl"},
                )
            else:
                response = lambda request: httpx.Response(status)
        self.routes.setdefault((method.upper(), url), []).append(response)

    def fail(self, method: str, url: str) -> None:
        """Make a route fail with a connection error."""

        def _raise(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        self.add(method, url, _raise)

    def requests_to(self, url: str, method: Optional[str] = None) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if self._route_url(request) == url and (method is None or request.method == method)
        ]

    @staticmethod
    def _route_url(request: httpx.Request) -> str:
        return str(request.url).split("?", 1)[0]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, self._route_url(request)))
        if not queue:
            return httpx.Response(404, text="not routed")
        handler = queue.pop(0) if len(queue) > 1 else queue[0]
        return handler(request)


# ============ HTTP Fixtures ============


@pytest.fixture
def mock_http() -> MockHttp:
    """Request router and recorder behind the test gateway."""
    return MockHttp()


@pytest.fixture
def gateway(mock_http: MockHttp) -> Generator[HttpGateway, None, None]:
    """Real HttpGateway over a mock transport."""
    gw = HttpGateway(transport=httpx.MockTransport(mock_http))
    yield gw
    gw.close()


@pytest.fixture
def twitch_client(gateway: HttpGateway) -> TwitchClient:
    """Twitch client with a fixed Client-ID."""
    return TwitchClient(gateway, client_id="test-client-id")


@pytest.fixture
def resolver(twitch_client: TwitchClient) -> StreamResolver:
    """Stream resolver with a seeded cache-buster source."""
    return StreamResolver(twitch_client, rng=random.Random(42))


# ============ Temporary File Fixtures ============


@pytest.fixture(scope="function")
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary config file."""
    config_file = tmp_path / "airtwitch.yaml"
    config_content = """
twitch:
  client_id: "yaml-client-id"

http:
  timeout: 2.5

playback:
  user_agent: "TestAgent/2.0"

logging:
  level: "DEBUG"
"""
    config_file.write_text(config_content)
    return config_file


# ============ Environment Fixtures ============


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean environment variables and cached configuration for each test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("AIRTWITCH_") or key == "TWITCH_CLIENT_ID":
            del os.environ[key]
    config_module._config = None

    yield

    os.environ.clear()
    os.environ.update(original_env)
    config_module._config = None


# ============ Markers ============


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")

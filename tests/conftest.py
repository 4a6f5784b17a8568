import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config
from services.store import MemoryStore


class RecordingLogger:
    """RequestLogger that keeps events in memory."""

    def __init__(self):
        self.requests = []
        self.forwards = []
        self.targets = []
        self.warnings = []
        self.errors = []

    def log_request(self, method, path, query):
        self.requests.append((method, path, query))

    def log_forward(self, method, upstream_url, status, size, *, headers=None):
        self.forwards.append((method, upstream_url, status, size))

    def log_target_update(self, url):
        self.targets.append(url)

    def log_warning(self, route, message):
        self.warnings.append((route, message))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


class Upstream:
    """Mock upstream recording the requests it receives."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None
        self.respond(200, b"ok", [("content-type", "text/plain")])

    def respond(self, status: int, body: bytes, headers: list[tuple[str, str]] | None = None) -> None:
        self._status = status
        self._body = body
        self._headers = headers or []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        # An unread stream, like a real transport returns
        return httpx.Response(self._status, headers=self._headers, stream=httpx.ByteStream(self._body))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def client(config, logger, store, upstream):
    app = create_app(config, logger, store=store, transport=httpx.MockTransport(upstream.handler))
    with TestClient(app) as test_client:
        yield test_client

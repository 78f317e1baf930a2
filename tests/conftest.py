from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from apps.proxy_router import ProxyRouter
from apps.proxy_router.forwarder import Forwarder
from apps.proxy_router.main import create_app
from lib.config.proxy_router_loader import ProxyRouterConfig
from lib.kv.store import InMemoryKVStore


ROUTING_ENTRIES = {
    "route:NESTLE:GDEC-01": "TARGET_A",
    "route:NESTLE": "TARGET_C",
    "route:PEPSI:WAREHOUSE-02": "TARGET_B",
    "route:COCA_COLA": "TARGET_A",
    "route:ORPHAN": "TARGET_NOWHERE",
    "endpoint:TARGET_A": "https://backend.example",
    "endpoint:TARGET_B": "https://orders.example:8443",
    "endpoint:TARGET_C": "https://fallback.example",
    "path:TARGET_A:/api/inventory": "/webhook/inventory",
    "path:TARGET_B:/api/orders": "/v2/orders",
}


class RecordingBackend:
    """Mock backend capturing every request it receives."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response] | None = None) -> None:
        self.requests: List[httpx.Request] = []
        self.responder = responder or self.default_response

    @staticmethod
    def default_response(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"method": request.method, "url": str(request.url)},
            headers={"x-backend": request.url.host},
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def store() -> InMemoryKVStore:
    return InMemoryKVStore(ROUTING_ENTRIES)


@pytest.fixture
def backend_factory():
    return RecordingBackend


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def make_client(store):
    def _make(backend: RecordingBackend) -> TestClient:
        forwarder = Forwarder(client=httpx.AsyncClient(transport=httpx.MockTransport(backend)))
        router = ProxyRouter(config=ProxyRouterConfig(), store=store, forwarder=forwarder)
        return TestClient(create_app(router))

    return _make


@pytest.fixture
def client(make_client, backend) -> TestClient:
    return make_client(backend)

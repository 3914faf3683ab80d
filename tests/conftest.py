"""Shared fixtures: recording logger, stores and a fake backend transport."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_gateway_app
from core.backend_store import FileBackendStore, MemoryBackendStore
from services.gateway import Gateway


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.proxied = []
        self.responses = []
        self.errors = []
        self.config_changes = []

    def log_proxy(self, method, path, target):
        self.proxied.append((method, path, target))

    def log_response(self, method, path, status):
        self.responses.append((method, path, status))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))

    def log_config_change(self, backend_url, persisted):
        self.config_changes.append((backend_url, persisted))


class FakeBackend:
    """httpx.MockTransport handler standing in for the backend origins."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.refused_hosts: set[str] = set()
        self.status = 200
        self.headers = {"content-type": "application/json"}
        self.body = b'{"ok": true}'

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host in self.refused_hosts:
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(self.status, headers=self.headers, stream=httpx.ByteStream(self.body))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def request_logger():
    return RecordingLogger()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def transport(backend):
    return httpx.MockTransport(backend)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "backend-config.json"


@pytest.fixture
def file_store(store_path, monkeypatch):
    monkeypatch.delenv("BACKEND_URL", raising=False)
    return FileBackendStore(store_path)


@pytest.fixture
def memory_store():
    return MemoryBackendStore("http://localhost:8080")


@pytest.fixture
def gateway(file_store, request_logger, transport):
    return Gateway(file_store, request_logger, transport=transport)


@pytest.fixture
def client(gateway):
    return TestClient(create_gateway_app(gateway))

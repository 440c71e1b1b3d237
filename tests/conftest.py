import json

import httpx
import pytest
from fastapi.testclient import TestClient

import api.main as api_main
from api.main import app


class VendorStub:
    """Stands in for the OpenAI API behind an httpx mock transport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: object = {}
        self.text: str | None = None
        self.exception: Exception | None = None

    def reply(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {}
        self.text = text

    def fail(self, exception: Exception):
        self.exception = exception

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exception is not None:
            raise self.exception
        if self.text is not None:
            return httpx.Response(
                self.status_code,
                text=self.text,
                headers={"content-type": "text/html"},
            )
        return httpx.Response(self.status_code, json=self.payload)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def vendor():
    return VendorStub()


@pytest.fixture
def vendor_http_client(vendor, monkeypatch):
    """Route the lifespan's connection pool to the vendor stub."""
    created = []

    def create_http_client():
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(vendor))
        created.append(http_client)
        return http_client

    monkeypatch.setattr(api_main, "create_http_client", create_http_client)
    return created


@pytest.fixture(scope="function")
def client(vendor_http_client, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("APP_ENV", raising=False)
    with TestClient(app) as test_client:
        yield test_client

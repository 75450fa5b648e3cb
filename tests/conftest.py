from __future__ import annotations

from typing import Callable

import httpx
import pytest

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import JobContext
from core.services.group_membership import UnassignUserFromGroupAction

BASE_URL = "https://example.okta.com"
BEARER_TOKEN = "test-okta-token-123456"


class RecordingTransport:
    """Serves canned responses and remembers every request it saw."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client_factory(self, settings: AppSettings) -> httpx.AsyncClient:
        return build_async_client(settings, transport=httpx.MockTransport(self))


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, address=None)


@pytest.fixture
def bearer_context() -> JobContext:
    return JobContext(secrets={"BEARER_AUTH_TOKEN": BEARER_TOKEN})


@pytest.fixture
def no_content_transport() -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(204))


@pytest.fixture
def make_action(settings: AppSettings):
    def _make(transport: RecordingTransport, **overrides) -> UnassignUserFromGroupAction:
        return UnassignUserFromGroupAction(
            settings=overrides.pop("settings", settings),
            client_factory=transport.client_factory,
            **overrides,
        )

    return _make

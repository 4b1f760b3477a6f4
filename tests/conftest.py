from __future__ import annotations

import json

import httpx
import pytest

from client.alerts import AlertQueue, Notifier
from client.api import ApiClient
from client.clock import ManualScheduler

BACKEND = "http://backend.test"


def envelope(status: int = 200, **fields) -> httpx.Response:
    """Backend reply carrying a JSON envelope."""
    return httpx.Response(status, content=json.dumps(fields).encode("utf-8"))


def make_api(handler, **kwargs) -> ApiClient:
    return ApiClient(BACKEND, transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def queue(scheduler) -> AlertQueue:
    return AlertQueue(scheduler)


@pytest.fixture
def notifier(queue) -> Notifier:
    return Notifier(queue)

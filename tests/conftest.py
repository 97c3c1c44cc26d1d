"""Shared fakes for graphrisk_scan tests — no network, no real sleeping."""

from __future__ import annotations

import json
from collections import deque
from typing import Any

import pytest

from graphrisk_scan.client import ScanClient
from graphrisk_scan.errors import ApiError, TransportError
from graphrisk_scan.reporter import Reporter
from graphrisk_scan.transport import TransportResponse

BASE_URL = "https://graphrisk.test/api"
API_KEY = "test-key"


def ok(body: Any, status_code: int = 200) -> TransportResponse:
    """Build a 2xx response the way HttpxTransport would."""
    if isinstance(body, str):
        return TransportResponse(status_code=status_code, body=body, text=body, is_json=False)
    return TransportResponse(
        status_code=status_code, body=body, text=json.dumps(body), is_json=True
    )


def sarif(*runs: list[str]) -> dict[str, Any]:
    """SARIF document with one run per argument, each a list of levels."""
    return {
        "version": "2.1.0",
        "runs": [
            {
                "tool": {"driver": {"name": "graphrisk"}},
                "results": [
                    {"ruleId": f"R{i}", "level": level, "message": {"text": "x"}}
                    for i, level in enumerate(levels)
                ],
            }
            for levels in runs
        ],
    }


class FakeTransport:
    """Scripted Transport.

    ``routes`` maps ``(METHOD, url-suffix)`` to a queue of responses or
    exceptions. The last queued item repeats once the queue drains.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], deque[Any]] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def add(self, method: str, suffix: str, *items: Any) -> None:
        self.routes.setdefault((method, suffix), deque()).extend(items)

    def calls_to(self, suffix: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["url"].endswith(suffix)]

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers})
        for (m, suffix), queue in self.routes.items():
            if m == method and url.endswith(suffix):
                item = queue.popleft() if len(queue) > 1 else queue[0]
                if isinstance(item, BaseException):
                    raise item
                return item
        raise ApiError(404, f"no route for {method} {url}")

    async def __aenter__(self) -> FakeTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.closed = True


class RecordingReporter(Reporter):
    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.failures: list[str] = []
        self.outputs: dict[str, str] = {}
        self.ticks = 0

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def set_failed(self, message: str) -> None:
        self.failed = True
        self.failure_message = message
        self.failures.append(message)

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value

    def progress(self) -> None:
        self.ticks += 1


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def network_down() -> TransportError:
    return TransportError(ConnectionResetError("connection reset by peer"))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def respond():
    """Factory for 2xx TransportResponses."""
    return ok


@pytest.fixture
def make_sarif():
    """Factory for SARIF documents: ``make_sarif(["error"], ["note"])``."""
    return sarif


@pytest.fixture
def network_error():
    """Factory for transport-level failures."""
    return network_down


@pytest.fixture
def scan_client(transport: FakeTransport) -> ScanClient:
    return ScanClient(transport, BASE_URL, API_KEY)

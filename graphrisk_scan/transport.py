"""HTTP transport — one request in, a typed response or a structured error out."""

from __future__ import annotations

import json as jsonlib
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog

from graphrisk_scan import __version__
from graphrisk_scan.errors import ApiError, TransportError

log = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class TransportResponse:
    """A 2xx response.

    ``body`` is the parsed JSON value, or the raw text when the body is not
    JSON (``is_json`` tells the two apart).
    """

    status_code: int
    body: Any
    text: str
    is_json: bool


@runtime_checkable
class Transport(Protocol):
    """Interface the scan client talks to; swap in a fake for tests."""

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse: ...


def parse_body(text: str) -> tuple[Any, bool]:
    """Parse *text* as JSON, falling back to the text itself."""
    try:
        return jsonlib.loads(text), True
    except ValueError:
        return text, False


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``. No retries at this layer."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._default_headers = {"User-Agent": f"graphrisk-scan/{__version__}"}

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        merged = {**self._default_headers, **(headers or {})}
        try:
            resp = await self._client.request(method, url, json=json, headers=merged)
        except httpx.RequestError as exc:
            log.debug("http.transport_error", method=method, url=url, error=repr(exc))
            raise TransportError(exc) from exc

        text = resp.text
        if not 200 <= resp.status_code < 300:
            log.debug("http.api_error", method=method, url=url, status=resp.status_code)
            raise ApiError(resp.status_code, text)

        body, is_json = parse_body(text)
        return TransportResponse(
            status_code=resp.status_code, body=body, text=text, is_json=is_json
        )

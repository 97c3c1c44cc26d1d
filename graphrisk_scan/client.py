"""Typed client for the GraphRisk async scan API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from graphrisk_scan.errors import (
    ReportFetchError,
    RequestError,
    StatusCheckError,
    SubmissionError,
)
from graphrisk_scan.models import JobStatus, ScanJob, ScanRequest, StatusReading
from graphrisk_scan.report import Report
from graphrisk_scan.transport import Transport

log = structlog.get_logger(__name__)


class _ProjectRef(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str | None = None


class _SubmitResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    scan_id: str = Field(alias="scanId", min_length=1)
    project: _ProjectRef | None = None

    @field_validator("project", mode="before")
    @classmethod
    def _drop_malformed_project(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


class ScanClient:
    """submit / check_status / fetch_report over a :class:`Transport`."""

    def __init__(self, transport: Transport, base_url: str, api_key: str) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._headers = {"x-api-key": api_key}

    def _url(self, *parts: str) -> str:
        return "/".join([self._base_url, *parts])

    @staticmethod
    def _scan_path(scan_id: str) -> str:
        return quote(scan_id, safe="")

    async def submit(self, request: ScanRequest) -> ScanJob:
        """Create an async scan job. Raises :class:`SubmissionError`."""
        try:
            resp = await self._transport.request(
                "POST",
                self._url("scan", "async"),
                json=request.to_payload(),
                headers=self._headers,
            )
        except RequestError as exc:
            raise SubmissionError(f"Scan submission failed: {exc}") from exc

        try:
            parsed = _SubmitResponse.model_validate(resp.body)
        except ValidationError as exc:
            raise SubmissionError(
                f"Scan submission response has no scan id: {resp.text[:200]}"
            ) from exc

        project_id = parsed.project.id if parsed.project is not None else None
        job = ScanJob(scan_id=parsed.scan_id, project_id=project_id)
        log.info("scan.submitted", scan_id=job.scan_id, project_id=job.project_id)
        return job

    async def check_status(self, scan_id: str) -> StatusReading:
        """Read the job's current status. Raises :class:`StatusCheckError`.

        A 2xx body that is not an object, or has no ``status``, reads as UNKNOWN.
        """
        try:
            resp = await self._transport.request(
                "GET",
                self._url("scan", self._scan_path(scan_id), "status"),
                headers=self._headers,
            )
        except RequestError as exc:
            raise StatusCheckError(str(exc)) from exc

        if isinstance(resp.body, dict):
            reading = StatusReading.from_wire(resp.body.get("status"))
        else:
            reading = StatusReading(status=JobStatus.UNKNOWN)
        if reading.status is JobStatus.UNKNOWN:
            log.warning(
                "scan.unknown_status",
                scan_id=scan_id,
                raw_status=reading.raw,
                body=resp.text[:200],
            )
        return reading

    async def fetch_report(self, scan_id: str) -> Report:
        """Download the SARIF report. Raises :class:`ReportFetchError`."""
        try:
            resp = await self._transport.request(
                "GET",
                self._url("scan", self._scan_path(scan_id), "sarif"),
                headers=self._headers,
            )
        except RequestError as exc:
            raise ReportFetchError(f"Report download failed: {exc}") from exc

        try:
            return Report.from_document(resp.body)
        except ValidationError as exc:
            raise ReportFetchError(
                f"Report is not a valid SARIF document ({exc.error_count()} problems)"
            ) from exc

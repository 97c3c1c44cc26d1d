"""Exception taxonomy for a scan run.

Only :class:`StatusCheckError` is absorbed (by the poller); every other
error ends the run and becomes its failure reason.
"""

from __future__ import annotations

from typing import Any


class ScanError(Exception):
    """Base exception for all scan client errors."""


class ManifestNotFoundError(ScanError):
    """Raised when no manifest file can be found for the requested ecosystem."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        if len(candidates) == 1:
            message = f"Manifest file {candidates[0]} not found."
        else:
            message = f"No manifest file found (looked for: {', '.join(candidates)})."
        super().__init__(message)


class ManifestReadError(ScanError):
    """The manifest exists but cannot be read as UTF-8 text."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read manifest file {path}: {cause}")


# ── transport ─────────────────────────────────────────────────────────────


class RequestError(ScanError):
    """Base for failures of a single HTTP request."""


class ApiError(RequestError):
    """The service answered with a status outside [200, 300)."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"API Error: {status_code} {body}")


class TransportError(RequestError):
    """The request never produced a response (DNS, connection reset, timeout)."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Transport error: {type(cause).__name__}: {cause}")


# ── scan client ───────────────────────────────────────────────────────────


class SubmissionError(ScanError):
    """The scan job could not be created."""


class StatusCheckError(ScanError):
    """A single status check failed. Transient: the poller logs it and keeps going."""


class ReportFetchError(ScanError):
    """The report could not be downloaded or does not look like a SARIF log."""


class ReportWriteError(ScanError):
    """The fetched report could not be written to disk."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(f"Cannot write SARIF report to {path}: {reason}")


# ── job outcome ───────────────────────────────────────────────────────────


class ScanTimeoutError(ScanError, TimeoutError):
    """Attempt budget exhausted while the job was still pending."""

    def __init__(self, last_status: Any, attempts: int) -> None:
        self.last_status = last_status
        self.attempts = attempts
        super().__init__(
            f"Scan timed out after {attempts} status checks. Status: {last_status!s}"
        )


class JobFailedError(ScanError):
    """The service reported a terminal status other than COMPLETED.

    ``raw_status`` is the string the service sent, when there was one; the
    message shows it in preference to the parsed ``status``.
    """

    def __init__(self, status: Any, raw_status: str | None = None) -> None:
        self.status = status
        self.raw_status = raw_status
        shown = raw_status if raw_status else status
        super().__init__(f"Scan failed. Status: {shown!s}")


class CriticalFindingsError(ScanError):
    """Critical findings present while the fail-on-critical policy is on."""

    def __init__(self, count: int, level: str) -> None:
        self.count = count
        self.level = level
        super().__init__(f"Found {count} critical vulnerabilities (level={level}).")

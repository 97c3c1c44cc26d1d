"""Data models for a single scan run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class ScanRequest:
    """What gets submitted to the service. Built once per run."""

    repository_url: str
    manifest_content: str
    ecosystem: str

    def to_payload(self) -> dict[str, str]:
        return {
            "repositoryUrl": self.repository_url,
            "manifestContent": self.manifest_content,
            "ecosystem": self.ecosystem,
        }


@dataclass(frozen=True)
class ScanJob:
    """Handle on the remote job, as returned by submission."""

    scan_id: str
    project_id: str | None = None


class JobStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PENDING

    @classmethod
    def parse(cls, value: Any) -> JobStatus:
        """Map a wire status to a member; anything unrecognised is UNKNOWN."""
        if not isinstance(value, str):
            return cls.UNKNOWN
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class StatusReading:
    """One successful status check: the parsed status and the wire string behind it."""

    status: JobStatus
    raw: str | None = None

    @classmethod
    def from_wire(cls, value: Any) -> StatusReading:
        raw = value if isinstance(value, str) else None
        return cls(status=JobStatus.parse(value), raw=raw)

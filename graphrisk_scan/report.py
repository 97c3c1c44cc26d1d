"""SARIF report model and severity summarizer."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from graphrisk_scan.errors import ReportWriteError

log = structlog.get_logger(__name__)


class Level(str, Enum):
    """SARIF result levels, highest first."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


DEFAULT_CRITICAL_LEVEL = Level.ERROR


# ── wire schema ───────────────────────────────────────────────────────────


class SarifResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    # SARIF §3.27.10: an absent level means "warning".
    level: str = Level.WARNING.value


class SarifRun(BaseModel):
    model_config = ConfigDict(extra="allow")

    results: list[SarifResult]


class SarifLog(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: str | None = None
    runs: list[SarifRun] = Field(min_length=1)


# ── domain ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Report:
    """A fetched report: the verbatim document plus its validated view.

    ``document`` is what gets written to disk; ``sarif`` is only used for
    counting. Neither is modified after construction.
    """

    document: dict[str, Any]
    sarif: SarifLog

    @classmethod
    def from_document(cls, document: Any) -> Report:
        """Validate *document*; raises ``pydantic.ValidationError`` on a bad shape."""
        return cls(document=document, sarif=SarifLog.model_validate(document))

    def iter_levels(self):
        for run in self.sarif.runs:
            for result in run.results:
                yield result.level

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.document, indent=indent)

    def write(self, path: str | Path) -> Path:
        """Write the report pretty-printed to *path*. Raises :class:`ReportWriteError`."""
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self.to_json() + "\n", encoding="utf-8")
        except OSError as exc:
            raise ReportWriteError(str(target), exc) from exc
        log.info("report.saved", path=str(target))
        return target


@dataclass(frozen=True)
class ReportSummary:
    critical_level: str
    critical_count: int
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def has_critical(self) -> bool:
        return self.critical_count > 0


def count_findings(report: Report, level: str = DEFAULT_CRITICAL_LEVEL.value) -> int:
    """Count results at *level* across every run of *report*."""
    wanted = str(level)
    return sum(1 for found in report.iter_levels() if found == wanted)


def count_by_level(report: Report) -> dict[str, int]:
    return dict(Counter(report.iter_levels()))


def summarize(report: Report, critical_level: str = DEFAULT_CRITICAL_LEVEL.value) -> ReportSummary:
    """Classify *report* by how many findings sit at *critical_level*.

    Never raises on a nonzero count; deciding whether that fails the run
    is the caller's policy.
    """
    counts = count_by_level(report)
    level = str(critical_level)
    return ReportSummary(
        critical_level=level,
        critical_count=counts.get(level, 0),
        counts=counts,
    )

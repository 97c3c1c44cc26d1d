"""ScanOrchestrator — manifest → submit → poll → fetch → persist → summarize."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from graphrisk_scan.client import ScanClient
from graphrisk_scan.core.config import DEFAULT_REPORT_PATH
from graphrisk_scan.errors import (
    CriticalFindingsError,
    JobFailedError,
    ScanError,
    ScanTimeoutError,
)
from graphrisk_scan.manifest import read_manifest
from graphrisk_scan.models import JobStatus, ScanJob, ScanRequest
from graphrisk_scan.poller import JobPoller
from graphrisk_scan.report import DEFAULT_CRITICAL_LEVEL, ReportSummary, summarize
from graphrisk_scan.reporter import Reporter

log = structlog.get_logger(__name__)


@dataclass
class ScanOutcome:
    """What a run produced. ``error`` is set exactly when ``success`` is False."""

    success: bool
    job: ScanJob | None = None
    status: JobStatus | None = None
    attempts: int = 0
    summary: ReportSummary | None = None
    report_path: Path | None = None
    error: ScanError | None = None


class ScanOrchestrator:
    """Run one scan end to end and hand the verdict to a :class:`Reporter`.

    Stages are strictly sequential. Any :class:`ScanError` ends the run;
    the report file is only written after a fully successful fetch.
    """

    def __init__(
        self,
        client: ScanClient,
        poller: JobPoller,
        reporter: Reporter,
        *,
        report_path: str | Path = DEFAULT_REPORT_PATH,
        critical_level: str = DEFAULT_CRITICAL_LEVEL.value,
        fail_on_critical: bool = False,
    ) -> None:
        self._client = client
        self._poller = poller
        self._reporter = reporter
        self._report_path = Path(report_path)
        self._critical_level = critical_level
        self._fail_on_critical = fail_on_critical

    async def run(
        self,
        repository_url: str,
        ecosystem: str,
        *,
        manifest: str | Path | None = None,
        root: str | Path = ".",
    ) -> ScanOutcome:
        outcome = ScanOutcome(success=False)
        try:
            await self._run(outcome, repository_url, ecosystem, manifest, root)
        except ScanError as exc:
            log.error("scan.failed", error=str(exc), error_type=type(exc).__name__)
            outcome.error = exc
            self._reporter.set_failed(str(exc))
            return outcome

        outcome.success = True
        return outcome

    async def _run(
        self,
        outcome: ScanOutcome,
        repository_url: str,
        ecosystem: str,
        manifest: str | Path | None,
        root: str | Path,
    ) -> None:
        reporter = self._reporter
        reporter.info(f"Starting scan for {repository_url} ({ecosystem})...")

        # 1. Manifest; no network calls before this succeeds
        manifest_path, manifest_content = read_manifest(ecosystem, root, manifest)
        log.info("manifest.loaded", path=str(manifest_path), size=len(manifest_content))
        request = ScanRequest(
            repository_url=repository_url,
            manifest_content=manifest_content,
            ecosystem=ecosystem,
        )

        # 2. Submit
        reporter.info("Initiating async scan...")
        job = await self._client.submit(request)
        outcome.job = job
        project = job.project_id if job.project_id is not None else "n/a"
        reporter.info(f"Scan initiated. ID: {job.scan_id}. Project ID: {project}")
        reporter.set_output("scan-id", job.scan_id)

        # 3. Poll
        try:
            polled = await self._poller.wait(job.scan_id)
        except ScanTimeoutError as exc:
            outcome.status, outcome.attempts = exc.last_status, exc.attempts
            raise
        except JobFailedError as exc:
            outcome.status = exc.status
            raise
        finally:
            reporter.end_progress()
        outcome.status = polled.status
        outcome.attempts = polled.attempts
        reporter.info("Scan completed successfully.")

        # 4. Fetch + persist
        reporter.info("Downloading SARIF report...")
        report = await self._client.fetch_report(job.scan_id)
        outcome.report_path = report.write(self._report_path)
        reporter.info(f"SARIF report saved to {outcome.report_path}")

        # 5. Summarize + policy
        summary = summarize(report, self._critical_level)
        outcome.summary = summary
        log.info(
            "scan.summary",
            scan_id=job.scan_id,
            critical_level=summary.critical_level,
            critical_count=summary.critical_count,
            counts=summary.counts,
        )
        if not summary.has_critical:
            reporter.info("No critical vulnerabilities found.")
            return

        reporter.warning(f"Found {summary.critical_count} critical vulnerabilities.")
        if self._fail_on_critical:
            raise CriticalFindingsError(summary.critical_count, summary.critical_level)

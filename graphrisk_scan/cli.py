"""CLI entry point: graphrisk-scan.

Typical CI usage:
    graphrisk-scan --api-key "$GRAPHRISK_API_KEY" --ecosystem npm

Exit status is 0 when the scan completed and passed policy, 1 otherwise.
"""

from __future__ import annotations

import asyncio
import dataclasses
import sys

import click
import structlog

from graphrisk_scan import __version__
from graphrisk_scan.client import ScanClient
from graphrisk_scan.core.config import Settings
from graphrisk_scan.core.github import normalize_repo_url, repository_url_from_env
from graphrisk_scan.core.logging import setup_logging
from graphrisk_scan.orchestrator import ScanOrchestrator, ScanOutcome
from graphrisk_scan.poller import JobPoller, RetryPolicy
from graphrisk_scan.report import Level
from graphrisk_scan.reporter import Reporter, get_reporter
from graphrisk_scan.transport import HttpxTransport

log = structlog.get_logger(__name__)


def _build_transport(settings: Settings) -> HttpxTransport:
    return HttpxTransport(timeout=settings.request_timeout)


def _merge_settings(settings: Settings, **overrides: object) -> Settings:
    """Apply CLI values that were actually given on top of *settings*."""
    given = {k: v for k, v in overrides.items() if v is not None}
    return dataclasses.replace(settings, **given)


async def _run_scan(
    settings: Settings,
    policy: RetryPolicy,
    reporter: Reporter,
    *,
    api_key: str,
    repository_url: str,
    ecosystem: str,
    manifest: str | None,
) -> ScanOutcome:
    async with _build_transport(settings) as transport:
        client = ScanClient(transport, settings.api_url, api_key)
        poller = JobPoller(client, policy, on_attempt=lambda _n, _s: reporter.progress())
        orchestrator = ScanOrchestrator(
            client,
            poller,
            reporter,
            report_path=settings.report_path,
            critical_level=settings.critical_level,
            fail_on_critical=settings.fail_on_critical,
        )
        return await orchestrator.run(repository_url, ecosystem, manifest=manifest)


@click.command()
@click.option(
    "--api-key",
    envvar=["GRAPHRISK_API_KEY", "INPUT_API-KEY"],
    required=True,
    help="GraphRisk API key (env: GRAPHRISK_API_KEY)",
)
@click.option(
    "--ecosystem",
    envvar=["GRAPHRISK_ECOSYSTEM", "INPUT_ECOSYSTEM"],
    default="npm",
    show_default=True,
    help="Package ecosystem of the manifest",
)
@click.option(
    "--repository-url",
    default=None,
    help="Repository URL (default: derived from GITHUB_SERVER_URL/GITHUB_REPOSITORY)",
)
@click.option("--manifest", default=None, help="Manifest file (default: discovered per ecosystem)")
@click.option("--api-url", default=None, help="Service base URL (env: GRAPHRISK_API_URL)")
@click.option("-o", "--output", default=None, help="SARIF output path (default: graphrisk.sarif)")
@click.option("--poll-interval", type=float, default=None, help="Seconds between status checks")
@click.option("--max-attempts", type=int, default=None, help="Status checks before timing out")
@click.option("--poll-jitter", type=float, default=None, help="Extra random seconds per wait")
@click.option("--request-timeout", type=float, default=None, help="Per-request timeout (s)")
@click.option(
    "--critical-level",
    type=click.Choice([lvl.value for lvl in Level]),
    default=None,
    help="SARIF level counted as critical (default: error)",
)
@click.option(
    "--fail-on-critical/--no-fail-on-critical",
    default=None,
    help="Fail the run when critical findings are present",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.version_option(__version__, prog_name="graphrisk-scan")
def main(
    api_key: str,
    ecosystem: str,
    repository_url: str | None,
    manifest: str | None,
    api_url: str | None,
    output: str | None,
    poll_interval: float | None,
    max_attempts: int | None,
    poll_jitter: float | None,
    request_timeout: float | None,
    critical_level: str | None,
    fail_on_critical: bool | None,
    verbose: bool,
) -> None:
    """Submit a dependency manifest to GraphRisk and wait for the SARIF report."""
    try:
        settings = _merge_settings(
            Settings.from_env(),
            api_url=api_url,
            report_path=output,
            poll_interval=poll_interval,
            max_attempts=max_attempts,
            poll_jitter=poll_jitter,
            request_timeout=request_timeout,
            critical_level=critical_level,
            fail_on_critical=fail_on_critical,
        )
        policy = RetryPolicy(
            interval=settings.poll_interval,
            max_attempts=settings.max_attempts,
            jitter=settings.poll_jitter,
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(settings.log_level, settings.log_format, verbose=verbose)

    resolved_url = repository_url or repository_url_from_env()
    if not resolved_url:
        raise click.UsageError(
            "Cannot determine repository URL; pass --repository-url or set GITHUB_REPOSITORY."
        )
    try:
        resolved_url = normalize_repo_url(resolved_url)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--repository-url") from e

    reporter = get_reporter()
    log.debug("cli.settings", api_url=settings.api_url, ecosystem=ecosystem)

    outcome = asyncio.run(
        _run_scan(
            settings,
            policy,
            reporter,
            api_key=api_key,
            repository_url=resolved_url,
            ecosystem=ecosystem,
            manifest=manifest,
        )
    )

    if not outcome.success:
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Runtime settings, read from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from graphrisk_scan.report import DEFAULT_CRITICAL_LEVEL, Level

DEFAULT_API_URL = "https://graphrisk.io/api"
DEFAULT_REPORT_PATH = "graphrisk.sarif"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_FORMATS = ["console", "json"]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean, got {raw!r}")


def _env_choice(env: Mapping[str, str], key: str, default: str, choices: list[str]) -> str:
    raw = env.get(key)
    if not raw:
        return default
    for choice in choices:
        if raw.strip().lower() == choice.lower():
            return choice
    raise ValueError(f"{key} must be one of {', '.join(choices)}, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    poll_interval: float = 10.0
    max_attempts: int = 60
    poll_jitter: float = 0.0
    request_timeout: float = 30.0
    report_path: str = DEFAULT_REPORT_PATH
    fail_on_critical: bool = False
    critical_level: str = DEFAULT_CRITICAL_LEVEL.value
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *env* (defaults to ``os.environ``).

        Variables:
            GRAPHRISK_API_URL          — service base URL
            GRAPHRISK_POLL_INTERVAL    — seconds between status checks (10)
            GRAPHRISK_MAX_ATTEMPTS     — status checks before timing out (60)
            GRAPHRISK_POLL_JITTER      — extra random seconds per wait (0)
            GRAPHRISK_REQUEST_TIMEOUT  — per-request timeout in seconds (30)
            GRAPHRISK_REPORT_PATH      — where the SARIF report is written
            GRAPHRISK_FAIL_ON_CRITICAL — fail the run on critical findings (false)
            GRAPHRISK_CRITICAL_LEVEL   — SARIF level counted as critical (error)
            GRAPHRISK_LOG_LEVEL        — DEBUG | INFO | WARNING | ERROR | CRITICAL (INFO)
            GRAPHRISK_LOG_FORMAT       — console | json (console)
        """
        env = os.environ if env is None else env
        return cls(
            api_url=env.get("GRAPHRISK_API_URL") or DEFAULT_API_URL,
            poll_interval=_env_float(env, "GRAPHRISK_POLL_INTERVAL", 10.0),
            max_attempts=_env_int(env, "GRAPHRISK_MAX_ATTEMPTS", 60),
            poll_jitter=_env_float(env, "GRAPHRISK_POLL_JITTER", 0.0),
            request_timeout=_env_float(env, "GRAPHRISK_REQUEST_TIMEOUT", 30.0),
            report_path=env.get("GRAPHRISK_REPORT_PATH") or DEFAULT_REPORT_PATH,
            fail_on_critical=_env_bool(env, "GRAPHRISK_FAIL_ON_CRITICAL", False),
            critical_level=_env_choice(
                env,
                "GRAPHRISK_CRITICAL_LEVEL",
                DEFAULT_CRITICAL_LEVEL.value,
                [lvl.value for lvl in Level],
            ),
            log_level=_env_choice(env, "GRAPHRISK_LOG_LEVEL", "INFO", LOG_LEVELS),
            log_format=_env_choice(env, "GRAPHRISK_LOG_FORMAT", "console", LOG_FORMATS),
        )

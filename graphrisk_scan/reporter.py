"""Reporter — how a run's messages and verdict reach the host environment."""

from __future__ import annotations

import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

import click


class Reporter(ABC):
    """Host output abstraction. The orchestrator only talks to this."""

    failed: bool = False
    failure_message: str | None = None

    @abstractmethod
    def info(self, message: str) -> None: ...

    @abstractmethod
    def warning(self, message: str) -> None: ...

    @abstractmethod
    def set_failed(self, message: str) -> None:
        """Record the run as failed with a human-readable reason."""
        ...

    @abstractmethod
    def set_output(self, name: str, value: str) -> None:
        """Publish a named value for later pipeline steps."""
        ...

    def progress(self) -> None:
        """Tick once per status check. Optional."""

    def end_progress(self) -> None:
        """Close a line of progress ticks. Optional."""


class ConsoleReporter(Reporter):
    """Plain terminal output."""

    _ticking = False

    def info(self, message: str) -> None:
        self.end_progress()
        click.echo(message)

    def warning(self, message: str) -> None:
        self.end_progress()
        click.echo(f"Warning: {message}", err=True)

    def set_failed(self, message: str) -> None:
        self.end_progress()
        self.failed = True
        self.failure_message = message
        click.echo(f"Error: {message}", err=True)

    def set_output(self, name: str, value: str) -> None:
        click.echo(f"{name}: {value}")

    def progress(self) -> None:
        self._ticking = True
        click.echo(".", nl=False)

    def end_progress(self) -> None:
        if self._ticking:
            self._ticking = False
            click.echo("")


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GitHubActionsReporter(ConsoleReporter):
    """Emit workflow commands (``::warning::``, ``::error::``) and step outputs."""

    def __init__(self, output_file: str | Path | None = None) -> None:
        resolved = output_file or os.environ.get("GITHUB_OUTPUT")
        self._output_file = Path(resolved) if resolved else None

    def warning(self, message: str) -> None:
        self.end_progress()
        click.echo(f"::warning::{_escape_data(message)}")

    def set_failed(self, message: str) -> None:
        self.end_progress()
        self.failed = True
        self.failure_message = message
        click.echo(f"::error::{_escape_data(message)}")

    def set_output(self, name: str, value: str) -> None:
        if self._output_file is None:
            super().set_output(name, value)
            return
        with self._output_file.open("a", encoding="utf-8") as fh:
            if "\n" in value:
                delimiter = f"ghadelimiter_{uuid.uuid4()}"
                fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
            else:
                fh.write(f"{name}={value}\n")


def get_reporter() -> Reporter:
    """Pick the reporter for the current host."""
    if os.environ.get("GITHUB_ACTIONS") == "true":
        return GitHubActionsReporter()
    return ConsoleReporter()

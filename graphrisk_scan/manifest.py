"""Manifest discovery — map an ecosystem to the file that declares its dependencies."""

from __future__ import annotations

from pathlib import Path

import structlog

from graphrisk_scan.errors import ManifestNotFoundError, ManifestReadError

log = structlog.get_logger(__name__)

DEFAULT_MANIFEST = "package.json"

# Candidates are tried in order; the first existing file wins.
MANIFEST_REGISTRY: dict[str, list[str]] = {
    "npm": ["package.json"],
    "yarn": ["package.json"],
    "pnpm": ["package.json"],
    "pypi": ["requirements.txt", "pyproject.toml", "Pipfile", "setup.py"],
    "maven": ["pom.xml"],
    "gradle": ["build.gradle.kts", "build.gradle"],
    "go": ["go.mod"],
    "cargo": ["Cargo.toml"],
    "rubygems": ["Gemfile"],
    "composer": ["composer.json"],
    "nuget": ["packages.config"],
}

_ALIASES = {
    "node": "npm",
    "javascript": "npm",
    "python": "pypi",
    "pip": "pypi",
    "java": "maven",
    "golang": "go",
    "rust": "cargo",
    "crates.io": "cargo",
    "ruby": "rubygems",
    "php": "composer",
    "packagist": "composer",
    "dotnet": "nuget",
}


def register_manifest(ecosystem: str, filenames: list[str]) -> None:
    """Register (or replace) the candidate manifest files for *ecosystem*."""
    MANIFEST_REGISTRY[ecosystem.lower()] = list(filenames)


def candidates_for(ecosystem: str) -> list[str]:
    key = ecosystem.strip().lower()
    key = _ALIASES.get(key, key)
    if key not in MANIFEST_REGISTRY:
        log.warning("manifest.unknown_ecosystem", ecosystem=ecosystem, fallback=DEFAULT_MANIFEST)
        return [DEFAULT_MANIFEST]
    return MANIFEST_REGISTRY[key]


def locate_manifest(
    ecosystem: str,
    root: str | Path = ".",
    explicit: str | Path | None = None,
) -> Path:
    """Return the manifest path to submit.

    An *explicit* path is used as-is (relative to *root*). Otherwise the
    ecosystem's candidates are tried under *root*.
    """
    base = Path(root)
    if explicit is not None:
        path = base / explicit
        if not path.is_file():
            raise ManifestNotFoundError([str(explicit)])
        return path

    names = candidates_for(ecosystem)
    for name in names:
        path = base / name
        if path.is_file():
            log.debug("manifest.found", ecosystem=ecosystem, path=str(path))
            return path
    raise ManifestNotFoundError(names)


def read_manifest(
    ecosystem: str,
    root: str | Path = ".",
    explicit: str | Path | None = None,
) -> tuple[Path, str]:
    path = locate_manifest(ecosystem, root, explicit)
    try:
        return path, path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(str(path), exc) from exc

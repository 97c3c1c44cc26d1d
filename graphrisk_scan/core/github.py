"""GitHub Actions context utilities."""

from __future__ import annotations

import os
from collections.abc import Mapping

DEFAULT_SERVER_URL = "https://github.com"


def repository_url_from_env(env: Mapping[str, str] | None = None) -> str | None:
    """Build the repository URL from the Actions environment.

    Uses ``GITHUB_SERVER_URL`` (default https://github.com) and
    ``GITHUB_REPOSITORY`` ("owner/repo"). Returns None outside Actions.
    """
    env = os.environ if env is None else env
    repository = (env.get("GITHUB_REPOSITORY") or "").strip().strip("/")
    if not repository or "/" not in repository:
        return None
    server = (env.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL).rstrip("/")
    return f"{server}/{repository}"


def normalize_repo_url(repo_url: str) -> str:
    """Normalise a repository URL to ``https://host/owner/repo`` form.

    Handles:
      - https://github.com/owner/repo
      - https://github.com/owner/repo.git
      - git@github.com:owner/repo.git
    """
    url = repo_url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[:-4]

    if url.startswith("git@"):
        host, sep, path = url[len("git@") :].partition(":")
        if not sep or not path:
            raise ValueError(f"cannot parse repository URL: {repo_url!r}")
        return f"https://{host}/{path}"

    if not url.startswith(("https://", "http://")):
        raise ValueError(f"cannot parse repository URL: {repo_url!r}")
    return url

"""Mutable run state: the fallback repository and the remote registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import InvalidSpecError, NoRemoteConfiguredError, RepoDetectionError
from .git import GitClient
from .models import RemoteIdentity
from .remotes import normalize_remote

logger = logging.getLogger(__name__)


@dataclass
class FallbackContext:
    """The repository that unqualified ``@branch`` lines resolve against."""

    remote: RemoteIdentity | None = None
    local_path: Path | None = None

    def current(self) -> tuple[RemoteIdentity | None, Path | None]:
        return self.remote, self.local_path

    def advance(self, remote: RemoteIdentity, local_path: Path | None) -> None:
        logger.debug("fallback: %s at %s", remote, local_path)
        self.remote = remote
        self.local_path = local_path


@dataclass
class RemoteRegistry:
    """Append-only mapping of remotes to the local path they live at."""

    _paths: dict[RemoteIdentity, Path] = field(default_factory=dict)

    def get(self, remote: RemoteIdentity) -> Path | None:
        return self._paths.get(remote)

    def __contains__(self, remote: object) -> bool:
        return remote in self._paths

    def register(self, remote: RemoteIdentity, path: Path) -> Path:
        """Record ``path`` unless the remote is already known; return the kept path."""

        existing = self._paths.get(remote)
        if existing is not None:
            return existing
        logger.debug("registry: %s -> %s", remote, path)
        self._paths[remote] = path
        return path


def resolve_own_remote(git: GitClient, repo_path: Path) -> RemoteIdentity:
    url = git.remote_url(repo_path)
    if not url:
        raise NoRemoteConfiguredError(
            f"No git remote configured for {repo_path}. Add one with `git remote add origin <url>`."
        )
    try:
        return normalize_remote(url)
    except InvalidSpecError as exc:
        raise RepoDetectionError(f"Unable to parse remote URL of {repo_path}: {url}") from exc


def initialize_fallback(git: GitClient, repo_path: Path) -> FallbackContext:
    """Seed the fallback with the enclosing repository's own remote and path."""

    return FallbackContext(remote=resolve_own_remote(git, repo_path), local_path=repo_path)


__all__ = ["FallbackContext", "RemoteRegistry", "initialize_fallback", "resolve_own_remote"]

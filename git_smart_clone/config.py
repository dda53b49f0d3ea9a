"""Load environment variables and git metadata for runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ConfigError, MissingInputError, RepoDetectionError
from .git import GitClient

DEFAULT_TIMEOUT = 600.0
REPO_LIST_NAMES = ("repos.list", "repos-to-clone.list")

TIMEOUT_ENV = "GIT_SMART_CLONE_TIMEOUT"
DEBUG_ENV = "GIT_SMART_CLONE_DEBUG"
ROOT_ENV = "GIT_SMART_CLONE_ROOT"


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration."""

    repo_path: Path
    repo_list: Path
    clone_root: Path
    timeout: float | None
    verbose: bool = False


def load_settings(
    *,
    repo_override: Path | None = None,
    list_override: Path | None = None,
    root_override: Path | None = None,
    timeout_override: float | None = None,
    verbose: bool = False,
) -> Settings:
    timeout = resolve_timeout(timeout_override)
    git = GitClient(timeout=timeout)
    repo_path = resolve_repo_path(git, repo_override)
    return Settings(
        repo_path=repo_path,
        repo_list=resolve_repo_list(repo_path, list_override),
        clone_root=resolve_clone_root(repo_path, root_override),
        timeout=timeout,
        verbose=verbose or debug_enabled(),
    )


def resolve_repo_path(git: GitClient, repo_override: Path | None) -> Path:
    if repo_override:
        candidate = repo_override.expanduser()
        if not candidate.exists():
            raise RepoDetectionError(f"Repository override path does not exist: {candidate}")
        cwd = candidate
    else:
        cwd = Path.cwd()
    return git.toplevel(cwd)


def resolve_repo_list(repo_path: Path, list_override: Path | None) -> Path:
    """Explicit path, else ``repos.list`` unless only ``repos-to-clone.list`` exists."""

    if list_override:
        candidate = list_override.expanduser()
    else:
        primary, legacy = (repo_path / name for name in REPO_LIST_NAMES)
        candidate = legacy if not primary.is_file() and legacy.is_file() else primary
    if not candidate.is_file():
        raise MissingInputError(f"Repo list not found: {candidate}")
    return candidate


def resolve_clone_root(repo_path: Path, root_override: Path | None) -> Path:
    if root_override:
        return root_override.expanduser().resolve()
    raw = os.environ.get(ROOT_ENV)
    if raw:
        return Path(raw).expanduser().resolve()
    return repo_path.parent


def resolve_timeout(timeout_override: float | None) -> float | None:
    """Seconds allowed per git operation; zero or negative disables the limit."""

    if timeout_override is not None:
        value = timeout_override
    else:
        raw = os.environ.get(TIMEOUT_ENV)
        if not raw:
            return DEFAULT_TIMEOUT
        try:
            value = float(raw)
        except ValueError as exc:
            raise ConfigError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}") from exc
    return value if value > 0 else None


def debug_enabled() -> bool:
    return os.environ.get(DEBUG_ENV, "").strip().lower() in {"1", "true", "yes", "on"}

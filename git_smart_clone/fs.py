"""Filesystem helpers for git-smart-clone."""

from __future__ import annotations

import re
from pathlib import Path


_SAFE_PATTERN = re.compile(r"[^A-Za-z0-9._-]")


def slugify_branch(name: str) -> str:
    """Produce a directory-name-safe representation of a branch name."""

    slug = name.strip()
    if not slug:
        return "unnamed"
    slug = slug.replace("/", "-").replace(" ", "-")
    return _SAFE_PATTERN.sub("-", slug)


def suffixed_name(base: str, branch: str) -> str:
    return f"{base}-{slugify_branch(branch)}"


def resolve_target(root: Path, target_dir: str) -> Path:
    candidate = Path(target_dir).expanduser()
    if candidate.is_absolute():
        return candidate
    return root / candidate


def is_occupied(path: Path) -> bool:
    """True for a non-empty directory or any non-directory entry at ``path``."""

    if not path.is_dir():
        return path.exists()
    return any(path.iterdir())


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)

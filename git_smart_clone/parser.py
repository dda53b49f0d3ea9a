"""Line normalization and repo-spec resolution for repo-list files."""

from __future__ import annotations

import re
from pathlib import Path

from .exceptions import (
    InvalidSpecError,
    MissingFallbackError,
    MissingInputError,
    MultipleTargetDirsError,
)
from .models import LineKind, ParsedLine, RemoteIdentity, RepoLine
from .remotes import normalize_remote, split_ref

_INLINE_COMMENT_RE = re.compile(r"\s+#.*$")

ALL_BRANCHES_FLAGS = {"-a", "--all-branches"}
NO_WORKTREE_FLAGS = {"-n", "--no-worktree"}


def normalize_line(raw: str) -> str | None:
    """Return the instruction part of ``raw`` or None for blank/comment lines."""

    text = raw.rstrip("\r\n").strip()
    if not text or text.startswith("#"):
        return None
    text = _INLINE_COMMENT_RE.sub("", text).strip()
    return text or None


def parse_line(text: str, fallback: RemoteIdentity | None) -> ParsedLine:
    """Resolve a normalized line into a RepoLine.

    ``fallback`` is the remote that ``@branch`` lines resolve against.
    Unknown or inapplicable flags are returned as warnings rather than raised.
    """

    head, *tail = text.split()
    target_dir: str | None = None
    all_branches = False
    no_worktree = False
    warnings: list[str] = []
    for token in tail:
        if token.startswith("-"):
            if token in ALL_BRANCHES_FLAGS:
                all_branches = True
            elif token in NO_WORKTREE_FLAGS:
                no_worktree = True
            else:
                warnings.append(f"Unknown option {token!r} ignored")
            continue
        if target_dir is not None:
            raise MultipleTargetDirsError(
                f"Multiple target directories given ({target_dir!r}, {token!r})"
            )
        target_dir = token

    if head.startswith("@"):
        branch = head[1:]
        if not branch:
            raise InvalidSpecError("Missing branch name after '@'")
        if fallback is None:
            raise MissingFallbackError(
                f"No repository to resolve '@{branch}' against"
            )
        if all_branches:
            warnings.append("--all-branches does not apply to @branch lines; ignored")
        line = RepoLine(
            raw_text=text,
            kind=LineKind.WORKTREE,
            remote=fallback,
            branch=branch,
            target_dir=target_dir,
            no_worktree=no_worktree,
        )
        return ParsedLine(line=line, warnings=tuple(warnings))

    if no_worktree:
        warnings.append("--no-worktree only applies to @branch lines; ignored")
    repo, ref = split_ref(head)
    if ref is not None and not ref:
        raise InvalidSpecError(f"Missing branch name after '@' in {head!r}")
    remote = normalize_remote(repo)
    line = RepoLine(
        raw_text=text,
        kind=LineKind.FULL_CLONE if ref is None else LineKind.BRANCH_CLONE,
        remote=remote,
        branch=ref,
        target_dir=target_dir,
        all_branches=all_branches,
    )
    return ParsedLine(line=line, warnings=tuple(warnings))


def read_lines(path: Path) -> list[str]:
    """Return the normalized instruction lines of a repo-list file."""

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MissingInputError(f"Unable to read repo list {path}: {exc}") from exc
    lines = (normalize_line(raw) for raw in content.splitlines())
    return [text for text in lines if text is not None]


__all__ = ["normalize_line", "parse_line", "read_lines"]

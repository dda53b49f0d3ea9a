"""Dataclasses shared across modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class RemoteIdentity:
    """Canonical form of a git remote: ``https://<host>/<path>``."""

    host: str
    path: str

    @property
    def url(self) -> str:
        return f"https://{self.host}/{self.path}"

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def __str__(self) -> str:
        return self.url


class LineKind(str, Enum):
    FULL_CLONE = "full-clone"
    BRANCH_CLONE = "branch-clone"
    WORKTREE = "worktree"


@dataclass(frozen=True)
class RepoLine:
    """One resolved line of a repo-list file."""

    raw_text: str
    kind: LineKind
    remote: RemoteIdentity
    branch: str | None = None
    target_dir: str | None = None
    all_branches: bool = False
    no_worktree: bool = False

    @property
    def is_worktree(self) -> bool:
        return self.kind is LineKind.WORKTREE and not self.no_worktree


@dataclass(frozen=True)
class ParsedLine:
    line: RepoLine
    warnings: tuple[str, ...] = ()


class Outcome(str, Enum):
    SUCCESS = "success"
    BENIGN_SKIP = "skipped"
    ERROR = "error"


class Action(str, Enum):
    FULL_CLONE = "full-clone"
    SINGLE_BRANCH_CLONE = "single-branch-clone"
    WORKTREE = "worktree"


@dataclass(frozen=True)
class LineResult:
    """Outcome of dispatching a single line."""

    outcome: Outcome
    message: str
    action: Action | None = None
    path: Path | None = None
    returncode: int = 0
    fallback_update: tuple[RemoteIdentity, Path] | None = None

    @classmethod
    def success(
        cls,
        message: str,
        *,
        action: Action | None,
        path: Path,
        remote: RemoteIdentity,
        fallback_path: Path | None = None,
    ) -> "LineResult":
        return cls(
            outcome=Outcome.SUCCESS,
            message=message,
            action=action,
            path=path,
            fallback_update=(remote, fallback_path or path),
        )

    @classmethod
    def skip(
        cls,
        message: str,
        *,
        path: Path | None = None,
        fallback_update: tuple[RemoteIdentity, Path] | None = None,
    ) -> "LineResult":
        return cls(
            outcome=Outcome.BENIGN_SKIP,
            message=message,
            path=path,
            fallback_update=fallback_update,
        )

    @classmethod
    def error(cls, message: str, returncode: int = 1) -> "LineResult":
        return cls(outcome=Outcome.ERROR, message=message, returncode=returncode)


@dataclass(frozen=True)
class PlanEntry:
    """Advisory facts gathered about one remote before anything is cloned."""

    has_full_clone_line: bool = False
    preferred_base_name: str | None = None
    has_worktree_lines: bool = False
    all_branches: bool = False


@dataclass(frozen=True)
class WorktreeEntry:
    """Represents a single worktree tracked by git."""

    path: Path
    branch: str | None
    head: str | None = None


@dataclass
class RunCounters:
    processed: int = 0
    skipped: int = 0
    cloned_full: int = 0
    cloned_single_branch: int = 0
    worktrees_added: int = 0
    errors: int = 0
    failed_lines: list[str] = field(default_factory=list)

    def record(self, result: LineResult, raw_text: str) -> None:
        self.processed += 1
        if result.outcome is Outcome.ERROR:
            self.errors += 1
            self.failed_lines.append(raw_text)
        elif result.outcome is Outcome.BENIGN_SKIP or result.action is None:
            self.skipped += 1
        elif result.action is Action.FULL_CLONE:
            self.cloned_full += 1
        elif result.action is Action.SINGLE_BRANCH_CLONE:
            self.cloned_single_branch += 1
        elif result.action is Action.WORKTREE:
            self.worktrees_added += 1

    def as_rows(self) -> list[tuple[str, int]]:
        return [
            ("Processed", self.processed),
            ("Skipped", self.skipped),
            ("Cloned (full)", self.cloned_full),
            ("Cloned (single branch)", self.cloned_single_branch),
            ("Worktrees added", self.worktrees_added),
            ("Errors", self.errors),
        ]

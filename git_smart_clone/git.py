"""Thin wrappers around git CLI commands."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .exceptions import GitCommandError, MissingToolError, RepoDetectionError
from .models import WorktreeEntry

logger = logging.getLogger(__name__)

TIMEOUT_RETURNCODE = 124


def require_binary(name: str) -> None:
    if shutil.which(name) is None:
        raise MissingToolError(f"Required binary not found in PATH: {name}")


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command and optionally raise on failure.

    Credential prompts are disabled so a private or missing remote fails
    instead of waiting on the terminal.
    """

    command = ["git", *args]
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
    logger.debug("$ %s (cwd=%s)", " ".join(command), cwd or ".")
    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            env=env,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitCommandError(
            command,
            TIMEOUT_RETURNCODE,
            stderr=_decode(exc.stderr),
            timed_out=True,
        ) from exc
    if check and result.returncode != 0:
        raise GitCommandError(command, result.returncode, stdout=result.stdout, stderr=result.stderr)
    return result


def parse_worktree_porcelain(output: str) -> list[WorktreeEntry]:
    items: list[WorktreeEntry] = []
    current: dict | None = None
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        key, _, value = line.partition(" ")
        if key == "worktree":
            if current:
                items.append(WorktreeEntry(**current))
            current = {"path": Path(value.strip()), "branch": None}
        elif not current:
            continue
        elif key == "branch":
            branch = value.strip()
            if branch.startswith("refs/heads/"):
                branch = branch[len("refs/heads/"):]
            current["branch"] = branch
        elif key == "HEAD":
            current["head"] = value.strip()
    if current:
        items.append(WorktreeEntry(**current))
    return items


@dataclass
class GitClient:
    """Git operations keyed by a working-directory path."""

    timeout: float | None = None

    def _run(self, args: Sequence[str], *, cwd: Path | None = None, check: bool = True):
        return run_git(args, cwd=cwd, timeout=self.timeout, check=check)

    def toplevel(self, path: Path) -> Path:
        try:
            proc = self._run(["rev-parse", "--show-toplevel"], cwd=path)
        except GitCommandError as exc:
            raise RepoDetectionError(f"Not inside a git repository: {path}") from exc
        return Path(proc.stdout.strip())

    def is_work_tree(self, path: Path) -> bool:
        """True when ``path`` is itself the top level of a working copy."""

        if not (path / ".git").exists():
            return False
        proc = self._run(["rev-parse", "--show-toplevel"], cwd=path, check=False)
        if proc.returncode != 0:
            return False
        return Path(proc.stdout.strip()).resolve() == path.resolve()

    def primary_remote(self, path: Path) -> str | None:
        proc = self._run(["remote"], cwd=path)
        remotes = [name.strip() for name in proc.stdout.splitlines() if name.strip()]
        if not remotes:
            return None
        return "origin" if "origin" in remotes else remotes[0]

    def remote_url(self, path: Path) -> str | None:
        remote = self.primary_remote(path)
        if remote is None:
            return None
        return self._run(["remote", "get-url", remote], cwd=path).stdout.strip()

    def remote_branch_exists(self, remote: str, branch: str, *, cwd: Path | None = None) -> bool:
        """Query ``remote`` (a name or URL) for ``refs/heads/<branch>``."""

        args = ["ls-remote", "--exit-code", "--heads", remote, f"refs/heads/{branch}"]
        proc = self._run(args, cwd=cwd, check=False)
        if proc.returncode == 0:
            return True
        if proc.returncode == 2:
            return False
        raise GitCommandError(
            ["git", *args],
            proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )

    def clone(
        self,
        url: str,
        target: Path,
        *,
        branch: str | None = None,
        single_branch: bool = True,
    ) -> None:
        args = ["clone"]
        if single_branch:
            args.append("--single-branch")
        if branch:
            args.extend(["--branch", branch])
        args.extend([url, str(target)])
        self._run(args, cwd=target.parent)

    def checkout_new_branch(self, path: Path, branch: str) -> None:
        self._run(["checkout", "-b", branch], cwd=path)

    def push_upstream(self, path: Path, remote: str, branch: str) -> None:
        self._run(["push", "--set-upstream", remote, branch], cwd=path)

    def set_upstream(self, path: Path, branch: str, upstream: str) -> None:
        self._run(["branch", "--set-upstream-to", upstream, branch], cwd=path)

    def fetch(self, path: Path, remote: str, refspec: str | None = None) -> None:
        args = ["fetch", remote]
        if refspec:
            args.append(refspec)
        self._run(args, cwd=path)

    def fetch_branch(self, path: Path, remote: str, branch: str) -> None:
        """Fetch one branch into its remote-tracking ref, even in single-branch clones."""

        self.fetch(path, remote, f"+refs/heads/{branch}:refs/remotes/{remote}/{branch}")

    def ref_exists(self, path: Path, ref: str) -> bool:
        proc = self._run(["rev-parse", "--verify", "--quiet", ref], cwd=path, check=False)
        return proc.returncode == 0

    def local_branch_exists(self, path: Path, branch: str) -> bool:
        return self.ref_exists(path, f"refs/heads/{branch}")

    def current_branch(self, path: Path) -> str | None:
        proc = self._run(["symbolic-ref", "-q", "--short", "HEAD"], cwd=path, check=False)
        if proc.returncode == 0:
            return proc.stdout.strip() or None
        return None

    def default_branch(self, path: Path, remote: str) -> str | None:
        proc = self._run(
            ["symbolic-ref", f"refs/remotes/{remote}/HEAD"],
            cwd=path,
            check=False,
        )
        if proc.returncode == 0:
            ref = proc.stdout.strip()
            prefix = f"refs/remotes/{remote}/"
            return ref[len(prefix):] if ref.startswith(prefix) else ref
        # fallback heuristics
        for candidate in ("main", "master"):
            if self.ref_exists(path, f"refs/remotes/{remote}/{candidate}"):
                return candidate
        return None

    def worktree_list(self, path: Path) -> list[WorktreeEntry]:
        proc = self._run(["worktree", "list", "--porcelain"], cwd=path)
        return parse_worktree_porcelain(proc.stdout)

    def worktree_add_existing(self, path: Path, target: Path, branch: str) -> None:
        self._run(["worktree", "add", str(target), branch], cwd=path)

    def worktree_add_tracking(self, path: Path, target: Path, branch: str, remote_ref: str) -> None:
        self._run(["worktree", "add", "--track", "-b", branch, str(target), remote_ref], cwd=path)

    def worktree_add_new(self, path: Path, target: Path, branch: str, start_point: str) -> None:
        self._run(["worktree", "add", "--no-track", "-b", branch, str(target), start_point], cwd=path)


def _decode(value: bytes | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return value


__all__ = ["GitClient", "run_git", "parse_worktree_porcelain", "require_binary"]

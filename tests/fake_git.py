"""In-memory stand-in for GitClient used by the dispatcher and runner tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from git_smart_clone.exceptions import GitCommandError
from git_smart_clone.models import WorktreeEntry
from git_smart_clone.remotes import normalize_remote


@dataclass
class FakeRemote:
    branches: set[str]
    default: str = "main"


@dataclass
class FakeRepo:
    """Object store shared by a clone and all of its worktrees."""

    url: str | None
    local_branches: set[str]
    tracking: set[str]
    base: Path
    worktrees: dict[Path, str | None] = field(default_factory=dict)
    upstreams: dict[str, str] = field(default_factory=dict)


class FakeGit:
    def __init__(self) -> None:
        self.remotes: dict[str, FakeRemote] = {}
        self.repos: dict[Path, FakeRepo] = {}
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.fail_once: set[str] = set()

    # fixtures

    def add_remote(self, url: str, *branches: str, default: str = "main") -> FakeRemote:
        remote = FakeRemote(branches={default, *branches}, default=default)
        self.remotes[normalize_remote(url).url] = remote
        return remote

    def add_checkout(self, path: Path, url: str | None, branch: str = "main") -> FakeRepo:
        path.mkdir(parents=True, exist_ok=True)
        (path / ".git").write_text("gitdir: fake\n")
        repo = FakeRepo(url=url, local_branches={branch}, tracking={branch}, base=path)
        repo.worktrees[path] = branch
        self.repos[path] = repo
        return repo

    @property
    def mutations(self) -> list[tuple]:
        readonly = {"fetch", "fetch_branch"}
        return [call for call in self.calls if call[0] not in readonly]

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_once:
            self.fail_once.discard(name)
            raise GitCommandError(["git", name], 128, stderr=f"fatal: {name} failed")
        if name in self.fail_on:
            raise GitCommandError(["git", name], 128, stderr=f"fatal: {name} failed")

    def _repo(self, path: Path) -> FakeRepo:
        return self.repos[path]

    def _remote_of(self, repo: FakeRepo) -> FakeRemote:
        return self.remotes[normalize_remote(repo.url).url]

    # GitClient surface

    def toplevel(self, path: Path) -> Path:
        return path

    def is_work_tree(self, path: Path) -> bool:
        return path in self.repos

    def primary_remote(self, path: Path) -> str | None:
        return "origin" if self._repo(path).url else None

    def remote_url(self, path: Path) -> str | None:
        return self._repo(path).url

    def remote_branch_exists(self, remote: str, branch: str, *, cwd: Path | None = None) -> bool:
        url = self._repo(cwd).url if cwd is not None and remote == "origin" else remote
        found = self.remotes.get(normalize_remote(url).url)
        if found is None:
            raise GitCommandError(["git", "ls-remote", remote], 128, stderr="repository not found")
        return branch in found.branches

    def clone(self, url: str, target: Path, *, branch: str | None = None, single_branch: bool = True) -> None:
        self._record("clone", url, target, branch, single_branch)
        remote = self.remotes.get(normalize_remote(url).url)
        if remote is None:
            raise GitCommandError(["git", "clone", url], 128, stderr="repository not found")
        checkout = branch or remote.default
        if checkout not in remote.branches:
            raise GitCommandError(["git", "clone", url], 128, stderr=f"branch {checkout} not found")
        repo = self.add_checkout(target, url, checkout)
        repo.tracking = {checkout} if single_branch else set(remote.branches)

    def checkout_new_branch(self, path: Path, branch: str) -> None:
        self._record("checkout_new_branch", path, branch)
        repo = self._repo(path)
        repo.local_branches.add(branch)
        repo.worktrees[path] = branch

    def push_upstream(self, path: Path, remote: str, branch: str) -> None:
        self._record("push_upstream", path, remote, branch)
        repo = self._repo(path)
        self._remote_of(repo).branches.add(branch)
        repo.tracking.add(branch)
        repo.upstreams[branch] = f"{remote}/{branch}"

    def set_upstream(self, path: Path, branch: str, upstream: str) -> None:
        self._record("set_upstream", path, branch, upstream)
        self._repo(path).upstreams[branch] = upstream

    def fetch(self, path: Path, remote: str, refspec: str | None = None) -> None:
        self._record("fetch", path, remote)

    def fetch_branch(self, path: Path, remote: str, branch: str) -> None:
        self._record("fetch_branch", path, remote, branch)
        repo = self._repo(path)
        if branch in self._remote_of(repo).branches:
            repo.tracking.add(branch)

    def ref_exists(self, path: Path, ref: str) -> bool:
        repo = self._repo(path)
        if ref.startswith("refs/heads/"):
            return ref[len("refs/heads/"):] in repo.local_branches
        if ref.startswith("refs/remotes/origin/"):
            return ref[len("refs/remotes/origin/"):] in repo.tracking
        return False

    def local_branch_exists(self, path: Path, branch: str) -> bool:
        return branch in self._repo(path).local_branches

    def current_branch(self, path: Path) -> str | None:
        return self._repo(path).worktrees.get(path)

    def default_branch(self, path: Path, remote: str) -> str | None:
        return self._remote_of(self._repo(path)).default

    def worktree_list(self, path: Path) -> list[WorktreeEntry]:
        repo = self._repo(path)
        return [WorktreeEntry(path=p, branch=b) for p, b in repo.worktrees.items()]

    def _attach(self, base: Path, target: Path, branch: str) -> None:
        repo = self._repo(base)
        target.mkdir(parents=True, exist_ok=True)
        (target / ".git").write_text("gitdir: fake\n")
        repo.local_branches.add(branch)
        repo.worktrees[target] = branch
        self.repos[target] = repo

    def worktree_add_existing(self, path: Path, target: Path, branch: str) -> None:
        self._record("worktree_add_existing", path, target, branch)
        self._attach(path, target, branch)

    def worktree_add_tracking(self, path: Path, target: Path, branch: str, remote_ref: str) -> None:
        self._record("worktree_add_tracking", path, target, branch, remote_ref)
        self._attach(path, target, branch)
        self._repo(path).upstreams[branch] = remote_ref

    def worktree_add_new(self, path: Path, target: Path, branch: str, start_point: str) -> None:
        self._record("worktree_add_new", path, target, branch, start_point)
        self._attach(path, target, branch)

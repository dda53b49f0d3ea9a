"""Decide and execute the clone or worktree action for a resolved line."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .context import FallbackContext, RemoteRegistry
from .exceptions import InvalidSpecError, PreconditionError
from .fs import ensure_directory, is_occupied, resolve_target, suffixed_name
from .git import GitClient
from .models import Action, LineKind, LineResult, RemoteIdentity, RepoLine
from .planner import Plan
from .remotes import normalize_remote

logger = logging.getLogger(__name__)


@dataclass
class Dispatcher:
    """Turns RepoLines into clones and worktrees under ``root``.

    Benign outcomes are returned as results; failures are raised and left
    for the run loop to classify.
    """

    git: GitClient
    root: Path
    own_remote: RemoteIdentity
    own_path: Path
    plan: Plan
    registry: RemoteRegistry

    def dispatch(self, line: RepoLine, fallback: FallbackContext) -> LineResult:
        if line.is_worktree:
            return self.add_worktree(line, fallback)
        return self.clone(line)

    # clones

    def clone(self, line: RepoLine) -> LineResult:
        remote = line.remote
        target = self.clone_destination(line)
        existing = self._existing_checkout(target, remote)
        if existing is not None:
            return existing
        ensure_directory(target.parent)
        if line.kind is LineKind.FULL_CLONE:
            logger.info("Cloning %s into %s", remote, target)
            self.git.clone(remote.url, target, single_branch=not line.all_branches)
            action = Action.FULL_CLONE
        else:
            self._clone_branch(remote, line.branch or "", target)
            action = Action.SINGLE_BRANCH_CLONE
        self.registry.register(remote, target)
        return LineResult.success(f"Cloned {remote} into {target}", action=action, path=target, remote=remote)

    def clone_destination(self, line: RepoLine) -> Path:
        if line.target_dir:
            return resolve_target(self.root, line.target_dir)
        name = line.remote.name
        if line.kind is LineKind.FULL_CLONE or not line.branch:
            return self.root / name
        if self._branch_clone_needs_suffix(line.remote):
            return self.root / suffixed_name(name, line.branch)
        return self.root / name

    def _branch_clone_needs_suffix(self, remote: RemoteIdentity) -> bool:
        """The bare name is kept for the first sighting of a remote that
        nothing else will claim: no full clone is planned and no ``@branch``
        line anchors on it."""

        if remote in self.registry:
            return True
        entry = self.plan.get(remote)
        return entry is not None and (entry.has_full_clone_line or entry.has_worktree_lines)

    def _clone_branch(self, remote: RemoteIdentity, branch: str, target: Path) -> None:
        if self.git.remote_branch_exists(remote.url, branch):
            logger.info("Cloning %s@%s into %s", remote, branch, target)
            self.git.clone(remote.url, target, branch=branch)
            return
        logger.info("Branch %s not found on %s; creating it from the default branch", branch, remote)
        self.git.clone(remote.url, target)
        self.git.checkout_new_branch(target, branch)
        self.git.push_upstream(target, "origin", branch)

    def _existing_checkout(self, target: Path, remote: RemoteIdentity) -> LineResult | None:
        if self.git.is_work_tree(target):
            url = self.git.remote_url(target)
            if url and self._same_remote(url, remote):
                kept = self.registry.register(remote, target)
                if kept != target:
                    logger.debug("%s already registered at %s", remote, kept)
                return LineResult.skip(
                    f"Already present: {target}",
                    path=target,
                    fallback_update=(remote, target),
                )
            logger.warning(
                "%s is a working copy of %s, not %s; leaving it alone",
                target,
                url or "(no remote)",
                remote,
            )
            return LineResult.skip(f"Occupied by another repository: {target}", path=target)
        if is_occupied(target):
            logger.warning("%s exists and is not a git working copy; leaving it alone", target)
            return LineResult.skip(f"Destination not empty: {target}", path=target)
        return None

    @staticmethod
    def _same_remote(url: str, remote: RemoteIdentity) -> bool:
        try:
            return normalize_remote(url) == remote
        except InvalidSpecError:
            return False

    # worktrees

    def add_worktree(self, line: RepoLine, fallback: FallbackContext) -> LineResult:
        remote = line.remote
        branch = line.branch or ""
        base = self.worktree_base(remote, fallback)
        for entry in self.git.worktree_list(base):
            if entry.branch == branch:
                return LineResult.skip(
                    f"Branch {branch} already checked out at {entry.path}",
                    path=entry.path,
                    fallback_update=(remote, base),
                )

        if line.target_dir:
            target = resolve_target(self.root, line.target_dir)
        else:
            target = self.root / suffixed_name(base.name, branch)
        if self.git.is_work_tree(target):
            if self.git.current_branch(target) == branch:
                return LineResult.success(
                    f"Already exists: {target}",
                    action=None,
                    path=target,
                    remote=remote,
                    fallback_path=base,
                )
            logger.warning("%s is a working copy on another branch; leaving it alone", target)
            return LineResult.skip(f"Occupied by another checkout: {target}", path=target)
        if is_occupied(target):
            logger.warning("%s exists and is not a git working copy; leaving it alone", target)
            return LineResult.skip(f"Destination not empty: {target}", path=target)

        remote_name = self.git.primary_remote(base)
        if remote_name is None:
            raise PreconditionError(f"No git remote configured for worktree base {base}")
        self.git.fetch(base, remote_name)
        local_exists = self.git.local_branch_exists(base, branch)
        remote_exists = self.git.remote_branch_exists(remote_name, branch, cwd=base)
        upstream = f"{remote_name}/{branch}"
        ensure_directory(target.parent)

        if local_exists:
            logger.info("Adding worktree %s from local branch %s", target, branch)
            self.git.worktree_add_existing(base, target, branch)
            if remote_exists:
                if not self.git.ref_exists(base, f"refs/remotes/{upstream}"):
                    self.git.fetch_branch(base, remote_name, branch)
                self.git.set_upstream(base, branch, upstream)
            else:
                self.git.push_upstream(target, remote_name, branch)
        elif remote_exists:
            self.git.fetch_branch(base, remote_name, branch)
            if self.git.ref_exists(base, f"refs/remotes/{upstream}"):
                logger.info("Adding worktree %s tracking %s", target, upstream)
                self.git.worktree_add_tracking(base, target, branch, upstream)
            else:
                logger.warning("%s could not be resolved in %s; branching from the default branch", upstream, base)
                self.git.worktree_add_new(base, target, branch, self._start_point(base, remote_name))
        else:
            start = self._start_point(base, remote_name)
            logger.info("Adding worktree %s on new branch %s from %s", target, branch, start)
            self.git.worktree_add_new(base, target, branch, start)
            self.git.push_upstream(target, remote_name, branch)

        return LineResult.success(
            f"Added worktree {target} on {branch}",
            action=Action.WORKTREE,
            path=target,
            remote=remote,
            fallback_path=base,
        )

    def worktree_base(self, remote: RemoteIdentity, fallback: FallbackContext) -> Path:
        """Local clone that anchors worktrees of ``remote``, cloned on demand."""

        if remote == self.own_remote:
            return self.own_path
        current_remote, current_path = fallback.current()
        if current_remote == remote and current_path is not None:
            return current_path
        known = self.registry.get(remote)
        if known is not None:
            return known
        entry = self.plan.get(remote)
        if entry is None or not entry.has_full_clone_line:
            raise PreconditionError(f"{remote} has not been cloned; add a line for it before its @branch lines")
        base = resolve_target(self.root, entry.preferred_base_name or remote.name)
        if self._existing_checkout(base, remote) is None:
            logger.info("Cloning worktree base %s into %s", remote, base)
            ensure_directory(base.parent)
            self.git.clone(remote.url, base, single_branch=not entry.all_branches)
        elif self.registry.get(remote) is None:
            raise PreconditionError(f"Cannot use {base} as the worktree base for {remote}")
        return self.registry.register(remote, base)

    def _start_point(self, base: Path, remote_name: str) -> str:
        default = self.git.default_branch(base, remote_name)
        if default and self.git.ref_exists(base, f"refs/remotes/{remote_name}/{default}"):
            return f"{remote_name}/{default}"
        return "HEAD"


__all__ = ["Dispatcher"]

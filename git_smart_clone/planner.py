"""First pass over a repo-list that records which remotes get full clones."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Mapping

from .exceptions import LineParseError
from .models import LineKind, PlanEntry, RemoteIdentity
from .parser import parse_line

logger = logging.getLogger(__name__)

Plan = Mapping[RemoteIdentity, PlanEntry]


def build_plan(lines: Iterable[str], initial_remote: RemoteIdentity | None) -> Plan:
    """Scan every normalized line before anything is cloned.

    ``@branch`` lines carry no remote of their own; they only mark the remote
    they would anchor on (tracked with a simulated fallback) as having
    worktree lines. Lines that fail to parse are left for the run loop to
    report.
    """

    plan: dict[RemoteIdentity, PlanEntry] = {}
    fallback = initial_remote
    for text in lines:
        try:
            parsed = parse_line(text, fallback)
        except LineParseError as exc:
            logger.debug("plan: ignoring %r (%s)", text, exc)
            continue
        line = parsed.line
        if line.kind is LineKind.WORKTREE:
            if line.is_worktree:
                entry = plan.get(line.remote, PlanEntry())
                plan[line.remote] = replace(entry, has_worktree_lines=True)
            continue
        entry = plan.get(line.remote, PlanEntry())
        plan[line.remote] = PlanEntry(
            has_full_clone_line=entry.has_full_clone_line
            or line.kind is LineKind.FULL_CLONE,
            preferred_base_name=entry.preferred_base_name
            or line.target_dir
            or line.remote.name,
            has_worktree_lines=entry.has_worktree_lines,
            all_branches=entry.all_branches
            or (line.kind is LineKind.FULL_CLONE and line.all_branches),
        )
        fallback = line.remote
    for remote, entry in plan.items():
        logger.debug("plan: %s -> %s", remote, entry)
    return plan


__all__ = ["Plan", "build_plan"]

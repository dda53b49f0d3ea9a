"""Tests for the planning pass over a repo list."""

from __future__ import annotations

import unittest

from git_smart_clone.models import PlanEntry
from git_smart_clone.planner import build_plan
from git_smart_clone.remotes import normalize_remote

OWN = normalize_remote("me/project")


class BuildPlanTests(unittest.TestCase):
    def test_full_clone_anywhere_marks_remote(self) -> None:
        plan = build_plan(["E/F@branch", "other/repo", "git@github.com:E/F.git"], OWN)

        self.assertTrue(plan[normalize_remote("E/F")].has_full_clone_line)
        self.assertEqual(plan[normalize_remote("E/F")].preferred_base_name, "F")

    def test_branch_only_remote_has_no_full_clone(self) -> None:
        plan = build_plan(["owner/tool@v1"], OWN)

        self.assertEqual(
            plan[normalize_remote("owner/tool")],
            PlanEntry(has_full_clone_line=False, preferred_base_name="tool"),
        )

    def test_first_base_name_wins(self) -> None:
        plan = build_plan(["owner/tool custom-dir", "owner/tool@dev other-dir"], OWN)

        self.assertEqual(plan[normalize_remote("owner/tool")].preferred_base_name, "custom-dir")

    def test_worktree_lines_mark_the_remote_they_anchor_on(self) -> None:
        plan = build_plan(
            ["SATVILab/projr", "@dev", "SATVILab/Analysis@test", "@tweak", "owner/plain@x"],
            OWN,
        )

        self.assertTrue(plan[normalize_remote("SATVILab/projr")].has_worktree_lines)
        self.assertTrue(plan[normalize_remote("SATVILab/Analysis")].has_worktree_lines)
        self.assertFalse(plan[normalize_remote("SATVILab/Analysis")].has_full_clone_line)
        self.assertFalse(plan[normalize_remote("owner/plain")].has_worktree_lines)

    def test_leading_worktree_lines_anchor_on_own_remote(self) -> None:
        plan = build_plan(["@dev", "owner/repo"], OWN)

        self.assertTrue(plan[OWN].has_worktree_lines)
        self.assertFalse(plan[OWN].has_full_clone_line)

    def test_no_worktree_lines_do_not_count_as_worktrees(self) -> None:
        plan = build_plan(["owner/repo@a", "@b -n"], OWN)

        self.assertFalse(plan[normalize_remote("owner/repo")].has_worktree_lines)

    def test_all_branches_flag_is_recorded(self) -> None:
        plan = build_plan(["owner/repo@x", "owner/repo -a", "@dev", "owner/other"], OWN)

        self.assertTrue(plan[normalize_remote("owner/repo")].all_branches)
        self.assertTrue(plan[normalize_remote("owner/repo")].has_worktree_lines)
        self.assertFalse(plan[normalize_remote("owner/other")].all_branches)

    def test_unparseable_lines_are_ignored(self) -> None:
        plan = build_plan(["owner/repo d1 d2", "nonsense", "owner/ok"], OWN)

        self.assertEqual(list(plan), [normalize_remote("owner/ok")])


if __name__ == "__main__":
    unittest.main()

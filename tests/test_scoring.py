"""Tests for codetheater.scenes.scoring."""

from __future__ import annotations

from datetime import timedelta

from codetheater.config import DensityConfig
from codetheater.scenes.scoring import (
    is_pivotal,
    rank_pivotal,
    rank_pivotal_indices,
    score_commit,
)


class TestScoreCommit:
    def test_plain_commit_scores_zero(self, make_commit) -> None:
        assert score_commit(make_commit("chore: tidy imports")) == 0

    def test_all_signals_fire(self, make_commit, pivotal_message) -> None:
        commit = make_commit(
            pivotal_message,
            additions=400,
            deletions=200,
            files=[f"src/f{i}.py" for i in range(25)],
        )
        # size 2+2, files 2+2, breaking 3, major 2, release 2, hotfix 2, critical fix 2
        assert score_commit(commit) >= 19

    def test_score_is_deterministic(self, make_commit, pivotal_message) -> None:
        commit = make_commit(pivotal_message, additions=300)
        assert score_commit(commit) == score_commit(commit)

    def test_size_thresholds_are_strict(self, make_commit) -> None:
        assert score_commit(make_commit("x", additions=200, deletions=0)) == 0
        assert score_commit(make_commit("x", additions=201, deletions=0)) == 2
        assert score_commit(make_commit("x", additions=501, deletions=0)) == 4

    def test_file_count_thresholds(self, make_commit) -> None:
        ten = make_commit("x", files=[f"f{i}" for i in range(10)])
        eleven = make_commit("x", files=[f"f{i}" for i in range(11)])
        twenty_one = make_commit("x", files=[f"f{i}" for i in range(21)])
        assert score_commit(ten) == 0
        assert score_commit(eleven) == 2
        assert score_commit(twenty_one) == 4

    def test_keywords_are_case_insensitive(self, make_commit) -> None:
        assert score_commit(make_commit("Revert SECURITY patch")) == 4

    def test_critical_needs_fix(self, make_commit) -> None:
        assert score_commit(make_commit("critical path cleanup")) == 0
        assert score_commit(make_commit("fix critical crash")) == 2

    def test_feat_prefix_only_at_start(self, make_commit) -> None:
        assert score_commit(make_commit("feat: search")) == 1
        assert score_commit(make_commit("add feat flag")) == 0

    def test_merge_keyword(self, make_commit) -> None:
        assert score_commit(make_commit("Merge branch 'main'")) == 1


class TestIsPivotal:
    def test_threshold_is_inclusive(self, make_commit) -> None:
        # breaking 3 + major 2
        assert is_pivotal(make_commit("breaking major change"))
        # breaking 3 + merge 1
        assert not is_pivotal(make_commit("breaking merge"))

    def test_custom_threshold(self, make_commit) -> None:
        config = DensityConfig(pivotal_threshold=1)
        assert is_pivotal(make_commit("feat: search"), config)


class TestRankPivotal:
    def test_returns_chronological_order(self, make_commit, pivotal_message) -> None:
        commits = [
            make_commit("chore", 0),
            make_commit(pivotal_message, 1),
            make_commit("feat: small", 2),
            make_commit("breaking change", 3),
        ]
        ranked = rank_pivotal(commits, 3)
        assert [c.sha for c in ranked] == [commits[1].sha, commits[2].sha, commits[3].sha]
        assert [c.date for c in ranked] == sorted(c.date for c in ranked)

    def test_sorted_by_date_even_when_input_is_not(self, make_commit, pivotal_message) -> None:
        late = make_commit(pivotal_message, 5)
        early = make_commit("breaking change", 1)
        ranked = rank_pivotal([late, early], 2)
        assert ranked == [early, late]

    def test_ties_keep_original_order(self, make_commit) -> None:
        commits = [make_commit("chore", i) for i in range(5)]
        assert rank_pivotal(commits, 2) == commits[:2]

    def test_limit_larger_than_input(self, make_commit) -> None:
        commits = [make_commit("chore", i) for i in range(3)]
        assert rank_pivotal(commits, 25) == commits

    def test_zero_limit(self, make_commit) -> None:
        assert rank_pivotal([make_commit("chore")], 0) == []

    def test_same_date_breaks_ties_by_position(self, make_commit, pivotal_message) -> None:
        first = make_commit("breaking change", 0)
        second = make_commit(pivotal_message, 1, date=first.date)
        assert rank_pivotal_indices([first, second], 2) == [0, 1]

    def test_indices_follow_dates(self, make_commit) -> None:
        a = make_commit("breaking", 0)
        b = make_commit("breaking", 1, date=a.date - timedelta(days=1))
        assert rank_pivotal_indices([a, b], 2) == [1, 0]

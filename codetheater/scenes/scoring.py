"""
codetheater.scenes.scoring - Pivotal commit scoring.

Assigns each commit a dramatic weight from static heuristics (diff size,
file count, keywords in the message). Commits at or above the pivotal
threshold are dramatized as highlight scenes.
"""

from __future__ import annotations

from typing import Sequence

from codetheater.config import DensityConfig
from codetheater.models import Commit

# (keyword, points); each row is checked independently
KEYWORD_POINTS: tuple[tuple[str, int], ...] = (
    ("breaking", 3),
    ("major", 2),
    ("release", 2),
    ("revert", 2),
    ("merge", 1),
    ("hotfix", 2),
    ("security", 2),
)


def score_commit(commit: Commit) -> int:
    """Compute the pivotal score of a commit.

    Args:
        commit: Commit to score

    Returns:
        Non-negative integer score; the rows are additive
    """
    score = 0
    message = commit.message.lower()

    changed = commit.additions + commit.deletions
    if changed > 200:
        score += 2
    if changed > 500:
        score += 2

    file_count = len(commit.files)
    if file_count > 10:
        score += 2
    if file_count > 20:
        score += 2

    for keyword, points in KEYWORD_POINTS:
        if keyword in message:
            score += points
    if "fix" in message and "critical" in message:
        score += 2

    if message.startswith("feat"):
        score += 1

    return score


def is_pivotal(commit: Commit, config: DensityConfig | None = None) -> bool:
    """Return True if the commit's score reaches the pivotal threshold."""
    config = config or DensityConfig()
    return score_commit(commit) >= config.pivotal_threshold


def rank_pivotal_indices(commits: Sequence[Commit], limit: int) -> list[int]:
    """Positions of the ``limit`` highest-scoring commits, in chronological order.

    Ties in score keep their original order. The selection is re-sorted
    by commit date (then position) so callers can walk it as a timeline.
    """
    scored = [(score_commit(commit), i) for i, commit in enumerate(commits)]
    scored.sort(key=lambda item: -item[0])
    top = [i for _, i in scored[: max(limit, 0)]]
    return sorted(top, key=lambda i: (commits[i].date, i))


def rank_pivotal(commits: Sequence[Commit], limit: int) -> list[Commit]:
    """Select up to ``limit`` commits by score, returned in chronological order."""
    return [commits[i] for i in rank_pivotal_indices(commits, limit)]

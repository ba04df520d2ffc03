"""
codetheater.git.contributors - Per-author statistics.

Aggregates the commits of each human contributor (bots are skipped) into
the numbers the casting step uses to pick an archetype.
"""

from __future__ import annotations

import re
from collections import Counter
from datetime import datetime
from typing import Sequence

from pydantic import BaseModel

from codetheater.models import Commit
from codetheater.utils import format_peak_hours

BOT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^copilot$",
        r"copilot\[bot\]",
        r"\[bot\]$",
        r"^dependabot",
        r"^github-actions",
        r"^renovate",
        r"^greenkeeper",
        r"^snyk-bot",
        r"^semantic-release-bot",
        r"^web-flow$",
        r"^noreply@github\.com$",
    )
]

STOP_WORDS = {"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for"}

_CO_AUTHOR_RE = re.compile(r"Co-authored-by:\s*([^<\n]+)", re.IGNORECASE)


class ContributorPatterns(BaseModel):
    late_night_ratio: float = 0.0
    test_file_ratio: float = 0.0
    refactor_ratio: float = 0.0
    doc_file_ratio: float = 0.0
    avg_files_per_commit: float = 0.0
    avg_commit_size: float = 0.0


class ContributorStats(BaseModel):
    name: str
    email: str
    commit_count: int
    additions: int
    deletions: int
    first_commit: datetime
    last_commit: datetime
    top_files: list[str]
    peak_hours: str
    common_words: list[str]
    co_authors: list[str]
    avg_diff_size: float
    patterns: ContributorPatterns


def is_bot(name: str, email: str) -> bool:
    return any(p.search(name) or p.search(email) for p in BOT_PATTERNS)


def contributor_stats(commits: Sequence[Commit]) -> list[ContributorStats]:
    """Build statistics for every human contributor, keyed by email.

    Args:
        commits: Commits in the extracted range

    Returns:
        One ContributorStats per author, in first-seen order
    """
    by_email: dict[str, list[Commit]] = {}
    names: dict[str, str] = {}

    for commit in commits:
        if is_bot(commit.author.name, commit.author.email):
            continue
        key = commit.author.email
        names.setdefault(key, commit.author.name)
        by_email.setdefault(key, []).append(commit)

    return [
        calculate_contributor_stats(names[email], email, author_commits)
        for email, author_commits in by_email.items()
    ]


def calculate_contributor_stats(
    name: str,
    email: str,
    commits: Sequence[Commit],
) -> ContributorStats:
    ordered = sorted(commits, key=lambda c: c.date)

    file_counts = Counter(f.path for c in commits for f in c.files)
    top_files = [path for path, _ in file_counts.most_common(5)]

    hour_counts = Counter(c.date.hour for c in commits)
    peak_hour = hour_counts.most_common(1)[0][0] if hour_counts else 12

    word_counts: Counter[str] = Counter()
    for commit in commits:
        for word in re.split(r"\W+", commit.message.lower()):
            if len(word) > 2 and word not in STOP_WORDS:
                word_counts[word] += 1
    common_words = [word for word, _ in word_counts.most_common(10)]

    co_authors: list[str] = []
    for commit in commits:
        for match in _CO_AUTHOR_RE.findall(commit.body):
            author = match.strip()
            if author and author not in co_authors:
                co_authors.append(author)

    additions = sum(c.additions for c in commits)
    deletions = sum(c.deletions for c in commits)

    return ContributorStats(
        name=name,
        email=email,
        commit_count=len(commits),
        additions=additions,
        deletions=deletions,
        first_commit=ordered[0].date,
        last_commit=ordered[-1].date,
        top_files=top_files,
        peak_hours=format_peak_hours(peak_hour),
        common_words=common_words,
        co_authors=co_authors,
        avg_diff_size=(additions + deletions) / len(commits) if commits else 0.0,
        patterns=calculate_patterns(commits),
    )


def calculate_patterns(commits: Sequence[Commit]) -> ContributorPatterns:
    late_night = 0
    refactors = 0
    test_files = 0
    doc_files = 0
    total_files = 0

    for commit in commits:
        hour = commit.date.hour
        if hour >= 22 or hour < 6:
            late_night += 1
        if "refactor" in commit.message.lower():
            refactors += 1
        for f in commit.files:
            total_files += 1
            if "test" in f.path or "spec" in f.path:
                test_files += 1
            if "doc" in f.path or f.path.endswith(".md"):
                doc_files += 1

    total_commits = len(commits) or 1

    return ContributorPatterns(
        late_night_ratio=late_night / total_commits,
        test_file_ratio=test_files / total_files if total_files else 0.0,
        refactor_ratio=refactors / total_commits,
        doc_file_ratio=doc_files / total_files if total_files else 0.0,
        avg_files_per_commit=total_files / total_commits,
        avg_commit_size=sum(c.additions + c.deletions for c in commits) / total_commits,
    )

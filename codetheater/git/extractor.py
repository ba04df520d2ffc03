"""
codetheater.git.extractor - Release-window extraction.

Resolves a from/to ref pair (tags, "latest-release", SHAs, HEAD) and
returns the commits in between together with contributor statistics.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel

from codetheater.exceptions import GitError, NoCommitsError
from codetheater.git.contributors import ContributorStats, contributor_stats
from codetheater.git.service import GitService
from codetheater.models import Commit, Tag

logger = logging.getLogger(__name__)

LATEST_RELEASE = "latest-release"


class DateRange(BaseModel):
    start: datetime
    end: datetime


class ExtractionResult(BaseModel):
    """Commits and contributors for one commit range."""

    commits: list[Commit]
    contributors: list[ContributorStats]
    from_ref: str | None
    to_ref: str
    from_tag: Tag | None = None
    to_tag: Tag | None = None
    date_range: DateRange


class GitExtractor:
    """Extracts commit ranges from a GitService."""

    def __init__(self, git: GitService) -> None:
        self.git = git

    def extract(self, from_ref: str | None = None, to_ref: str | None = None) -> ExtractionResult:
        """Extract commits between two refs.

        Args:
            from_ref: Start ref (exclusive); defaults to the latest tag
            to_ref: End ref (inclusive); defaults to HEAD

        Returns:
            ExtractionResult with commits oldest first

        Raises:
            GitError: If a ref cannot be resolved
            NoCommitsError: If the range holds no commits
        """
        tags = self.git.get_tags()

        resolved_from = self.resolve_ref(from_ref, tags, "from")
        resolved_to = self.resolve_ref(to_ref, tags, "to") or "HEAD"

        logger.debug("Extracting commits %s..%s", resolved_from, resolved_to)
        commits = self.git.get_commits(resolved_from, resolved_to)
        if not commits:
            raise NoCommitsError(resolved_from, resolved_to)

        contributors = sorted(
            contributor_stats(commits),
            key=lambda c: c.commit_count,
            reverse=True,
        )

        dates = sorted(c.date for c in commits)

        return ExtractionResult(
            commits=commits,
            contributors=contributors,
            from_ref=resolved_from,
            to_ref=resolved_to,
            from_tag=_find_tag(tags, resolved_from),
            to_tag=_find_tag(tags, resolved_to),
            date_range=DateRange(start=dates[0], end=dates[-1]),
        )

    def resolve_ref(self, ref: str | None, tags: list[Tag], position: str) -> str | None:
        """Resolve a user-supplied ref.

        A missing ``to`` ref means HEAD. A missing ``from`` ref means the
        latest tag, or the whole history when the repository has no tags.
        """
        if not ref:
            if position == "to":
                return "HEAD"
            if tags:
                return tags[0].name
            logger.debug("No tags found; using the full history")
            return None

        if ref == "HEAD":
            return "HEAD"

        if ref == LATEST_RELEASE:
            if not tags:
                raise GitError("No release tags found")
            return tags[0].name

        return ref

    def list_releases(self) -> tuple[list[Tag], dict[str, int]]:
        """Tags (newest first) and the number of commits each one introduced."""
        tags = self.git.get_tags()
        counts: dict[str, int] = {}

        for i, tag in enumerate(tags):
            previous = tags[i + 1].name if i + 1 < len(tags) else None
            try:
                counts[tag.name] = self.git.count_commits(previous, tag.name)
            except (GitError, ValueError) as e:
                logger.debug("Could not count commits for %s: %s", tag.name, e)
                counts[tag.name] = 0

        return tags, counts


def _find_tag(tags: list[Tag], ref: str | None) -> Tag | None:
    if not ref:
        return None
    return next((t for t in tags if t.name == ref or (t.sha and t.sha.startswith(ref))), None)

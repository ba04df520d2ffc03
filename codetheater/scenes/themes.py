"""
codetheater.scenes.themes - Theme labels for groups of commits.

Keyword heuristics over commit messages, falling back to the paths the
commits touched. The keyword table is checked in priority order and the
first theme with any match wins, so a message mentioning both "fix" and
"test" is labeled "Bug Fixes".
"""

from __future__ import annotations

from typing import Sequence

from codetheater.models import Commit

THEME_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Bug Fixes", ("fix", "bug", "issue", "patch")),
    ("New Features", ("feat", "add", "implement", "new")),
    ("Refactoring", ("refactor", "clean", "reorganize")),
    ("Testing", ("test", "spec", "coverage")),
    ("Documentation", ("doc", "readme", "comment")),
    ("Code Style", ("style", "format", "lint")),
    ("Performance", ("perf", "optimize", "speed")),
    ("Security", ("security", "auth", "permission")),
    ("Deployment", ("deploy", "release", "version")),
    ("Configuration", ("config", "setup", "install")),
)

DEFAULT_THEME = "Development"


def classify_theme(commits: Sequence[Commit]) -> str:
    """Infer a short theme label for a set of commits.

    Args:
        commits: Commits to label (normally non-empty)

    Returns:
        Theme label such as "Bug Fixes" or "Development"
    """
    messages = [c.message.lower() for c in commits]

    for theme, keywords in THEME_KEYWORDS:
        if any(k in m for m in messages for k in keywords):
            return theme

    paths = [f.path for c in commits for f in c.files]
    if any("test" in p or "spec" in p for p in paths):
        return "Testing"
    if any(p.endswith(".md") or "doc" in p for p in paths):
        return "Documentation"

    return DEFAULT_THEME


infer_theme = classify_theme

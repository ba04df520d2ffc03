"""
codetheater.git - Commit history extraction.

Turns a repository (local path, URL or GitHub shorthand) and a ref range
into an ordered list of commits plus contributor statistics.
"""

from __future__ import annotations

from .contributors import ContributorStats, contributor_stats  # noqa: F401
from .extractor import ExtractionResult, GitExtractor  # noqa: F401
from .remote import RemoteHandler, repo_hash  # noqa: F401
from .service import GitService  # noqa: F401

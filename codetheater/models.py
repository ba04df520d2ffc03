"""
codetheater.models - Commit history data models.

Commits are produced by the git extractor and treated as read-only by
everything downstream, so the commit models are frozen.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

FileStatus = Literal["added", "modified", "deleted", "renamed"]


class Author(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str = ""


class FileChange(BaseModel):
    """A single file touched by a commit."""

    model_config = ConfigDict(frozen=True)

    path: str
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    status: FileStatus = "modified"
    previous_path: str | None = None


class Commit(BaseModel):
    """One recorded change to the repository with its diff stats.

    ``message`` is the subject line; ``body`` holds the rest of the
    commit message. ``additions``/``deletions`` are totals across files.
    """

    model_config = ConfigDict(frozen=True)

    sha: str
    short_sha: str = ""
    message: str
    body: str = ""
    author: Author
    date: datetime
    files: tuple[FileChange, ...] = ()
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    parents: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def fill_short_sha(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("short_sha") and data.get("sha"):
            data = {**data, "short_sha": data["sha"][:7]}
        return data

    @property
    def changed_lines(self) -> int:
        return self.additions + self.deletions


class Tag(BaseModel):
    name: str
    sha: str = ""
    date: datetime
    message: str | None = None

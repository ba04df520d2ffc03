"""
codetheater.git.service - Git CLI wrapper.

Runs ``git`` as a subprocess and parses its output into Commit and Tag
models. Commits are returned oldest first.
"""

from __future__ import annotations

import logging
import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Any

from codetheater.exceptions import GitError
from codetheater.models import Author, Commit, FileChange, Tag

logger = logging.getLogger(__name__)

RECORD_SEP = "\x1e"
FIELD_SEP = "\x1f"

# sha, parents, author name, author email, author date, subject, body
LOG_FORMAT = "%x1e%H%x1f%P%x1f%an%x1f%ae%x1f%aI%x1f%s%x1f%b%x1f"

TAG_FORMAT = "%1f".join(
    [
        "%(refname:short)",
        "%(if)%(*objectname)%(then)%(*objectname)%(else)%(objectname)%(end)",
        "%(creatordate:iso-strict)",
        "%(subject)",
    ]
)

STATUS_CODES = {"A": "added", "M": "modified", "D": "deleted", "R": "renamed"}

_NUMSTAT_RE = re.compile(r"^(\d+|-)\t(\d+|-)\t(.+)$")
_BRACE_RENAME_RE = re.compile(r"^(.*)\{(.*) => (.*)\}(.*)$")


def run_git(args: list[str], cwd: Path | None = None) -> str:
    """Run a git command and return its stdout.

    Raises:
        GitError: If git is missing or the command exits non-zero
    """
    cmd = ["git", *args]
    logger.debug("Running: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found on PATH") from e

    if proc.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed: {proc.stderr.strip()}")
    return proc.stdout


def split_rename_path(path: str) -> tuple[str, str | None]:
    """Resolve numstat rename notation into (new_path, previous_path).

    Handles both ``old => new`` and ``dir/{old => new}/file``.
    """
    match = _BRACE_RENAME_RE.match(path)
    if match:
        prefix, old, new, suffix = match.groups()
        old_path = (prefix + old + suffix).replace("//", "/")
        new_path = (prefix + new + suffix).replace("//", "/")
        return new_path, old_path
    if " => " in path:
        old_path, new_path = path.split(" => ", 1)
        return new_path, old_path
    return path, None


def parse_numstat(lines: list[str]) -> list[FileChange]:
    """Parse ``--numstat`` lines. Binary files (``-``) count as zero lines."""
    files = []
    for line in lines:
        match = _NUMSTAT_RE.match(line)
        if not match:
            continue
        adds, dels, raw_path = match.groups()
        path, previous = split_rename_path(raw_path)
        files.append(
            FileChange(
                path=path,
                additions=0 if adds == "-" else int(adds),
                deletions=0 if dels == "-" else int(dels),
                status="renamed" if previous else "modified",
                previous_path=previous,
            )
        )
    return files


def parse_name_status(output: str) -> dict[str, dict[str, str]]:
    """Parse ``--name-status`` log output into {sha: {path: status}}."""
    statuses: dict[str, dict[str, str]] = {}
    for record in output.split(RECORD_SEP):
        lines = [ln for ln in record.strip().splitlines() if ln.strip()]
        if not lines:
            continue
        sha = lines[0].strip()
        entry = statuses.setdefault(sha, {})
        for line in lines[1:]:
            parts = line.split("\t")
            if len(parts) < 2:
                continue
            code = parts[0][:1]
            entry[parts[-1]] = STATUS_CODES.get(code, "modified")
    return statuses


def parse_log(output: str, statuses: dict[str, dict[str, str]] | None = None) -> list[Commit]:
    """Parse ``git log`` output produced with LOG_FORMAT and ``--numstat``."""
    statuses = statuses or {}
    commits = []

    for record in output.split(RECORD_SEP):
        if not record.strip():
            continue
        fields = record.split(FIELD_SEP)
        if len(fields) < 8:
            logger.debug("Skipping malformed log record: %r", record[:80])
            continue

        sha, parents, name, email, date, subject, body, stat_block = fields[:8]
        files = parse_numstat(stat_block.strip().splitlines())
        file_statuses = statuses.get(sha, {})
        files = [
            f.model_copy(update={"status": file_statuses[f.path]}) if f.path in file_statuses else f
            for f in files
        ]

        commits.append(
            Commit(
                sha=sha,
                message=subject,
                body=body.strip(),
                author=Author(name=name, email=email),
                date=_parse_date(date),
                files=tuple(files),
                additions=sum(f.additions for f in files),
                deletions=sum(f.deletions for f in files),
                parents=tuple(parents.split()),
            )
        )

    return commits


def revision_range(from_ref: str | None, to_ref: str = "HEAD") -> str:
    return f"{from_ref}..{to_ref}" if from_ref else to_ref


class GitService:
    """Read-only access to a local git repository."""

    def __init__(self, repo_path: Path) -> None:
        self.repo_path = repo_path

    @classmethod
    def create(cls, repo_path: Path) -> GitService:
        """Create a service after checking the path is a git work tree."""
        service = cls(repo_path)
        service.validate()
        return service

    def validate(self) -> None:
        if not self.repo_path.exists():
            raise GitError(f"Repository not found: {self.repo_path}")
        try:
            inside = self.run(["rev-parse", "--is-inside-work-tree"]).strip()
        except GitError as e:
            raise GitError(f"Not a git repository: {self.repo_path}") from e
        if inside != "true":
            raise GitError(f"Not a git repository: {self.repo_path}")

    def run(self, args: list[str]) -> str:
        return run_git(args, cwd=self.repo_path)

    def get_commits(self, from_ref: str | None = None, to_ref: str = "HEAD") -> list[Commit]:
        """Commits reachable from ``to_ref`` but not ``from_ref``, oldest first."""
        rev = revision_range(from_ref, to_ref)
        output = self.run(["log", "--reverse", "-M", f"--format={LOG_FORMAT}", "--numstat", rev])
        status_output = self.run(
            ["log", "--reverse", "-M", "--format=%x1e%H", "--name-status", rev]
        )
        return parse_log(output, parse_name_status(status_output))

    def count_commits(self, from_ref: str | None, to_ref: str) -> int:
        return int(self.run(["rev-list", "--count", revision_range(from_ref, to_ref)]).strip())

    def get_tags(self) -> list[Tag]:
        """All tags, newest first."""
        output = self.run(["for-each-ref", f"--format={TAG_FORMAT}", "refs/tags"])
        tags = []
        for line in output.splitlines():
            parts = line.split(FIELD_SEP)
            if len(parts) < 4 or not parts[0]:
                continue
            name, sha, date, subject = parts[:4]
            tags.append(
                Tag(
                    name=name,
                    sha=sha,
                    date=_parse_date(date),
                    message=subject or None,
                )
            )
        return sorted(tags, key=lambda t: t.date, reverse=True)


def _parse_date(value: Any) -> datetime:
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return datetime.now().astimezone()

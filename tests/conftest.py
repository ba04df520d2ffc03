"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

from codetheater.git.contributors import contributor_stats
from codetheater.models import Author, Commit, FileChange

BASE_DATE = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)

CommitFactory = Callable[..., Commit]


def build_commit(
    message: str = "chore: tidy",
    index: int = 0,
    author: str = "Ada Lovelace",
    email: str | None = None,
    additions: int = 5,
    deletions: int = 1,
    files: list[str] | None = None,
    date: datetime | None = None,
    body: str = "",
) -> Commit:
    paths = files if files is not None else ["src/app.py"]
    return Commit(
        sha=f"{index:040x}",
        message=message,
        body=body,
        author=Author(name=author, email=email or f"{author.split()[0].lower()}@example.com"),
        date=date or BASE_DATE + timedelta(hours=index),
        files=tuple(FileChange(path=p) for p in paths),
        additions=additions,
        deletions=deletions,
    )


@pytest.fixture
def make_commit() -> CommitFactory:
    """Factory for commits; ``index`` sets the sha and an hourly timestamp."""
    return build_commit


@pytest.fixture
def make_commits(make_commit: CommitFactory) -> Callable[..., list[Commit]]:
    """Build a chronological commit list from messages."""

    def factory(messages: list[str], **kwargs) -> list[Commit]:
        return [make_commit(message, index=i, **kwargs) for i, message in enumerate(messages)]

    return factory


@pytest.fixture
def pivotal_message() -> str:
    return "breaking: major release hotfix for critical fix"


@pytest.fixture
def sample_commits(make_commit: CommitFactory) -> list[Commit]:
    """A small mixed history by two authors."""
    return [
        make_commit("feat: add login form", 0, author="Ada Lovelace", files=["src/login.py"]),
        make_commit("fix: login redirect bug", 1, author="Grace Hopper", files=["src/login.py"]),
        make_commit("test: cover login flow", 2, author="Grace Hopper", files=["tests/test_login.py"]),
        make_commit("docs: explain login", 3, author="Ada Lovelace", files=["README.md"]),
        make_commit(
            "breaking: major release of the auth rewrite",
            4,
            author="Ada Lovelace",
            additions=450,
            deletions=200,
            files=[f"src/auth/mod{i}.py" for i in range(12)],
        ),
    ]


@pytest.fixture
def sample_contributors(sample_commits: list[Commit]):
    return contributor_stats(sample_commits)


@pytest.fixture
def mock_llm_client() -> MagicMock:
    """LLM client stub that answers every chat with a short scene."""
    client = MagicMock()
    client.model = "ollama/test"
    client.chat.return_value = (
        "INT. OFFICE - NIGHT\n\nThe monitor glows.\n\nADA\n(quietly)\nFound it.\n"
    )
    client.get_token_usage.return_value = {
        "prompt_tokens": 10,
        "completion_tokens": 20,
        "total_tokens": 30,
    }
    return client


def _git(repo: Path, *args: str, env: dict[str, str] | None = None) -> None:
    subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True, env=env)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A real repository with three commits and a v1.0.0 tag after the first."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "config", "user.name", "Ada Lovelace")
    _git(repo, "config", "user.email", "ada@example.com")
    _git(repo, "config", "commit.gpgsign", "false")
    _git(repo, "config", "tag.gpgsign", "false")

    (repo / "README.md").write_text("# Demo\n")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "docs: initial readme")
    _git(repo, "tag", "-a", "v1.0.0", "-m", "First release")

    (repo / "app.py").write_text("print('hello')\n")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "feat: add app", "-m", "Co-authored-by: Grace Hopper <g@x.io>")

    _git(repo, "mv", "app.py", "main.py")
    _git(repo, "commit", "-q", "-m", "refactor: rename app")

    return repo

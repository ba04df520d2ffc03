"""Tests for codetheater.git.service."""

from __future__ import annotations

from pathlib import Path

import pytest

from codetheater.exceptions import GitError
from codetheater.git.service import (
    FIELD_SEP,
    RECORD_SEP,
    GitService,
    parse_log,
    parse_name_status,
    parse_numstat,
    revision_range,
    split_rename_path,
)


def log_record(sha: str, subject: str, stats: str = "", body: str = "", parents: str = "") -> str:
    fields = [sha, parents, "Ada Lovelace", "ada@example.com", "2026-03-02T22:15:00+01:00"]
    return RECORD_SEP + FIELD_SEP.join(fields + [subject, body]) + FIELD_SEP + "\n\n" + stats


class TestSplitRenamePath:
    def test_plain_path(self) -> None:
        assert split_rename_path("src/a.py") == ("src/a.py", None)

    def test_arrow_rename(self) -> None:
        assert split_rename_path("old.py => new.py") == ("new.py", "old.py")

    def test_brace_rename(self) -> None:
        assert split_rename_path("src/{core => lib}/a.py") == ("src/lib/a.py", "src/core/a.py")

    def test_brace_rename_empty_side(self) -> None:
        assert split_rename_path("src/{ => lib}/a.py") == ("src/lib/a.py", "src/a.py")


class TestParseNumstat:
    def test_counts_and_binary(self) -> None:
        files = parse_numstat(["3\t1\tsrc/a.py", "-\t-\tlogo.png", "garbage"])
        assert [(f.path, f.additions, f.deletions) for f in files] == [
            ("src/a.py", 3, 1),
            ("logo.png", 0, 0),
        ]

    def test_rename_sets_previous_path(self) -> None:
        (change,) = parse_numstat(["0\t0\told.py => new.py"])
        assert change.status == "renamed"
        assert change.previous_path == "old.py"


class TestParseNameStatus:
    def test_maps_status_codes(self) -> None:
        output = f"{RECORD_SEP}abc\n\nA\tnew.py\nD\tgone.py\nR087\told.py\trenamed.py\n"
        assert parse_name_status(output) == {
            "abc": {"new.py": "added", "gone.py": "deleted", "renamed.py": "renamed"}
        }


class TestParseLog:
    def test_parses_fields_and_totals(self) -> None:
        output = log_record(
            "a" * 40,
            "feat: add parser",
            stats="10\t2\tsrc/parser.py\n5\t0\ttests/test_parser.py\n",
            body="Longer explanation\n\nCo-authored-by: Grace <g@x.io>\n",
            parents="b" * 40,
        )
        (commit,) = parse_log(output, {"a" * 40: {"src/parser.py": "added"}})

        assert commit.short_sha == "aaaaaaa"
        assert commit.message == "feat: add parser"
        assert commit.body.startswith("Longer explanation")
        assert commit.additions == 15
        assert commit.deletions == 2
        assert commit.date.hour == 22
        assert commit.parents == ("b" * 40,)
        assert commit.files[0].status == "added"
        assert commit.files[1].status == "modified"

    def test_multiple_records_keep_order(self) -> None:
        output = log_record("1" * 40, "first") + log_record("2" * 40, "second")
        assert [c.message for c in parse_log(output)] == ["first", "second"]

    def test_commit_without_files(self) -> None:
        (commit,) = parse_log(log_record("c" * 40, "empty"))
        assert commit.files == ()
        assert commit.changed_lines == 0

    def test_utc_z_suffix(self) -> None:
        output = log_record("d" * 40, "zulu").replace("+01:00", "Z")
        (commit,) = parse_log(output)
        assert commit.date.utcoffset().total_seconds() == 0

    def test_skips_malformed_records(self) -> None:
        assert parse_log(RECORD_SEP + "not a record") == []


class TestRevisionRange:
    def test_with_from(self) -> None:
        assert revision_range("v1.0", "HEAD") == "v1.0..HEAD"

    def test_without_from(self) -> None:
        assert revision_range(None, "main") == "main"


class TestGitService:
    def test_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(GitError, match="not found"):
            GitService.create(tmp_path / "missing")

    def test_non_repository_raises(self, tmp_path: Path, git_repo: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(GitError):
            GitService.create(plain)

    def test_get_commits_oldest_first(self, git_repo: Path) -> None:
        commits = GitService.create(git_repo).get_commits()
        assert [c.message for c in commits] == [
            "docs: initial readme",
            "feat: add app",
            "refactor: rename app",
        ]
        assert commits[0].files[0].path == "README.md"
        assert commits[1].files[0].status == "added"
        assert "Co-authored-by: Grace Hopper" in commits[1].body

    def test_rename_detected(self, git_repo: Path) -> None:
        rename = GitService.create(git_repo).get_commits()[-1]
        assert rename.files[0].path == "main.py"
        assert rename.files[0].previous_path == "app.py"
        assert rename.files[0].status == "renamed"

    def test_range_excludes_start(self, git_repo: Path) -> None:
        commits = GitService.create(git_repo).get_commits("v1.0.0", "HEAD")
        assert [c.message for c in commits] == ["feat: add app", "refactor: rename app"]

    def test_get_tags(self, git_repo: Path) -> None:
        service = GitService.create(git_repo)
        (tag,) = service.get_tags()
        first = service.get_commits()[0]
        assert tag.name == "v1.0.0"
        assert tag.sha == first.sha
        assert tag.message == "First release"

    def test_count_commits(self, git_repo: Path) -> None:
        service = GitService.create(git_repo)
        assert service.count_commits(None, "v1.0.0") == 1
        assert service.count_commits("v1.0.0", "HEAD") == 2

    def test_bad_ref_raises(self, git_repo: Path) -> None:
        with pytest.raises(GitError):
            GitService.create(git_repo).get_commits("no-such-ref", "HEAD")

"""Tests for codetheater.io module - JSON and text I/O utilities."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from codetheater.io import read_json, write_json, write_text


class TestReadJson:
    def test_read_valid_json(self, tmp_path: Path) -> None:
        data = {"key": "value", "number": 42}
        json_file = tmp_path / "test.json"
        json_file.write_text(json.dumps(data))

        assert read_json(json_file) == data

    def test_read_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_json(tmp_path / "nonexistent.json")

    def test_read_invalid_json_raises(self, tmp_path: Path) -> None:
        json_file = tmp_path / "invalid.json"
        json_file.write_text("{not valid json}")

        with pytest.raises(json.JSONDecodeError):
            read_json(json_file)


class TestWriteJson:
    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        output_path = tmp_path / "a" / "b" / "out.json"
        write_json(output_path, {"scene": 1})
        assert json.loads(output_path.read_text()) == {"scene": 1}

    def test_preserves_unicode(self, tmp_path: Path) -> None:
        output_path = tmp_path / "out.json"
        write_json(output_path, {"emoji": "🎭"})
        assert "🎭" in output_path.read_text(encoding="utf-8")

    def test_serializes_datetimes_as_strings(self, tmp_path: Path) -> None:
        output_path = tmp_path / "out.json"
        when = datetime(2026, 1, 1, tzinfo=timezone.utc)
        write_json(output_path, {"at": when})
        assert read_json(output_path)["at"] == str(when)

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        write_json(tmp_path / "out.json", {"a": 1})
        write_json(tmp_path / "out.json", {"a": 2})
        assert [p.name for p in tmp_path.iterdir()] == ["out.json"]
        assert read_json(tmp_path / "out.json") == {"a": 2}


class TestWriteText:
    def test_writes_text(self, tmp_path: Path) -> None:
        output_path = tmp_path / "nested" / "play.txt"
        write_text(output_path, "FADE IN:\n")
        assert output_path.read_text() == "FADE IN:\n"

    def test_failed_write_keeps_previous_content(self, tmp_path: Path) -> None:
        output_path = tmp_path / "out.json"
        write_json(output_path, {"act": 1})
        circular: dict = {}
        circular["self"] = circular

        with pytest.raises(ValueError):
            write_json(output_path, circular)

        assert read_json(output_path) == {"act": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["out.json"]

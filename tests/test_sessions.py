"""Tests for codetheater.sessions."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from codetheater.exceptions import LLMError
from codetheater.sessions import SessionStore, StoredNarrative

SUMMARY_JSON = json.dumps(
    {
        "summary": "The parser was rewritten under pressure.",
        "keyEvents": ["Ada broke the build", "Grace fixed it", "Release shipped"],
        "characterStates": {"Ada Lovelace": "exhausted", "Grace Hopper": "vindicated"},
    }
)


@pytest.fixture
def store(tmp_path: Path) -> SessionStore:
    return SessionStore(tmp_path)


@pytest.fixture
def director() -> MagicMock:
    director = MagicMock()
    director.send.return_value = f"Here you go:\n```json\n{SUMMARY_JSON}\n```"
    return director


class TestBeginAct:
    def test_fresh_story_is_act_one(self, store: SessionStore) -> None:
        start = store.begin_act("h", "/repo", director_session_id="abc")
        assert start.act_number == 1
        assert start.recap is None
        session = store.get_session("h")
        assert session.repo_path == "/repo"
        assert session.director_session_id == "abc"

    def test_continue_without_story_starts_fresh(self, store: SessionStore) -> None:
        assert store.begin_act("h", "/repo", continue_story=True).act_number == 1

    def test_continue_uses_stored_narrative(self, store: SessionStore, director) -> None:
        store.begin_act("h", "/repo")
        store.save_act_summary("h", 1, director, "deadbeef")

        start = store.begin_act("h", "/repo", continue_story=True)

        assert start.act_number == 2
        assert start.narrative.summary.startswith("The parser")
        assert "STORY SO FAR (Acts I-I)" in start.recap
        assert "1. Ada broke the build" in start.recap
        assert "- Grace Hopper: vindicated" in start.recap
        assert "LAST COMMIT: deadbeef" in start.recap
        assert store.get_session("h").act_count == 2

    def test_continue_falls_back_to_session_count(self, store: SessionStore) -> None:
        store.begin_act("h", "/repo")
        assert store.begin_act("h", "/repo", continue_story=True).act_number == 2

    def test_forget_clears_story(self, store: SessionStore, director) -> None:
        store.begin_act("h", "/repo")
        store.save_act_summary("h", 1, director, "deadbeef")

        start = store.begin_act("h", "/repo", continue_story=True, forget=True)

        assert start.act_number == 1
        assert store.get_narrative("h") is None


class TestSaveActSummary:
    def test_stores_narrative(self, store: SessionStore, director) -> None:
        store.begin_act("h", "/repo")
        narrative = store.save_act_summary("h", 1, director, "cafe")

        assert isinstance(narrative, StoredNarrative)
        assert narrative.key_events[-1] == "Release shipped"
        assert store.get_narrative("h").character_states["Ada Lovelace"] == "exhausted"
        prompt = director.send.call_args[0][0]
        assert "Only output the JSON" in prompt

    def test_unparseable_reply_is_logged(self, store: SessionStore, director, caplog) -> None:
        director.send.return_value = "I cannot summarize that."
        assert store.save_act_summary("h", 1, director, "cafe") is None
        assert store.get_narrative("h") is None
        assert "Could not save act summary" in caplog.text

    def test_llm_failure_is_logged(self, store: SessionStore, director) -> None:
        director.send.side_effect = LLMError("offline")
        assert store.save_act_summary("h", 1, director, "cafe") is None


class TestListAndClear:
    def test_list_sessions(self, store: SessionStore) -> None:
        store.begin_act("a", "/repo/a")
        store.begin_act("b", "/repo/b")
        assert [key for key, _ in store.list_sessions()] == ["a", "b"]

    def test_clear_one(self, store: SessionStore) -> None:
        store.begin_act("a", "/repo/a")
        store.begin_act("b", "/repo/b")
        assert store.clear("a")
        assert not store.clear("a")
        assert [key for key, _ in store.list_sessions()] == ["b"]

    def test_clear_all(self, store: SessionStore, tmp_path: Path) -> None:
        store.begin_act("a", "/repo/a")
        store.clear_all()
        assert store.list_sessions() == []
        assert not (tmp_path / "sessions.json").exists()

    def test_corrupt_store_is_empty(self, store: SessionStore, tmp_path: Path) -> None:
        (tmp_path / "sessions.json").write_text("not json")
        assert store.list_sessions() == []
        assert store.begin_act("a", "/repo").act_number == 1

"""
codetheater.sessions - Story continuity across runs.

Two JSON stores live in the state directory, both keyed by repo hash:

- sessions.json: bookkeeping for the last run (act count, timestamps)
- narratives.json: the director's summary of the last act, used to
  build a "story so far" recap when a story is continued

Persistence is best effort. A corrupt or unwritable store is logged and
treated as empty so generation can still go ahead.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from codetheater.exceptions import CacheError, CodeTheaterError
from codetheater.io import read_json, write_json
from codetheater.llm.director import DirectorSession
from codetheater.llm.parsing import parse_llm_json, validate_act_summary
from codetheater.llm.templates import PromptTemplateManager
from codetheater.utils import to_roman

logger = logging.getLogger(__name__)

SESSIONS_FILE = "sessions.json"
NARRATIVES_FILE = "narratives.json"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StorySession(BaseModel):
    director_session_id: str = ""
    last_generated: datetime = Field(default_factory=_now)
    act_count: int = 1
    repo_path: str = ""


class StoredNarrative(BaseModel):
    act_number: int
    summary: str
    key_events: list[str] = []
    character_states: dict[str, str] = {}
    last_commit_sha: str = ""
    generated_at: datetime = Field(default_factory=_now)


class ActStart(BaseModel):
    """Where a new act picks up."""

    act_number: int
    recap: str | None = None
    narrative: StoredNarrative | None = None


class SessionStore:
    """Reads and writes story sessions under the state directory."""

    def __init__(
        self,
        state_dir: Path,
        template_manager: PromptTemplateManager | None = None,
    ) -> None:
        self.state_dir = state_dir
        self.templates = template_manager or PromptTemplateManager()

    @property
    def sessions_path(self) -> Path:
        return self.state_dir / SESSIONS_FILE

    @property
    def narratives_path(self) -> Path:
        return self.state_dir / NARRATIVES_FILE

    def _load(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            data = read_json(path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable %s: %s", path.name, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, path: Path, data: dict[str, Any]) -> None:
        try:
            write_json(path, data)
        except OSError as e:
            logger.warning("Could not write %s: %s", path.name, e)

    def get_session(self, repo_hash: str) -> StorySession | None:
        raw = self._load(self.sessions_path).get(repo_hash)
        if raw is None:
            return None
        try:
            return StorySession.model_validate(raw)
        except ValidationError as e:
            logger.warning("Ignoring invalid session for %s: %s", repo_hash, e)
            return None

    def get_narrative(self, repo_hash: str) -> StoredNarrative | None:
        raw = self._load(self.narratives_path).get(repo_hash)
        if raw is None:
            return None
        try:
            return StoredNarrative.model_validate(raw)
        except ValidationError as e:
            logger.warning("Ignoring invalid narrative for %s: %s", repo_hash, e)
            return None

    def save_session(self, repo_hash: str, session: StorySession) -> None:
        data = self._load(self.sessions_path)
        data[repo_hash] = session.model_dump(mode="json")
        self._save(self.sessions_path, data)

    def save_narrative(self, repo_hash: str, narrative: StoredNarrative) -> None:
        data = self._load(self.narratives_path)
        data[repo_hash] = narrative.model_dump(mode="json")
        self._save(self.narratives_path, data)

    def begin_act(
        self,
        repo_hash: str,
        repo_path: str,
        continue_story: bool = False,
        forget: bool = False,
        director_session_id: str = "",
    ) -> ActStart:
        """Work out the act number and recap for a new run, and record it.

        Args:
            repo_hash: Key for the repository
            repo_path: Repository path or URL, stored for listing
            continue_story: Pick up after the last stored act
            forget: Drop any stored story first
            director_session_id: Id of the director conversation for this act

        Returns:
            ActStart with act number, recap text and the stored narrative
        """
        if forget:
            self.clear(repo_hash)

        start = ActStart(act_number=1)
        if continue_story and not forget:
            narrative = self.get_narrative(repo_hash)
            session = self.get_session(repo_hash)
            if narrative:
                start = ActStart(
                    act_number=narrative.act_number + 1,
                    recap=self.build_recap_context(narrative),
                    narrative=narrative,
                )
            elif session:
                start = ActStart(act_number=session.act_count + 1)
            else:
                logger.info("No previous story for %s; starting fresh", repo_hash)

        self.save_session(
            repo_hash,
            StorySession(
                director_session_id=director_session_id,
                act_count=start.act_number,
                repo_path=repo_path,
            ),
        )
        return start

    def build_recap_context(self, narrative: StoredNarrative) -> str:
        return self.templates.render(
            "recap.txt",
            {
                "LAST_ACT_ROMAN": to_roman(narrative.act_number),
                "SUMMARY": narrative.summary,
                "KEY_EVENTS": narrative.key_events,
                "CHARACTER_STATES": narrative.character_states,
                "LAST_COMMIT_SHA": narrative.last_commit_sha,
            },
        )

    def save_act_summary(
        self,
        repo_hash: str,
        act_number: int,
        director: DirectorSession,
        last_commit_sha: str,
        console=None,
    ) -> StoredNarrative | None:
        """Ask the director to summarize the act and store the result.

        Failures are logged and reported as None; they never abort a run.
        """
        try:
            reply = director.send(self.templates.render("act_summary.txt", {}), console=console)
            summary = validate_act_summary(parse_llm_json(reply))
        except CodeTheaterError as e:
            logger.warning("Could not save act summary: %s", e)
            if console:
                console.print("[dim]Could not save act summary[/dim]")
            return None

        narrative = StoredNarrative(
            act_number=act_number,
            last_commit_sha=last_commit_sha,
            **summary,
        )
        self.save_narrative(repo_hash, narrative)

        session = self.get_session(repo_hash)
        if session:
            session.act_count = act_number
            session.last_generated = _now()
            self.save_session(repo_hash, session)

        return narrative

    def list_sessions(self) -> list[tuple[str, StorySession]]:
        sessions = []
        for repo_hash in self._load(self.sessions_path):
            session = self.get_session(repo_hash)
            if session:
                sessions.append((repo_hash, session))
        return sessions

    def clear(self, repo_hash: str) -> bool:
        """Forget one repository's story. Returns True if anything was removed."""
        removed = False
        for path in (self.sessions_path, self.narratives_path):
            data = self._load(path)
            if repo_hash in data:
                del data[repo_hash]
                self._save(path, data)
                removed = True
        return removed

    def clear_all(self) -> None:
        for path in (self.sessions_path, self.narratives_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise CacheError(f"Could not remove {path}: {e}") from e

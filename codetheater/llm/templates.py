"""
codetheater.llm.templates - Prompt template loading and rendering.

Uses Jinja2 to load and render the prompt templates shipped in
codetheater/prompts/.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

from jinja2 import Environment, FileSystemLoader, Template

from codetheater.models import Commit
from codetheater.utils import format_date

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

GENRE_DIRECTIONS = {
    "drama": (
        "Focus on the human element. The struggles, triumphs, and relationships "
        "between developers. Late nights and hard decisions. The weight of technical "
        "debt and the satisfaction of clean code. Treat every commit as a chapter in "
        "someone's professional journey."
    ),
    "comedy": (
        "Write with wit and humor. Find the absurdity in debugging sessions, the "
        "comedy in merge conflicts, and the slapstick potential of production "
        "incidents. Use comedic timing, witty banter, and situational humor."
    ),
    "thriller": (
        "Build tension and suspense. Every commit could be the one that brings down "
        "production. Hotfixes are races against time. Unknown bugs lurk in the "
        "shadows. Use short, punchy sentences. Create a sense of urgency and dread."
    ),
    "noir": (
        "Write in a dark, atmospheric style. The codebase is a city at night, full of "
        "shadows and secrets. Developers are detectives hunting bugs through "
        "rain-soaked streets of legacy code. Use metaphor heavily. First-person "
        "narration encouraged."
    ),
}


class PromptTemplateManager:
    """Manages loading and rendering of prompt templates."""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR) -> None:
        self.prompts_dir = prompts_dir
        self.env = Environment(
            loader=FileSystemLoader(str(prompts_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._cache: dict[str, Template] = {}

    def get_template(self, name: str) -> Template:
        """Load a template by name.

        Args:
            name: Template filename (e.g., "scene.txt")

        Returns:
            Jinja2 Template object

        Raises:
            FileNotFoundError: If template doesn't exist
        """
        if name not in self._cache:
            template_path = self.prompts_dir / name
            if not template_path.exists():
                raise FileNotFoundError(f"Template not found: {template_path}")
            self._cache[name] = self.env.get_template(name)
        return self._cache[name]

    def render(self, template_name: str, variables: dict[str, Any]) -> str:
        """Render a template with variables.

        Args:
            template_name: Template filename
            variables: Dict of template variables

        Returns:
            Rendered prompt string
        """
        template = self.get_template(template_name)
        return template.render(**variables).strip() + "\n"

    def list_templates(self) -> list[str]:
        """List available templates."""
        if not self.prompts_dir.exists():
            return []
        return sorted(f.name for f in self.prompts_dir.glob("*.txt"))


def genre_direction(genre: str) -> str:
    return GENRE_DIRECTIONS.get(genre, GENRE_DIRECTIONS["drama"])


def format_files_for_prompt(commit: Commit, limit: int = 5) -> str:
    """Comma-separated list of the first few changed paths."""
    paths = [f.path for f in commit.files[:limit]]
    if not paths:
        return "various files"
    extra = len(commit.files) - limit
    text = ", ".join(paths)
    if extra > 0:
        text += f" (+{extra} more)"
    return text


def format_commit_summary(commits: Sequence[Commit], limit: int = 5) -> str:
    """Bullet list of ``author: message`` lines for montage narration.

    Args:
        commits: Commits in the montage
        limit: Maximum lines before summarizing the rest

    Returns:
        Formatted summary string
    """
    lines = [f"- {c.author.name}: {c.message}" for c in commits[:limit]]
    if len(commits) > limit:
        lines.append(f"... and {len(commits) - limit} more")
    return "\n".join(lines)


def format_time_span(commits: Sequence[Commit]) -> str:
    if not commits:
        return ""
    start = format_date(commits[0].date)
    end = format_date(commits[-1].date)
    return start if start == end else f"{start} to {end}"

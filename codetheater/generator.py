"""
codetheater.generator - Scene generation orchestrator.

Partitions a commit range into scene groups, then walks them in order,
asking the director for one piece of screenplay per group and rendering
each reply as it arrives.
"""

from __future__ import annotations

import logging
from typing import Sequence

from codetheater.characters import CharacterPool
from codetheater.config import DensityConfig
from codetheater.llm.director import DirectorSession
from codetheater.llm.templates import (
    PromptTemplateManager,
    format_commit_summary,
    format_files_for_prompt,
    format_time_span,
)
from codetheater.models import Commit
from codetheater.render.theater import TheaterRenderer
from codetheater.scenes import DensityResult, SceneGroup, build_scene_groups, select_mode
from codetheater.utils import time_of_day, to_roman

logger = logging.getLogger(__name__)

ACT_BREAK_CONTRIBUTORS = 5


def unique_authors(commits: Sequence[Commit], limit: int | None = None) -> list[str]:
    """Author names in first-appearance order."""
    names = list(dict.fromkeys(c.author.name for c in commits))
    return names[:limit] if limit is not None else names


class SceneGenerator:
    """Drives one act: opening, one director call per scene group, act break."""

    def __init__(
        self,
        renderer: TheaterRenderer,
        template_manager: PromptTemplateManager,
        density_config: DensityConfig | None = None,
    ) -> None:
        self.renderer = renderer
        self.templates = template_manager
        self.density = density_config or DensityConfig()

    def generate(
        self,
        commits: Sequence[Commit],
        director: DirectorSession,
        cast: CharacterPool,
        genre: str = "drama",
        act_number: int = 1,
        full: bool = False,
        highlights_only: bool = False,
        recap: str | None = None,
    ) -> DensityResult:
        """Generate and render a full act.

        Args:
            commits: Commits oldest first
            director: Running director conversation
            cast: Character pool for the act
            genre: Screenplay genre
            act_number: Act being generated (1 for a fresh story)
            full: Force one scene per commit
            highlights_only: Force highlights mode
            recap: Story-so-far context for continued stories

        Returns:
            The DensityResult that was dramatized

        Raises:
            LLMError: If the director cannot be reached
        """
        commits = list(commits)
        mode = select_mode(len(commits), full, highlights_only, self.density)
        result = build_scene_groups(commits, mode, self.density)
        logger.debug("Mode %s: %d commits in %d scenes", mode, len(commits), result.scenes_count)

        self.renderer.render_title(
            "Code Theater",
            f"Act {to_roman(act_number)} · {genre.title()} · "
            f"{len(commits)} commits · {mode} mode",
        )

        opening = self.templates.render(
            "opening.txt",
            {
                "ACT_NUMBER": act_number,
                "GENRE": genre,
                "TIME_SPAN": format_time_span(commits),
                "COMMIT_COUNT": len(commits),
                "CONTRIBUTORS": cast.named_characters() or unique_authors(commits),
                "RECAP": recap,
            },
        )
        self._perform(director, opening, cast)

        for scene_number, group in enumerate(result.scenes, start=1):
            self.generate_scene(group, scene_number, director, cast, genre)

        teaser_prompt = self.templates.render(
            "act_break.txt",
            {
                "ACT_NUMBER": act_number,
                "COMMIT_COUNT": len(commits),
                "CONTRIBUTORS": unique_authors(commits, ACT_BREAK_CONTRIBUTORS),
                "TIME_SPAN": format_time_span(commits),
            },
        )
        teaser = director.send(teaser_prompt, console=self.renderer.console)
        self.renderer.render_act_break(act_number, teaser)

        return result

    def generate_scene(
        self,
        group: SceneGroup,
        scene_number: int,
        director: DirectorSession,
        cast: CharacterPool,
        genre: str,
    ) -> None:
        if group.kind == "montage":
            prompt = self.templates.render(
                "montage.txt",
                {
                    "TITLE": group.title or "Development",
                    "COMMIT_COUNT": len(group.commits),
                    "COMMIT_SUMMARY": format_commit_summary(group.commits),
                    "TIME_SPAN": format_time_span(group.commits),
                    "GENRE": genre,
                },
            )
            narration = director.send(prompt, console=self.renderer.console)
            self.renderer.render_montage(group.title or "Development", group.commits, narration)
            return

        commit = group.commits[0]
        if group.kind == "highlight":
            self.renderer.render_pivotal_banner()

        prompt = self.templates.render(
            "scene.txt",
            {
                "SCENE_NUMBER": scene_number,
                "PIVOTAL": group.kind == "highlight",
                "COMMIT": commit,
                "PROFILE": cast.get_profile(commit.author.name),
                "FILES": format_files_for_prompt(commit),
                "GENRE": genre,
                "TIME_OF_DAY": time_of_day(commit.date),
            },
        )
        self._perform(director, prompt, cast)

    def _perform(self, director: DirectorSession, prompt: str, cast: CharacterPool) -> None:
        reply = director.send(prompt, console=self.renderer.console)
        self.renderer.render_screenplay(reply, cast)

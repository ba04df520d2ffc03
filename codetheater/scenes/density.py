"""
codetheater.scenes.density - Scene density selection and grouping.

Large release windows cannot be dramatized commit by commit. Three
strategies keep the screenplay bounded:

- full: every commit is its own scene (small ranges)
- montage: consecutive commits sharing a theme are narrated together,
  with the first pivotal commit of each run pulled out as a highlight
- highlights: only the top-scoring commits get scenes; everything
  between them is summarized as montages

All functions are pure; thresholds come from DensityConfig.
"""

from __future__ import annotations

from typing import Literal, Sequence

from pydantic import BaseModel, Field

from codetheater.config import DensityConfig
from codetheater.models import Commit
from codetheater.scenes.scoring import is_pivotal, rank_pivotal_indices
from codetheater.scenes.themes import classify_theme

DensityMode = Literal["full", "montage", "highlights"]
SceneKind = Literal["single", "montage", "highlight"]


class SceneGroup(BaseModel):
    """A unit of dramatization wrapping one or more commits."""

    kind: SceneKind
    commits: list[Commit] = Field(min_length=1)
    title: str | None = None
    is_pivotal: bool = False


class DensityResult(BaseModel):
    """Scene groups for one generation run."""

    mode: DensityMode
    scenes: list[SceneGroup] = Field(default_factory=list)
    total_commits: int = 0

    @property
    def scenes_count(self) -> int:
        return len(self.scenes)

    def flattened(self) -> list[Commit]:
        """All commits across scenes, in emission order."""
        return [c for scene in self.scenes for c in scene.commits]


def select_mode(
    commit_count: int,
    full: bool = False,
    highlights_only: bool = False,
    config: DensityConfig | None = None,
) -> DensityMode:
    """Choose a density mode from the commit count and explicit overrides.

    Args:
        commit_count: Number of commits in the range
        full: Force one scene per commit
        highlights_only: Force highlights mode
        config: Thresholds (defaults: 50 full, 200 montage)

    Returns:
        "full", "montage" or "highlights"
    """
    config = config or DensityConfig()

    if full:
        return "full"
    if highlights_only:
        return "highlights"

    if commit_count <= config.full_threshold:
        return "full"
    if commit_count <= config.montage_threshold:
        return "montage"
    return "highlights"


def build_scene_groups(
    commits: Sequence[Commit],
    mode: DensityMode,
    config: DensityConfig | None = None,
) -> DensityResult:
    """Partition a chronological commit list into scene groups.

    Args:
        commits: Commits in ascending chronological order
        mode: Density mode from select_mode
        config: Thresholds and limits

    Returns:
        DensityResult whose flattened commits equal the input
    """
    config = config or DensityConfig()
    commits = list(commits)

    if mode == "full":
        scenes = _process_full(commits)
    elif mode == "montage":
        scenes = _process_montage(commits, config)
    elif mode == "highlights":
        scenes = _process_highlights(commits, config)
    else:
        raise ValueError(f"Unknown density mode: {mode}")

    return DensityResult(mode=mode, scenes=scenes, total_commits=len(commits))


def _process_full(commits: list[Commit]) -> list[SceneGroup]:
    return [SceneGroup(kind="single", commits=[commit]) for commit in commits]


def _process_montage(commits: list[Commit], config: DensityConfig) -> list[SceneGroup]:
    scenes: list[SceneGroup] = []

    for title, group in group_by_theme(commits, config.merge_below):
        if len(group) == 1:
            scenes.append(SceneGroup(kind="single", commits=group))
            continue

        pivotal_index = next(
            (i for i, c in enumerate(group) if is_pivotal(c, config)),
            None,
        )
        if pivotal_index is None:
            scenes.append(SceneGroup(kind="montage", title=title, commits=group))
            continue

        # Only the first pivotal commit of a run is promoted to a highlight.
        others = group[:pivotal_index] + group[pivotal_index + 1 :]
        if others:
            scenes.append(SceneGroup(kind="montage", title=title, commits=others))
        scenes.append(
            SceneGroup(kind="highlight", commits=[group[pivotal_index]], is_pivotal=True)
        )

    return scenes


def _process_highlights(commits: list[Commit], config: DensityConfig) -> list[SceneGroup]:
    scenes: list[SceneGroup] = []
    checkpoints = sorted(rank_pivotal_indices(commits, config.highlights_count))

    last_index = 0
    for index in checkpoints:
        skipped = commits[last_index:index]
        if skipped:
            scenes.append(
                SceneGroup(kind="montage", title=classify_theme(skipped), commits=skipped)
            )
        scenes.append(SceneGroup(kind="highlight", commits=[commits[index]], is_pivotal=True))
        last_index = index + 1

    remaining = commits[last_index:]
    if remaining:
        scenes.append(
            SceneGroup(kind="montage", title=classify_theme(remaining), commits=remaining)
        )

    return scenes


def group_by_theme(
    commits: Sequence[Commit],
    merge_below: int = 3,
) -> list[tuple[str, list[Commit]]]:
    """Split commits into contiguous same-theme runs, then merge small neighbours.

    Theme is evaluated per commit. Two commits with the same theme that are
    separated by a differently-themed commit land in different runs.
    """
    runs: list[tuple[str, list[Commit]]] = []
    for commit in commits:
        theme = classify_theme([commit])
        if runs and runs[-1][0] == theme:
            runs[-1][1].append(commit)
        else:
            runs.append((theme, [commit]))

    return merge_small_groups(runs, merge_below)


def merge_small_groups(
    groups: list[tuple[str, list[Commit]]],
    merge_below: int = 3,
) -> list[tuple[str, list[Commit]]]:
    """Greedily merge adjacent groups while both are smaller than ``merge_below``.

    The pending group is a running accumulator, so a freshly merged group
    can absorb the next small group too.
    """
    result: list[tuple[str, list[Commit]]] = []
    pending: tuple[str, list[Commit]] | None = None

    for title, group in groups:
        if pending is None:
            pending = (title, group)
            continue

        if len(pending[1]) < merge_below and len(group) < merge_below:
            pending = (f"{pending[0]} & {title}", pending[1] + group)
        else:
            result.append(pending)
            pending = (title, group)

    if pending is not None:
        result.append(pending)

    return result

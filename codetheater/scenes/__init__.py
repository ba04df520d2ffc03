"""
codetheater.scenes - Scene density and narrative compression.

Decides how a commit range is partitioned into scenes: which commits get
full dramatization, which are compressed into montages, and how each
group is labeled. Everything here is pure and deterministic.
"""

from __future__ import annotations

from .density import (  # noqa: F401
    DensityMode,
    DensityResult,
    SceneGroup,
    build_scene_groups,
    select_mode,
)
from .scoring import is_pivotal, rank_pivotal, score_commit  # noqa: F401
from .themes import classify_theme, infer_theme  # noqa: F401

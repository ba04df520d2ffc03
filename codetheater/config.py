"""
codetheater.config - YAML config loading, merging, validation.

Handles loading the user config (~/.codetheater/config.yaml) and the
per-repository override (.codetheater.yaml), merging them and validating
all parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from codetheater.exceptions import ConfigError

DEFAULT_STATE_DIR = Path.home() / ".codetheater"
USER_CONFIG_NAME = "config.yaml"
REPO_CONFIG_NAME = ".codetheater.yaml"

GENRES = ("drama", "comedy", "thriller", "noir")


class DensityConfig(BaseModel):
    """Thresholds for scene density selection and pivotal scoring."""

    full_threshold: int = Field(default=50, gt=0)
    montage_threshold: int = Field(default=200, gt=0)
    highlights_count: int = Field(default=25, gt=0)
    pivotal_threshold: int = Field(default=5, gt=0)
    merge_below: int = Field(default=3, ge=0)

    @model_validator(mode="after")
    def validate_thresholds(self) -> DensityConfig:
        if self.montage_threshold < self.full_threshold:
            raise ValueError("montage_threshold must be >= full_threshold")
        return self


class TheaterConfig(BaseModel):
    """Resolved configuration for a Code Theater run."""

    genre: str = "drama"

    llm_backend: str = "ollama"
    llm_model: str = "llama3.1:8b"
    llm_timeout: int = Field(default=300, gt=0)
    max_retries: int = Field(default=3, ge=1)

    cache_ttl_hours: float = Field(default=24.0, gt=0.0)
    state_dir: Path = DEFAULT_STATE_DIR

    density: DensityConfig = Field(default_factory=DensityConfig)

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, v: str) -> str:
        if v not in GENRES:
            raise ValueError(f"genre must be one of: {set(GENRES)}")
        return v

    @field_validator("llm_backend")
    @classmethod
    def validate_llm_backend(cls, v: str) -> str:
        valid = {"ollama", "lmstudio", "claude", "openai"}
        if v not in valid:
            raise ValueError(f"llm_backend must be one of: {valid}")
        return v

    @field_validator("state_dir", mode="before")
    @classmethod
    def expand_state_dir(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @property
    def cache_dir(self) -> Path:
        return self.state_dir / "cache"

    @property
    def repos_dir(self) -> Path:
        return self.state_dir / "repos"


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file, returning {} when it does not exist."""
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two config dicts. Override takes precedence."""
    merged = base.copy()
    for key, value in override.items():
        if key == "density" and isinstance(value, dict):
            density = dict(merged.get("density") or {})
            density.update(value)
            merged["density"] = density
        elif value is not None:
            merged[key] = value
    return merged


def load_config(
    repo_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    state_dir: Path | None = None,
) -> TheaterConfig:
    """Load and validate configuration.

    Args:
        repo_path: Repository whose .codetheater.yaml should be applied
        overrides: Values from the command line, applied last
        state_dir: Directory holding the user config (default ~/.codetheater)

    Returns:
        Validated TheaterConfig

    Raises:
        ConfigError: If a config file is malformed or a value is invalid
    """
    state_dir = state_dir or DEFAULT_STATE_DIR
    raw = read_config_file(state_dir / USER_CONFIG_NAME)
    raw.setdefault("state_dir", str(state_dir))

    if repo_path is not None:
        raw = merge_config(raw, read_config_file(repo_path / REPO_CONFIG_NAME))

    if overrides:
        raw = merge_config(raw, overrides)

    try:
        return TheaterConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


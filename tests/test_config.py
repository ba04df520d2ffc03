"""Tests for codetheater.config module."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from codetheater.config import (
    DensityConfig,
    TheaterConfig,
    load_config,
    merge_config,
    read_config_file,
)
from codetheater.exceptions import ConfigError


class TestTheaterConfig:
    def test_default_config(self) -> None:
        config = TheaterConfig()
        assert config.genre == "drama"
        assert config.llm_backend == "ollama"
        assert config.cache_ttl_hours == 24.0
        assert config.density == DensityConfig()

    def test_invalid_genre_raises(self) -> None:
        with pytest.raises(ValueError):
            TheaterConfig(genre="musical")

    def test_invalid_llm_backend_raises(self) -> None:
        with pytest.raises(ValueError):
            TheaterConfig(llm_backend="invalid")

    def test_state_dir_expands_user(self) -> None:
        config = TheaterConfig(state_dir="~/theater")
        assert config.state_dir == Path("~/theater").expanduser()
        assert config.cache_dir == config.state_dir / "cache"
        assert config.repos_dir == config.state_dir / "repos"


class TestMergeConfig:
    def test_override_wins(self) -> None:
        assert merge_config({"genre": "drama"}, {"genre": "noir"}) == {"genre": "noir"}

    def test_none_values_ignored(self) -> None:
        assert merge_config({"genre": "drama"}, {"genre": None}) == {"genre": "drama"}

    def test_density_merged_key_by_key(self) -> None:
        base = {"density": {"full_threshold": 10, "montage_threshold": 100}}
        merged = merge_config(base, {"density": {"montage_threshold": 300}})
        assert merged["density"] == {"full_threshold": 10, "montage_threshold": 300}

    def test_base_not_mutated(self) -> None:
        base = {"density": {"full_threshold": 10}}
        merge_config(base, {"density": {"full_threshold": 20}})
        assert base["density"]["full_threshold"] == 10


class TestReadConfigFile:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert read_config_file(tmp_path / "nope.yaml") == {}

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("genre: [unclosed")
        with pytest.raises(ConfigError):
            read_config_file(path)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            read_config_file(path)


class TestLoadConfig:
    def test_defaults_without_files(self, tmp_path: Path) -> None:
        config = load_config(state_dir=tmp_path)
        assert config.genre == "drama"
        assert config.state_dir == tmp_path

    def test_repo_file_overrides_user_file(self, tmp_path: Path) -> None:
        state = tmp_path / "state"
        state.mkdir()
        repo = tmp_path / "repo"
        repo.mkdir()
        (state / "config.yaml").write_text(
            yaml.dump({"genre": "comedy", "llm_model": "m1", "density": {"full_threshold": 10}})
        )
        (repo / ".codetheater.yaml").write_text(
            yaml.dump({"genre": "noir", "density": {"montage_threshold": 40}})
        )

        config = load_config(repo, state_dir=state)

        assert config.genre == "noir"
        assert config.llm_model == "m1"
        assert config.density.full_threshold == 10
        assert config.density.montage_threshold == 40

    def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / ".codetheater.yaml").write_text("genre: comedy\n")
        config = load_config(tmp_path, overrides={"genre": "thriller"}, state_dir=tmp_path)
        assert config.genre == "thriller"

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        (tmp_path / ".codetheater.yaml").write_text("genre: opera\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path, state_dir=tmp_path)

    def test_invalid_density_raises_config_error(self, tmp_path: Path) -> None:
        (tmp_path / ".codetheater.yaml").write_text(
            yaml.dump({"density": {"full_threshold": 300}})
        )
        with pytest.raises(ConfigError):
            load_config(tmp_path, state_dir=tmp_path)

"""Unit tests for project root discovery."""

from pathlib import Path

import pytest

from src.utils.paths import get_project_root


def test_finds_config_yaml_above_start(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text("config: {}\n")
    nested = tmp_path / "services" / "frontend"
    nested.mkdir(parents=True)

    assert get_project_root(nested) == tmp_path.resolve()


def test_environment_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BRANCH_DEPLOY_ROOT", str(tmp_path))

    assert get_project_root(Path("/")) == tmp_path.resolve()


def test_nearest_marker_wins(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("")
    inner = tmp_path / "app"
    inner.mkdir()
    (inner / "config.yaml").write_text("config: {}\n")

    assert get_project_root(inner) == inner.resolve()

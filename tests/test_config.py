"""Tests for spmkit.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from spmkit.config import ConfigError, SpmKitConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, SpmKitConfig)
    assert config.root == tmp_path.resolve()
    assert config.manifest_name == "Package.swift"
    assert config.commands.build == "swift build"
    assert config.include_test_tasks is True
    assert config.graph.dump_command == "swift package dump-package"
    assert config.graph.max_workers == 1
    assert config.graph.timeout is None
    assert config.graph.fallback is True
    assert config.exclude_paths == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".spmkit.yml"
    config_file.write_text(
        """
manifest_name: "Package@swift-5.9.swift"
commands:
  build: "swift build -c release"
  test: "swift test --parallel"
  lint: "swiftlint --strict"
include_lint_tasks: false
graph:
  dump_command: "xcrun swift package dump-package"
  max_workers: 4
  timeout: 30
  fallback: "no"
exclude_paths:
  - "vendor/"
  - "Examples"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.manifest_name == "Package@swift-5.9.swift"
    assert config.commands.build == "swift build -c release"
    assert config.commands.test == "swift test --parallel"
    assert config.include_test_tasks is True
    assert config.include_lint_tasks is False
    assert config.graph.dump_command == "xcrun swift package dump-package"
    assert config.graph.max_workers == 4
    assert config.graph.timeout == pytest.approx(30.0)
    assert config.graph.fallback is False
    assert config.exclude_paths == ["vendor/", "Examples"]

    options = config.task_options()
    assert options.lint_command == "swiftlint --strict"
    assert options.include_lint_tasks is False


def test_load_config_resolves_sibling_file(tmp_path: Path) -> None:
    (tmp_path / ".spmkit.yml").write_text("include_test_tasks: no\n", encoding="utf-8")

    config = load_config(tmp_path / "Package.swift")

    assert config.include_test_tasks is False


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".spmkit.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).commands.lint == "swiftlint"


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "graph: [unterminated\n",
        "graph:\n  max_workers: 0\n",
    ],
)
def test_load_config_rejects_invalid_files(tmp_path: Path, content: str) -> None:
    (tmp_path / ".spmkit.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)

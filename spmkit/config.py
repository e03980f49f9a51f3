"""Configuration loading for spmkit (.spmkit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import SpmKitError
from .graph.projects import DEFAULT_MANIFEST_NAME
from .graph.sources import DEFAULT_DUMP_COMMAND
from .tasks import TaskOptions

CONFIG_FILENAME = ".spmkit.yml"


class ConfigError(SpmKitError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CommandConfig:
    """Commands used by inferred tasks."""

    build: str = "swift build"
    test: str = "swift test"
    lint: str = "swiftlint"


@dataclass
class GraphConfig:
    """Graph construction settings."""

    dump_command: str = DEFAULT_DUMP_COMMAND
    max_workers: int = 1
    timeout: Optional[float] = None
    fallback: bool = True


@dataclass
class SpmKitConfig:
    """Represents the settings defined in .spmkit.yml."""

    root: Path
    manifest_name: str = DEFAULT_MANIFEST_NAME
    commands: CommandConfig = field(default_factory=CommandConfig)
    include_test_tasks: bool = True
    include_lint_tasks: bool = True
    graph: GraphConfig = field(default_factory=GraphConfig)
    exclude_paths: List[str] = field(default_factory=list)

    def task_options(self) -> TaskOptions:
        return TaskOptions(
            build_command=self.commands.build,
            test_command=self.commands.test,
            lint_command=self.commands.lint,
            include_test_tasks=self.include_test_tasks,
            include_lint_tasks=self.include_lint_tasks,
        )


def load_config(config_path: Path) -> SpmKitConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SpmKitConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    commands = CommandConfig()
    commands_data = _as_dict(data.get("commands"))
    if commands_data:
        commands.build = _as_str(commands_data.get("build")) or commands.build
        commands.test = _as_str(commands_data.get("test")) or commands.test
        commands.lint = _as_str(commands_data.get("lint")) or commands.lint

    graph = GraphConfig()
    graph_data = _as_dict(data.get("graph"))
    if graph_data:
        graph.dump_command = _as_str(graph_data.get("dump_command")) or graph.dump_command
        max_workers = _as_int(graph_data.get("max_workers"))
        if max_workers is not None:
            if max_workers < 1:
                raise ConfigError("graph.max_workers must be at least 1")
            graph.max_workers = max_workers
        timeout = _as_float(graph_data.get("timeout"))
        if timeout is not None and timeout > 0:
            graph.timeout = timeout
        fallback = _as_bool(graph_data.get("fallback"))
        if fallback is not None:
            graph.fallback = fallback

    include_tests = _as_bool(data.get("include_test_tasks"))
    include_lint = _as_bool(data.get("include_lint_tasks"))

    return SpmKitConfig(
        root=root,
        manifest_name=_as_str(data.get("manifest_name")) or DEFAULT_MANIFEST_NAME,
        commands=commands,
        include_test_tasks=True if include_tests is None else include_tests,
        include_lint_tasks=True if include_lint is None else include_lint,
        graph=graph,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CommandConfig",
    "ConfigError",
    "GraphConfig",
    "SpmKitConfig",
    "load_config",
]

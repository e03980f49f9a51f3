"""Project inference: build, test, lint and clean tasks for Swift packages."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ManifestReadError
from .graph.projects import WORKSPACE_ROOT, normalize_root
from .logging import get_logger
from .models import UNKNOWN_PACKAGE, Manifest
from .reader import read_manifest

DEFAULT_PROJECT_NAME = "swift-package"
_EXISTING_PROJECT_MARKERS = ("project.json", "package.json")

_LOGGER = get_logger("tasks")


@dataclass
class TaskOptions:
    """Commands and toggles used when inferring tasks."""

    build_command: str = "swift build"
    test_command: str = "swift test"
    lint_command: str = "swiftlint"
    include_test_tasks: bool = True
    include_lint_tasks: bool = True


@dataclass(frozen=True)
class TaskConfig:
    """A runnable task for one project."""

    command: str
    cwd: str
    cache: bool = False
    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    depends_on: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"command": self.command, "options": {"cwd": self.cwd}}
        if self.cache:
            payload["cache"] = True
        if self.inputs:
            payload["inputs"] = list(self.inputs)
        if self.outputs:
            payload["outputs"] = list(self.outputs)
        if self.depends_on:
            payload["dependsOn"] = list(self.depends_on)
        return payload


@dataclass(frozen=True)
class ProjectNode:
    """An inferred project with its tasks."""

    name: str
    root: str
    project_type: str
    source_root: str
    tags: List[str]
    tasks: Dict[str, TaskConfig]
    existing: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "root": self.root,
            "projectType": self.project_type,
            "sourceRoot": self.source_root,
            "tags": list(self.tags),
            "targets": {name: task.to_dict() for name, task in self.tasks.items()},
            "existing": self.existing,
        }


def create_tasks(
    project_root: str,
    manifest: Manifest,
    options: TaskOptions | None = None,
    workspace_root: Path | None = None,
) -> Dict[str, TaskConfig]:
    """Return the task set for one Swift package."""
    opts = options or TaskOptions()
    tasks: Dict[str, TaskConfig] = {
        "build": TaskConfig(
            command=opts.build_command or "swift build",
            cwd=project_root,
            cache=True,
            inputs=[
                "{projectRoot}/Package.swift",
                "{projectRoot}/Sources/**/*",
                "{projectRoot}/Package.resolved",
            ],
            outputs=["{projectRoot}/.build"],
        )
    }

    if opts.include_test_tasks and _has_tests(project_root, manifest, workspace_root):
        tasks["test"] = TaskConfig(
            command=opts.test_command or "swift test",
            cwd=project_root,
            cache=True,
            inputs=[
                "{projectRoot}/Package.swift",
                "{projectRoot}/Sources/**/*",
                "{projectRoot}/Tests/**/*",
                "{projectRoot}/Package.resolved",
            ],
            outputs=["{projectRoot}/.build"],
            depends_on=["^build"],
        )

    if opts.include_lint_tasks:
        tasks["lint"] = TaskConfig(
            command=opts.lint_command or "swiftlint",
            cwd=project_root,
            cache=True,
            inputs=[
                "{projectRoot}/Sources/**/*.swift",
                "{projectRoot}/Tests/**/*.swift",
                "{projectRoot}/.swiftlint.yml",
            ],
        )

    tasks["clean"] = TaskConfig(command="swift package clean", cwd=project_root)
    return tasks


def infer_project(
    manifest_file: str,
    workspace_root: Path,
    options: TaskOptions | None = None,
) -> Optional[ProjectNode]:
    """Infer a project node from a workspace-relative manifest path."""
    project_root = normalize_root(posixpath.dirname(manifest_file))
    try:
        manifest = read_manifest(workspace_root / manifest_file)
    except ManifestReadError as exc:
        _LOGGER.warning("Failed to process Swift package at %s: %s", manifest_file, exc)
        return None

    project_dir = workspace_root / project_root
    existing = any((project_dir / marker).exists() for marker in _EXISTING_PROJECT_MARKERS)
    project_type = project_type_of(manifest)
    return ProjectNode(
        name=_project_name(manifest, project_root, workspace_root),
        root=project_root,
        project_type=project_type,
        source_root=posixpath.join(project_root, "Sources")
        if project_root != WORKSPACE_ROOT
        else "Sources",
        tags=["lang:swift", f"type:{project_type}"],
        tasks=create_tasks(project_root, manifest, options, workspace_root),
        existing=existing,
    )


def project_type_of(manifest: Manifest) -> str:
    if any(target.type == "executable" for target in manifest.targets):
        return "application"
    return "library"


def _has_tests(project_root: str, manifest: Manifest, workspace_root: Path | None) -> bool:
    if workspace_root is not None and (workspace_root / project_root / "Tests").is_dir():
        return True
    return any(target.type == "test" for target in manifest.targets)


def _project_name(manifest: Manifest, project_root: str, workspace_root: Path) -> str:
    if manifest.name and manifest.name != UNKNOWN_PACKAGE:
        return manifest.name
    if project_root == WORKSPACE_ROOT:
        return workspace_root.resolve().name or DEFAULT_PROJECT_NAME
    return project_root.split("/")[-1] or DEFAULT_PROJECT_NAME


__all__ = [
    "ProjectNode",
    "TaskConfig",
    "TaskOptions",
    "create_tasks",
    "infer_project",
    "project_type_of",
]

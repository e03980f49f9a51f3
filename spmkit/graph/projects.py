"""Workspace project discovery and lookup."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from ..errors import ManifestReadError
from ..logging import get_logger
from ..models import UNKNOWN_PACKAGE
from ..reader import read_manifest

DEFAULT_MANIFEST_NAME = "Package.swift"
WORKSPACE_ROOT = "."

_EXCLUDED_DIRS = {
    ".build",
    ".git",
    ".hg",
    ".svn",
    ".swiftpm",
    ".venv",
    "node_modules",
    "__pycache__",
    "DerivedData",
}

_LOGGER = get_logger("graph.projects")


@dataclass(frozen=True)
class Project:
    """A workspace project rooted at a workspace-relative POSIX directory."""

    name: str
    root: str

    @property
    def basename(self) -> str:
        return self.root.rstrip("/").split("/")[-1]

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "root": self.root}


class ProjectIndex:
    """Resolves project roots and names to known workspace projects.

    Names are indexed from project names first; directory basenames fill in
    only where no project already claims that name.
    """

    def __init__(self, projects: Iterable[Project]) -> None:
        self._projects: List[Project] = list(projects)
        self._by_root: Dict[str, Project] = {}
        self._by_name: Dict[str, str] = {}
        for project in self._projects:
            self._by_root.setdefault(normalize_root(project.root), project)
        for project in self._projects:
            if project.name:
                self._by_name.setdefault(project.name, normalize_root(project.root))
        for project in self._projects:
            basename = project.basename
            if basename and basename != WORKSPACE_ROOT:
                self._by_name.setdefault(basename, normalize_root(project.root))

    def __iter__(self) -> Iterator[Project]:
        return iter(self._projects)

    def __len__(self) -> int:
        return len(self._projects)

    @property
    def roots(self) -> List[str]:
        return list(self._by_root)

    def get(self, root: str) -> Optional[Project]:
        return self._by_root.get(normalize_root(root))

    def resolve_root(self, root: str) -> Optional[str]:
        """Return ``root`` when it names a known project root."""
        normalized = normalize_root(root)
        return normalized if normalized in self._by_root else None

    def resolve_name(self, name: str) -> Optional[str]:
        """Return the root of the project known by ``name``."""
        return self._by_name.get(name)

    def resolve_path(self, path: Path | str, workspace_root: Path) -> Optional[str]:
        """Map a filesystem path to a known project root, if it is one."""
        absolute = Path(path)
        if not absolute.is_absolute():
            absolute = workspace_root / absolute
        try:
            relative = Path(os.path.normpath(absolute.resolve())).relative_to(
                workspace_root.resolve()
            )
        except ValueError:
            return None
        return self.resolve_root(relative.as_posix())

    def find(self, reference: str) -> Optional[Project]:
        """Look a project up by name first, then by root."""
        root = self.resolve_name(reference)
        if root is not None:
            return self._by_root[root]
        return self.get(reference)


def normalize_root(root: str) -> str:
    normalized = root.replace("\\", "/").strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    normalized = normalized.rstrip("/")
    return normalized or WORKSPACE_ROOT


def discover_projects(
    workspace_root: Path,
    manifest_name: str = DEFAULT_MANIFEST_NAME,
    exclude_paths: Sequence[str] = (),
) -> List[Project]:
    """Walk the workspace and return one project per manifest found."""
    root = workspace_root.resolve()
    projects: List[Project] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _is_excluded(rel_path, exclude_paths):
                continue
            kept.append(name)
        dirnames[:] = kept

        if manifest_name not in filenames:
            continue
        project_root = rel_dir or WORKSPACE_ROOT
        projects.append(
            Project(name=_project_name(current_dir / manifest_name, current_dir), root=project_root)
        )

    _LOGGER.debug("Discovered %d projects under %s", len(projects), root)
    return projects


def _project_name(manifest_path: Path, directory: Path) -> str:
    try:
        name = read_manifest(manifest_path).name
    except ManifestReadError as exc:
        _LOGGER.warning("%s", exc)
        return directory.name
    return directory.name if name == UNKNOWN_PACKAGE else name


def _is_excluded(rel_path: str, patterns: Sequence[str]) -> bool:
    for pattern in patterns:
        cleaned = pattern.strip().strip("/")
        if not cleaned:
            continue
        if fnmatchcase(rel_path, cleaned) or rel_path.startswith(f"{cleaned}/"):
            return True
        if "/" not in cleaned and fnmatchcase(rel_path.split("/")[-1], cleaned):
            return True
    return False


__all__ = [
    "DEFAULT_MANIFEST_NAME",
    "Project",
    "ProjectIndex",
    "WORKSPACE_ROOT",
    "discover_projects",
    "normalize_root",
]

"""Helper utilities for constructing temporary Swift workspaces in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from spmkit.graph import Project
from spmkit.workspace import Workspace


class WorkspaceBuilder:
    """Utility for writing packages into a throwaway workspace."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "workspace"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the workspace."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def package(self, root: str, manifest: str) -> Project:
        """Write a Package.swift under ``root`` and return the matching project."""
        self.write({f"{root}/Package.swift": manifest})
        name = root.rstrip("/").split("/")[-1]
        return Project(name=name, root=root)

    def read(self, relative: str) -> str:
        return (self.root / relative).read_text(encoding="utf-8")

    def workspace(self, **kwargs: object) -> Workspace:
        """Discover the workspace as it currently exists on disk."""
        return Workspace.discover(self.root, **kwargs)  # type: ignore[arg-type]

    def path(self) -> Path:
        """Return the workspace root path."""
        return self.root


__all__ = ["WorkspaceBuilder"]

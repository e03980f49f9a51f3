"""Edge sources describing which workspace projects a manifest points at."""

from __future__ import annotations

import json
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence

from ..errors import EdgeSourceError, ManifestReadError
from ..models import GraphEdge
from ..reader import read_manifest
from .projects import ProjectIndex

DEFAULT_DUMP_COMMAND = "swift package dump-package"


@dataclass(frozen=True)
class ManifestContext:
    """Everything an edge source needs to describe one manifest."""

    source_root: str
    manifest_file: str
    package_dir: Path
    workspace_root: Path
    index: ProjectIndex

    @property
    def manifest_path(self) -> Path:
        return self.workspace_root / self.manifest_file

    def edge(self, target_root: str) -> GraphEdge:
        return GraphEdge(
            source=self.source_root, target=target_root, source_file=self.manifest_file
        )


class EdgeSource(ABC):
    """Contract for strategies that turn a manifest into graph edges."""

    name: str = "source"

    @abstractmethod
    def edges(self, context: ManifestContext) -> List[GraphEdge]:
        """Return edges for one manifest or raise ``EdgeSourceError``."""


class DumpPackageSource(EdgeSource):
    """Queries the toolchain's structured package description."""

    name = "dump-package"

    def __init__(
        self,
        runner: Callable[..., str] | None = None,
        *,
        command: Sequence[str] | str = DEFAULT_DUMP_COMMAND,
        timeout: Optional[float] = None,
    ) -> None:
        self._runner = runner or self._default_runner
        self._command = shlex.split(command) if isinstance(command, str) else list(command)
        self._timeout = timeout

    def edges(self, context: ManifestContext) -> List[GraphEdge]:
        payload = self._describe(context.package_dir)
        edges: List[GraphEdge] = []

        for dependency in _as_list(payload.get("dependencies")):
            if not isinstance(dependency, dict):
                continue
            # Remote `scm` entries live outside the workspace.
            for entry in _as_list(dependency.get("fileSystem")):
                path = entry.get("path") if isinstance(entry, dict) else None
                if not isinstance(path, str) or not path:
                    continue
                target = context.index.resolve_path(
                    _absolute(path, context.package_dir), context.workspace_root
                )
                if target is not None:
                    edges.append(context.edge(target))

        for target in _as_list(payload.get("targets")):
            if not isinstance(target, dict):
                continue
            for reference in _as_list(target.get("dependencies")):
                if not isinstance(reference, dict):
                    continue
                by_name = _as_list(reference.get("byName"))
                if not by_name or not isinstance(by_name[0], str):
                    continue
                resolved = context.index.resolve_name(by_name[0])
                if resolved is not None:
                    edges.append(context.edge(resolved))
        return edges

    def _describe(self, package_dir: Path) -> dict:
        try:
            output = self._runner(self._command, cwd=package_dir, timeout=self._timeout)
        except (subprocess.SubprocessError, OSError) as exc:
            raise EdgeSourceError(f"{' '.join(self._command)} failed in {package_dir}: {exc}") from exc
        try:
            payload = json.loads(output)
        except (TypeError, ValueError) as exc:
            raise EdgeSourceError(f"Unparsable package description from {package_dir}: {exc}") from exc
        if not isinstance(payload, dict):
            raise EdgeSourceError(f"Package description from {package_dir} is not an object")
        return payload

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        timeout: Optional[float] = None,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
        return completed.stdout


class ManifestReaderSource(EdgeSource):
    """Falls back to the text reader and follows local ``path`` dependencies."""

    name = "manifest-reader"

    def edges(self, context: ManifestContext) -> List[GraphEdge]:
        try:
            manifest = read_manifest(context.manifest_path)
        except ManifestReadError as exc:
            raise EdgeSourceError(str(exc)) from exc

        edges: List[GraphEdge] = []
        for dependency in manifest.dependencies:
            if not dependency.path:
                continue
            target = context.index.resolve_path(
                _absolute(dependency.path, context.package_dir), context.workspace_root
            )
            if target is not None:
                edges.append(context.edge(target))
        return edges


def _absolute(path: str, package_dir: Path) -> Path:
    candidate = Path(path)
    return candidate if candidate.is_absolute() else package_dir / candidate


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


__all__ = [
    "DEFAULT_DUMP_COMMAND",
    "DumpPackageSource",
    "EdgeSource",
    "ManifestContext",
    "ManifestReaderSource",
]

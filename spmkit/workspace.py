"""Edit and query surface binding manifests, projects and the graph to disk."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .config import SpmKitConfig, load_config
from .dependencies import relative_path, validate_version_constraint
from .errors import (
    InvalidDependencyError,
    ManifestNotFoundError,
    ManifestReadError,
    ProjectNotFoundError,
)
from .graph import (
    DependencyGraphBuilder,
    DumpPackageSource,
    EdgeSource,
    ManifestReaderSource,
    Project,
    ProjectIndex,
    discover_projects,
)
from .graph.projects import WORKSPACE_ROOT
from .identity import canonical_name
from .logging import get_logger
from .models import Dependency, GraphEdge, Manifest
from .mutator import insert_dependency, remove_dependency
from .reader import read_manifest
from .tasks import ProjectNode, infer_project

_LOGGER = get_logger("workspace")


class Workspace:
    """A directory of Swift packages addressed by project name or root."""

    def __init__(
        self,
        root: Path,
        projects: Iterable[Project],
        config: SpmKitConfig | None = None,
        *,
        sources: Sequence[EdgeSource] | None = None,
    ) -> None:
        self.root = root.resolve()
        self.config = config or SpmKitConfig(root=self.root)
        self.index = ProjectIndex(projects)
        self._sources = list(sources) if sources is not None else None

    @classmethod
    def discover(
        cls,
        root: Path,
        config: SpmKitConfig | None = None,
        *,
        sources: Sequence[EdgeSource] | None = None,
    ) -> "Workspace":
        """Load ``.spmkit.yml`` (unless given) and find every project under ``root``."""
        resolved = root.resolve()
        settings = config or load_config(resolved)
        projects = discover_projects(resolved, settings.manifest_name, settings.exclude_paths)
        return cls(resolved, projects, settings, sources=sources)

    @property
    def projects(self) -> List[Project]:
        return list(self.index)

    def project(self, reference: str) -> Project:
        project = self.index.find(reference)
        if project is None:
            raise ProjectNotFoundError(f'Project "{reference}" not found in workspace {self.root}')
        return project

    def manifest_file(self, reference: str) -> str:
        """Return the workspace-relative manifest path of a project."""
        return self._manifest_file_of(self.project(reference))

    def manifest_path(self, reference: str) -> Path:
        path = self.root / self.manifest_file(reference)
        if not path.is_file():
            raise ManifestNotFoundError(f"{self.config.manifest_name} not found at {path}")
        return path

    def read_manifest(self, reference: str) -> Manifest:
        return read_manifest(self.manifest_path(reference))

    def add_dependency(
        self,
        project: str,
        *,
        url: Optional[str] = None,
        version: Optional[str] = None,
        local_project: Optional[str] = None,
        targets: Optional[Sequence[str]] = None,
        product_name: Optional[str] = None,
    ) -> Dependency:
        """Declare a remote (``url``) or local (``local_project``) dependency."""
        if url and local_project:
            raise InvalidDependencyError("Specify either a URL or a local project, not both")
        if not url and not local_project:
            raise InvalidDependencyError("URL is required for remote dependencies")
        if url and version is not None and not validate_version_constraint(version):
            raise InvalidDependencyError(f'Invalid version requirement "{version}"')

        owner = self.project(project)
        path = self.manifest_path(project)

        if url:
            dependency = Dependency(url=url, version=version)
            reference = product_name
        else:
            local = self.project(local_project or "")
            dependency = Dependency(path=relative_path(owner.root, local.root))
            reference = product_name or local.name

        text = self._read_text(path)
        updated = insert_dependency(text, dependency, targets, product_name=reference)
        path.write_text(updated, encoding="utf-8")
        _LOGGER.info(
            'Added %s dependency "%s" to project "%s"',
            "remote" if dependency.is_remote else "local",
            reference or canonical_name(dependency.name),
            owner.name,
        )
        _LOGGER.info("Run 'swift package resolve' in %s to resolve the new dependency", owner.root)
        return dependency

    def remove_dependency(
        self,
        project: str,
        dependency: str,
        *,
        targets: Optional[Sequence[str]] = None,
        remove_from_package: bool = True,
    ) -> None:
        """Remove ``dependency`` (a name, URL or path) from a project's manifest."""
        owner = self.project(project)
        path = self.manifest_path(project)
        text = self._read_text(path)
        updated = remove_dependency(
            text, dependency, targets, remove_from_package=remove_from_package
        )
        path.write_text(updated, encoding="utf-8")
        _LOGGER.info('Removed dependency "%s" from project "%s"', dependency, owner.name)

    def build_graph(self, changed: Optional[Iterable[str]] = None) -> List[GraphEdge]:
        """Build edges for ``changed`` manifest files, or for every project."""
        if changed is None:
            manifest_files = [self._manifest_file_of(project) for project in self.index]
        else:
            manifest_files = list(changed)
        builder = DependencyGraphBuilder(
            self.index,
            self.root,
            self._edge_sources(),
            max_workers=self.config.graph.max_workers,
        )
        return builder.build(manifest_files)

    def infer_projects(self) -> List[ProjectNode]:
        options = self.config.task_options()
        nodes: List[ProjectNode] = []
        for project in self.index:
            node = infer_project(self._manifest_file_of(project), self.root, options)
            if node is not None:
                nodes.append(node)
        return nodes

    # ------------------------------------------------------------------
    # Internals

    def _manifest_file_of(self, project: Project) -> str:
        if project.root == WORKSPACE_ROOT:
            return self.config.manifest_name
        return posixpath.join(project.root, self.config.manifest_name)

    def _edge_sources(self) -> List[EdgeSource]:
        if self._sources is not None:
            return list(self._sources)
        graph = self.config.graph
        sources: List[EdgeSource] = [
            DumpPackageSource(command=graph.dump_command, timeout=graph.timeout)
        ]
        if graph.fallback:
            sources.append(ManifestReaderSource())
        return sources

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestReadError(str(path), str(exc)) from exc


__all__ = ["Workspace"]

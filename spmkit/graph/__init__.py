"""Dependency graph construction across workspace projects."""

from .builder import DependencyGraphBuilder
from .projects import Project, ProjectIndex, discover_projects
from .sources import DumpPackageSource, EdgeSource, ManifestContext, ManifestReaderSource

__all__ = [
    "DependencyGraphBuilder",
    "DumpPackageSource",
    "EdgeSource",
    "ManifestContext",
    "ManifestReaderSource",
    "Project",
    "ProjectIndex",
    "discover_projects",
]

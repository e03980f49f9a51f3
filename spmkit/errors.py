"""Exception hierarchy shared by spmkit components."""

from __future__ import annotations


class SpmKitError(RuntimeError):
    """Base class for failures surfaced by spmkit operations."""


class NotFoundError(SpmKitError):
    """A requested project, manifest, dependency or target does not exist."""


class ProjectNotFoundError(NotFoundError):
    """Raised when a project reference does not match any workspace project."""


class ManifestNotFoundError(NotFoundError):
    """Raised when a project has no Package.swift."""


class DependencyNotFoundError(NotFoundError):
    """Raised when a dependency is neither declared nor referenced."""


class TargetNotFoundError(NotFoundError):
    """Raised when an explicitly requested target is missing from the manifest."""


class ManifestReadError(SpmKitError):
    """Raised when the manifest file cannot be read from storage."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to read manifest at {path}: {reason}")
        self.path = path
        self.reason = reason


class MalformedManifestError(SpmKitError):
    """Raised when an edit needs a structure the manifest text does not have."""


class EdgeSourceError(SpmKitError):
    """Raised by a graph edge source that could not describe a manifest."""


class InvalidDependencyError(SpmKitError):
    """Raised when a dependency request mixes its address or has a bad version requirement."""


__all__ = [
    "DependencyNotFoundError",
    "EdgeSourceError",
    "InvalidDependencyError",
    "MalformedManifestError",
    "ManifestNotFoundError",
    "ManifestReadError",
    "NotFoundError",
    "ProjectNotFoundError",
    "SpmKitError",
    "TargetNotFoundError",
]

"""Helpers for querying manifest dependencies and version requirements."""

from __future__ import annotations

import re
from typing import List, Optional

from .identity import canonical_name
from .models import Dependency, Manifest

_VERSION = r"\d+(?:\.\d+)*(?:-[\w.]+)?"

_VALID_CONSTRAINTS = (
    re.compile(rf'^from:\s*"{_VERSION}"$'),
    re.compile(r'^branch:\s*"[\w\-/.]+"$'),
    re.compile(r'^revision:\s*"[a-f0-9]+"$'),
    re.compile(rf'^exact:\s*"{_VERSION}"$'),
    re.compile(rf"^{_VERSION}$"),
    re.compile(rf'^"{_VERSION}"$'),
    re.compile(rf"^\.\.<{_VERSION}$"),
    re.compile(rf"^{_VERSION}\.\.<{_VERSION}$"),
    re.compile(rf"^{_VERSION}\.\.\.{_VERSION}$"),
)

_SIMPLE_VERSION = re.compile(rf"^{_VERSION}$")


def dependency_exists(manifest: Manifest, dependency: Dependency) -> bool:
    """Return True when an equivalent dependency is already declared."""
    for existing in manifest.dependencies:
        if existing.url and dependency.url:
            if existing.url == dependency.url:
                return True
            continue
        if existing.path and dependency.path:
            if existing.path == dependency.path:
                return True
            continue
        if existing.name == dependency.name:
            return True
    return False


def find_dependency(manifest: Manifest, identifier: str) -> Optional[Dependency]:
    """Find a declared dependency by name, URL or path."""
    for dependency in manifest.dependencies:
        if identifier in (dependency.name, dependency.url, dependency.path):
            return dependency
        if dependency.url and canonical_name(dependency.url) == identifier:
            return dependency
    return None


def is_dependency_used(manifest: Manifest, dependency_name: str) -> bool:
    return any(dependency_name in target.dependencies for target in manifest.targets)


def targets_using_dependency(manifest: Manifest, dependency_name: str) -> List[str]:
    return [
        target.name for target in manifest.targets if dependency_name in target.dependencies
    ]


def validate_version_constraint(version: str) -> bool:
    """Return True for requirement strings Package.swift accepts."""
    return any(pattern.match(version) for pattern in _VALID_CONSTRAINTS)


def format_version_constraint(version: str) -> str:
    """Render a version requirement argument, defaulting to ``from:``."""
    if any(keyword in version for keyword in ("from:", "branch:", "revision:", "exact:")):
        return version
    if _SIMPLE_VERSION.match(version):
        return f'from: "{version}"'
    if version.startswith('"') and version.endswith('"') and len(version) > 1:
        return f"from: {version}"
    if "..<" in version or "..." in version:
        operator = "..<" if "..<" in version else "..."
        lower, upper = version.split(operator, 1)
        lower_part = f'"{lower.strip()}"' if lower.strip() else ""
        return f'{lower_part}{operator}"{upper.strip()}"'
    return f'from: "{version}"'


def relative_path(from_path: str, to_path: str) -> str:
    """Return the POSIX path leading from one workspace directory to another."""
    from_parts = _segments(from_path)
    to_parts = _segments(to_path)

    common = 0
    for left, right in zip(from_parts, to_parts):
        if left != right:
            break
        common += 1

    parts = [".."] * (len(from_parts) - common) + to_parts[common:]
    return "/".join(parts) or "."


def _segments(path: str) -> List[str]:
    return [part for part in path.replace("\\", "/").split("/") if part not in ("", ".")]


__all__ = [
    "dependency_exists",
    "find_dependency",
    "format_version_constraint",
    "is_dependency_used",
    "relative_path",
    "targets_using_dependency",
    "validate_version_constraint",
]

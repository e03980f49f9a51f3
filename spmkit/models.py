"""Core data models shared across spmkit components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .identity import canonical_name

UNKNOWN_PACKAGE = "unknown-package"

TARGET_TYPES = ("library", "executable", "test")
PRODUCT_TYPES = ("library", "executable")


@dataclass(frozen=True)
class Dependency:
    """A package-level dependency, addressed either remotely or by local path."""

    name: str = ""
    url: Optional[str] = None
    path: Optional[str] = None
    version: Optional[str] = None
    branch: Optional[str] = None
    commit: Optional[str] = None

    def __post_init__(self) -> None:
        if bool(self.url) == bool(self.path):
            raise ValueError("A dependency needs exactly one of 'url' or 'path'")
        if not self.name:
            reference = self.url if self.url else self.path
            object.__setattr__(self, "name", canonical_name(reference or ""))

    @property
    def is_remote(self) -> bool:
        return bool(self.url)

    @property
    def is_local(self) -> bool:
        return bool(self.path)

    def to_dict(self) -> Dict[str, Any]:
        return _compact(asdict(self))


@dataclass(frozen=True)
class Target:
    """A build target declared in the manifest."""

    name: str
    type: str = "library"
    dependencies: List[str] = field(default_factory=list)
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(asdict(self))


@dataclass(frozen=True)
class Product:
    """A product bundling one or more targets."""

    name: str
    type: str = "library"
    targets: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Manifest:
    """Structured view of a Package.swift, rebuilt on every read."""

    name: str = UNKNOWN_PACKAGE
    platforms: Optional[Dict[str, str]] = None
    dependencies: List[Dependency] = field(default_factory=list)
    targets: List[Target] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)

    def target(self, name: str) -> Optional[Target]:
        for target in self.targets:
            if target.name == name:
                return target
        return None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "targets": [target.to_dict() for target in self.targets],
            "products": [product.to_dict() for product in self.products],
        }
        if self.platforms is not None:
            payload["platforms"] = dict(self.platforms)
        return payload


@dataclass(frozen=True)
class GraphEdge:
    """Directed dependency between two workspace projects."""

    source: str
    target: str
    source_file: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


__all__ = [
    "Dependency",
    "GraphEdge",
    "Manifest",
    "PRODUCT_TYPES",
    "Product",
    "TARGET_TYPES",
    "Target",
    "UNKNOWN_PACKAGE",
]

"""Swift Package Manager manifest tooling for multi-project workspaces."""

from .errors import SpmKitError
from .identity import canonical_name
from .models import Dependency, GraphEdge, Manifest, Product, Target
from .mutator import insert_dependency, remove_dependency
from .reader import read_manifest, read_manifest_text
from .workspace import Workspace

__all__ = [
    "Dependency",
    "GraphEdge",
    "Manifest",
    "Product",
    "SpmKitError",
    "Target",
    "Workspace",
    "canonical_name",
    "insert_dependency",
    "read_manifest",
    "read_manifest_text",
    "remove_dependency",
]

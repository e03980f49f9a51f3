"""Inter-project dependency graph construction."""

from __future__ import annotations

import posixpath
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..errors import EdgeSourceError
from ..logging import get_logger
from ..models import GraphEdge
from .projects import WORKSPACE_ROOT, ProjectIndex, normalize_root
from .sources import DumpPackageSource, EdgeSource, ManifestContext, ManifestReaderSource

_LOGGER = get_logger("graph")


class DependencyGraphBuilder:
    """Collects edges for changed manifests using an ordered list of sources.

    For each manifest the sources are tried in order and the first one that
    succeeds supplies the edges. Edges are concatenated in input order and are
    not deduplicated; an edge pointing back at its own project is dropped.
    """

    def __init__(
        self,
        index: ProjectIndex,
        workspace_root: Path,
        sources: Sequence[EdgeSource] | None = None,
        *,
        max_workers: int = 1,
    ) -> None:
        self._index = index
        self._workspace_root = workspace_root.resolve()
        self._sources: List[EdgeSource] = (
            list(sources) if sources is not None else [DumpPackageSource(), ManifestReaderSource()]
        )
        self._max_workers = max(1, max_workers)

    def build(self, manifest_files: Iterable[str | Path]) -> List[GraphEdge]:
        files = [self._relative(manifest) for manifest in manifest_files]
        if self._max_workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                results = list(executor.map(self._edges_for, files))
        else:
            results = [self._edges_for(manifest) for manifest in files]

        edges = [edge for batch in results for edge in batch]
        _LOGGER.debug("Built %d edges from %d manifests", len(edges), len(files))
        return edges

    # ------------------------------------------------------------------
    # Internals

    def _edges_for(self, manifest_file: str) -> List[GraphEdge]:
        context = self._context(manifest_file)
        if context is None:
            return []

        for source in self._sources:
            try:
                edges = source.edges(context)
            except EdgeSourceError as exc:
                _LOGGER.debug("%s failed for %s: %s", source.name, manifest_file, exc)
                continue
            return [
                edge for edge in edges if edge.source.casefold() != edge.target.casefold()
            ]

        _LOGGER.debug("No edge source could describe %s", manifest_file)
        return []

    def _context(self, manifest_file: str) -> Optional[ManifestContext]:
        package_dir_rel = posixpath.dirname(manifest_file) or WORKSPACE_ROOT
        package_dir = self._workspace_root / package_dir_rel
        if not package_dir.is_dir():
            _LOGGER.debug("Skipping %s: %s does not exist", manifest_file, package_dir)
            return None
        source_root = self._index.resolve_root(package_dir_rel) or normalize_root(package_dir_rel)
        return ManifestContext(
            source_root=source_root,
            manifest_file=manifest_file,
            package_dir=package_dir,
            workspace_root=self._workspace_root,
            index=self._index,
        )

    def _relative(self, manifest: str | Path) -> str:
        path = Path(manifest)
        if path.is_absolute() and path.resolve().is_relative_to(self._workspace_root):
            path = path.resolve().relative_to(self._workspace_root)
        return path.as_posix()


__all__ = ["DependencyGraphBuilder"]

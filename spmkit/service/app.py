"""FastAPI application entrypoint for spmkit service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import NotFoundError, SpmKitError
from ..workspace import Workspace

_T = TypeVar("_T")


class ManifestRequest(BaseModel):
    workspace: str
    project: str


class ManifestResponse(BaseModel):
    project: str
    manifest: Dict[str, Any]


class GraphRequest(BaseModel):
    workspace: str
    changed: Optional[List[str]] = None


class GraphEdgeModel(BaseModel):
    source: str
    target: str
    source_file: str


class GraphResponse(BaseModel):
    edges: List[GraphEdgeModel]


class AddDependencyRequest(BaseModel):
    workspace: str
    project: str
    url: Optional[str] = None
    version: Optional[str] = None
    local_project: Optional[str] = None
    targets: Optional[List[str]] = None
    product_name: Optional[str] = None


class RemoveDependencyRequest(BaseModel):
    workspace: str
    project: str
    dependency: str
    targets: Optional[List[str]] = None
    remove_from_package: bool = True


class EditResponse(BaseModel):
    status: str
    project: str
    dependency: str


class HealthResponse(BaseModel):
    status: str


def _default_workspace(path: Path) -> Workspace:
    return Workspace.discover(path)


async def _run_blocking(func: Callable[[], _T]) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    workspace_factory: Callable[[Path], Workspace] = _default_workspace,
) -> FastAPI:
    """Create the FastAPI application exposing spmkit operations."""

    app = FastAPI(title="spmkit Service", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/manifest", response_model=ManifestResponse)
    async def read_manifest(payload: ManifestRequest) -> ManifestResponse:
        def _read() -> Dict[str, Any]:
            workspace = workspace_factory(Path(payload.workspace))
            return workspace.read_manifest(payload.project).to_dict()

        manifest = await _run_blocking(_read)
        return ManifestResponse(project=payload.project, manifest=manifest)

    @app.post("/graph", response_model=GraphResponse)
    async def build_graph(payload: GraphRequest) -> GraphResponse:
        def _build() -> List[Dict[str, str]]:
            workspace = workspace_factory(Path(payload.workspace))
            return [edge.to_dict() for edge in workspace.build_graph(payload.changed)]

        edges = await _run_blocking(_build)
        return GraphResponse(edges=[GraphEdgeModel(**edge) for edge in edges])

    @app.post("/dependencies/add", response_model=EditResponse)
    async def add_dependency(payload: AddDependencyRequest) -> EditResponse:
        def _add() -> str:
            workspace = workspace_factory(Path(payload.workspace))
            dependency = workspace.add_dependency(
                payload.project,
                url=payload.url,
                version=payload.version,
                local_project=payload.local_project,
                targets=payload.targets,
                product_name=payload.product_name,
            )
            return dependency.name

        name = await _run_blocking(_add)
        return EditResponse(status="added", project=payload.project, dependency=name)

    @app.post("/dependencies/remove", response_model=EditResponse)
    async def remove_dependency(payload: RemoveDependencyRequest) -> EditResponse:
        def _remove() -> None:
            workspace = workspace_factory(Path(payload.workspace))
            workspace.remove_dependency(
                payload.project,
                payload.dependency,
                targets=payload.targets,
                remove_from_package=payload.remove_from_package,
            )

        await _run_blocking(_remove)
        return EditResponse(status="removed", project=payload.project, dependency=payload.dependency)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_: Any, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SpmKitError)
    async def spmkit_error_handler(_: Any, exc: SpmKitError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]

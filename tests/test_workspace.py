"""Tests for the workspace edit and query surface."""

from __future__ import annotations

import pytest

from spmkit.config import SpmKitConfig
from spmkit.errors import (
    DependencyNotFoundError,
    InvalidDependencyError,
    ManifestNotFoundError,
    ProjectNotFoundError,
)
from spmkit.graph import ManifestReaderSource, Project
from spmkit.models import Dependency, GraphEdge
from spmkit.workspace import Workspace
from tests._fixtures.manifests import library_manifest
from tests._fixtures.workspace_builder import WorkspaceBuilder

SWIFT_LOG = "https://github.com/apple/swift-log.git"


def _populate(builder: WorkspaceBuilder) -> None:
    builder.write(
        {
            "apps/app/Package.swift": library_manifest("app"),
            "libs/core/Package.swift": library_manifest("core", '.package(path: "../utils")'),
            "libs/utils/Package.swift": library_manifest("utils"),
        }
    )


def test_discover_finds_projects_by_name_and_root(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    assert [project.root for project in workspace.projects] == [
        "apps/app",
        "libs/core",
        "libs/utils",
    ]
    assert workspace.project("core") == workspace.project("libs/core")
    assert workspace.manifest_file("utils") == "libs/utils/Package.swift"
    assert workspace.read_manifest("core").dependencies == [
        Dependency(name="utils", path="../utils")
    ]


def test_discover_honours_config_excludes(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace_builder.write({".spmkit.yml": "exclude_paths:\n  - libs/core\n"})

    workspace = workspace_builder.workspace()

    assert [project.name for project in workspace.projects] == ["app", "utils"]


def test_add_remote_dependency(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    dependency = workspace.add_dependency("app", url=SWIFT_LOG, version="1.5.0")

    assert dependency.name == "swift-log"
    text = workspace_builder.read("apps/app/Package.swift")
    assert '.package(url: "https://github.com/apple/swift-log.git", from: "1.5.0")' in text
    assert '.target(name: "app", dependencies: ["swift-log"])' in text


def test_add_remote_dependency_with_product_name(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    workspace.add_dependency("app", url=SWIFT_LOG, product_name="Logging", targets=["app"])

    manifest = workspace.read_manifest("app")
    assert manifest.target("app").dependencies == ["Logging"]
    assert manifest.dependencies[0].version == "1.0.0"


def test_add_local_dependency_uses_relative_path(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    dependency = workspace.add_dependency("app", local_project="libs/utils")

    assert dependency.path == "../../libs/utils"
    manifest = workspace.read_manifest("app")
    assert manifest.dependencies == [Dependency(name="utils", path="../../libs/utils")]
    assert manifest.target("app").dependencies == ["utils"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"url": SWIFT_LOG, "local_project": "utils"},
    ],
)
def test_add_dependency_requires_exactly_one_source(
    workspace_builder: WorkspaceBuilder, kwargs: dict
) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    with pytest.raises(InvalidDependencyError):
        workspace.add_dependency("app", **kwargs)

    assert workspace_builder.read("apps/app/Package.swift") == library_manifest("app")


@pytest.mark.parametrize("version", ["latest", "from: 1.0.0", ""])
def test_add_dependency_rejects_invalid_version_requirement(
    workspace_builder: WorkspaceBuilder, version: str
) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    with pytest.raises(InvalidDependencyError, match="Invalid version requirement"):
        workspace.add_dependency("app", url=SWIFT_LOG, version=version)

    assert workspace_builder.read("apps/app/Package.swift") == library_manifest("app")


def test_add_dependency_accepts_branch_requirement(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    workspace.add_dependency("app", url=SWIFT_LOG, version='branch: "main"')

    text = workspace_builder.read("apps/app/Package.swift")
    assert '.package(url: "https://github.com/apple/swift-log.git", branch: "main")' in text


def test_add_dependency_reports_unknown_projects(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    with pytest.raises(ProjectNotFoundError):
        workspace.add_dependency("missing", url=SWIFT_LOG)
    with pytest.raises(ProjectNotFoundError):
        workspace.add_dependency("app", local_project="missing")


def test_missing_manifest_is_reported(workspace_builder: WorkspaceBuilder) -> None:
    workspace = Workspace(workspace_builder.path(), [Project(name="ghost", root="ghost")])

    with pytest.raises(ManifestNotFoundError):
        workspace.read_manifest("ghost")


def test_remove_dependency_clears_unused_declaration(
    workspace_builder: WorkspaceBuilder,
) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    workspace.remove_dependency("core", "utils")

    text = workspace_builder.read("libs/core/Package.swift")
    assert "    dependencies: [],\n" in text
    assert workspace.read_manifest("core").dependencies == []


def test_add_then_remove_restores_manifest(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    workspace.add_dependency("app", local_project="core")
    workspace.remove_dependency("app", "core")

    manifest = workspace.read_manifest("app")
    assert manifest.dependencies == []
    assert manifest.target("app").dependencies == []


def test_remove_unknown_dependency_fails(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace()

    with pytest.raises(DependencyNotFoundError):
        workspace.remove_dependency("app", "swift-log")


def test_build_graph_for_all_projects(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace(sources=[ManifestReaderSource()])
    workspace.add_dependency("app", local_project="core")

    edges = workspace.build_graph()

    assert edges == [
        GraphEdge(source="apps/app", target="libs/core", source_file="apps/app/Package.swift"),
        GraphEdge(source="libs/core", target="libs/utils", source_file="libs/core/Package.swift"),
    ]


def test_build_graph_for_changed_files(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace = workspace_builder.workspace(sources=[ManifestReaderSource()])

    edges = workspace.build_graph(["libs/core/Package.swift", "libs/utils/Package.swift"])

    assert [(edge.source, edge.target) for edge in edges] == [("libs/core", "libs/utils")]


def test_build_graph_uses_configured_dump_command(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    config = SpmKitConfig(root=workspace_builder.path())
    config.graph.dump_command = "definitely-not-a-swift-binary dump-package"
    workspace = workspace_builder.workspace(config=config)

    edges = workspace.build_graph(["libs/core/Package.swift"])

    assert [(edge.source, edge.target) for edge in edges] == [("libs/core", "libs/utils")]


def test_infer_projects_lists_every_package(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)
    workspace_builder.write({".spmkit.yml": "include_lint_tasks: false\n"})
    workspace = workspace_builder.workspace()

    nodes = workspace.infer_projects()

    assert [node.name for node in nodes] == ["app", "core", "utils"]
    assert all(list(node.tasks) == ["build", "clean"] for node in nodes)
    assert all(node.project_type == "library" for node in nodes)

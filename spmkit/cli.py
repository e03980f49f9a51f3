"""CLI entrypoints for spmkit commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .errors import SpmKitError
from .logging import configure_logging
from .reader import read_manifest
from .workspace import Workspace


def _logging_options(*, subcommand: bool) -> argparse.ArgumentParser:
    """Logging flags accepted both before and after the subcommand name."""
    options = argparse.ArgumentParser(add_help=False)
    # A subcommand copy must not reset a value given before the subcommand.
    options.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if subcommand else False,
        help="Show debug records on stderr, including graph source fallbacks.",
    )
    options.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if subcommand else None,
        help="Also write every record, debug included, to this file.",
    )
    return options


def _workspace_options() -> argparse.ArgumentParser:
    options = argparse.ArgumentParser(add_help=False)
    options.add_argument(
        "-w",
        "--workspace",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )
    return options


def _add_target_option(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument(
        "-t",
        "--target",
        dest="targets",
        action="append",
        default=None,
        help=help_text,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spmkit",
        description="Inspect and edit Swift package manifests across a workspace.",
        parents=[_logging_options(subcommand=False)],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    logging_options = _logging_options(subcommand=True)
    workspace_commands = [logging_options, _workspace_options()]

    show_parser = subparsers.add_parser(
        "show",
        help="Print the structured view of a manifest as JSON.",
        parents=workspace_commands,
    )
    show_parser.add_argument(
        "project",
        help="Project name, project root or path to a Package.swift file.",
    )

    graph_parser = subparsers.add_parser(
        "graph",
        help="Print inter-project dependency edges as JSON.",
        parents=workspace_commands,
    )
    graph_parser.add_argument(
        "--changed",
        nargs="+",
        default=None,
        help="Workspace-relative manifest files to analyse (defaults to every project).",
    )

    add_parser = subparsers.add_parser(
        "add",
        help="Add a remote or local dependency to a project.",
        parents=workspace_commands,
    )
    add_parser.add_argument("project", help="Project whose manifest is edited.")
    source = add_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", help="Repository URL of a remote dependency.")
    source.add_argument("--local-project", help="Workspace project to depend on by path.")
    add_parser.add_argument(
        "--version",
        default=None,
        help='Version requirement, e.g. "1.2.0", "branch: \\"main\\"" or "1.0.0..<2.0.0".',
    )
    add_parser.add_argument(
        "--product-name",
        default=None,
        help="Product name referenced from targets (defaults to the dependency name).",
    )
    _add_target_option(add_parser, "Target to update (repeatable; defaults to non-test targets).")

    remove_parser = subparsers.add_parser(
        "remove",
        help="Remove a dependency from a project.",
        parents=workspace_commands,
    )
    remove_parser.add_argument("project", help="Project whose manifest is edited.")
    remove_parser.add_argument("dependency", help="Dependency name, URL or path.")
    _add_target_option(remove_parser, "Target to update (repeatable; defaults to all targets).")
    remove_parser.add_argument(
        "--keep-declaration",
        action="store_true",
        help="Leave the package-level declaration in place.",
    )

    subparsers.add_parser(
        "projects",
        help="Print inferred projects and their tasks as JSON.",
        parents=workspace_commands,
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
        parents=[logging_options],
    )
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for spmkit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        if args.command == "show":
            _emit(_show(args.workspace, args.project))
        elif args.command == "graph":
            workspace = Workspace.discover(Path(args.workspace))
            edges = workspace.build_graph(args.changed)
            _emit([edge.to_dict() for edge in edges])
        elif args.command == "add":
            workspace = Workspace.discover(Path(args.workspace))
            dependency = workspace.add_dependency(
                args.project,
                url=args.url,
                version=args.version,
                local_project=args.local_project,
                targets=args.targets,
                product_name=args.product_name,
            )
            print(f'Added dependency "{dependency.name}" to {args.project}')
        elif args.command == "remove":
            workspace = Workspace.discover(Path(args.workspace))
            workspace.remove_dependency(
                args.project,
                args.dependency,
                targets=args.targets,
                remove_from_package=not args.keep_declaration,
            )
            print(f'Removed dependency "{args.dependency}" from {args.project}')
        elif args.command == "projects":
            workspace = Workspace.discover(Path(args.workspace))
            _emit([node.to_dict() for node in workspace.infer_projects()])
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except SpmKitError as exc:
        parser.exit(1, f"spmkit {args.command} failed: {exc}\n")


def _show(workspace_path: str, reference: str) -> dict[str, Any]:
    candidate = Path(reference)
    if candidate.is_file():
        return read_manifest(candidate).to_dict()
    workspace = Workspace.discover(Path(workspace_path))
    return workspace.read_manifest(reference).to_dict()


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main(sys.argv[1:])

"""Best-effort reading of Package.swift manifests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from .errors import ManifestReadError
from .logging import get_logger
from .models import UNKNOWN_PACKAGE, Dependency, Manifest, Product, Target
from .scanner import Call, SourceScanner, Span

TARGET_KINDS: Dict[str, str] = {
    "target": "library",
    "executableTarget": "executable",
    "testTarget": "test",
}

PRODUCT_KINDS: Dict[str, str] = {
    "library": "library",
    "executable": "executable",
}

# `.vNN` tokens PackageDescription defines across platforms: macOS 10.x, the
# v1..v18 range shared by iOS, tvOS, watchOS, visionOS and macCatalyst,
# driverKit v19..v25 and the unified v26. The legacy short code is the last
# character of the token. Tokens outside this set are stored as written.
_PLATFORM_TOKENS = (
    tuple(f"v10_{minor}" for minor in range(10, 16))
    + tuple(f"v{major}" for major in range(1, 19))
    + tuple(f"v{major}" for major in range(19, 26))
    + ("v26",)
)
PLATFORM_VERSION_CODES: Dict[str, str] = {token: token[-1] for token in _PLATFORM_TOKENS}

_LOGGER = get_logger("reader")

_T = TypeVar("_T")


def read_manifest(path: Path | str) -> Manifest:
    """Read and parse the manifest at ``path``.

    Raises ``ManifestReadError`` when the file itself cannot be read; any
    content problem only degrades the returned manifest.
    """
    manifest_path = Path(path)
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(str(manifest_path), str(exc)) from exc
    _LOGGER.debug("Read %d characters from %s", len(text), manifest_path)
    return read_manifest_text(text)


def read_manifest_text(text: str) -> Manifest:
    """Parse manifest text into a ``Manifest``; never raises."""
    scanner = SourceScanner(text)
    return Manifest(
        name=_best_effort("name", lambda: _extract_name(scanner), UNKNOWN_PACKAGE),
        platforms=_best_effort("platforms", lambda: _extract_platforms(scanner), None),
        dependencies=_best_effort(
            "dependencies", lambda: _extract_dependencies(scanner), []
        ),
        targets=_best_effort("targets", lambda: _extract_targets(scanner), []),
        products=_best_effort("products", lambda: _extract_products(scanner), []),
    )


def parse_dependency_declaration(declaration: str) -> Optional[Dependency]:
    """Parse a single ``.package(...)`` declaration string."""
    scanner = SourceScanner(declaration)
    items = scanner.split(scanner.whole)
    if not items:
        return None
    return dependency_from_span(scanner, items[0])


# ---------------------------------------------------------------------------
# Layout helpers shared with the mutator


def targets_span(scanner: SourceScanner) -> Optional[Span]:
    return scanner.find_array_block("targets")


def products_span(scanner: SourceScanner) -> Optional[Span]:
    return scanner.find_array_block("products")


def package_dependencies_span(scanner: SourceScanner) -> Optional[Span]:
    """Locate the package-level ``dependencies: [...]`` array."""
    excluded = [
        span for span in (targets_span(scanner), products_span(scanner)) if span is not None
    ]
    return scanner.find_array_block("dependencies", exclude=excluded)


def target_calls(scanner: SourceScanner) -> List[Tuple[Call, str]]:
    """Return ``(call, name)`` for each recognised target declaration."""
    block = targets_span(scanner)
    if block is None:
        return []
    calls: List[Tuple[Call, str]] = []
    for item in scanner.split(block):
        call = scanner.parse_call(item)
        if call is None or call.keyword not in TARGET_KINDS:
            continue
        name = scanner.labeled_string(call.args, "name")
        if name:
            calls.append((call, name))
    return calls


def dependency_from_span(scanner: SourceScanner, span: Span) -> Optional[Dependency]:
    call = scanner.parse_call(span)
    if call is None or call.keyword != "package":
        return None
    explicit_name = scanner.labeled_string(call.args, "name") or ""

    url = scanner.labeled_string(call.args, "url")
    if url:
        version, branch, commit = _qualifiers(scanner, call.args)
        return Dependency(
            name=explicit_name,
            url=url,
            version=version,
            branch=branch,
            commit=commit,
        )

    path = scanner.labeled_string(call.args, "path")
    if path:
        return Dependency(name=explicit_name, path=path)
    return None


# ---------------------------------------------------------------------------
# Field extractors


def _best_effort(field: str, extractor: Callable[[], _T], default: _T) -> _T:
    try:
        return extractor()
    except Exception as exc:  # pragma: no cover - extractors do not raise on valid spans
        _LOGGER.debug("Could not extract %s from manifest: %s", field, exc)
        return default


def _extract_name(scanner: SourceScanner) -> str:
    for position, _ in sorted(scanner.find_labels("name"), key=lambda item: item[1]):
        literal = scanner.literal_at(scanner.skip_trivia(position))
        if literal is None:
            continue
        value = scanner.string_value(literal)
        if value:
            return value
    return UNKNOWN_PACKAGE


def _extract_platforms(scanner: SourceScanner) -> Optional[Dict[str, str]]:
    block = scanner.find_array_block("platforms")
    if block is None:
        return None
    platforms: Dict[str, str] = {}
    for item in scanner.split(block):
        call = scanner.parse_call(item)
        if call is None:
            continue
        arguments = scanner.split(call.args)
        if not arguments:
            continue
        token = scanner.string_value(arguments[0])
        if token is None:
            token = arguments[0].of(scanner.text).lstrip(".").strip()
        if token:
            platforms[call.keyword] = PLATFORM_VERSION_CODES.get(token, token)
    return platforms or None


def _extract_dependencies(scanner: SourceScanner) -> List[Dependency]:
    block = package_dependencies_span(scanner)
    if block is None:
        return []
    dependencies: List[Dependency] = []
    for item in scanner.split(block):
        dependency = dependency_from_span(scanner, item)
        if dependency is not None:
            dependencies.append(dependency)
    return dependencies


def _extract_targets(scanner: SourceScanner) -> List[Target]:
    targets: List[Target] = []
    for call, name in target_calls(scanner):
        dependencies_block = scanner.labeled_array(call.args, "dependencies")
        dependencies = (
            scanner.string_items(dependencies_block) if dependencies_block is not None else []
        )
        targets.append(
            Target(
                name=name,
                type=TARGET_KINDS[call.keyword],
                dependencies=dependencies,
                path=scanner.labeled_string(call.args, "path"),
            )
        )
    return targets


def _extract_products(scanner: SourceScanner) -> List[Product]:
    block = products_span(scanner)
    if block is None:
        return []
    products: List[Product] = []
    for item in scanner.split(block):
        call = scanner.parse_call(item)
        if call is None or call.keyword not in PRODUCT_KINDS:
            continue
        name = scanner.labeled_string(call.args, "name")
        if not name:
            continue
        targets_block = scanner.labeled_array(call.args, "targets")
        products.append(
            Product(
                name=name,
                type=PRODUCT_KINDS[call.keyword],
                targets=scanner.string_items(targets_block) if targets_block else [],
            )
        )
    return products


def _qualifiers(
    scanner: SourceScanner, args: Span
) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    version: Optional[str] = None
    branch: Optional[str] = None
    commit: Optional[str] = None
    for argument in scanner.arguments(args):
        if argument.label in ("from", "exact"):
            version = scanner.string_value(argument.value)
        elif argument.label == "branch":
            branch = scanner.string_value(argument.value)
        elif argument.label == "revision":
            commit = scanner.string_value(argument.value)
        elif argument.label is None:
            version = _positional_requirement(scanner, argument.value) or version
    return version, branch, commit


def _positional_requirement(scanner: SourceScanner, value: Span) -> Optional[str]:
    # `.upToNextMajor(from: "4.0.0")`, `.exact("1.2.3")` or `"1.0.0"..<"2.0.0"`
    nested = scanner.parse_call(value)
    if nested is not None:
        from_value = scanner.labeled_string(nested.args, "from")
        if from_value:
            return from_value
        items = scanner.string_items(nested.args)
        return items[0] if items else None
    raw = value.of(scanner.text)
    if ".." in raw:
        return "".join(raw.replace('"', "").split())
    return None


__all__ = [
    "PLATFORM_VERSION_CODES",
    "PRODUCT_KINDS",
    "TARGET_KINDS",
    "dependency_from_span",
    "package_dependencies_span",
    "parse_dependency_declaration",
    "products_span",
    "read_manifest",
    "read_manifest_text",
    "target_calls",
    "targets_span",
]

"""Minimal-diff edits of dependency declarations in Package.swift text.

Edits never re-serialise the manifest. Each operation locates the spans it
needs with the scanner and splices new text between them, so whitespace,
comments and unrelated declarations survive byte for byte.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .dependencies import format_version_constraint
from .errors import DependencyNotFoundError, MalformedManifestError, TargetNotFoundError
from .identity import canonical_name
from .logging import get_logger
from .models import Dependency, Manifest
from .reader import (
    dependency_from_span,
    package_dependencies_span,
    read_manifest_text,
    target_calls,
)
from .scanner import Call, SourceScanner, Span

DEFAULT_REQUIREMENT = 'from: "1.0.0"'
INDENT_UNIT = "    "

_LOGGER = get_logger("mutator")


def render_declaration(dependency: Dependency) -> str:
    """Return the ``.package(...)`` declaration for a dependency."""
    if dependency.path:
        return f".package(path: {_quote(dependency.path)})"
    if dependency.version:
        requirement = format_version_constraint(dependency.version)
    elif dependency.branch:
        requirement = f"branch: {_quote(dependency.branch)}"
    elif dependency.commit:
        requirement = f"revision: {_quote(dependency.commit)}"
    else:
        requirement = DEFAULT_REQUIREMENT
    return f".package(url: {_quote(dependency.url or '')}, {requirement})"


def insert_dependency(
    text: str,
    dependency: Dependency,
    targets: Optional[Sequence[str]] = None,
    *,
    product_name: Optional[str] = None,
) -> str:
    """Declare ``dependency`` and reference it from the selected targets.

    Without an explicit ``targets`` list every non-test target is updated.
    Existing declarations are not deduplicated.
    """
    scanner = SourceScanner(text)
    block = package_dependencies_span(scanner)
    if block is None:
        raise MalformedManifestError("Could not find dependencies array in Package.swift")

    updated = _append_element(scanner, block, render_declaration(dependency), multiline=True)
    reference = product_name or canonical_name(dependency.name)

    if targets:
        target_names = list(targets)
    else:
        target_names = [
            target.name for target in read_manifest_text(updated).targets if target.type != "test"
        ]
    for target_name in target_names:
        updated = add_target_dependency(updated, target_name, reference)
    return updated


def remove_dependency(
    text: str,
    identifier: str,
    targets: Optional[Sequence[str]] = None,
    *,
    remove_from_package: bool = True,
) -> str:
    """Remove a dependency reference from targets and, if unused, its declaration.

    ``identifier`` may be a name, a URL or a path. Raises
    ``DependencyNotFoundError`` when nothing declares or references it.
    """
    manifest = read_manifest_text(text)
    name = resolve_dependency_name(manifest, identifier)
    declared = _matching_declarations(manifest.dependencies, identifier, name)

    if not declared and usage_count(text, name) == 0:
        raise DependencyNotFoundError(
            f'Dependency "{identifier}" is neither declared nor referenced by any target'
        )

    target_names = list(targets) if targets else [target.name for target in manifest.targets]
    updated = text
    removed_from_targets = False
    for target_name in target_names:
        updated, removed = remove_target_dependency(updated, target_name, name)
        removed_from_targets = removed_from_targets or removed

    if not removed_from_targets:
        _LOGGER.warning('Dependency "%s" was not found in any selected target', name)

    if remove_from_package and declared:
        if usage_count(updated, name) == 0:
            updated = _remove_declarations(updated, identifier, name)
        else:
            _LOGGER.warning(
                'Dependency "%s" is still used by some targets; keeping its declaration', name
            )
    return updated


def resolve_dependency_name(manifest: Manifest, identifier: str) -> str:
    """Resolve a name, URL or path to the name targets use."""
    for dependency in manifest.dependencies:
        if dependency.url and dependency.url == identifier:
            return dependency.name
    for dependency in manifest.dependencies:
        if dependency.path and dependency.path == identifier:
            return dependency.name
    return canonical_name(identifier)


def usage_count(text: str, name: str) -> int:
    """Count target dependency entries referring to ``name``."""
    scanner = SourceScanner(text)
    count = 0
    for call, _ in target_calls(scanner):
        block = scanner.labeled_array(call.args, "dependencies")
        if block is None:
            continue
        count += sum(1 for item in scanner.split(block) if _references(scanner, item, name))
    return count


def add_target_dependency(text: str, target_name: str, dependency_name: str) -> str:
    """Append ``dependency_name`` to one target's dependency list."""
    scanner = SourceScanner(text)
    call = _find_target(scanner, target_name)
    element = _quote(dependency_name)

    block = scanner.labeled_array(call.args, "dependencies")
    if block is not None:
        return _append_element(scanner, block, element, multiline=False)
    if scanner.labeled_value(call.args, "dependencies") is not None:
        raise MalformedManifestError(
            f'Dependencies of target "{target_name}" are not an array literal'
        )

    name_argument = scanner.labeled_argument(call.args, "name")
    if name_argument is None:  # pragma: no cover - target_calls requires a name
        raise MalformedManifestError(f'Target "{target_name}" has no name argument')
    position = name_argument.span.end
    if scanner.starts_line(name_argument.span.start):
        indent = scanner.line_indent(name_argument.span.start)
        insertion = f",\n{indent}dependencies: [{element}]"
    else:
        insertion = f", dependencies: [{element}]"
    return text[:position] + insertion + text[position:]


def remove_target_dependency(
    text: str, target_name: str, dependency_name: str
) -> Tuple[str, bool]:
    """Remove every reference to ``dependency_name`` from one target."""
    scanner = SourceScanner(text)
    call = _find_target(scanner, target_name)
    block = scanner.labeled_array(call.args, "dependencies")
    if block is None:
        return text, False
    items = scanner.split(block)
    matching = [item for item in items if _references(scanner, item, dependency_name)]
    if not matching:
        return text, False
    return _remove_elements(scanner, block, items, matching), True


# ---------------------------------------------------------------------------
# Internals


def _find_target(scanner: SourceScanner, target_name: str) -> Call:
    for call, name in target_calls(scanner):
        if name == target_name:
            return call
    raise TargetNotFoundError(f'Target "{target_name}" not found in Package.swift')


def _references(scanner: SourceScanner, item: Span, name: str) -> bool:
    if scanner.string_value(item) == name:
        return True
    call = scanner.parse_call(item)
    if call is None or call.keyword not in ("product", "target", "byName"):
        return False
    return name in (
        scanner.labeled_string(call.args, "name"),
        scanner.labeled_string(call.args, "package"),
    )


def _matching_declarations(
    dependencies: Sequence[Dependency], identifier: str, name: str
) -> List[Dependency]:
    return [dependency for dependency in dependencies if _declares(dependency, identifier, name)]


def _declares(dependency: Dependency, identifier: str, name: str) -> bool:
    if identifier in (dependency.url, dependency.path):
        return True
    reference = dependency.url or dependency.path or ""
    return name in (dependency.name, canonical_name(reference))


def _remove_declarations(text: str, identifier: str, name: str) -> str:
    scanner = SourceScanner(text)
    block = package_dependencies_span(scanner)
    if block is None:
        raise MalformedManifestError("Could not find dependencies array in Package.swift")
    items = scanner.split(block)
    matching = []
    for item in items:
        dependency = dependency_from_span(scanner, item)
        if dependency is not None and _declares(dependency, identifier, name):
            matching.append(item)
    if not matching:
        return text
    return _remove_elements(scanner, block, items, matching)


def _append_element(
    scanner: SourceScanner, block: Span, element: str, *, multiline: bool
) -> str:
    text = scanner.text
    items = scanner.split(block)

    if not items:
        inner = block.of(text).rstrip()
        if multiline:
            base = scanner.line_indent(block.start - 1)
            replacement = f"{inner}\n{base}{INDENT_UNIT}{element}\n{base}"
        else:
            replacement = f"{inner} {element}" if inner.strip() else element
        return text[: block.start] + replacement + text[block.end :]

    last = items[-1]
    after = scanner.skip_trivia(last.end, block.end)
    trailing_comma = after < block.end and text[after] == ","
    on_own_line = scanner.starts_line(last.start)

    if on_own_line:
        indent = scanner.line_indent(last.start)
        if trailing_comma:
            position = _end_of_line_after(scanner, after + 1, block.end)
            return text[:position] + f"\n{indent}{element}," + text[position:]
        line_end = _end_of_line_after(scanner, last.end, block.end)
        return (
            text[: last.end]
            + ","
            + text[last.end : line_end]
            + f"\n{indent}{element}"
            + text[line_end:]
        )
    if trailing_comma:
        position = after + 1
        insertion = f" {element},"
    else:
        position = last.end
        insertion = f", {element}"
    return text[:position] + insertion + text[position:]


def _end_of_line_after(scanner: SourceScanner, index: int, limit: int) -> int:
    # Keep a trailing comment with the element it annotates.
    line_end = scanner.text.find("\n", index, limit)
    if line_end == -1:
        return index
    if scanner.skip_trivia(index, line_end) == line_end:
        return line_end
    return index


def _remove_elements(
    scanner: SourceScanner, block: Span, items: Sequence[Span], to_remove: Sequence[Span]
) -> str:
    text = scanner.text
    removing = set(to_remove)
    ranges: List[Tuple[int, int]] = []

    for index, item in enumerate(items):
        if item not in removing:
            continue
        is_last = index == len(items) - 1
        if not is_last:
            ranges.append((item.start, _after_separator(scanner, item, items[index + 1])))
            continue
        kept_index = next(
            (position for position in range(index - 1, -1, -1) if items[position] not in removing),
            None,
        )
        previous_kept = items[kept_index] if kept_index is not None else None
        if previous_kept is not None and scanner.starts_line(item.start):
            # Cut from the line break before the removed run, so no blank line is left.
            run_start = items[kept_index + 1].start
            line_break = text.rfind("\n", previous_kept.end, run_start)
            start = line_break if line_break != -1 else item.start
            trailing = scanner.skip_trivia(item.end, block.end)
            if trailing < block.end and text[trailing] == ",":
                # Trailing-comma style: the kept element keeps its own comma.
                ranges.append((start, _end_of_line_after(scanner, trailing + 1, block.end)))
                continue
            # Drop the separator after the kept element but leave its comments.
            separator = scanner.skip_trivia(previous_kept.end, item.start)
            if separator < item.start and text[separator] == ",":
                ranges.append((separator, separator + 1))
            ranges.append((start, _end_of_line_after(scanner, item.end, block.end)))
        elif previous_kept is not None:
            ranges.append((previous_kept.end, item.end))
        else:
            end = item.end
            after = scanner.skip_trivia(end, block.end)
            if after < block.end and text[after] == ",":
                end = after + 1
            ranges.append((item.start, end))

    inner_start = block.start
    inner = block.of(text)
    for start, end in reversed(_merge(ranges)):
        inner = inner[: start - inner_start] + inner[end - inner_start :]
    if len(removing) == len(items) and not inner.strip():
        inner = ""
    return text[: block.start] + inner + text[block.end :]


def _after_separator(scanner: SourceScanner, item: Span, following: Span) -> int:
    text = scanner.text
    comma = scanner.skip_trivia(item.end, following.start)
    if comma >= following.start or text[comma] != ",":
        return following.start
    position = comma + 1
    if scanner.starts_line(item.start):
        line_end = _end_of_line_after(scanner, position, following.start)
        if line_end < following.start and text[line_end] == "\n":
            position = line_end + 1
    while position < following.start and text[position] in " \t":
        position += 1
    return position


def _merge(ranges: Sequence[Tuple[int, int]]) -> List[Tuple[int, int]]:
    merged: List[Tuple[int, int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


__all__ = [
    "add_target_dependency",
    "insert_dependency",
    "remove_dependency",
    "remove_target_dependency",
    "render_declaration",
    "resolve_dependency_name",
    "usage_count",
]

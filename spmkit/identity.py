"""Canonical names for dependency references.

A dependency can be referred to by its remote address, by a filesystem path
or by the short name targets use. Every lookup in spmkit funnels through
``canonical_name`` so that extraction, insertion and removal agree on which
declaration a reference means.
"""

from __future__ import annotations

import re

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
_SCP_LIKE = re.compile(r"^[\w.\-]+@[\w.\-]+:")
_HOST_LIKE = re.compile(r"^(?:[\w\-]+\.)+[A-Za-z]{2,}(?::\d+)?/")
_ARCHIVE_SUFFIX = ".git"


def is_remote_reference(reference: str) -> bool:
    """Return True when the reference looks like a repository address."""
    candidate = reference.strip()
    return bool(
        _SCHEME.match(candidate)
        or _SCP_LIKE.match(candidate)
        or _HOST_LIKE.match(candidate)
    )


def canonical_name(reference: str) -> str:
    """Return the short logical name for a URL, path or bare dependency name."""
    candidate = reference.strip()
    if not candidate:
        return candidate

    if is_remote_reference(candidate):
        trimmed = candidate.rstrip("/")
        # A bare ".git" segment names nothing; fall back to the segment before it.
        for segment in reversed(re.split(r"[/:]", trimmed)):
            if segment.endswith(_ARCHIVE_SUFFIX):
                segment = segment[: -len(_ARCHIVE_SUFFIX)]
            if segment:
                return segment
        return trimmed

    if "/" in candidate or "\\" in candidate:
        trimmed = candidate.replace("\\", "/").rstrip("/")
        segment = trimmed.split("/")[-1]
        return segment or candidate

    return candidate


__all__ = ["canonical_name", "is_remote_reference"]

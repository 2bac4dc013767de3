"""
Path containment.

This is the core security layer for file operations: every ``open`` and
``write`` target passes through ``validate_path`` before a handler sees it.

Exclusion contract. An excluded entry (trailing ``/`` and leading ``./``
stripped) rejects the cleaned path when:

1. the entry glob-matches the whole cleaned path (``fnmatchcase``), or
2. the cleaned path starts with the entry followed by a separator, or
3. the entry has no separator and glob-matches any single path component.

So ``.git`` excludes ``.git/config`` and ``vendor/.git/HEAD``, and ``*.key``
excludes ``certs/server.key``. Matching is case-sensitive and lexical; it
runs before any filesystem access. An absolute request under the root is
matched in its root-relative form too, and the resolved target is matched
again so a symlink cannot alias an excluded path.
"""

from __future__ import annotations

import logging
import os
from fnmatch import fnmatchcase
from typing import Iterable

from repogate.errors import PathSecurityError
from repogate.security.extensions import validate_write_extension

logger = logging.getLogger(__name__)


def _escapes(relative: str) -> bool:
    """True if a relative path climbs out of its base."""
    return relative == os.pardir or relative.startswith(os.pardir + os.sep)


def _relative_to(path: str, root: str) -> str | None:
    try:
        return os.path.relpath(path, root)
    except ValueError:
        # Different drives on Windows.
        return None


def _normalize_entry(entry: str) -> str:
    entry = entry.strip().replace("/", os.sep)
    while entry.startswith("." + os.sep):
        entry = entry[2:]
    return entry.rstrip(os.sep)


def match_excluded(cleaned: str, excluded_paths: Iterable[str]) -> str | None:
    """
    Return the first exclusion entry that matches ``cleaned``, or None.

    Args:
        cleaned: A lexically cleaned path (``os.path.normpath`` output).
        excluded_paths: Glob patterns or literal names.
    """
    components = [c for c in cleaned.split(os.sep) if c]
    for raw in excluded_paths:
        entry = _normalize_entry(raw)
        if not entry:
            continue
        if fnmatchcase(cleaned, entry):
            return raw
        if cleaned.startswith(entry + os.sep):
            return raw
        if os.sep not in entry and any(fnmatchcase(c, entry) for c in components):
            return raw
    return None


def _check_excluded(cleaned: str, excluded_paths: Iterable[str]) -> None:
    hit = match_excluded(cleaned, excluded_paths)
    if hit is not None:
        logger.debug(f"Excluded path {cleaned!r} (entry {hit!r})")
        raise PathSecurityError(f"path is in excluded list: {cleaned}")


def validate_path(
    requested_path: str,
    repository_root: str,
    excluded_paths: Iterable[str] = (),
) -> str:
    """
    Resolve ``requested_path`` inside ``repository_root``.

    Args:
        requested_path: Path as requested by the model, relative or absolute.
        repository_root: Directory the result must stay within.
        excluded_paths: Exclusion entries (see module docstring).

    Returns:
        The canonical absolute path, with symlinks resolved.

    Raises:
        PathSecurityError: If the path is empty, excluded, or escapes the root
            lexically or through a symlink.
    """
    if not requested_path or not requested_path.strip():
        raise PathSecurityError("empty path")
    if "\x00" in requested_path:
        raise PathSecurityError("path contains NUL byte")

    excluded_paths = tuple(excluded_paths)
    cleaned = os.path.normpath(requested_path)

    # Exclusions are a cheap pre-resolution gate.
    _check_excluded(cleaned, excluded_paths)

    if os.path.isabs(cleaned):
        joined = cleaned
    else:
        joined = os.path.join(repository_root, cleaned)
    joined = os.path.normpath(os.path.abspath(joined))

    abs_root = os.path.normpath(os.path.abspath(repository_root))
    try:
        real_root = os.path.realpath(abs_root)
    except OSError as e:
        raise PathSecurityError(f"cannot resolve repository root: {e}") from e

    # Textual traversal guard, independent of filesystem state. The root may
    # itself sit behind a symlink, so either spelling of it is accepted here.
    lexical = [_relative_to(joined, abs_root), _relative_to(joined, real_root)]
    if all(rel is None or _escapes(rel) for rel in lexical):
        logger.debug(f"Lexical traversal rejected: {requested_path!r}")
        raise PathSecurityError(f"path traversal detected: {requested_path}")

    # Absolute requests are also matched against the root-relative spelling.
    if os.path.isabs(cleaned):
        for rel in lexical:
            if rel is not None and not _escapes(rel):
                _check_excluded(rel, excluded_paths)

    # Non-strict realpath resolves every existing prefix (following dangling
    # links too) and reattaches the part that does not exist yet.
    try:
        resolved = os.path.realpath(joined)
    except OSError as e:
        raise PathSecurityError(f"cannot resolve path: {e}") from e

    relative = _relative_to(resolved, real_root)
    if relative is None or _escapes(relative):
        logger.debug(f"Containment rejected: {requested_path!r} -> {resolved!r}")
        raise PathSecurityError(f"path escapes repository root: {requested_path}")

    # A symlink inside the root may point into an excluded directory.
    if relative != os.curdir:
        _check_excluded(relative, excluded_paths)

    return resolved


class PathValidator:
    """
    Injectable bundle of the path and extension checks.

    The Executor depends on this class rather than the module functions so
    tests and embedders can substitute their own policy.
    """

    def validate_path(
        self,
        requested_path: str,
        repository_root: str,
        excluded_paths: Iterable[str] = (),
    ) -> str:
        return validate_path(requested_path, repository_root, excluded_paths)

    def validate_write_extension(self, path: str, allowed_extensions: Iterable[str]) -> None:
        validate_write_extension(path, allowed_extensions)

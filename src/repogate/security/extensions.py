"""Write-extension allow-list."""

from __future__ import annotations

import os
from typing import Iterable

from repogate.errors import ExtensionDeniedError


def file_extension(path: str) -> str:
    """
    Extension of the final path component, lower-cased.

    Everything from the last ``.`` counts, so ``archive.tar.gz`` gives
    ``.gz`` and ``.env`` gives ``.env``. Returns ``""`` when there is no dot.
    """
    name = os.path.basename(path.rstrip("/\\"))
    dot = name.rfind(".")
    if dot == -1:
        return ""
    return name[dot:].lower()


def _normalize(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def validate_write_extension(path: str, allowed_extensions: Iterable[str]) -> None:
    """
    Check a write target against the allow-list.

    Args:
        path: Target path; only its final component is inspected.
        allowed_extensions: Permitted extensions (``".py"`` or ``"py"``).
            Empty means unrestricted; ``""`` admits files without extension.

    Raises:
        ExtensionDeniedError: If the extension is not allowed.
    """
    allowed = {_normalize(ext) for ext in allowed_extensions}
    if not allowed:
        return

    ext = file_extension(path)
    if ext in allowed:
        return
    if not ext:
        raise ExtensionDeniedError(f"file has no extension: {path}")
    raise ExtensionDeniedError(f"file extension not allowed: {ext}")

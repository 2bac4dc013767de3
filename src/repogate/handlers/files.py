"""
Local filesystem handler.

Reads are size-bounded. Writes go to a temporary sibling and are renamed
into place, so a target is never observed half-written.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import shutil
import stat
import tempfile
import time

from repogate._types import WriteAction, WriteResult
from repogate.errors import (
    BackupFailedError,
    FileMissingError,
    PermissionDeniedError,
    ResourceLimitError,
    WriteFailedError,
)
from repogate.handlers._base import FileHandler
from repogate.security.extensions import file_extension

logger = logging.getLogger(__name__)

BACKUP_MARKER = ".bak."
_NEW_FILE_MODE = 0o644


def _reformat(path: str, content: str) -> str:
    """Best-effort pretty-printing by target type. Falls back to ``content``."""
    if file_extension(path) == ".json":
        try:
            return json.dumps(json.loads(content), indent=2, ensure_ascii=False)
        except ValueError:
            return content
    return content


class LocalFileHandler(FileHandler):
    """
    File handler for the host filesystem.

    Paths are expected to be resolved by ``validate_path`` already; this class
    enforces size limits, backups and write atomicity only.

    Example:
        >>> handler = LocalFileHandler(max_backups=3)
        >>> result = await handler.write_file("/repo/notes.md", "hi", max_size=1024, backup=True)
        >>> result.action
        <WriteAction.CREATED: 'CREATED'>
    """

    def __init__(self, *, max_backups: int = 5) -> None:
        """
        Args:
            max_backups: Backups kept per file; older ones are pruned.
                Zero keeps every backup.
        """
        self._max_backups = max_backups

    async def open_file(self, path: str, max_size: int) -> str:
        try:
            info = os.stat(path)
        except FileNotFoundError:
            raise FileMissingError(f"file not found: {path}") from None
        except OSError as e:
            raise PermissionDeniedError(f"cannot stat {path}: {e}") from e

        if not stat.S_ISREG(info.st_mode):
            raise PermissionDeniedError(f"not a regular file: {path}")
        if info.st_size > max_size:
            raise ResourceLimitError("file", max_size, info.st_size)

        try:
            with open(path, "rb") as f:
                data = f.read(max_size + 1)
        except OSError as e:
            raise PermissionDeniedError(f"cannot read {path}: {e}") from e

        # The file may have grown since stat.
        if len(data) > max_size:
            raise ResourceLimitError("file", max_size, len(data))
        return data.decode("utf-8", errors="replace")

    async def write_file(self, path: str, content: str, *, max_size: int, backup: bool) -> WriteResult:
        data = content.encode("utf-8")
        if len(data) > max_size:
            raise ResourceLimitError("content", max_size, len(data))

        if os.path.isdir(path):
            raise WriteFailedError(f"target is a directory: {path}")

        existing: os.stat_result | None
        try:
            existing = os.stat(path)
        except FileNotFoundError:
            existing = None
        except OSError as e:
            raise WriteFailedError(f"cannot stat {path}: {e}") from e

        formatted = _reformat(path, content)
        if formatted is not content:
            pretty = formatted.encode("utf-8")
            # Pretty-printing must not push the payload over the limit.
            if len(pretty) <= max_size:
                data = pretty

        action = WriteAction.UPDATED if existing is not None else WriteAction.CREATED
        backup_file = ""
        if backup and existing is not None:
            backup_file = self._create_backup(path)

        parent = os.path.dirname(path) or "."
        mode = stat.S_IMODE(existing.st_mode) if existing is not None else _NEW_FILE_MODE
        try:
            try:
                os.makedirs(parent, exist_ok=True)
            except OSError as e:
                raise WriteFailedError(f"cannot create directory {parent}: {e}") from e
            self._atomic_write(path, data, mode)
        except WriteFailedError:
            if backup_file:
                with contextlib.suppress(OSError):
                    os.unlink(backup_file)
            raise

        if backup_file:
            self._prune_backups(path)

        logger.debug(f"{action.value} {path} ({len(data)} bytes)")
        return WriteResult(action=action, bytes_written=len(data), backup_file=backup_file)

    def _atomic_write(self, path: str, data: bytes, mode: int) -> None:
        directory, name = os.path.split(path)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory or ".", prefix=f".{name}.", suffix=".tmp")
        except OSError as e:
            raise WriteFailedError(f"cannot create temporary file for {path}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise WriteFailedError(f"could not write {path}: {e}") from e

    def _create_backup(self, path: str) -> str:
        """Copy the current target to ``<path>.bak.<ns>``. Leaves nothing behind on failure."""
        backup_path = f"{path}{BACKUP_MARKER}{time.time_ns()}"
        try:
            shutil.copy2(path, backup_path)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.unlink(backup_path)
            raise BackupFailedError(f"could not back up {path}: {e}") from e
        return backup_path

    def _prune_backups(self, path: str) -> None:
        if self._max_backups <= 0:
            return
        directory, name = os.path.split(path)
        prefix = name + BACKUP_MARKER
        try:
            stamps = sorted(
                int(entry[len(prefix):])
                for entry in os.listdir(directory or ".")
                if entry.startswith(prefix) and entry[len(prefix):].isdigit()
            )
        except OSError as e:
            logger.warning(f"Could not list backups for {path}: {e}")
            return

        for stamp in stamps[: -self._max_backups]:
            stale = os.path.join(directory, f"{prefix}{stamp}")
            try:
                os.unlink(stale)
            except OSError as e:
                logger.warning(f"Could not prune backup {stale}: {e}")

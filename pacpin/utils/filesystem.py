"""
Filesystem utilities for pacpin.

This module provides safe helpers for reading specification files,
writing downloaded archives, managing the download directory and
translating Windows paths for the MSYS2 shell. All filesystem errors are
normalized to ``FileOperationError``.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Mapping, Optional, Union

from pacpin.utils.logger import get_logger
from pacpin.exceptions import FileOperationError
from pacpin.constants import DOWNLOAD_FOLDER_NAME, MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]

_DRIVE_PATH_RE = re.compile(r"^([a-zA-Z]):(/.*)")


def _validated_file(path: Path) -> Path:
    """Validate and resolve an existing file path."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_bytes(file_path: PathLike, content: bytes) -> Path:
    """Write bytes atomically using a temporary file + replace.

    A partially written download never appears under the final name.

    Returns:
        The written path.
    """
    target = Path(file_path)
    temp_path: Optional[Path] = None

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)
        return target

    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Cleaned up temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def remove_file(file_path: PathLike) -> None:
    """Delete a file; a file that is already gone is not an error."""
    path = Path(file_path)
    try:
        path.unlink()
        logger.debug("Removed %s", path)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise FileOperationError(
            f"Failed to remove file: {exc}",
            file_path=str(path),
            operation="delete",
            original_error=exc,
        ) from exc


def validate_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Resolve and validate a filesystem path.

    If ``base_dir`` is provided, the resolved path must be within it.
    """
    resolved = Path(path).expanduser().resolve(strict=False)

    if base_dir:
        base = Path(base_dir).resolve(strict=False)
        try:
            resolved.relative_to(base)
        except ValueError:
            raise FileOperationError(
                f"Path outside allowed base directory: {resolved}",
                file_path=str(path),
                operation="validate",
            ) from None

    return resolved


def resolve_download_dir(
    configured: Optional[PathLike] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """Return (and create) the directory archives are downloaded to.

    Order: ``configured``, ``$RUNNER_TEMP/pacpin`` (GitHub Actions), then a
    folder in the system temp directory.
    """
    env = os.environ if environ is None else environ

    if configured:
        folder = Path(configured).expanduser()
    elif env.get("RUNNER_TEMP"):
        folder = Path(env["RUNNER_TEMP"]) / DOWNLOAD_FOLDER_NAME
    else:
        folder = Path(tempfile.gettempdir()) / DOWNLOAD_FOLDER_NAME

    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError(
            f"Cannot create download directory: {exc}",
            file_path=str(folder),
            operation="mkdir",
            original_error=exc,
        ) from exc

    return folder.resolve()


def windows_path_to_posix(path: PathLike) -> str:
    """Translate a Windows path for use inside the MSYS2 shell.

    ``C:\\Users\\me\\a.zst`` becomes ``/c/Users/me/a.zst``. Paths without a
    drive letter only get their separators converted.
    """
    text = str(path).replace("\\", "/")

    match = _DRIVE_PATH_RE.match(text)
    if match is None:
        return text

    return f"/{match.group(1).lower()}{match.group(2)}"

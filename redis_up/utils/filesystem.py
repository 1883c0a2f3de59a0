"""Filesystem helpers for safe path operations and atomic writes."""

import os
import tempfile
import shutil
from pathlib import Path
from typing import Union
from ..core.errors import FilesystemError, PathError, AtomicWriteError
from ..core.log import get_logger

logger = get_logger(__name__)


def atomic_write(path: Path, data: Union[str, bytes], mode: str = "w") -> None:
    """Atomically write data to a file.

    The data goes to a temporary file in the same directory which then
    replaces the target, so readers never observe a partially written file.
    """
    path = Path(path)
    ensure_dir(path.parent)
    is_binary = isinstance(data, bytes) or "b" in mode
    write_mode = mode if is_binary else mode.replace("b", "")
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode=write_mode,
            dir=path.parent,
            delete=False,
            prefix=f".{path.name}.tmp",
            encoding=None if is_binary else "utf-8",
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            tmp_file.write(data)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        tmp_path.replace(path)
        logger.debug(
            "Atomically wrote %s %s to %s",
            len(data),
            "bytes" if is_binary else "chars",
            path,
        )
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass
        raise AtomicWriteError(f"Failed to atomically write to {path}: {e}") from e


def read_text(path: Path, encoding: str = "utf-8") -> str:
    """Read text file with proper error handling."""
    try:
        return Path(path).read_text(encoding=encoding)
    except FileNotFoundError as e:
        raise PathError(f"File not found: {path}") from e
    except PermissionError as e:
        raise FilesystemError(f"Permission denied reading {path}") from e
    except UnicodeDecodeError as e:
        raise FilesystemError(f"Encoding error reading {path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Error reading {path}: {e}") from e


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists and return it."""
    try:
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        return path
    except PermissionError as e:
        raise FilesystemError(f"Permission denied creating directory {path}") from e
    except OSError as e:
        raise FilesystemError(f"Error creating directory {path}: {e}") from e


def safe_remove(path: Path) -> bool:
    """Remove a file or directory tree, returning whether anything was removed."""
    try:
        path = Path(path)
        if path.is_file():
            path.unlink()
            return True
        elif path.is_dir():
            shutil.rmtree(path)
            return True
        else:
            return False
    except OSError as e:
        logger.warning("Failed to remove %s: %s", path, e)
        return False

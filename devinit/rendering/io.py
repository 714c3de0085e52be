"""File I/O operations for rendered output."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ..errors import FileReadWriteError

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read a UTF-8 text file.

    Args:
        path: File to read

    Returns:
        File contents
    """
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise FileReadWriteError(f"{path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise FileReadWriteError(f"{path}: not a UTF-8 text file ({e.reason})") from e


def ensure_parent(path: Path) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Write text to a file atomically using a temporary file.

    Args:
        path: Destination file path
        text: Text content to write
        mode: File permissions (octal)
    """
    try:
        ensure_parent(path)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    except OSError as e:
        raise FileReadWriteError(f"{path}: {e.strerror or e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    except OSError as e:
        raise FileReadWriteError(f"{path}: {e.strerror or e}") from e
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def assert_empty_file(path: Path) -> None:
    """Fail if *path* is an existing, non-empty file."""
    if path.is_file() and path.stat().st_size > 0:
        raise FileReadWriteError(f"Output file {path} is not empty")


def assert_empty_dir(path: Path) -> None:
    """Fail if *path* is an existing, non-empty directory."""
    if path.is_dir() and any(path.iterdir()):
        raise FileReadWriteError(f"Output directory {path} is not empty")


def write_file_output(path: Path, text: str, assert_empty: bool = False) -> Path:
    """Write a rendered file template to *path*.

    Returns:
        Output file path
    """
    if assert_empty:
        assert_empty_file(path)
    if path.is_dir():
        raise FileReadWriteError(f"Output path {path} is a directory")

    atomic_write_text(path, text)
    logger.info(f"Rendered file → {path}")
    return path


def write_project_output(
    output_dir: Path, outputs: dict[str, str], assert_empty: bool = False
) -> list[Path]:
    """Write every rendered project member below *output_dir*.

    Returns:
        List of output file paths
    """
    if assert_empty:
        assert_empty_dir(output_dir)
    if output_dir.exists() and not output_dir.is_dir():
        raise FileReadWriteError(f"Output path {output_dir} is not a directory")

    written = []
    for relative, text in outputs.items():
        path = output_dir / relative
        atomic_write_text(path, text)
        written.append(path)

    logger.info(f"Rendered {len(written)} file(s) → {output_dir}")
    return written

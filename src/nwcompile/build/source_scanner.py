"""
Source scanning.

Translation units are every regular file found recursively under a project's
source directory. The scan is a point-in-time snapshot: files created after
it returns are not part of the build.
"""

import logging
from pathlib import Path

from nwcompile.errors import FileSystemError

logger = logging.getLogger(__name__)


def scan_files(directory: Path, suffix: str = "") -> list[Path]:
    """List every non-directory entry under ``directory``, recursively.

    Args:
        directory: Directory to scan
        suffix: If given, only files with this suffix are returned

    Returns:
        Sorted list of file paths (the discovery order used for reporting)

    Raises:
        FileSystemError: If ``directory`` is not a directory
    """
    if not directory.is_dir():
        raise FileSystemError.not_a_directory(directory)

    files = sorted(path for path in directory.rglob("*") if not path.is_dir() and (not suffix or path.suffix == suffix))
    logger.debug(f"Scanned {directory}: {len(files)} file(s)")
    return files


def count_files(directory: Path, suffix: str = "") -> int:
    """Number of files scan_files() would return.

    Raises:
        FileSystemError: If ``directory`` is not a directory
    """
    return len(scan_files(directory, suffix))

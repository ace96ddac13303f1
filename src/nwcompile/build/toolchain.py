"""
GCC-style command-line conventions.

Every toolchain call is a single flattened command string run through the
shell. This module turns paths and flag lists into that string:

- prefix_flags() expands a list into prefixed flags (-D, -I, -l)
- quote_arg() quotes one argument for the platform shell
- object_glob() builds the unquoted "*.obj" pattern the shell expands at link
- join_command() flattens the pieces, skipping empty ones

It also holds the artifact naming rules (object, executable and library
suffixes) that depend on the host platform.
"""

import shlex
import subprocess
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Union

OBJECT_SUFFIX = ".obj"
STATIC_LIB_SUFFIX = ".a"
LIB_PREFIX = "lib"

PathOrStr = Union[str, Path]


def executable_suffix() -> str:
    """Suffix of a linked executable on this platform."""
    return ".exe" if sys.platform == "win32" else ""


def shared_library_suffix() -> str:
    """Suffix of a dynamic library on this platform."""
    if sys.platform == "win32":
        return ".dll"
    if sys.platform == "darwin":
        return ".dylib"
    return ".so"


def quote_arg(arg: PathOrStr) -> str:
    """Quote a single argument for the platform shell (only when needed)."""
    text = str(arg)
    if sys.platform == "win32":
        return subprocess.list2cmdline([text])
    return shlex.quote(text)


def prefix_flags(prefix: str, values: Iterable[PathOrStr]) -> list[str]:
    """Expand values into prefixed, quoted flags.

    Example:
        prefix_flags("-D", ["DEBUG", "NAME=app"]) -> ["-DDEBUG", "-DNAME=app"]
    """
    return [quote_arg(f"{prefix}{value}") for value in values]


def raw_flags(values: Iterable[str]) -> list[str]:
    """Pass user flags through untouched (they may hold their own quoting)."""
    return [value for value in values if value]


def object_glob(directory: Path) -> str:
    """Shell pattern matching every object file in ``directory``.

    The directory part is quoted, the wildcard is not, so the shell expands it.
    """
    separator = "\\" if sys.platform == "win32" else "/"
    return quote_arg(f"{directory}{separator}") + f"*{OBJECT_SUFFIX}"


def object_path(source: Path, object_dir: Path) -> Path:
    """Object file for a translation unit: same base name, object suffix."""
    return object_dir / source.with_suffix(OBJECT_SUFFIX).name


def join_command(parts: Iterable[str]) -> str:
    """Flatten command pieces into one command line."""
    return " ".join(part for part in parts if part)

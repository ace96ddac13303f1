"""
Error types for nwcompile.

Two kinds of failure travel through a build:

- BuildError values: produced where an external process exits non-zero (or a
  stage cannot run). They are plain data; the caller decides whether to report
  and continue, or to stop.
- NwCompileError exceptions: raised for conditions that end the whole run,
  such as an unreadable projects file or a source directory that is missing
  when the orchestrator scans it.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(Enum):
    """Category of a build error."""

    CONFIG = "config"
    FILESYSTEM = "filesystem"
    PROCESS = "process"


@dataclass(frozen=True)
class BuildError:
    """Single build error: a message and a numeric code."""

    message: str
    code: int
    kind: ErrorKind = ErrorKind.PROCESS
    source: Optional[str] = None

    @classmethod
    def not_a_directory(cls, path: Path, code: int = 1) -> "BuildError":
        return cls(message=f"Not a directory: {path}", code=code, kind=ErrorKind.FILESYSTEM, source=str(path))

    @classmethod
    def process_failed(cls, diagnostics: str, code: int, source: Optional[str] = None) -> "BuildError":
        return cls(message=diagnostics, code=code, kind=ErrorKind.PROCESS, source=source)

    @classmethod
    def invalid_output_kind(cls, project_name: str, code: int = 2) -> "BuildError":
        return cls(
            message=f"Project '{project_name}' has no valid ProjectType (expected Normal, Executable, DynamicLib or StaticLib)",
            code=code,
            kind=ErrorKind.CONFIG,
            source=project_name,
        )


class NwCompileError(Exception):
    """Base class for errors that abort a build run."""

    def __init__(self, error: BuildError):
        super().__init__(error.message)
        self.error = error


class ConfigurationError(NwCompileError):
    """Raised when the projects document cannot be turned into projects."""

    def __init__(self, message: str, code: int = 2, source: Optional[str] = None):
        super().__init__(BuildError(message=message, code=code, kind=ErrorKind.CONFIG, source=source))


class FileSystemError(NwCompileError):
    """Raised when a directory the build must scan is not a directory."""

    @classmethod
    def not_a_directory(cls, path: Path) -> "FileSystemError":
        return cls(BuildError.not_a_directory(path))

"""
Type-safe project configuration models.

A Project is one buildable unit from the projects document together with its
single active Configuration. Both are frozen so the compile workers can read
them concurrently without locking.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class OutputKind(Enum):
    """Kind of artifact a project produces."""

    INVALID = "invalid"
    EXECUTABLE = "executable"
    DYNAMIC_LIB = "dynamic_lib"
    STATIC_LIB = "static_lib"

    @classmethod
    def from_string(cls, value: object) -> "OutputKind":
        """Map a ProjectType value to an OutputKind.

        Unrecognized values (including None) map to INVALID; this never raises.
        """
        return _KIND_NAMES.get(value if isinstance(value, str) else "", cls.INVALID)

    def __str__(self) -> str:
        return self.value


_KIND_NAMES = {
    "Normal": OutputKind.EXECUTABLE,
    "Executable": OutputKind.EXECUTABLE,
    "DynamicLib": OutputKind.DYNAMIC_LIB,
    "StaticLib": OutputKind.STATIC_LIB,
}


@dataclass(frozen=True)
class Configuration:
    """
    Named build variant of a project.

    Every list is appended after the matching project-level list; nothing here
    replaces a project setting.

    Attributes:
        name: Configuration name, also the binary subdirectory name
        defines: Preprocessor defines (without -D)
        include_dirs: Extra include directories
        link_libs: Libraries to link (without -l)
        compiler_flags: Raw compiler flags
        linker_flags: Raw linker flags
        optimization_level: Value passed as -O<level>
    """

    name: str
    defines: tuple[str, ...] = ()
    include_dirs: tuple[Path, ...] = ()
    link_libs: tuple[str, ...] = ()
    compiler_flags: tuple[str, ...] = ()
    linker_flags: tuple[str, ...] = ()
    optimization_level: int = 0


@dataclass(frozen=True)
class Project:
    """
    One buildable unit and its active configuration.

    Attributes:
        name: Project name (top-level key in the projects document)
        output_kind: Artifact kind, selects the link template
        toolchain: Compiler binary (e.g. "g++", "clang++")
        standard: Language standard passed as -std=<standard>
        cwd: Working directory; the final artifact is written here
        header_dir: Header directory (always part of include_dirs)
        source_dir: Directory scanned recursively for translation units
        binary_dir: Root of object files and import libraries
        config: Active configuration
        archiver: Archiver binary used for static libraries
        precompiled_header: Optional header compiled ahead of everything else
        defines: Project-wide preprocessor defines
        include_dirs: Project-wide include directories
        link_libs: Project-wide link libraries
        compiler_flags: Project-wide compiler flags
        linker_flags: Project-wide linker flags
    """

    name: str
    output_kind: OutputKind
    toolchain: str
    standard: str
    cwd: Path
    header_dir: Path
    source_dir: Path
    binary_dir: Path
    config: Configuration
    archiver: str = "ar"
    precompiled_header: Optional[Path] = None
    defines: tuple[str, ...] = ()
    include_dirs: tuple[Path, ...] = ()
    link_libs: tuple[str, ...] = ()
    compiler_flags: tuple[str, ...] = ()
    linker_flags: tuple[str, ...] = ()

    @property
    def config_binary_dir(self) -> Path:
        """Binary subdirectory of the active configuration (holds the objects)."""
        return self.binary_dir / self.config.name

    @property
    def required_dirs(self) -> tuple[Path, ...]:
        """The five directories that must exist before compiling."""
        return (self.cwd, self.header_dir, self.source_dir, self.binary_dir, self.config_binary_dir)

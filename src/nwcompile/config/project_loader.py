"""
Projects document loader.

The projects document is YAML; its top-level keys are project names and each
value describes one project:

    App:
      ProjectType: Normal          # Normal/Executable, DynamicLib, StaticLib
      Gxx: g++                     # compiler binary (default g++)
      Archiver: ar                 # archiver binary (default ar)
      Standard: c++23              # -std value (default c++23)
      Cwd: .                       # working directory (default: current dir)
      HeaderDir: Header
      SourceDir: Source
      BinaryDir: Binary
      Prc: pch.hpp                 # precompiled header inside HeaderDir
      GlobalDefines: [APP]
      GlobalIncludeDirs: [third_party/include]
      GlobalLinkFiles: [pthread]
      GlobalCompilerFlags: [-Wall]
      GlobalLinkerFlags: []
      CurrentConfigName: Debug
      Configurations:
        Debug:
          Defines: [DEBUG]
          Includes: []
          Links: []
          CompilerFlags: [-g]
          LinkerFlags: []
          OptimLvl: 0

PyYAML parses the document into plain mappings; the functions here read that
tree with typed defaults and build frozen Project/Configuration values.

Every relative path ends up absolute. A relative Cwd is taken from the
projects file's directory (the current directory when there is no file);
HeaderDir, SourceDir, BinaryDir, GlobalIncludeDirs and Includes are taken
from the project's Cwd, so the same document yields the same -I paths
wherever the build is started.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml

from nwcompile.config.project_model import Configuration, OutputKind, Project
from nwcompile.errors import BuildError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TOOLCHAIN = "g++"
DEFAULT_ARCHIVER = "ar"
DEFAULT_STANDARD = "c++23"
DEFAULT_HEADER_DIR = "Header"
DEFAULT_SOURCE_DIR = "Source"
DEFAULT_BINARY_DIR = "Binary"
DEFAULT_CONFIG_NAME = "Debug"


def _get_str(node: Mapping[str, Any], key: str, default: str) -> str:
    value = node.get(key)
    if value is None:
        return default
    return str(value)


def _get_list(node: Mapping[str, Any], key: str) -> tuple[str, ...]:
    """Read a sequence of scalars; a lone scalar counts as a one-item list."""
    value = node.get(key)
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item is not None)
    if isinstance(value, Mapping):
        raise ConfigurationError(f"Expected a list for '{key}', got a mapping")
    return (str(value),)


def _get_int(node: Mapping[str, Any], key: str, default: int) -> int:
    value = node.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigurationError(f"Expected an integer for '{key}', got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Expected an integer for '{key}', got {value!r}")


def _get_node(node: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = node.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Expected a mapping for '{key}', got {type(value).__name__}")
    return value


def _get_dirs(node: Mapping[str, Any], key: str, base: Optional[Path]) -> tuple[Path, ...]:
    """Read a list of directories, anchoring relative ones at ``base``."""
    dirs = tuple(Path(p) for p in _get_list(node, key))
    if base is None:
        return dirs
    return tuple(d if d.is_absolute() else base / d for d in dirs)


def load_config(node: Mapping[str, Any], name: str, base_dir: Optional[Path] = None) -> Configuration:
    """Build a Configuration from its node.

    Args:
        node: Parsed configuration mapping (may be empty)
        name: Configuration name
        base_dir: Directory relative Includes are anchored at (the project's
            Cwd); None leaves them as written

    Returns:
        Configuration with empty lists and level 0 where keys are absent
    """
    return Configuration(
        name=name,
        defines=_get_list(node, "Defines"),
        include_dirs=_get_dirs(node, "Includes", base_dir),
        link_libs=_get_list(node, "Links"),
        compiler_flags=_get_list(node, "CompilerFlags"),
        linker_flags=_get_list(node, "LinkerFlags"),
        optimization_level=_get_int(node, "OptimLvl", 0),
    )


def load_project(node: Mapping[str, Any], name: str, base_dir: Optional[Path] = None) -> Project:
    """Build a Project (and its active Configuration) from its node.

    Args:
        node: Parsed project mapping
        name: Project name
        base_dir: Directory that a relative Cwd is resolved against
            (the projects file's directory); None means the process's
            current directory

    Returns:
        Project; an unrecognized ProjectType yields OutputKind.INVALID
    """
    if not isinstance(node, Mapping):
        raise ConfigurationError(f"Project '{name}' must be a mapping", source=name)

    if node.get("Cwd") is None:
        cwd = Path.cwd()
    else:
        cwd = (base_dir if base_dir is not None else Path.cwd()) / str(node["Cwd"])

    header_dir = cwd / _get_str(node, "HeaderDir", DEFAULT_HEADER_DIR)
    source_dir = cwd / _get_str(node, "SourceDir", DEFAULT_SOURCE_DIR)
    binary_dir = cwd / _get_str(node, "BinaryDir", DEFAULT_BINARY_DIR)

    prc = node.get("Prc")
    precompiled_header = header_dir / str(prc) if prc else None

    config_name = _get_str(node, "CurrentConfigName", DEFAULT_CONFIG_NAME)
    configurations = _get_node(node, "Configurations")
    if config_name not in configurations:
        logger.debug(f"Project '{name}': configuration '{config_name}' not defined, using defaults")
    config_node = configurations.get(config_name) or {}
    if not isinstance(config_node, Mapping):
        raise ConfigurationError(f"Configuration '{config_name}' of project '{name}' must be a mapping", source=name)

    include_dirs = _get_dirs(node, "GlobalIncludeDirs", cwd) + (header_dir,)

    return Project(
        name=name,
        output_kind=OutputKind.from_string(node.get("ProjectType")),
        toolchain=_get_str(node, "Gxx", DEFAULT_TOOLCHAIN),
        archiver=_get_str(node, "Archiver", DEFAULT_ARCHIVER),
        standard=_get_str(node, "Standard", DEFAULT_STANDARD),
        cwd=cwd,
        header_dir=header_dir,
        source_dir=source_dir,
        binary_dir=binary_dir,
        precompiled_header=precompiled_header,
        defines=_get_list(node, "GlobalDefines"),
        include_dirs=include_dirs,
        link_libs=_get_list(node, "GlobalLinkFiles"),
        compiler_flags=_get_list(node, "GlobalCompilerFlags"),
        linker_flags=_get_list(node, "GlobalLinkerFlags"),
        config=load_config(config_node, config_name, base_dir=cwd),
    )


def load_projects(root: Any, base_dir: Optional[Path] = None) -> list[Project]:
    """Load every project of a parsed document, in document order."""
    if root is None:
        return []
    if not isinstance(root, Mapping):
        raise ConfigurationError("Projects document must be a mapping of project names to definitions")

    projects = [load_project(node, str(name), base_dir) for name, node in root.items()]
    logger.debug(f"Loaded {len(projects)} project(s): {[p.name for p in projects]}")
    return projects


def load_projects_file(path: Path) -> list[Project]:
    """Parse a YAML projects file and load its projects.

    Raises:
        ConfigurationError: If the file is missing or is not valid YAML
    """
    if not path.is_file():
        raise ConfigurationError(f"Projects file not found: {path}", source=str(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            root = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}", source=str(path))

    return load_projects(root, base_dir=path.resolve().parent)


def validate_projects(projects: list[Project]) -> list[BuildError]:
    """Return one CONFIG error per project that cannot be linked."""
    return [BuildError.invalid_output_kind(p.name) for p in projects if p.output_kind is OutputKind.INVALID]

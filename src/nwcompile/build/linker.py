"""
Link stage.

The project's output kind selects exactly one command:

    EXECUTABLE   <toolchain> <objects> -o <cwd>/<name><exe> <libs/flags>
    DYNAMIC_LIB  <toolchain> -shared <objects> -o <cwd>/<name><dll>
                 -Wl,--out-implib,<binary_dir>/lib<name>.a <libs/flags>
    STATIC_LIB   <archiver> rcs <cfgdir>/lib<name>.a <objects>
    INVALID      no command

<objects> is the shell glob of object files in the configuration's binary
directory. Link libraries and linker flags are project-level first, then
configuration-level; archiving takes neither.
"""

import logging
from pathlib import Path
from typing import Optional

from nwcompile.build.toolchain import (
    LIB_PREFIX,
    STATIC_LIB_SUFFIX,
    executable_suffix,
    join_command,
    object_glob,
    prefix_flags,
    quote_arg,
    raw_flags,
    shared_library_suffix,
)
from nwcompile.config.project_model import OutputKind, Project
from nwcompile.errors import BuildError
from nwcompile.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


def artifact_path(project: Project) -> Optional[Path]:
    """Where the link stage writes the project's final artifact."""
    kind = project.output_kind
    if kind is OutputKind.EXECUTABLE:
        return project.cwd / f"{project.name}{executable_suffix()}"
    if kind is OutputKind.DYNAMIC_LIB:
        return project.cwd / f"{project.name}{shared_library_suffix()}"
    if kind is OutputKind.STATIC_LIB:
        return project.config_binary_dir / f"{LIB_PREFIX}{project.name}{STATIC_LIB_SUFFIX}"
    return None


def import_library_path(project: Project) -> Path:
    """Import library generated next to a dynamic library."""
    return project.binary_dir / f"{LIB_PREFIX}{project.name}{STATIC_LIB_SUFFIX}"


def _link_libraries_and_flags(project: Project) -> list[str]:
    config = project.config
    return [
        *prefix_flags("-l", project.link_libs),
        *raw_flags(project.linker_flags),
        *prefix_flags("-l", config.link_libs),
        *raw_flags(config.linker_flags),
    ]


def build_link_command(project: Project) -> Optional[str]:
    """Select and build the link command for the project's output kind.

    Returns:
        The command line, or None for OutputKind.INVALID
    """
    artifact = artifact_path(project)
    if artifact is None:
        return None

    objects = object_glob(project.config_binary_dir)

    if project.output_kind is OutputKind.EXECUTABLE:
        return join_command([project.toolchain, objects, "-o", quote_arg(artifact), *_link_libraries_and_flags(project)])

    if project.output_kind is OutputKind.DYNAMIC_LIB:
        return join_command(
            [
                project.toolchain,
                "-shared",
                objects,
                "-o",
                quote_arg(artifact),
                quote_arg(f"-Wl,--out-implib,{import_library_path(project)}"),
                *_link_libraries_and_flags(project),
            ]
        )

    return join_command([project.archiver, "rcs", quote_arg(artifact), objects])


def link(project: Project, runner: ProcessRunner) -> Optional[BuildError]:
    """Produce the project's artifact from its object files.

    Returns:
        None on success, otherwise the reported BuildError. An INVALID output
        kind issues no command and yields a CONFIG error.
    """
    command_line = build_link_command(project)
    if command_line is None:
        error = BuildError.invalid_output_kind(project.name)
        runner.output.log_build_error("Linking", error)
        return error

    logger.debug(f"{project.name}: linking {project.output_kind} -> {artifact_path(project)}")
    return runner.run_and_report(command_line, "Linking", source=project.name)

"""Precompiled header stage."""

import logging
from typing import Optional

from nwcompile.build.compiler import compile_flags
from nwcompile.build.toolchain import join_command, quote_arg
from nwcompile.config.project_model import Project
from nwcompile.errors import BuildError
from nwcompile.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


def build_precompile_command(project: Project) -> Optional[str]:
    """Compile-only command for the project's precompiled header, if it has one.

    The header is compiled with the same flags as the translation units so
    the toolchain accepts the result when they include it.
    """
    if project.precompiled_header is None:
        return None
    return join_command([project.toolchain, "-c", quote_arg(project.precompiled_header), *compile_flags(project)])


def precompile(project: Project, runner: ProcessRunner) -> Optional[BuildError]:
    """Compile the precompiled header ahead of every other stage.

    A failure is reported like any compile failure and returned; it does not
    stop the build.
    """
    command_line = build_precompile_command(project)
    if command_line is None:
        logger.debug(f"{project.name}: no precompiled header")
        return None
    return runner.run_and_report(command_line, "Precompile", source=str(project.precompiled_header))

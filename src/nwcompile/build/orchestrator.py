"""
Build orchestration for nwcompile projects.

The orchestrator walks the projects strictly in document order:

    load projects -> validate -> provision every project's directories ->
    for each project:
        precompile (if a precompiled header is set)
        count source files   (scan failure is fatal for the whole run)
        compile all          (if any sources)
        count object files   (scan failure is fatal for the whole run)
        link                 (if any objects)

Compile, link and precompile failures are reported and the build moves on;
they never change the exit status. A directory that cannot be scanned stops
the run at once with exit status 1, as does an invalid projects document.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from nwcompile import __version__
from nwcompile.build.compiler import compile_all
from nwcompile.build.directories import provision_all
from nwcompile.build.linker import artifact_path, link
from nwcompile.build.precompiler import precompile
from nwcompile.build.source_scanner import count_files
from nwcompile.build.toolchain import OBJECT_SUFFIX
from nwcompile.config.project_loader import load_projects_file, validate_projects
from nwcompile.config.project_model import Project
from nwcompile.errors import BuildError, ConfigurationError, FileSystemError
from nwcompile.output import BuildOutput, TimedLogger
from nwcompile.process_runner import ProcessRunner

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


@dataclass
class ProjectResult:
    """Outcome of building one project."""

    name: str
    source_count: int = 0
    object_count: int = 0
    errors: list[BuildError] = field(default_factory=list)
    artifact: Optional[Path] = None
    linked: bool = False

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class BuildResult:
    """Result of a complete build run."""

    exit_code: int
    projects: list[ProjectResult]
    build_time: float
    message: str
    fatal_error: Optional[BuildError] = None

    @property
    def success(self) -> bool:
        return self.exit_code == EXIT_SUCCESS and all(p.success for p in self.projects)


class BuildOrchestrator:
    """
    Orchestrates the build of every project in a projects document.

    Args:
        output: Console + log sink shared by every stage
        jobs: Compile worker count (default: CPU count)
    """

    def __init__(self, output: BuildOutput, jobs: Optional[int] = None):
        self.output = output
        self.jobs = jobs
        self.runner = ProcessRunner(output)

    def run_file(self, projects_file: Path) -> BuildResult:
        """Load a projects file and build it."""
        start_time = time.time()
        try:
            projects = load_projects_file(projects_file)
        except ConfigurationError as e:
            self.output.log_build_error("Loading projects", e.error)
            return self._fatal(e.error, [], start_time)
        return self.run(projects)

    def run(self, projects: list[Project]) -> BuildResult:
        """Build the projects in order.

        Returns:
            BuildResult; exit_code is 1 only for configuration errors and
            directory scan failures
        """
        start_time = time.time()
        self.output.log_header("NwCompile C/C++ build tool", __version__)

        invalid = validate_projects(projects)
        if invalid:
            for error in invalid:
                self.output.log_build_error("Validation", error)
            return self._fatal(invalid[0], [], start_time)

        try:
            provision_all(projects)
        except FileSystemError as e:
            self.output.log_build_error("Creating directories", e.error)
            return self._fatal(e.error, [], start_time)

        results: list[ProjectResult] = []
        for project in projects:
            result = ProjectResult(name=project.name)
            results.append(result)
            try:
                self._build_project(project, result)
            except FileSystemError as e:
                return self._fatal(e.error, results, start_time)

        build_time = time.time() - start_time
        failed = [r.name for r in results if not r.success]
        message = f"Built {len(results)} project(s)" + (f", with errors in: {', '.join(failed)}" if failed else "")
        self.output.log(message)
        self.output.log_build_complete(build_time)
        return BuildResult(exit_code=EXIT_SUCCESS, projects=results, build_time=build_time, message=message)

    def _build_project(self, project: Project, result: ProjectResult) -> None:
        """Run every stage for one project, recording errors in ``result``.

        Raises:
            FileSystemError: If the source or object directory cannot be scanned
        """
        self.output.log(f"Project -- {project.name}")

        error = precompile(project, self.runner)
        if error is not None:
            result.errors.append(error)

        try:
            result.source_count = count_files(project.source_dir)
        except FileSystemError as e:
            self.output.log_build_error("Compiling", e.error)
            raise

        if result.source_count > 0:
            with TimedLogger(self.output, f"Compiling {result.source_count} file(s)", verbose_only=True):
                compile_errors = compile_all(project, self.runner, self.jobs)
            result.errors.extend(e for e in compile_errors if e is not None)

        try:
            result.object_count = count_files(project.config_binary_dir, OBJECT_SUFFIX)
        except FileSystemError as e:
            self.output.log_build_error("Linking", e.error)
            raise

        if result.object_count > 0:
            self.output.log("Linking...")
            error = link(project, self.runner)
            if error is None:
                result.linked = True
                result.artifact = artifact_path(project)
            else:
                result.errors.append(error)

    def _fatal(self, error: BuildError, results: list[ProjectResult], start_time: float) -> BuildResult:
        logger.debug(f"Build aborted: {error.message}")
        return BuildResult(
            exit_code=EXIT_FAILURE,
            projects=results,
            build_time=time.time() - start_time,
            message=error.message,
            fatal_error=error,
        )

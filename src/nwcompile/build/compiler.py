"""
Parallel compilation of a project's translation units.

Compilation Process:
    1. Snapshot every file under the project's source directory
    2. Build one compile command per file
    3. Run all commands on a bounded worker pool and wait for every one
    4. Report failures in discovery order

Flag Order:
    <toolchain> -c <source> -o <object> -O<level> -std=<standard>
    project defines, includes, flags, then configuration defines, includes,
    flags. Configuration lists are appended, never merged or de-duplicated;
    GCC-style toolchains resolve repeated flags left to right.
"""

import logging
import multiprocessing
from pathlib import Path
from typing import Optional

from nwcompile.build.compilation_queue import CompilationJob, CompilationJobQueue
from nwcompile.build.source_scanner import scan_files
from nwcompile.build.toolchain import join_command, object_path, prefix_flags, quote_arg, raw_flags
from nwcompile.config.project_model import Project
from nwcompile.errors import BuildError
from nwcompile.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


def compile_flags(project: Project) -> list[str]:
    """Optimization, standard, defines, includes and flags shared by every compile."""
    config = project.config
    return [
        f"-O{config.optimization_level}",
        quote_arg(f"-std={project.standard}"),
        *prefix_flags("-D", project.defines),
        *prefix_flags("-I", project.include_dirs),
        *raw_flags(project.compiler_flags),
        *prefix_flags("-D", config.defines),
        *prefix_flags("-I", config.include_dirs),
        *raw_flags(config.compiler_flags),
    ]


def build_compile_command(project: Project, source: Path) -> str:
    """Command line compiling one translation unit into the configuration's object directory."""
    return join_command(
        [
            project.toolchain,
            "-c",
            quote_arg(source),
            "-o",
            quote_arg(object_path(source, project.config_binary_dir)),
            *compile_flags(project),
        ]
    )


def _warn_shared_objects(compile_jobs: list[CompilationJob], runner: ProcessRunner) -> None:
    """Warn when sources with the same base name map to one object file."""
    by_object: dict[Path, list[Path]] = {}
    for job in compile_jobs:
        by_object.setdefault(job.output_path, []).append(job.source_path)

    for object_file, sources in by_object.items():
        if len(sources) > 1:
            logger.warning(f"{len(sources)} sources compile to {object_file}")
            runner.output.log_warning(
                f"{object_file.name} is produced by {len(sources)} sources, only one survives: "
                + ", ".join(str(s) for s in sources)
            )


def compile_all(
    project: Project,
    runner: ProcessRunner,
    jobs: Optional[int] = None,
) -> list[Optional[BuildError]]:
    """Compile every source file of a project in parallel.

    Every file is attempted even when others fail. Errors are reported to the
    runner's output after all jobs have finished, in discovery order.

    Args:
        project: Project to compile
        runner: Process runner shared by all workers
        jobs: Worker count (default: CPU count)

    Returns:
        One entry per source file, in discovery order: None on success,
        otherwise the file's BuildError

    Raises:
        FileSystemError: If the source directory is not a directory
    """
    sources = scan_files(project.source_dir)
    if not sources:
        return []

    compile_jobs = [
        CompilationJob(
            job_id=f"{project.name}:{index}",
            source_path=source,
            output_path=object_path(source, project.config_binary_dir),
            command_line=build_compile_command(project, source),
        )
        for index, source in enumerate(sources)
    ]

    _warn_shared_objects(compile_jobs, runner)

    worker_count = min(jobs or multiprocessing.cpu_count(), len(compile_jobs))
    with CompilationJobQueue(runner.run, num_workers=worker_count) as queue:
        for job in compile_jobs:
            runner.output.log(f"Compiling \"{job.source_path}\"", verbose_only=True)
            queue.submit_job(job)
        queue.wait_for_completion([job.job_id for job in compile_jobs])
        stats = queue.get_statistics()

    errors = [job.error for job in compile_jobs]
    for error in errors:
        if error is not None:
            runner.output.log_build_error("Compile", error)

    logger.debug(f"{project.name}: compiled {stats['completed']}/{stats['total_jobs']} file(s) on {worker_count} worker(s)")
    return errors

"""
Command-line interface for nwcompile.

This module provides the `nwcompile` CLI tool for building the projects
described in a YAML projects document.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from nwcompile import __version__
from nwcompile.build import BuildOrchestrator, BuildParams
from nwcompile.build.build_context import DEFAULT_LOG_FILE
from nwcompile.output import BuildOutput


def build_command(args: BuildParams) -> int:
    """Build every project in the projects file.

    Examples:
        nwcompile projects.yaml            # Build all projects
        nwcompile projects.yaml -j 4       # Use 4 compile workers
        nwcompile projects.yaml --no-log   # Console output only
        nwcompile                          # Prompt for the projects file

    Returns:
        Process exit status
    """
    try:
        with BuildOutput(log_path=args.log_path, verbose=args.verbose) as output:
            orchestrator = BuildOrchestrator(output, jobs=args.jobs)
            result = orchestrator.run_file(args.projects_file)
        return result.exit_code

    except PermissionError as e:
        print()
        print("\033[1;31m✗ Error: Permission denied\033[0m")
        print()
        print(str(e))
        return 1

    except KeyboardInterrupt:
        print()
        print("\033[1;33m✗ Build interrupted\033[0m")
        return 130  # Standard exit code for SIGINT

    except Exception as e:
        print()
        print("\033[1;31m✗ Unexpected error\033[0m")
        print()
        print(f"{type(e).__name__}: {e}")

        if args.verbose:
            import traceback

            print()
            print("Traceback:")
            print(traceback.format_exc())

        return 1


def prompt_for_projects_file() -> Path:
    """Ask for the projects file when none was given on the command line."""
    return Path(input("Give me the path to the file with projects to compile:\n> ").strip())


def parse_args(argv: Optional[list[str]] = None) -> BuildParams:
    parser = argparse.ArgumentParser(
        prog="nwcompile",
        description="Build C/C++ projects described in a YAML projects file.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "projects_file",
        nargs="?",
        type=Path,
        help="YAML file describing the projects (prompted for when omitted)",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Number of parallel compile jobs (default: CPU count)",
    )
    parser.add_argument(
        "--log",
        type=Path,
        default=Path(DEFAULT_LOG_FILE),
        help=f"Append-only log file (default: {DEFAULT_LOG_FILE})",
    )
    parser.add_argument("--no-log", action="store_true", help="Do not write a log file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    parsed = parser.parse_args(argv)
    if parsed.jobs is not None and parsed.jobs < 1:
        parser.error("--jobs must be at least 1")

    projects_file = parsed.projects_file
    if projects_file is None:
        try:
            projects_file = prompt_for_projects_file()
        except EOFError:
            parser.error("no projects file given and stdin is closed")

    return BuildParams(
        projects_file=projects_file,
        jobs=parsed.jobs,
        log_path=None if parsed.no_log else parsed.log,
        verbose=parsed.verbose,
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the `nwcompile` console script."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(build_command(args))


if __name__ == "__main__":
    main()

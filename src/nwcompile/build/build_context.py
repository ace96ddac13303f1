"""Build Context - run parameters.

BuildParams flows from the CLI to the orchestrator. It holds only what the
user chose for this run; everything about the projects themselves comes from
the projects document.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_LOG_FILE = "Compile.log"


@dataclass(frozen=True)
class BuildParams:
    """Basic build parameters from the CLI.

    Attributes:
        projects_file: YAML document describing the projects to build
        jobs: Compile worker count (None = CPU count)
        log_path: Append-only log file (None disables file logging)
        verbose: Whether to enable verbose output
    """

    projects_file: Path
    jobs: Optional[int] = None
    log_path: Optional[Path] = Path(DEFAULT_LOG_FILE)
    verbose: bool = False

"""Directory provisioning for projects."""

import logging
from collections.abc import Iterable

from nwcompile.config.project_model import Project
from nwcompile.errors import FileSystemError

logger = logging.getLogger(__name__)


def provision(project: Project) -> None:
    """Create the project's working, header, source, binary and configuration directories.

    Idempotent: existing directories are left alone.

    Raises:
        FileSystemError: If one of the paths exists but is not a directory
    """
    for directory in project.required_dirs:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except (FileExistsError, NotADirectoryError):
            raise FileSystemError.not_a_directory(directory)
    logger.debug(f"Provisioned directories for {project.name} under {project.cwd}")


def provision_all(projects: Iterable[Project]) -> None:
    for project in projects:
        provision(project)

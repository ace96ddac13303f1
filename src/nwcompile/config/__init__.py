"""Project configuration: data model and projects document loader."""

from .project_loader import load_config, load_project, load_projects, load_projects_file, validate_projects
from .project_model import Configuration, OutputKind, Project

__all__ = [
    "Configuration",
    "OutputKind",
    "Project",
    "load_config",
    "load_project",
    "load_projects",
    "load_projects_file",
    "validate_projects",
]

"""
Build system components for nwcompile.

This package provides:
- Directory provisioning
- Source file discovery
- Precompiled header compilation
- Parallel compilation on a bounded worker pool
- Linking / archiving
- Build orchestration
"""

from .build_context import BuildParams
from .orchestrator import BuildOrchestrator, BuildResult, ProjectResult

__all__ = [
    "BuildOrchestrator",
    "BuildParams",
    "BuildResult",
    "ProjectResult",
]

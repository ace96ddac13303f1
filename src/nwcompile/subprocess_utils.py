"""Subprocess utilities for platform-safe process execution.

Every toolchain invocation goes through safe_run(), which applies the
platform-specific flags that keep child processes from opening console
windows or reading from the parent's terminal.
"""

import subprocess
import sys
from typing import Any, Union


def get_subprocess_creation_flags() -> int:
    """Creation flags for toolchain processes.

    Returns:
        subprocess.CREATE_NO_WINDOW on Windows, 0 elsewhere
    """
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def safe_run(cmd: Union[str, list[str]], **kwargs: Any) -> subprocess.CompletedProcess:
    """subprocess.run() with the flags every compiler and linker call needs.

    Caller-supplied creationflags are combined with the platform flags, and
    stdin defaults to DEVNULL unless the caller passes one.

    Args:
        cmd: Command string (with shell=True) or argument list
        **kwargs: Passed through to subprocess.run
    """
    platform_flags = get_subprocess_creation_flags()
    if "creationflags" in kwargs:
        kwargs["creationflags"] |= platform_flags
    elif platform_flags:
        kwargs["creationflags"] = platform_flags

    # Parallel compile workers must never compete for the terminal's input
    kwargs.setdefault("stdin", subprocess.DEVNULL)

    return subprocess.run(cmd, **kwargs)

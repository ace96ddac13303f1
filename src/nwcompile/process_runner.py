"""
Process Runner - run one toolchain command and capture its diagnostics.

Each invocation gets its own stdout/stderr pipes, so concurrent callers never
share or redirect a process-wide stream. The command line is echoed to the
output sink before it runs; a non-zero exit turns into a BuildError value
carrying the captured diagnostic text and the exit status.
"""

import logging
from typing import Optional

from nwcompile.errors import BuildError
from nwcompile.output import BuildOutput
from nwcompile.subprocess_utils import safe_run

logger = logging.getLogger(__name__)


class ProcessRunner:
    """Runs flattened command lines through the shell, one call at a time per thread."""

    def __init__(self, output: BuildOutput):
        self.output = output

    def run(self, command_line: str, source: Optional[str] = None) -> Optional[BuildError]:
        """Run a command synchronously.

        Args:
            command_line: Full command string, passed to the shell as-is
            source: File or project the command works on, attached to any error

        Returns:
            None on success, otherwise a BuildError with the diagnostic output
            and exit status
        """
        self.output.log_command(command_line)

        try:
            result = safe_run(
                command_line,
                shell=True,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.error(f"Failed to spawn command: {e}")
            return BuildError.process_failed(f"Failed to run command: {e}", -1, source)

        if result.returncode == 0:
            logger.debug(f"Command succeeded ({len(result.stderr)} bytes of diagnostics discarded)")
            return None

        diagnostics = result.stderr.strip() or result.stdout.strip()
        logger.debug(f"Command failed with exit code {result.returncode}")
        return BuildError.process_failed(diagnostics, result.returncode, source)

    def run_and_report(self, command_line: str, phase: str, source: Optional[str] = None) -> Optional[BuildError]:
        """Run a command and report a failure to the sink under ``phase``."""
        error = self.run(command_line, source)
        if error is not None:
            self.output.log_build_error(phase, error)
        return error

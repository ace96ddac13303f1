"""
Console and log output for nwcompile.

A single BuildOutput instance is created per run and handed to every
component that reports anything. It writes each message to the console and
to an append-only log file, both guarded by one lock so that messages from
concurrent compile workers never interleave mid-line.

All output is prefixed with elapsed time in MM:SS.cc format
(minutes:seconds.centiseconds).

Example output:
    00:00.01 NwCompile C/C++ build tool v0.1.0
    00:00.02 Project -- App
    00:00.02   |> g++ -c Source/a.cpp -o Binary/Debug/a.obj -O0 -std=c++23
    00:00.41 Compile - Error found:
    00:00.41       Msg:  a.cpp:3:1: error: expected ';'
    00:00.41       Code: 1

Usage:
    from nwcompile.output import BuildOutput

    with BuildOutput(log_path=Path("Compile.log")) as output:
        output.log("Project -- App")
        output.log_command("g++ -c a.cpp")
"""

import sys
import threading
import time
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Optional, TextIO

if TYPE_CHECKING:
    from nwcompile.errors import BuildError


class BuildOutput:
    """Lock-guarded console + append-only log sink."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        log_path: Optional[Path] = None,
        verbose: bool = True,
    ):
        """
        Initialize the sink.

        Args:
            stream: Console stream (defaults to sys.stdout)
            log_path: Append-only log file, or None to disable file output
            verbose: If False, verbose_only messages are suppressed
        """
        self._stream = stream if stream is not None else sys.stdout
        self._log_file: Optional[TextIO] = None
        self._verbose = verbose
        self._lock = threading.Lock()
        self._start_time = time.time()

        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._log_file = open(log_path, "a", encoding="utf-8")

    def close(self) -> None:
        """Flush and close the log file."""
        with self._lock:
            if self._log_file is not None:
                self._log_file.flush()
                self._log_file.close()
                self._log_file = None

    def __enter__(self) -> "BuildOutput":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_type, exc_val, exc_tb  # Unused
        self.close()

    def get_elapsed(self) -> float:
        """Elapsed seconds since the sink was created."""
        return time.time() - self._start_time

    def format_timestamp(self) -> str:
        """
        Format the current elapsed time as MM:SS.cc.

        Returns:
            Formatted timestamp string
        """
        elapsed = self.get_elapsed()
        minutes = int(elapsed // 60)
        seconds = elapsed % 60
        return f"{minutes:02d}:{seconds:05.2f}"

    def _write_lines(self, lines: list[str]) -> None:
        """Write a block of lines atomically with respect to other callers."""
        with self._lock:
            timestamp = self.format_timestamp()
            text = "".join(f"{timestamp} {line}\n" for line in lines)
            self._stream.write(text)
            self._stream.flush()

            if self._log_file is not None:
                self._log_file.write(text)
                self._log_file.flush()

    def log(self, message: str, verbose_only: bool = False) -> None:
        """
        Log a message with timestamp.

        Args:
            message: Message to log
            verbose_only: If True, only print if verbose mode is enabled
        """
        if verbose_only and not self._verbose:
            return
        self._write_lines(message.splitlines() or [""])

    def log_detail(self, message: str, indent: int = 6, verbose_only: bool = False) -> None:
        """
        Log a detail message (indented).

        Args:
            message: Detail message
            indent: Number of spaces to indent (default 6)
            verbose_only: If True, only print if verbose mode is enabled
        """
        if verbose_only and not self._verbose:
            return
        self._write_lines([f"{' ' * indent}{line}" for line in message.splitlines() or [""]])

    def log_command(self, command_line: str) -> None:
        """Echo an external command line before it runs."""
        self._write_lines([f"  |> {command_line}"])

    def log_header(self, title: str, version: str) -> None:
        self._write_lines([f"{title} v{version}", ""])

    def log_warning(self, message: str) -> None:
        """Report a non-fatal problem the user should know about."""
        self._write_lines([f"WARNING: {message}"])

    def log_build_error(self, phase: str, error: "BuildError") -> None:
        """
        Report a BuildError with its message and numeric code.

        The whole report is written as one block so a multi-line diagnostic
        from one worker is never split by another worker's output.

        Args:
            phase: Stage that produced the error (e.g. "Compile", "Linking")
            error: The error to report
        """
        lines = [f"{phase} - Error found:"]
        if error.source:
            lines.append(f"      File: {error.source}")
        message_lines = error.message.rstrip().splitlines() or [""]
        lines.append(f"      Msg:  {message_lines[0]}")
        lines.extend(f"            {line}" for line in message_lines[1:])
        lines.append(f"      Code: {error.code}")
        self._write_lines(lines)

    def log_build_complete(self, build_time: float) -> None:
        self._write_lines(["", f"Build time: {build_time:.2f}s"])


class TimedLogger:
    """
    Context manager for logging with elapsed time tracking.

    Usage:
        with TimedLogger(output, "Compiling 10 file(s)"):
            compile_all(project, runner)
        # Logs completion time on normal exit
    """

    def __init__(
        self,
        output: BuildOutput,
        operation: str,
        verbose_only: bool = False,
    ):
        self.output = output
        self.operation = operation
        self.verbose_only = verbose_only
        self.start_time = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        self.output.log(f"{self.operation}...", self.verbose_only)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        elapsed = time.time() - self.start_time
        if exc_type is None:
            self.output.log_detail(f"Done ({elapsed:.2f}s)", verbose_only=self.verbose_only)
        return None

"""Pytest configuration and fixtures for nwcompile tests.

Provides:
- output: a BuildOutput writing to an in-memory stream and a temp log file
- make_project: factory for Project values rooted in tmp_path
- RecordingRunner / recording_runner: a ProcessRunner that records command
  lines instead of spawning processes
- fake_toolchain: a Python script that behaves like a tiny compiler/archiver
"""

import io
import sys
import textwrap
import threading
from typing import Callable, Optional

import pytest

from nwcompile.build.toolchain import quote_arg
from nwcompile.config.project_model import Configuration, OutputKind, Project
from nwcompile.errors import BuildError
from nwcompile.output import BuildOutput
from nwcompile.process_runner import ProcessRunner


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are always restored after each test."""
    yield

    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__


@pytest.fixture
def console():
    return io.StringIO()


@pytest.fixture
def output(console, tmp_path):
    sink = BuildOutput(stream=console, log_path=tmp_path / "Compile.log")
    yield sink
    sink.close()


@pytest.fixture
def make_project(tmp_path) -> Callable[..., Project]:
    """Build a Project under tmp_path/<name>, overriding any field by keyword."""

    def _make(
        name: str = "App",
        output_kind: OutputKind = OutputKind.EXECUTABLE,
        config: Optional[Configuration] = None,
        **overrides,
    ) -> Project:
        cwd = overrides.pop("cwd", tmp_path / name)
        header_dir = overrides.pop("header_dir", cwd / "Header")
        fields = dict(
            name=name,
            output_kind=output_kind,
            toolchain="g++",
            standard="c++23",
            cwd=cwd,
            header_dir=header_dir,
            source_dir=cwd / "Source",
            binary_dir=cwd / "Binary",
            config=config or Configuration(name="Debug"),
            include_dirs=(header_dir,),
        )
        fields.update(overrides)
        return Project(**fields)

    return _make


class RecordingRunner(ProcessRunner):
    """ProcessRunner that records command lines and fails on demand."""

    def __init__(self, output: BuildOutput, fail_when: Optional[Callable[[str], bool]] = None):
        super().__init__(output)
        self.fail_when = fail_when or (lambda command_line: False)
        self.commands: list[str] = []
        self._lock = threading.Lock()

    def run(self, command_line: str, source: Optional[str] = None) -> Optional[BuildError]:
        self.output.log_command(command_line)
        with self._lock:
            self.commands.append(command_line)
        if self.fail_when(command_line):
            return BuildError.process_failed(f"error in {source}", 1, source)
        return None


@pytest.fixture
def recording_runner(output):
    return RecordingRunner(output)


FAKE_TOOLCHAIN = textwrap.dedent(
    '''
    """Tiny stand-in for g++/ar used by the integration tests."""
    import glob
    import sys
    from pathlib import Path


    def expand(args):
        result = []
        for arg in args:
            if "*" in arg:
                result.extend(sorted(glob.glob(arg)))
            else:
                result.append(arg)
        return result


    def main(args):
        args = expand(args)
        if args and args[0] == "rcs":
            Path(args[1]).write_text("\\n".join(Path(a).name for a in args[2:]))
            return 0
        if "-c" in args:
            source = Path(args[args.index("-c") + 1])
            if "#error" in source.read_text():
                sys.stderr.write(f"{source}:1:2: error: #error directive\\n")
                return 1
            if "-o" in args:
                Path(args[args.index("-o") + 1]).write_text(f"object of {source.name}")
            return 0
        objects = [Path(a).name for a in args if a.endswith(".obj")]
        Path(args[args.index("-o") + 1]).write_text("\\n".join(objects))
        return 0


    sys.exit(main(sys.argv[1:]))
    '''
)


@pytest.fixture
def fake_toolchain(tmp_path) -> str:
    """Command prefix that runs the fake compiler/archiver with this interpreter."""
    script = tmp_path / "fake_toolchain.py"
    script.write_text(FAKE_TOOLCHAIN)
    return f"{quote_arg(sys.executable)} {quote_arg(script)}"


@pytest.fixture
def failing_runner(output) -> Callable[[Callable[[str], bool]], RecordingRunner]:
    """Factory for a RecordingRunner whose commands fail when the predicate matches."""

    def _make(fail_when: Callable[[str], bool]) -> RecordingRunner:
        return RecordingRunner(output, fail_when=fail_when)

    return _make

"""Tests for the console + log sink."""

import io
import re
import threading

import pytest

from nwcompile.errors import BuildError
from nwcompile.output import BuildOutput, TimedLogger

TIMESTAMP = re.compile(r"^\d{2}:\d{2}\.\d{2} ")


def test_log_writes_to_console_and_log_file(output, console, tmp_path):
    output.log("Project -- App")
    output.close()

    assert "Project -- App" in console.getvalue()
    assert "Project -- App" in (tmp_path / "Compile.log").read_text(encoding="utf-8")


def test_every_line_is_timestamped(output, console):
    output.log("first\nsecond")
    lines = console.getvalue().splitlines()
    assert len(lines) == 2
    assert all(TIMESTAMP.match(line) for line in lines)


def test_log_file_is_append_only(tmp_path):
    log_path = tmp_path / "Compile.log"
    with BuildOutput(stream=io.StringIO(), log_path=log_path) as first:
        first.log("run one")
    with BuildOutput(stream=io.StringIO(), log_path=log_path) as second:
        second.log("run two")

    content = log_path.read_text(encoding="utf-8")
    assert content.index("run one") < content.index("run two")


def test_verbose_only_messages_are_suppressed_when_not_verbose(tmp_path):
    console = io.StringIO()
    with BuildOutput(stream=console, verbose=False) as sink:
        sink.log("hidden", verbose_only=True)
        sink.log("shown")

    assert "hidden" not in console.getvalue()
    assert "shown" in console.getvalue()


def test_log_command_echoes_command_line(output, console):
    output.log_command("g++ -c a.cpp")
    assert "|> g++ -c a.cpp" in console.getvalue()


def test_log_build_error_includes_message_and_code(output, console):
    error = BuildError.process_failed("a.cpp:1:1: error: boom\nnote: here", 7, "a.cpp")
    output.log_build_error("Compile", error)

    text = console.getvalue()
    assert "Compile - Error found:" in text
    assert "File: a.cpp" in text
    assert "Msg:  a.cpp:1:1: error: boom" in text
    assert "note: here" in text
    assert "Code: 7" in text


def test_timed_logger_reports_done(output, console):
    with TimedLogger(output, "Compiling 2 file(s)"):
        pass

    lines = console.getvalue().splitlines()
    assert lines[0].endswith(" Compiling 2 file(s)...")
    assert re.search(r" {6}Done \(\d+\.\d{2}s\)$", lines[1])


def test_timed_logger_respects_verbose_only(tmp_path):
    console = io.StringIO()
    with BuildOutput(stream=console, verbose=False) as sink:
        with TimedLogger(sink, "Compiling", verbose_only=True):
            pass
    assert console.getvalue() == ""


def test_log_warning(output, console):
    output.log_warning("two sources share a.obj")
    assert "WARNING: two sources share a.obj" in console.getvalue()


def test_timed_logger_skips_done_on_exception(output, console):
    with pytest.raises(RuntimeError):
        with TimedLogger(output, "Linking"):
            raise RuntimeError("fail")

    assert "Done (" not in console.getvalue()


@pytest.mark.concurrent_safety
def test_concurrent_error_reports_are_not_interleaved(tmp_path):
    """Multi-line reports from many threads stay contiguous in both sinks."""
    console = io.StringIO()
    log_path = tmp_path / "Compile.log"
    sink = BuildOutput(stream=console, log_path=log_path)

    def report(worker: int) -> None:
        for i in range(25):
            message = "\n".join(f"worker{worker}-report{i}-line{n}" for n in range(4))
            sink.log_build_error("Compile", BuildError.process_failed(message, worker, f"w{worker}"))

    threads = [threading.Thread(target=report, args=(w,)) for w in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    sink.close()

    for text in (console.getvalue(), log_path.read_text(encoding="utf-8")):
        lines = [TIMESTAMP.sub("", line) for line in text.splitlines()]
        assert len(lines) == 8 * 25 * 7
        for start in range(0, len(lines), 7):
            block = lines[start : start + 7]
            assert block[0] == "Compile - Error found:"
            owner = block[2].split("Msg:  ")[1].rsplit("-line", 1)[0]
            assert all(owner in line for line in block[2:6])

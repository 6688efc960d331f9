import os
import sys

import pytest

from loopcoder.agent.agentic_edit_tools import DEFAULT_PREVIEW_URL, ToolExecutor, resolve_tool_path
from loopcoder.agent.agentic_edit_types import (
    CreateFileTool, OpenPreviewTool, ReadFileTool, TerminalTool, WriteFileTool)
from loopcoder.host import CommandOutput

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell syntax")


@pytest.fixture
def executor(host, tmp_path):
    return ToolExecutor(host, str(tmp_path))


def test_resolve_tool_path():
    assert resolve_tool_path("/proj", "src/a.py") == os.path.join("/proj", "src/a.py")
    assert resolve_tool_path("/proj", "/etc/hosts") == "/etc/hosts"
    assert resolve_tool_path("/proj", "C:\\work\\a.py") == "C:\\work\\a.py"
    assert resolve_tool_path("/proj", "\\share\\a.py") == "\\share\\a.py"


def test_create_file_creates_missing_parents(executor, host, tmp_path):
    output = executor.execute(CreateFileTool(path="deep/nested/dir/notes.txt", content="hello"))

    assert output == "Successfully wrote to deep/nested/dir/notes.txt"
    assert (tmp_path / "deep" / "nested" / "dir" / "notes.txt").read_text() == "hello"
    assert executor.execute(ReadFileTool(path="deep/nested/dir/notes.txt")) == "hello"


def test_write_file_overwrites(executor, tmp_path):
    (tmp_path / "a.txt").write_text("old")

    result = executor.run(WriteFileTool(path="a.txt", content="new"))

    assert result.success
    assert (tmp_path / "a.txt").read_text() == "new"


def test_write_file_accepts_empty_content(executor, tmp_path):
    assert executor.execute(WriteFileTool(path="empty.txt", content="")) == "Successfully wrote to empty.txt"
    assert (tmp_path / "empty.txt").read_text() == ""


def test_write_file_to_absolute_path(executor, tmp_path):
    target = tmp_path / "abs" / "out.txt"
    assert executor.execute(WriteFileTool(path=str(target), content="x")) == f"Successfully wrote to {target}"
    assert target.read_text() == "x"


def test_write_file_requires_path_and_content(executor):
    assert executor.execute(WriteFileTool(path="a.txt")) == "Error: Path and content required"
    assert executor.execute(CreateFileTool(content="x")) == "Error: Path and content required"


def test_write_failure_becomes_text(executor, tmp_path):
    (tmp_path / "file.txt").write_text("i am a file")

    result = executor.run(WriteFileTool(path="file.txt/child.txt", content="x"))

    assert not result.success
    assert result.output == "Failed to write to file.txt/child.txt"


def test_read_missing_file(executor):
    result = executor.run(ReadFileTool(path="nope.txt"))

    assert not result.success
    assert result.output == "File is empty or could not be read"


def test_read_requires_path(executor):
    assert executor.execute(ReadFileTool()) == "Error: No path provided"


def test_terminal_requires_command(executor):
    assert executor.execute(TerminalTool()) == "Error: No command provided"
    assert executor.execute(TerminalTool(command="")) == "Error: No command provided"


@posix_only
def test_terminal_runs_in_project_root(executor, tmp_path):
    output = executor.execute(TerminalTool(command="pwd"))
    assert os.path.realpath(output.strip()) == os.path.realpath(str(tmp_path))


@posix_only
def test_terminal_honours_relative_cwd(executor, tmp_path):
    (tmp_path / "sub").mkdir()
    output = executor.execute(TerminalTool(command="pwd", cwd="sub"))
    assert os.path.realpath(output.strip()) == os.path.realpath(str(tmp_path / "sub"))


@posix_only
def test_terminal_combines_stdout_and_stderr(executor):
    output = executor.execute(TerminalTool(command="echo out; echo err 1>&2"))
    assert output == "out\n\n\nSTDERR:\nerr\n"


@posix_only
def test_terminal_stderr_only(executor):
    result = executor.run(TerminalTool(command="echo err 1>&2"))

    assert not result.success
    assert result.output == "STDERR:\nerr\n"


@posix_only
def test_terminal_nonzero_exit_without_output(executor):
    assert executor.execute(TerminalTool(command="exit 3")) == "STDERR:\nCommand exited with code 3"


@posix_only
def test_terminal_no_output(executor):
    assert executor.execute(TerminalTool(command="true")) == "Command completed with no output."


def test_open_preview_defaults_url(executor, host):
    assert executor.execute(OpenPreviewTool()) == f"Opening preview for {DEFAULT_PREVIEW_URL}..."
    assert executor.execute(OpenPreviewTool(url="http://localhost:5173")) == \
        "Opening preview for http://localhost:5173..."
    assert host.previews == [DEFAULT_PREVIEW_URL, "http://localhost:5173"]


def test_open_preview_uses_configured_url(host, tmp_path):
    executor = ToolExecutor(host, str(tmp_path), preview_url="http://127.0.0.1:8000")
    executor.execute(OpenPreviewTool())
    assert host.previews == ["http://127.0.0.1:8000"]


def test_host_exceptions_become_text(host, tmp_path):
    def explode(command, cwd=None) -> CommandOutput:
        raise RuntimeError("boom")

    host.run_shell_command = explode
    result = ToolExecutor(host, str(tmp_path)).run(TerminalTool(command="ls"))

    assert not result.success
    assert result.output == "Error executing terminal: boom"


def test_guides_cover_every_tool():
    guides = ToolExecutor.guides()
    for name in ("terminal", "readFile", "writeFile", "createFile", "openPreview"):
        assert f"## {name}" in guides

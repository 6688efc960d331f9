import os
import sys

import pytest

from loopcoder.host import LocalHost
from loopcoder.utils.shell_utils import run_cmd_subprocess

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell syntax")


def test_list_directory(tmp_path):
    (tmp_path / "d").mkdir()
    (tmp_path / "f.txt").write_text("x")

    entries = sorted(LocalHost().list_directory(str(tmp_path)), key=lambda e: e.name)

    assert [(e.name, e.is_directory) for e in entries] == [("d", True), ("f.txt", False)]
    assert entries[0].path == os.path.join(str(tmp_path), "d")


def test_list_missing_directory(tmp_path):
    assert LocalHost().list_directory(str(tmp_path / "missing")) == []


def test_write_read_and_stat(tmp_path):
    host = LocalHost()
    target = str(tmp_path / "a" / "b.txt")

    assert host.write_file(target, "hello")
    assert host.read_file(target) == "hello"
    stats = host.stat(target)
    assert stats.is_file and not stats.is_directory
    assert stats.size == 5
    assert "T" in stats.modified
    assert host.stat(str(tmp_path / "nope")) is None


def test_delete_file_and_directory(tmp_path):
    host = LocalHost()
    (tmp_path / "dir" / "sub").mkdir(parents=True)
    (tmp_path / "f.txt").write_text("x")

    assert not host.delete_file(str(tmp_path / "dir"))
    assert host.delete_directory(str(tmp_path / "dir"))
    assert host.delete_file(str(tmp_path / "f.txt"))
    assert not host.path_exists(str(tmp_path / "dir"))
    assert not host.path_exists(str(tmp_path / "f.txt"))


def test_cd_is_answered_without_a_process(tmp_path):
    host = LocalHost()
    (tmp_path / "sub").mkdir()

    moved = host.run_shell_command("cd sub", str(tmp_path))
    missing = host.run_shell_command("cd nowhere", str(tmp_path))

    assert moved.stdout == f"Changed directory to {tmp_path / 'sub'}"
    assert moved.cwd == str(tmp_path / "sub")
    assert missing.stderr == f"Directory not found: {tmp_path / 'nowhere'}"
    assert missing.cwd == str(tmp_path)


@posix_only
def test_command_timeout(tmp_path):
    result = LocalHost(command_timeout=0.5).run_shell_command("sleep 2", str(tmp_path))
    assert "Command timed out after 0.5 seconds" in result.stderr


@posix_only
def test_run_cmd_subprocess(tmp_path):
    code, out, err = run_cmd_subprocess("echo hi; echo bad 1>&2; exit 2", cwd=str(tmp_path))
    assert (code, out, err) == (2, "hi\n", "bad\n")


def test_open_folder_dialog(tmp_path):
    assert LocalHost(input_func=lambda _: str(tmp_path)).open_folder_dialog() == str(tmp_path)
    assert LocalHost(input_func=lambda _: str(tmp_path / "missing")).open_folder_dialog() is None


def test_current_working_directory():
    assert LocalHost().current_working_directory() == os.getcwd()


def test_invalid_input_is_reported_not_raised(tmp_path):
    host = LocalHost()
    bad_path = str(tmp_path / "bad\x00.txt")

    assert not host.write_file(bad_path, "x")
    assert host.read_file(bad_path) is None
    assert not host.delete_file(bad_path)
    assert host.stat(bad_path) is None
    assert host.list_directory(bad_path) == []
    assert not host.write_file(str(tmp_path / "surrogate.txt"), "\ud800")


def test_command_with_null_byte_is_reported(tmp_path):
    result = LocalHost().run_shell_command("echo a\x00b", str(tmp_path))
    assert result.stderr.startswith("Error: ")
    assert result.cwd == str(tmp_path)


@posix_only
def test_compound_cd_command_runs_in_the_shell(tmp_path):
    (tmp_path / "sub").mkdir()

    result = LocalHost().run_shell_command("cd sub && touch made.txt && pwd", str(tmp_path))

    assert result.stderr == ""
    assert (tmp_path / "sub" / "made.txt").exists()
    assert result.cwd == str(tmp_path)

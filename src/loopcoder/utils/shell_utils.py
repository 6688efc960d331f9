import os
import platform
import subprocess
import sys
from typing import Optional, Tuple

import psutil


def get_windows_parent_process_name():
    """
    获取当前进程的父进程名（仅在Windows系统下有意义）。

    适用场景：
    - 判断命令是否由PowerShell或cmd.exe启动，以便调整命令格式。

    返回：
    - str|None: 父进程名（小写字符串，如"powershell.exe"或"cmd.exe"），如果无法获取则为None。
    """
    try:
        current_process = psutil.Process()
        while True:
            parent = current_process.parent()
            if parent is None:
                break
            parent_name = parent.name().lower()
            if parent_name in ["powershell.exe", "cmd.exe"]:
                return parent_name
            current_process = parent
        return None
    except psutil.Error:
        return None


def default_shell() -> str:
    if platform.system() == "Windows":
        return os.environ.get("COMSPEC", "cmd.exe")
    return os.environ.get("SHELL", "/bin/sh")


def run_cmd_subprocess(
        command: str, cwd: Optional[str] = None, timeout: Optional[float] = None,
        encoding: Optional[str] = None
) -> Tuple[int, str, str]:
    """
    通过系统 shell 执行命令, 分别收集 stdout 与 stderr
    返回 (exit_code, stdout, stderr), 超时时 exit_code 为 -1
    """
    if platform.system() == "Windows":
        if get_windows_parent_process_name() == "powershell.exe":
            command = f"powershell -Command {command}"

    process = subprocess.Popen(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        shell=True,
        encoding=encoding or sys.stdout.encoding or "utf-8",
        errors="replace",
        cwd=cwd,
    )
    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        stdout, stderr = process.communicate()
        timeout_message = f"Command timed out after {timeout} seconds"
        stderr = f"{stderr}\n{timeout_message}" if stderr else timeout_message
        return -1, stdout or "", stderr
    return process.returncode, stdout or "", stderr or ""

import os
import re
import shutil
import threading
import webbrowser
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger

from loopcoder.host.base_host import BaseHost, CommandOutput, FileEntry, FileStats
from loopcoder.utils.shell_utils import run_cmd_subprocess


_SHELL_OPERATORS_RE = re.compile(r"[;&|<>\n]")


class LocalHost(BaseHost):
    """ 基于本机文件系统与 subprocess 的宿主实现 """

    def __init__(self, command_timeout: Optional[float] = 300, input_func=input):
        self.command_timeout = command_timeout
        self.input_func = input_func

    def open_folder_dialog(self) -> Optional[str]:
        try:
            folder = self.input_func("Project folder: ").strip()
        except EOFError:
            return None
        if folder and os.path.isdir(folder):
            return os.path.abspath(folder)
        return None

    def list_directory(self, path: str) -> List[FileEntry]:
        try:
            with os.scandir(path) as it:
                return [
                    FileEntry(name=entry.name, path=os.path.join(path, entry.name), is_directory=entry.is_dir())
                    for entry in it
                ]
        except (OSError, ValueError) as e:
            logger.warning(f"读取目录失败 {path}: {e}")
            return []

    def read_file(self, path: str) -> Optional[str]:
        try:
            with open(path, 'r', encoding='utf-8', errors='replace') as f:
                return f.read()
        except (OSError, ValueError) as e:
            logger.warning(f"读取文件失败 {path}: {e}")
            return None

    def write_file(self, path: str, content: str) -> bool:
        normalized_path = os.path.normpath(path)
        try:
            parent = os.path.dirname(normalized_path)
            if parent and not os.path.exists(parent):
                logger.debug(f"创建目录 {parent}")
                os.makedirs(parent, exist_ok=True)
            with open(normalized_path, 'w', encoding='utf-8') as f:
                f.write(content)
            return True
        except (OSError, ValueError) as e:
            logger.warning(f"写入文件失败 {normalized_path}: {e}")
            return False

    def create_file(self, path: str, content: str) -> bool:
        return self.write_file(path, content)

    def delete_file(self, path: str) -> bool:
        try:
            os.unlink(path)
            return True
        except (OSError, ValueError) as e:
            logger.warning(f"删除文件失败 {path}: {e}")
            return False

    def delete_directory(self, path: str) -> bool:
        try:
            if os.path.exists(path):
                shutil.rmtree(path)
            return True
        except (OSError, ValueError) as e:
            logger.warning(f"删除目录失败 {path}: {e}")
            return False

    def path_exists(self, path: str) -> bool:
        return os.path.exists(path)

    def stat(self, path: str) -> Optional[FileStats]:
        try:
            st = os.stat(path)
        except (OSError, ValueError) as e:
            logger.warning(f"获取文件信息失败 {path}: {e}")
            return None
        return FileStats(
            is_directory=os.path.isdir(path),
            is_file=os.path.isfile(path),
            size=st.st_size,
            modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).isoformat()
        )

    def current_working_directory(self) -> str:
        return os.getcwd()

    def run_shell_command(self, command: str, cwd: Optional[str] = None) -> CommandOutput:
        work_dir = cwd or os.getcwd()
        stripped = command.strip()

        # 单独的 cd 命令不启动进程, 直接返回新的工作目录; 带 && ; | 等操作符的组合命令交给 shell
        if stripped.startswith("cd ") and not _SHELL_OPERATORS_RE.search(stripped):
            new_path = stripped[3:].strip()
            target_path = new_path if os.path.isabs(new_path) else os.path.abspath(os.path.join(work_dir, new_path))
            if os.path.isdir(target_path):
                return CommandOutput(stdout=f"Changed directory to {target_path}", cwd=target_path)
            return CommandOutput(stderr=f"Directory not found: {target_path}", cwd=work_dir)

        try:
            exit_code, stdout, stderr = run_cmd_subprocess(stripped, cwd=work_dir, timeout=self.command_timeout)
        except (OSError, ValueError) as e:
            logger.warning(f"执行命令失败 {stripped}: {e}")
            return CommandOutput(stderr=f"Error: {e}", cwd=work_dir)

        if exit_code != 0 and not stderr:
            stderr = f"Command exited with code {exit_code}"
        return CommandOutput(stdout=stdout, stderr=stderr, cwd=work_dir)

    def open_preview(self, url: str) -> None:
        threading.Thread(target=webbrowser.open_new_tab, args=(url,), daemon=True).start()

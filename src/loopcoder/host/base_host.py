from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel


class FileEntry(BaseModel):
    name: str
    path: str
    is_directory: bool


class FileStats(BaseModel):
    is_directory: bool
    is_file: bool
    size: int
    modified: str  # ISO8601


class CommandOutput(BaseModel):
    stdout: str = ""
    stderr: str = ""
    cwd: Optional[str] = None


class BaseHost(ABC):
    """
    宿主环境提供的文件系统与进程能力
    所有方法在失败时返回 None/False/空值, 不向调用方抛出异常
    """

    @abstractmethod
    def open_folder_dialog(self) -> Optional[str]:
        pass

    @abstractmethod
    def list_directory(self, path: str) -> List[FileEntry]:
        pass

    @abstractmethod
    def read_file(self, path: str) -> Optional[str]:
        pass

    @abstractmethod
    def write_file(self, path: str, content: str) -> bool:
        pass

    @abstractmethod
    def create_file(self, path: str, content: str) -> bool:
        pass

    @abstractmethod
    def delete_file(self, path: str) -> bool:
        pass

    @abstractmethod
    def delete_directory(self, path: str) -> bool:
        pass

    @abstractmethod
    def path_exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def stat(self, path: str) -> Optional[FileStats]:
        pass

    @abstractmethod
    def current_working_directory(self) -> str:
        pass

    @abstractmethod
    def run_shell_command(self, command: str, cwd: Optional[str] = None) -> CommandOutput:
        pass

    @abstractmethod
    def open_preview(self, url: str) -> None:
        """ 通知外部预览界面打开 url, 立即返回, 不等待加载 """
        pass

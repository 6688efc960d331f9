import os
import re
import typing
from abc import ABC, abstractmethod

from loopcoder.agent.agentic_edit_types import BaseTool, ToolResult

if typing.TYPE_CHECKING:
    from loopcoder.agent.agentic_edit_tools.tool_executor import ToolExecutor


_DRIVE_LETTER_RE = re.compile(r"^[a-zA-Z]:")


def resolve_tool_path(root_path: str, path: str) -> str:
    """ 相对路径基于项目根目录解析, 盘符或前导斜杠形式视为绝对路径 """
    if _DRIVE_LETTER_RE.match(path) or path.startswith(("/", "\\")):
        return path
    return os.path.join(root_path, path)


class BaseToolResolver(ABC):
    def __init__(self, executor: 'ToolExecutor', tool: BaseTool):
        """
        Initializes the resolver.
        Args:
            executor: 持有宿主能力与项目根目录的工具执行器
            tool: The Pydantic model instance representing the tool call.
        """
        self.executor = executor
        self.tool = tool

    @property
    def host(self):
        return self.executor.host

    @property
    def root_path(self) -> str:
        return self.executor.root_path

    @abstractmethod
    def resolve(self) -> ToolResult:
        """
        Executes the tool's logic.
        Returns:
            A ToolResult object indicating success or failure and a text output.
        """
        pass

    @staticmethod
    @abstractmethod
    def guide() -> str:
        pass

# flake8: noqa
from .base_tool_resolver import BaseToolResolver, resolve_tool_path
from .terminal_tool import TerminalToolResolver
from .read_file_tool import ReadFileToolResolver
from .write_file_tool import WriteFileToolResolver
from .open_preview_tool import OpenPreviewToolResolver
from .tool_executor import ToolExecutor, TOOL_RESOLVER_MAP, DEFAULT_PREVIEW_URL

__all__ = [
    "BaseToolResolver",
    "resolve_tool_path",
    "TerminalToolResolver",
    "ReadFileToolResolver",
    "WriteFileToolResolver",
    "OpenPreviewToolResolver",
    "ToolExecutor",
    "TOOL_RESOLVER_MAP",
    "DEFAULT_PREVIEW_URL"
]

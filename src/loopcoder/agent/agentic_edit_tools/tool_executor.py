import textwrap
from typing import Dict, Optional, Type

from loguru import logger

from loopcoder.agent.agentic_edit_tools.base_tool_resolver import BaseToolResolver
from loopcoder.agent.agentic_edit_tools.open_preview_tool import OpenPreviewToolResolver
from loopcoder.agent.agentic_edit_tools.read_file_tool import ReadFileToolResolver
from loopcoder.agent.agentic_edit_tools.terminal_tool import TerminalToolResolver
from loopcoder.agent.agentic_edit_tools.write_file_tool import WriteFileToolResolver
from loopcoder.agent.agentic_edit_types import (
    BaseTool, CreateFileTool, OpenPreviewTool, ReadFileTool, TerminalTool, ToolResult, WriteFileTool)
from loopcoder.host import BaseHost


DEFAULT_PREVIEW_URL = "http://localhost:3000"


TOOL_RESOLVER_MAP: Dict[Type[BaseTool], Type[BaseToolResolver]] = {
    TerminalTool: TerminalToolResolver,
    ReadFileTool: ReadFileToolResolver,
    WriteFileTool: WriteFileToolResolver,
    CreateFileTool: WriteFileToolResolver,
    OpenPreviewTool: OpenPreviewToolResolver,
}


class ToolExecutor:
    """
    工具执行适配器: 把解析出的工具调用落到宿主能力上, 并将结果归一为文本
    任何失败都转换为文本返回, 调用方无需处理异常
    """

    def __init__(self, host: BaseHost, root_path: str, preview_url: Optional[str] = None):
        self.host = host
        self.root_path = root_path
        self.preview_url = preview_url or DEFAULT_PREVIEW_URL

    def run(self, tool: BaseTool) -> ToolResult:
        resolver_cls = TOOL_RESOLVER_MAP.get(type(tool))
        tool_name = getattr(tool, "tool", type(tool).__name__)
        if resolver_cls is None:
            return ToolResult(success=False, output=f"Unknown tool: {tool_name}")
        try:
            return resolver_cls(self, tool).resolve()
        except Exception as e:
            logger.exception(f"工具 {tool_name} 执行异常")
            return ToolResult(success=False, output=f"Error executing {tool_name}: {e}")

    def execute(self, tool: BaseTool) -> str:
        return self.run(tool).output

    @staticmethod
    def guides() -> str:
        """ 汇总所有工具的使用说明, 用于系统提示词 """
        seen = []
        for resolver_cls in TOOL_RESOLVER_MAP.values():
            if resolver_cls not in seen:
                seen.append(resolver_cls)
        return "\n\n".join(textwrap.dedent(resolver_cls.guide()).strip() for resolver_cls in seen)

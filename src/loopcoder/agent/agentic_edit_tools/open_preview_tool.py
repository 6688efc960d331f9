from loopcoder.agent.agentic_edit_tools.base_tool_resolver import BaseToolResolver
from loopcoder.agent.agentic_edit_types import OpenPreviewTool, ToolResult


class OpenPreviewToolResolver(BaseToolResolver):
    tool: OpenPreviewTool

    def resolve(self) -> ToolResult:
        url = self.tool.url or self.executor.preview_url
        # 只发出信号, 不等待预览加载
        self.host.open_preview(url)
        return ToolResult(success=True, output=f"Opening preview for {url}...")

    @staticmethod
    def guide() -> str:
        doc = """
        ## openPreview
        Open the live preview panel for the user.
        Parameters:
        - url (optional): address to preview, defaults to the local dev server.
        Example:
        ```tool_call
        {"tool": "openPreview", "url": "http://localhost:5173"}
        ```
        """
        return doc

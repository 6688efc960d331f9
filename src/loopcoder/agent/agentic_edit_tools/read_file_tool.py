from loopcoder.agent.agentic_edit_tools.base_tool_resolver import BaseToolResolver, resolve_tool_path
from loopcoder.agent.agentic_edit_types import ReadFileTool, ToolResult


class ReadFileToolResolver(BaseToolResolver):
    tool: ReadFileTool

    def resolve(self) -> ToolResult:
        if not self.tool.path:
            return ToolResult(success=False, output="Error: No path provided")

        content = self.host.read_file(resolve_tool_path(self.root_path, self.tool.path))
        if not content:
            return ToolResult(success=content is not None, output="File is empty or could not be read")
        return ToolResult(success=True, output=content)

    @staticmethod
    def guide() -> str:
        doc = """
        ## readFile
        Read the content of a file.
        Parameters:
        - path (required): file path relative to the project root.
        Example:
        ```tool_call
        {"tool": "readFile", "path": "src/main.py"}
        ```
        """
        return doc

from typing import Union

from loopcoder.agent.agentic_edit_tools.base_tool_resolver import BaseToolResolver, resolve_tool_path
from loopcoder.agent.agentic_edit_types import CreateFileTool, ToolResult, WriteFileTool


class WriteFileToolResolver(BaseToolResolver):
    """ writeFile 与 createFile 共用, 宿主写入时会自动创建缺失的父目录 """
    tool: Union[WriteFileTool, CreateFileTool]

    def resolve(self) -> ToolResult:
        file_path = self.tool.path
        content = self.tool.content
        if not file_path or content is None:
            return ToolResult(success=False, output="Error: Path and content required")

        full_path = resolve_tool_path(self.root_path, file_path)
        if isinstance(self.tool, CreateFileTool):
            success = self.host.create_file(full_path, content)
        else:
            success = self.host.write_file(full_path, content)

        if success:
            return ToolResult(success=True, output=f"Successfully wrote to {file_path}")
        return ToolResult(success=False, output=f"Failed to write to {file_path}")

    @staticmethod
    def guide() -> str:
        doc = """
        ## writeFile
        Overwrite a file (or create it) with the full content. Missing directories are created.
        Parameters:
        - path (required): file path relative to the project root.
        - content (required): the complete file content, never truncated.
        Example:
        ```tool_call
        {"tool": "writeFile", "path": "src/app.js", "content": "console.log('hi');\\n"}
        ```

        ## createFile
        Create a new file together with its parent directories. Same parameters as writeFile.
        Example:
        ```tool_call
        {"tool": "createFile", "path": "notes.txt", "content": "hello"}
        ```
        """
        return doc

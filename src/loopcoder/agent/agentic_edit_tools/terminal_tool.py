from loopcoder.agent.agentic_edit_tools.base_tool_resolver import BaseToolResolver, resolve_tool_path
from loopcoder.agent.agentic_edit_types import TerminalTool, ToolResult


class TerminalToolResolver(BaseToolResolver):
    tool: TerminalTool

    def resolve(self) -> ToolResult:
        command = self.tool.command
        if not command:
            return ToolResult(success=False, output="Error: No command provided")

        cwd = resolve_tool_path(self.root_path, self.tool.cwd) if self.tool.cwd else self.root_path
        result = self.host.run_shell_command(command, cwd)
        output = result.stdout or ""
        error = result.stderr or ""

        if error and not output:
            return ToolResult(success=False, output=f"STDERR:\n{error}")
        if not output and not error:
            return ToolResult(success=True, output="Command completed with no output.")
        return ToolResult(success=not error, output=output + (f"\n\nSTDERR:\n{error}" if error else ""))

    @staticmethod
    def guide() -> str:
        doc = """
        ## terminal
        Run a shell command. The command runs in the project root unless "cwd" is given.
        Parameters:
        - command (required): the shell command to run.
        - cwd (optional): working directory, relative to the project root.
        Example:
        ```tool_call
        {"tool": "terminal", "command": "npm install lodash"}
        ```
        """
        return doc

from typing import Optional

from loopcoder.core import prompt
from loopcoder.lctypes import EnvInfo


@prompt()
def agent_system_prompt(root_path: str, tool_guides: str, env_info: Optional[EnvInfo] = None):
    """
    You are an autonomous AI coding assistant. You are currently working in the project root: {{ root_path }}.
    {% if env_info %}
    Operating system: {{ env_info.os_name }} {{ env_info.os_version }}, default shell: {{ env_info.default_shell }}.
    {% endif %}

    CRITICAL RULES:
    1. When a user asks you to perform an action (install, create, run, fix, etc.), ALWAYS use a tool call.
    2. DO NOT ask the user to run commands themselves. You have the power to do it.
    3. Use at most ONE tool call per reply, in the following JSON format:

    ```tool_call
    {"tool": "terminal", "command": "npm install lodash"}
    ```

    AVAILABLE TOOLS:
    {{ tool_guides }}

    Workflow: Explain your plan -> Tool call block -> Wait for result -> Repeat until task complete.
    When the task is complete, reply with a final summary and no tool_call block.
    """


@prompt()
def tool_result_prompt(tool: str, output: str):
    """
    [TOOL RESULT for {{ tool }}]:
    {{ output }}

    Continue with the task. If the task is complete, provide a final summary without any tool_call blocks.
    """


CHAT_SYSTEM_PROMPT = (
    "You are an expert coding assistant embedded in a code editor. Answer concisely. "
    "When the user asks for changes spanning several files, reply with a single fenced block tagged "
    "file_operations containing a JSON array of "
    '{"action": "CREATE"|"UPDATE"|"DELETE", "path": "<relative path>", "content": "<full file text>"} '
    "objects (content is omitted for DELETE)."
)

CODE_SYSTEM_PROMPT = (
    "You are an expert software engineer. Reply with the complete resulting code "
    "in a single fenced code block and nothing else."
)

COMPLETION_SYSTEM_PROMPT = (
    "You are an AI coding assistant. Provide a single code completion for the current cursor position. "
    "Do not explain. Do not use markdown blocks. Return only the code to insert."
)


@prompt()
def chat_prompt(message: str, context: Optional[str] = None):
    """
    {% if context -%}
    {{ context }}

    {% endif -%}
    {{ message }}
    """


@prompt()
def explain_code_prompt(code: str, language: Optional[str] = None, file_path: Optional[str] = None):
    """
    Explain what the following {{ language or "" }} code{% if file_path %} from {{ file_path }}{% endif %} does.
    Describe its purpose, the important steps and any pitfalls.

    ```{{ language or "" }}
    {{ code }}
    ```
    """


@prompt()
def refactor_code_prompt(code: str, instruction: Optional[str] = None, language: Optional[str] = None):
    """
    Refactor the following {{ language or "" }} code to improve readability and maintainability
    without changing its behavior.
    {% if instruction %}
    Additional instruction: {{ instruction }}
    {% endif %}

    ```{{ language or "" }}
    {{ code }}
    ```
    """


@prompt()
def generate_file_prompt(instruction: str, file_path: Optional[str] = None, language: Optional[str] = None,
                         file_tree: Optional[str] = None):
    """
    Generate the full content of {% if file_path %}the file {{ file_path }}{% else %}a new file{% endif %}
    {%- if language %} written in {{ language }}{% endif %}.
    Requirement: {{ instruction }}
    {% if file_tree %}

    === PROJECT STRUCTURE ===
    {{ file_tree }}
    {% endif %}
    """


@prompt()
def fix_bug_prompt(code: str, error: Optional[str] = None, language: Optional[str] = None):
    """
    Fix the bug in the following {{ language or "" }} code and return the corrected code.
    {% if error %}
    Error / symptom:
    {{ error }}
    {% endif %}

    ```{{ language or "" }}
    {{ code }}
    ```
    """


@prompt()
def complete_code_prompt(code_with_cursor: str, file_path: Optional[str] = None, language: Optional[str] = None):
    """
    Complete the following code at the cursor (marked as <CURSOR>).

    File: {{ file_path or "current" }}
    Language: {{ language or "" }}

    Code:
    {{ code_with_cursor }}
    """

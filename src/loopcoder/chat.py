from typing import Optional

from loguru import logger

from loopcoder.context import ProjectContext, format_context_for_ai
from loopcoder.core import BaseLLMProvider, extract_code
from loopcoder.templates import (
    CHAT_SYSTEM_PROMPT, CODE_SYSTEM_PROMPT, COMPLETION_SYSTEM_PROMPT,
    chat_prompt, explain_code_prompt, refactor_code_prompt, generate_file_prompt, fix_bug_prompt,
    complete_code_prompt)


CURSOR_MARKER = "<CURSOR>"


class CodeAssistant:
    """
    非 Agent 模式下的单次助手动作
    refactor / generate / fix / complete 只返回回复中的第一个代码块
    """

    def __init__(self, llm: BaseLLMProvider):
        self.llm = llm

    def chat(self, message: str, context: Optional[ProjectContext] = None, selection: Optional[str] = None) -> str:
        rendered_context = format_context_for_ai(context, selection).strip() if context is not None else None
        return self.llm.generate_text(chat_prompt.prompt(message=message, context=rendered_context),
                                      CHAT_SYSTEM_PROMPT)

    def explain_code(self, code: str, language: Optional[str] = None, file_path: Optional[str] = None) -> str:
        return self.llm.generate_text(
            explain_code_prompt.prompt(code=code, language=language, file_path=file_path), CHAT_SYSTEM_PROMPT)

    def refactor_code(self, code: str, instruction: Optional[str] = None, language: Optional[str] = None) -> str:
        response = self.llm.generate_text(
            refactor_code_prompt.prompt(code=code, instruction=instruction, language=language), CODE_SYSTEM_PROMPT)
        return extract_code(response)

    def generate_file(
            self, instruction: str, file_path: Optional[str] = None, language: Optional[str] = None,
            file_tree: Optional[str] = None
    ) -> str:
        response = self.llm.generate_text(
            generate_file_prompt.prompt(
                instruction=instruction, file_path=file_path, language=language, file_tree=file_tree),
            CODE_SYSTEM_PROMPT)
        return extract_code(response)

    def fix_bug(self, code: str, error: Optional[str] = None, language: Optional[str] = None) -> str:
        response = self.llm.generate_text(
            fix_bug_prompt.prompt(code=code, error=error, language=language), CODE_SYSTEM_PROMPT)
        return extract_code(response)

    def complete_code(
            self, code_before: str, code_after: str = "", file_path: Optional[str] = None,
            language: Optional[str] = None
    ) -> str:
        """ 行内补全: 光标位置以 <CURSOR> 标记, 使用低温度短输出 """
        code_with_cursor = f"{code_before}{CURSOR_MARKER}{code_after}"
        logger.debug(f"请求补全: {file_path or 'current'}, 光标前 {len(code_before)} 字符")
        response = self.llm.generate_completion(
            complete_code_prompt.prompt(code_with_cursor=code_with_cursor, file_path=file_path, language=language),
            COMPLETION_SYSTEM_PROMPT)
        return extract_code(response)

import json
import re
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from loopcoder.agent.agentic_edit_types import BaseTool, TOOL_CALL_ADAPTER, TOOL_NAMES


TOOL_CALL_TAG = "```tool_call"
TOOL_CALL_PATTERN = re.compile(r"```tool_call\s*\n([\s\S]*?)\n```")


def parse_tool_call(response: str) -> Optional[BaseTool]:
    """
    Agent 工具调用解析器
    - 只识别回复中的第一个 tool_call 代码块, 其余忽略
    - 内容须为带 tool 字段的 JSON 对象, 且 tool 属于已知工具
    - 任何解析失败都记录日志并返回 None, 不向调用方抛出
    - 不检查各工具字段是否齐全, 由执行阶段负责
    """
    match = TOOL_CALL_PATTERN.search(response)
    if not match:
        return None

    body = match.group(1).strip()
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        logger.warning(f"tool_call 代码块 JSON 解析失败: {e}\n内容:\n{body}")
        return None

    if not isinstance(parsed, dict) or parsed.get("tool") not in TOOL_NAMES:
        logger.warning(f"tool_call 代码块缺少有效的 tool 字段: {body}")
        return None

    try:
        return TOOL_CALL_ADAPTER.validate_python(parsed)
    except ValidationError as e:
        logger.warning(f"tool_call 字段校验失败 <{parsed.get('tool')}>: {e}")
        return None


def text_before_tool_call(response: str) -> str:
    """ tool_call 代码块之前的解释性文本 """
    return response.split(TOOL_CALL_TAG, 1)[0].strip()

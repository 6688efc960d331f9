from loopcoder.agent.agent_base import parse_tool_call, text_before_tool_call
from loopcoder.agent.agentic_changes import (
    ChangeSetReview, apply_change_set, format_apply_result, normalize_operation_path, parse_file_operations)
from loopcoder.agent.agentic_runtime import (
    AgenticRuntime, AgentRequest, is_agent_request, summarize_tool_steps, CANCELLED_MESSAGE)
from loopcoder.agent.step_log import StepLog


__all__ = [
    "parse_tool_call", "text_before_tool_call",
    "ChangeSetReview", "apply_change_set", "format_apply_result", "normalize_operation_path",
    "parse_file_operations",
    "AgenticRuntime", "AgentRequest", "is_agent_request", "summarize_tool_steps", "CANCELLED_MESSAGE",
    "StepLog"
]

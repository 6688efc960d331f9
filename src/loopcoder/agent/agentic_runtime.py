import os
from typing import List, Optional, Protocol, Sequence

from loguru import logger
from pydantic import BaseModel, Field
from rich.markdown import Markdown
from rich.text import Text

from loopcoder.agent.agent_base import parse_tool_call, text_before_tool_call
from loopcoder.agent.agentic_edit_tools import ToolExecutor
from loopcoder.agent.agentic_edit_types import (
    AgentOutcome, AgentRunResult, AgentStep, ConversationTurn, StepKind, StepStatus)
from loopcoder.agent.step_log import StepLog, StepObserver
from loopcoder.context import ProjectContext
from loopcoder.core import BaseLLMProvider
from loopcoder.host import BaseHost
from loopcoder.lctypes import LoopCoderArgs
from loopcoder.templates import agent_system_prompt, tool_result_prompt
from loopcoder.utils.sys_utils import detect_env
from loopcoder.utils.printer_utils import (
    Printer, COLOR_SYSTEM, COLOR_SUCCESS, COLOR_ERROR, COLOR_WARNING, COLOR_INFO, STEP_STATUS_COLORS)

printer = Printer()


CANCELLED_MESSAGE = "⚠️ Agent loop was stopped by user."
TRUNCATION_MARKER = "\n... (truncated)"

AGENT_KEYWORDS = (
    "install", "create a", "build", "set up", "setup", "init", "scaffold", "run", "fix the",
    "deploy", "npm", "git", "mkdir", "touch", "generate", "start the app", "open preview", "preview the app"
)


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


class AgentRequest(BaseModel):
    message: str
    root_path: str
    context: ProjectContext = Field(default_factory=ProjectContext)
    max_iterations: Optional[int] = None  # 不指定时使用配置中的 max_iterations


def truncate_output(output: str, limit: int) -> str:
    if limit > 0 and len(output) > limit:
        return output[:limit] + TRUNCATION_MARKER
    return output


def is_agent_request(text: str, has_project: bool) -> bool:
    """ 判断一条用户输入是否应交给 Agent 执行, 未打开项目时一律走普通对话 """
    if not has_project:
        return False
    lowered = text.strip().lower()
    return lowered.startswith("/") or any(keyword in lowered for keyword in AGENT_KEYWORDS)


def summarize_tool_steps(steps: Sequence[AgentStep]) -> str:
    """ 渲染本次运行执行过的工具列表, 结果状态取自对应的 tool_result 步骤 """
    lines = []
    pending: Optional[AgentStep] = None
    for step in steps:
        if step.kind == StepKind.TOOL_CALL:
            pending = step
        elif step.kind == StepKind.TOOL_RESULT and pending is not None:
            status = "ok" if step.status == StepStatus.DONE else "failed"
            lines.append(f"- **{pending.tool}**: `{pending.input or ''}` → {status}")
            pending = None
    return "\n".join(lines)


def render_transcript(turns: Sequence[ConversationTurn], char_limit: int = 0) -> str:
    """
    将对话记录渲染为 [ROLE]: content 形式
    超过 char_limit 时保留首条用户指令与最新一轮, 中间最早的若干轮以省略标记代替
    """
    rendered = [f"[{turn.role.upper()}]: {turn.content}" for turn in turns]
    full = "\n\n".join(rendered)
    if char_limit <= 0 or len(full) <= char_limit or len(rendered) <= 2:
        return full

    head, tail = rendered[0], rendered[1:]
    dropped = 0
    while len(tail) > 1:
        tail.pop(0)
        dropped += 1
        marker = f"[USER]: [... {dropped} earlier turns omitted ...]"
        if len("\n\n".join([head, marker] + tail)) <= char_limit:
            break
    logger.debug(f"对话记录超出 {char_limit} 字符, 省略最早的 {dropped} 轮")
    return "\n\n".join([head, f"[USER]: [... {dropped} earlier turns omitted ...]"] + tail)


class AgenticRuntime:
    """
    Agent 循环控制器
    每轮: 调用模型 -> 解析 tool_call -> 执行工具 -> 将结果写回对话记录, 直到
    得到不含 tool_call 的最终回复 / 被取消 / 模型调用失败 / 达到最大迭代次数
    """

    def __init__(self, args: LoopCoderArgs, llm: BaseLLMProvider, host: BaseHost):
        self.args = args
        self.llm = llm
        self.host = host
        self.mapp = "Agentic"
        self.env_info = detect_env()

    def _build_prompt(self, conversations: List[ConversationTurn], context: ProjectContext) -> str:
        history = render_transcript(conversations, self.args.transcript_char_limit)
        prompt = f"{history}\n\n"
        if context.file_tree:
            prompt += f"\n=== PROJECT STRUCTURE ===\n{context.file_tree}"
        if context.code:
            prompt += f"\n=== CURRENT FILE ({context.file_path}) ===\n```\n{context.code}\n```"
        return prompt

    @staticmethod
    def _exhausted_response(max_iterations: int, step_log: StepLog) -> str:
        lines = [
            f"- **{step.tool}**: `{step.input or ''}` → {step.status.value}"
            for step in step_log.of_kind(StepKind.TOOL_CALL)
        ]
        return (f"⚠️ Agent reached maximum iterations ({max_iterations}). "
                f"Here's what was accomplished:\n\n" + "\n".join(lines))

    def run(
            self, request: AgentRequest, on_step: Optional[StepObserver] = None,
            cancel_event: Optional[CancelSignal] = None
    ) -> AgentRunResult:
        max_iterations = request.max_iterations if request.max_iterations is not None else self.args.max_iterations
        output_limit = self.args.tool_output_limit
        executor = ToolExecutor(self.host, request.root_path, self.args.preview_url)
        system_prompt = agent_system_prompt.prompt(
            root_path=request.root_path, tool_guides=ToolExecutor.guides(), env_info=self.env_info)

        step_log = StepLog(observer=on_step)
        conversations: List[ConversationTurn] = [ConversationTurn(role="user", content=request.message)]
        iteration = 0
        outcome: Optional[AgentOutcome] = None
        final_response = ""

        logger.info(f"Agent 开始运行, 项目根目录: {request.root_path}, 最大迭代次数: {max_iterations}")

        while iteration < max_iterations:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Agent 在第 {iteration + 1} 轮开始前被取消")
                outcome = AgentOutcome.CANCELLED
                final_response = CANCELLED_MESSAGE
                break

            iteration += 1
            logger.debug(f"第 {iteration} 轮, 对话记录 {len(conversations)} 条")

            thinking = step_log.add(StepKind.THINKING)
            full_prompt = self._build_prompt(conversations, request.context)
            try:
                reply = self.llm.generate_text(full_prompt, system_prompt)
            except Exception as e:
                logger.error(f"第 {iteration} 轮模型调用失败: {e}")
                step_log.update(thinking.id, status=StepStatus.ERROR)
                outcome = AgentOutcome.MODEL_ERROR
                final_response = f"Error from AI: {e}"
                break
            step_log.update(thinking.id, status=StepStatus.DONE)

            tool = parse_tool_call(reply)
            if tool is None:
                outcome = AgentOutcome.FINISHED
                final_response = reply
                break

            explanation = text_before_tool_call(reply)
            if explanation:
                conversations.append(ConversationTurn(role="assistant", content=explanation))

            tool_step = step_log.add(StepKind.TOOL_CALL, tool=tool.tool, input=tool.display_input)
            result = executor.run(tool)
            output = truncate_output(result.output, output_limit)
            step_log.update(tool_step.id, status=StepStatus.DONE, output=output)
            step_log.add(
                StepKind.TOOL_RESULT, tool=tool.tool, output=output,
                status=StepStatus.DONE if result.success else StepStatus.ERROR)
            logger.info(f"工具 {tool.tool} 执行{'成功' if result.success else '失败'}: {tool.display_input}")

            conversations.append(
                ConversationTurn(role="assistant", content=f"I used {tool.tool}: {tool.display_input}"))
            conversations.append(
                ConversationTurn(role="user", content=tool_result_prompt.prompt(tool=tool.tool, output=output)))

        if outcome is None:
            logger.warning(f"Agent 达到最大迭代次数 {max_iterations}")
            outcome = AgentOutcome.EXHAUSTED
            final_response = self._exhausted_response(max_iterations, step_log)

        step_log.add(
            StepKind.FINAL, output=final_response,
            status=StepStatus.ERROR if outcome == AgentOutcome.MODEL_ERROR else StepStatus.DONE)
        logger.info(f"Agent 运行结束: {outcome.value}, 共 {iteration} 轮")

        return AgentRunResult(
            final_response=final_response,
            steps=step_log.snapshot(),
            outcome=outcome,
            iterations=iteration
        )

    def _render_step(self, step: AgentStep):
        color = STEP_STATUS_COLORS.get(step.status.value, COLOR_INFO)
        if step.kind == StepKind.THINKING:
            if step.status == StepStatus.RUNNING:
                printer.print_text("思考中 ...", style=COLOR_INFO, prefix=f"{self.mapp} > ")
            elif step.status == StepStatus.ERROR:
                printer.print_text("模型调用失败", style=COLOR_ERROR, prefix=f"{self.mapp} > ")
        elif step.kind == StepKind.TOOL_CALL:
            if step.status == StepStatus.RUNNING:
                printer.print_text(f"🛠️ {step.tool}: {step.input or ''}", style=color, prefix=f"{self.mapp} > ")
        elif step.kind == StepKind.TOOL_RESULT:
            printer.print_panel(
                content=Text(step.output or "", style=COLOR_INFO),
                title=f"{step.tool} 执行结果",
                border_style=color,
                center=True)

    def run_in_terminal(self, request: AgentRequest, cancel_event: Optional[CancelSignal] = None) -> AgentRunResult:
        project_name = os.path.basename(os.path.abspath(request.root_path))
        printer.print_text(f"Agent 开始运行, 项目名: {project_name}, 用户目标: {request.message.strip()}",
                           style=COLOR_SYSTEM, prefix=f"{self.mapp} > ")

        result = self.run(request, on_step=self._render_step, cancel_event=cancel_event)

        summary = summarize_tool_steps(result.steps)
        if summary:
            printer.print_markdown(f"**Agent actions**\n\n{summary}", panel=True, title="工具调用")

        if result.outcome == AgentOutcome.FINISHED:
            printer.print_panel(content=Markdown(result.final_response), title="任务完成",
                                border_style=COLOR_SUCCESS, center=True)
        elif result.outcome == AgentOutcome.MODEL_ERROR:
            printer.print_panel(content=result.final_response, title="任务失败",
                                border_style=COLOR_ERROR, center=True)
        else:
            printer.print_panel(content=Markdown(result.final_response), title="任务中止",
                                border_style=COLOR_WARNING, center=True)

        printer.print_text(f"Agent 结束, 共 {result.iterations} 轮", style=COLOR_SUCCESS, prefix=f"{self.mapp} > ")
        return result

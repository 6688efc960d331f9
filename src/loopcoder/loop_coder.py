import argparse
import os
import threading
import traceback
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style
from rich.markdown import Markdown
from rich.text import Text

from loopcoder.agent import (
    AgenticRuntime, AgentRequest, ChangeSetReview, format_apply_result, is_agent_request)
from loopcoder.agent.agentic_edit_types import AgentRunResult, ProposedChangeSet
from loopcoder.chat import CodeAssistant
from loopcoder.context import build_project_context, detect_language
from loopcoder.core import BaseLLMProvider, ModelProviderError, create_provider, provider_config_from_args
from loopcoder.host import LocalHost
from loopcoder.lctypes import LoopCoderArgs
from loopcoder.utils.config_utils import convert_config_value, get_final_config, save_project_config
from loopcoder.utils.log_utils import default_log_dir, setup_logging
from loopcoder.utils.printer_utils import (
    Printer, COLOR_SYSTEM, COLOR_SUCCESS, COLOR_ERROR, COLOR_WARNING, COLOR_INFO)
from loopcoder.version import __version__


printer = Printer()

COMMANDS = [
    "/agent", "/chat", "/explain", "/fix", "/open", "/changes", "/accept", "/reject",
    "/shell", "/conf", "/help", "/exit"
]

PROVIDER_KEYS = {"provider", "model", "api_key", "base_url"}

HELP_ITEMS = [
    ("/agent <instruction>", "让 Agent 自主执行任务(运行命令, 读写文件), Ctrl-C 在当前轮结束后停止"),
    ("/chat <message>", "普通对话, 回复中的 file_operations 会暂存为待审阅变更"),
    ("/explain", "解释当前打开的文件"),
    ("/fix [error]", "修复当前打开文件中的问题"),
    ("/open <file>", "设置当前文件, 作为上下文发送给模型"),
    ("/changes", "查看待审阅的多文件变更"),
    ("/accept", "应用待审阅的多文件变更"),
    ("/reject", "丢弃待审阅的多文件变更"),
    ("/shell <command>", "在项目目录中执行命令"),
    ("/conf [key:value]", "查看或修改配置"),
    ("/help", "显示帮助"),
    ("/exit", "退出"),
]


class EditorSession:
    """ 一个项目的交互会话: 配置, 宿主, 模型以及待审阅的变更 """

    def __init__(self, args: LoopCoderArgs, llm: Optional[BaseLLMProvider] = None,
                 host: Optional[LocalHost] = None):
        self.args = args
        self.host = host or LocalHost(command_timeout=args.command_timeout or 300)
        self.llm = llm or create_provider(provider_config_from_args(args))
        self.review = ChangeSetReview(self.host)
        self.current_file: Optional[str] = None

    @property
    def root_path(self) -> str:
        return self.args.source_dir

    def rebuild_llm(self):
        self.llm = create_provider(provider_config_from_args(self.args))

    def build_context(self):
        return build_project_context(
            self.host, self.root_path, self.current_file, max_depth=self.args.file_tree_depth)

    def runtime(self) -> AgenticRuntime:
        return AgenticRuntime(self.args, self.llm, self.host)

    def assistant(self) -> CodeAssistant:
        return CodeAssistant(self.llm)


def parse_args(input_args: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="LoopCoder")

    parser.add_argument("--project", type=str, default=None, help="项目根目录, 默认为当前目录")
    parser.add_argument("--agent", type=str, help="直接执行一条 Agent 指令后退出")
    parser.add_argument("--debug", action="store_true", help="开启 debug 模式")

    if input_args:
        return parser.parse_args(input_args)
    return parser.parse_args()


def print_change_set(change_set: ProposedChangeSet):
    data = []
    for op in change_set.operations:
        style = COLOR_ERROR if op.action == "DELETE" else COLOR_SUCCESS
        size = "" if op.content is None else f"{len(op.content)} chars"
        data.append([Text(op.action, style=style), op.path, size])
    printer.print_table(data, title=change_set.description, headers=["操作", "路径", "内容"],
                        caption="使用 /accept 应用, /reject 丢弃")


def stage_changes(session: EditorSession, response: str):
    change_set = session.review.propose(response)
    if change_set is not None:
        print_change_set(change_set)


def run_agent(session: EditorSession, instruction: str) -> Optional[AgentRunResult]:
    """ Agent 在工作线程中运行, 主线程等待期间的 Ctrl-C 只设置取消标记 """
    request = AgentRequest(message=instruction, root_path=session.root_path, context=session.build_context())
    runtime = session.runtime()
    cancel_event = threading.Event()
    holder = {}

    def _worker():
        holder["result"] = runtime.run_in_terminal(request, cancel_event=cancel_event)

    worker = threading.Thread(target=_worker, name="loopcoder-agent", daemon=True)
    worker.start()
    while worker.is_alive():
        try:
            worker.join(0.2)
        except KeyboardInterrupt:
            if not cancel_event.is_set():
                cancel_event.set()
                printer.print_text("已请求停止, Agent 将在当前轮结束后退出", style=COLOR_WARNING)

    result = holder.get("result")
    if result is not None:
        stage_changes(session, result.final_response)
    return result


def chat_command(session: EditorSession, message: str):
    reply = session.assistant().chat(message, session.build_context())
    printer.print_llm_output(reply)
    stage_changes(session, reply)


def _read_current_file(session: EditorSession) -> Optional[str]:
    if not session.current_file:
        printer.print_text("请先使用 /open <file> 打开文件", style=COLOR_WARNING)
        return None
    code = session.host.read_file(os.path.join(session.root_path, session.current_file))
    if code is None:
        printer.print_text(f"无法读取文件 {session.current_file}", style=COLOR_ERROR)
    return code


def explain_command(session: EditorSession):
    code = _read_current_file(session)
    if code is None:
        return
    reply = session.assistant().explain_code(
        code, language=detect_language(session.current_file), file_path=session.current_file)
    printer.print_panel(Markdown(reply), title=f"Explain {session.current_file}", border_style=COLOR_INFO)


def fix_command(session: EditorSession, error: str):
    code = _read_current_file(session)
    if code is None:
        return
    language = detect_language(session.current_file)
    fixed = session.assistant().fix_bug(code, error=error or None, language=language)
    printer.print_panel(Markdown(f"```{language}\n{fixed}\n```"), title=f"Fix {session.current_file}",
                        border_style=COLOR_SUCCESS)


def open_command(session: EditorSession, file_path: str):
    full_path = os.path.join(session.root_path, file_path)
    stats = session.host.stat(full_path)
    if stats is None or not stats.is_file:
        printer.print_text(f"文件不存在: {file_path}", style=COLOR_ERROR)
        return
    session.current_file = file_path
    printer.print_text(f"当前文件: {file_path}", style=COLOR_SUCCESS)


def changes_command(session: EditorSession):
    if session.review.pending is None:
        printer.print_text("没有待审阅的变更", style=COLOR_INFO)
        return
    print_change_set(session.review.pending)


def accept_command(session: EditorSession):
    result = session.review.accept(session.root_path)
    if result is None:
        printer.print_text("没有待审阅的变更", style=COLOR_INFO)
        return
    printer.print_markdown(format_apply_result(result))


def reject_command(session: EditorSession):
    if session.review.reject() is None:
        printer.print_text("没有待审阅的变更", style=COLOR_INFO)
        return
    printer.print_text("变更已丢弃", style=COLOR_WARNING)


def shell_command(session: EditorSession, command: str):
    result = session.host.run_shell_command(command, session.root_path)
    if result.stdout:
        printer.print_text(result.stdout, prefix=None)
    if result.stderr:
        printer.print_text(result.stderr, style=COLOR_ERROR, prefix=None)


def print_conf(args: LoopCoderArgs):
    data_list = []
    for key, value in sorted(args.model_dump().items()):
        if key == "api_key" and value:
            value = "******"
        if isinstance(value, bool):
            formatted_value = Text(str(value), style="bright_green" if value else "red")
        elif isinstance(value, (int, float)):
            formatted_value = Text(str(value), style="bright_cyan")
        else:
            formatted_value = Text(str(value), style="green")
        data_list.append([key, formatted_value])
    printer.print_table(data_list, title="Conf 配置", headers=["键", "值"],
                        caption="使用 /conf <key>:<value> 修改这些设置")


def configure(session: EditorSession, conf: str):
    parts = conf.split(":", 1)
    if len(parts) != 2 or not parts[1].strip():
        printer.print_text("配置格式错误, 请使用 key:value", style=COLOR_ERROR)
        return
    key, value = parts[0].strip(), parts[1].strip()
    converted_value = convert_config_value(key, value)
    if converted_value is None:
        return
    setattr(session.args, key, converted_value)
    save_project_config(session.root_path, key, converted_value)
    if key in PROVIDER_KEYS:
        session.rebuild_llm()
    printer.print_text(f"Set {key} to {converted_value}", style=COLOR_SUCCESS)


def show_help():
    printer.print_table(HELP_ITEMS, title="可用命令", headers=["命令", "说明"],
                        caption="直接输入文字时, 动作类请求交给 Agent, 其余走普通对话")


def handle_input(session: EditorSession, user_input: str) -> bool:
    """ 处理一行输入, 返回 False 表示退出 """
    user_input = user_input.strip()
    if not user_input:
        return True

    if user_input.startswith("/exit"):
        return False
    elif user_input.startswith("/help"):
        show_help()
    elif user_input.startswith("/agent"):
        instruction = user_input[len("/agent"):].strip()
        if not instruction:
            printer.print_text("Please enter your request.", style=COLOR_WARNING)
        else:
            run_agent(session, instruction)
    elif user_input.startswith("/chat"):
        message = user_input[len("/chat"):].strip()
        if not message:
            printer.print_text("Please enter your request.", style=COLOR_WARNING)
        else:
            chat_command(session, message)
    elif user_input.startswith("/explain"):
        explain_command(session)
    elif user_input.startswith("/fix"):
        fix_command(session, user_input[len("/fix"):].strip())
    elif user_input.startswith("/open"):
        open_command(session, user_input[len("/open"):].strip())
    elif user_input.startswith("/changes"):
        changes_command(session)
    elif user_input.startswith("/accept"):
        accept_command(session)
    elif user_input.startswith("/reject"):
        reject_command(session)
    elif user_input.startswith("/shell"):
        command = user_input[len("/shell"):].strip()
        if not command:
            printer.print_text("Please enter a shell command to execute.", style=COLOR_WARNING)
        else:
            shell_command(session, command)
    elif user_input.startswith("/conf"):
        conf = user_input[len("/conf"):].strip()
        if not conf:
            print_conf(session.args)
        else:
            configure(session, conf)
    elif is_agent_request(user_input, has_project=bool(session.root_path)):
        run_agent(session, user_input)
    else:
        chat_command(session, user_input)
    return True


def main(input_args: Optional[List[str]] = None):
    raw_args = parse_args(input_args)
    project_root = os.path.abspath(raw_args.project or os.getcwd())

    args = get_final_config(project_root)
    if raw_args.debug:
        args.log_level = "DEBUG"
    log_file = setup_logging(args.log_dir or default_log_dir(args.source_dir), args.log_level or "INFO")

    try:
        session = EditorSession(args)
    except ModelProviderError as e:
        printer.print_text(f"模型初始化失败: {e}", style=COLOR_ERROR)
        return

    if raw_args.agent:
        try:
            run_agent(session, raw_args.agent)
        except Exception as e:
            printer.print_text(f"发生异常: {type(e).__name__} - {e}", style=COLOR_ERROR)
            if raw_args.debug:
                traceback.print_exc()
        return

    printer.print_key_value(
        {
            "LoopCoder": f"v{__version__}",
            "Project": project_root,
            "Model": f"{args.provider}/{args.model}",
            "Log": log_file,
            "Help": "输入 /help 可以查看可用的命令."
        }
    )

    style = Style.from_dict({"project": "ansicyan", "dollar": "ansigreen bold"})
    prompt_session = PromptSession(
        history=InMemoryHistory(),
        auto_suggest=AutoSuggestFromHistory(),
        completer=WordCompleter(COMMANDS, sentence=True),
        complete_while_typing=True,
    )
    prompt_message = FormattedText([
        ("class:project", os.path.basename(project_root) or project_root),
        ("class:dollar", " $ "),
    ])

    while True:
        try:
            user_input = prompt_session.prompt(prompt_message, style=style)
            if not handle_input(session, user_input):
                raise EOFError()
        except KeyboardInterrupt:
            continue
        except EOFError:
            printer.print_text("退出 LoopCoder...", style=COLOR_SYSTEM)
            break
        except Exception as e:
            printer.print_text(f"发生异常: {type(e).__name__} - {e}", style=COLOR_ERROR)
            if raw_args.debug:
                traceback.print_exc()


if __name__ == '__main__':
    main()

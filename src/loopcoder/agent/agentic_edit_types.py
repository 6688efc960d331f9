from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


# 工具的基本Pydantic模型, 解析完成后不可变
class BaseTool(BaseModel):
    """ 代理工具的基类，所有工具类都应继承此类 """
    model_config = ConfigDict(frozen=True)

    @property
    def display_input(self) -> str:
        """ 工具调用的主要参数, 用于步骤日志与对话记录 """
        return ""


class TerminalTool(BaseTool):
    tool: Literal["terminal"] = "terminal"
    command: Optional[str] = None
    cwd: Optional[str] = None  # 不指定时使用项目根目录

    @property
    def display_input(self) -> str:
        return self.command or ""


class ReadFileTool(BaseTool):
    tool: Literal["readFile"] = "readFile"
    path: Optional[str] = None

    @property
    def display_input(self) -> str:
        return self.path or ""


class WriteFileTool(BaseTool):
    tool: Literal["writeFile"] = "writeFile"
    path: Optional[str] = None
    content: Optional[str] = None

    @property
    def display_input(self) -> str:
        return self.path or ""


class CreateFileTool(BaseTool):
    tool: Literal["createFile"] = "createFile"
    path: Optional[str] = None
    content: Optional[str] = None

    @property
    def display_input(self) -> str:
        return self.path or ""


class OpenPreviewTool(BaseTool):
    tool: Literal["openPreview"] = "openPreview"
    url: Optional[str] = None

    @property
    def display_input(self) -> str:
        return self.url or ""


ToolCall = Annotated[
    Union[TerminalTool, ReadFileTool, WriteFileTool, CreateFileTool, OpenPreviewTool],
    Field(discriminator="tool")
]
TOOL_CALL_ADAPTER: TypeAdapter = TypeAdapter(ToolCall)
TOOL_NAMES: Tuple[str, ...] = ("terminal", "readFile", "writeFile", "createFile", "openPreview")


# Result class used by Tool Resolvers
class ToolResult(BaseModel):
    success: bool
    output: str


class StepKind(str, Enum):
    THINKING = "thinking"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    FINAL = "final"


class StepStatus(str, Enum):
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class AgentStep(BaseModel):
    """ Agent 活动日志中的一条记录, 仅 status/output 可在原地更新 """
    id: str
    kind: StepKind
    tool: Optional[str] = None
    input: Optional[str] = None
    output: Optional[str] = None
    status: StepStatus = StepStatus.RUNNING
    timestamp: float


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class AgentOutcome(str, Enum):
    FINISHED = "finished"
    CANCELLED = "cancelled"
    MODEL_ERROR = "model_error"
    EXHAUSTED = "exhausted_iterations"


class AgentRunResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    final_response: str
    steps: Tuple[AgentStep, ...]
    outcome: AgentOutcome
    iterations: int


class FileOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: Literal["CREATE", "UPDATE", "DELETE"]
    path: str
    content: Optional[str] = None

    @model_validator(mode="after")
    def _check_content(self) -> "FileOperation":
        if self.action in ("CREATE", "UPDATE") and self.content is None:
            raise ValueError(f"{self.action} 操作缺少 content: {self.path}")
        return self


FILE_OPERATIONS_ADAPTER: TypeAdapter = TypeAdapter(List[FileOperation])


class ProposedChangeSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    operations: Tuple[FileOperation, ...]
    description: str = "Suggested multi-file changes"
    timestamp: float


class ApplyResult(BaseModel):
    succeeded: int = 0
    failed: int = 0
    failed_paths: List[str] = Field(default_factory=list)

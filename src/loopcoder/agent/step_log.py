import time
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger

from loopcoder.agent.agentic_edit_types import AgentStep, StepKind, StepStatus


StepObserver = Callable[[AgentStep], None]


class StepLog:
    """
    Agent 单次运行的步骤日志
    顺序列表 + id 索引, 更新按 id 原地进行; 每次变更都同步通知观察者(传入快照)
    """

    def __init__(self, observer: Optional[StepObserver] = None):
        self._steps: List[AgentStep] = []
        self._index: Dict[str, int] = {}
        self._observer = observer

    def __len__(self) -> int:
        return len(self._steps)

    def get(self, step_id: str) -> AgentStep:
        return self._steps[self._index[step_id]]

    def add(
            self, kind: StepKind, tool: Optional[str] = None, input: Optional[str] = None,
            output: Optional[str] = None, status: StepStatus = StepStatus.RUNNING
    ) -> AgentStep:
        step = AgentStep(
            id=f"step-{uuid.uuid4().hex[:12]}-{kind.value}",
            kind=kind,
            tool=tool,
            input=input,
            output=output,
            status=status,
            timestamp=time.time()
        )
        self._index[step.id] = len(self._steps)
        self._steps.append(step)
        self._notify(step)
        return step

    def update(self, step_id: str, status: Optional[StepStatus] = None, output: Optional[str] = None) -> AgentStep:
        step = self.get(step_id)
        if status is not None:
            if step.status != StepStatus.RUNNING and status == StepStatus.RUNNING:
                raise ValueError(f"步骤 {step_id} 已结束({step.status.value}), 不能回到 running")
            step.status = status
        if output is not None:
            step.output = output
        self._notify(step)
        return step

    def snapshot(self) -> Tuple[AgentStep, ...]:
        return tuple(step.model_copy() for step in self._steps)

    def of_kind(self, kind: StepKind) -> List[AgentStep]:
        return [step for step in self._steps if step.kind == kind]

    def _notify(self, step: AgentStep):
        if self._observer is None:
            return
        try:
            self._observer(step.model_copy())
        except Exception:
            # 渲染端的异常不影响 Agent 运行
            logger.exception(f"步骤观察者处理 {step.id} 失败")

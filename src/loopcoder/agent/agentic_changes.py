import json
import os
import re
import time
import uuid
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from loopcoder.agent.agentic_edit_types import ApplyResult, FILE_OPERATIONS_ADAPTER, FileOperation, ProposedChangeSet
from loopcoder.host import BaseHost


FILE_OPERATIONS_PATTERN = re.compile(r"```file_operations\s*\n([\s\S]*?)```")
_LEADING_SEPARATORS_RE = re.compile(r"^[/\\]+")
_SEPARATORS_RE = re.compile(r"[/\\]")


def parse_file_operations(response: str) -> Optional[ProposedChangeSet]:
    """
    从模型回复中提取多文件变更集
    - 只识别第一个 file_operations 代码块
    - 内容须为 FileOperation 的 JSON 数组, CREATE/UPDATE 必须带 content
    - 解析失败或数组为空时返回 None
    """
    match = FILE_OPERATIONS_PATTERN.search(response)
    if not match:
        return None

    body = match.group(1)
    try:
        operations = FILE_OPERATIONS_ADAPTER.validate_python(json.loads(body))
    except json.JSONDecodeError as e:
        logger.warning(f"file_operations 代码块 JSON 解析失败: {e}")
        return None
    except ValidationError as e:
        logger.warning(f"file_operations 代码块字段校验失败: {e}")
        return None

    if not operations:
        logger.warning("file_operations 代码块为空数组, 忽略")
        return None

    return ProposedChangeSet(
        id=uuid.uuid4().hex,
        operations=tuple(operations),
        timestamp=time.time()
    )


def normalize_operation_path(path: str, root_path: str) -> str:
    """ 去掉前导分隔符, 以及模型重复带上的项目目录名, 返回相对项目根目录的路径 """
    relative_path = _LEADING_SEPARATORS_RE.sub("", path)
    parts = _SEPARATORS_RE.split(relative_path)
    root_name = os.path.basename(os.path.normpath(root_path))
    if parts and parts[0] == root_name:
        relative_path = "/".join(parts[1:])
    return relative_path


def _resolve_operation_path(path: str, root_path: str) -> Optional[str]:
    """ 解析操作的绝对路径, 路径无效或指向项目根目录本身及其之外时返回 None """
    relative_path = normalize_operation_path(path, root_path)
    if not relative_path.strip():
        return None
    full_path = os.path.normpath(os.path.join(root_path, relative_path))
    try:
        root = os.path.realpath(root_path)
        resolved = os.path.realpath(full_path)
        inside = os.path.commonpath([root, resolved]) == root
    except ValueError:
        # 路径含空字符或位于不同驱动器
        return None
    if not inside or resolved == root:
        return None
    return full_path


def _apply_operation(operation: FileOperation, full_path: str, host: BaseHost) -> bool:
    if operation.action in ("CREATE", "UPDATE"):
        return host.write_file(full_path, operation.content or "")
    # 无法预先区分文件与目录, 先按文件删除, 失败再按目录删除
    if host.delete_file(full_path):
        return True
    return host.delete_directory(full_path)


def apply_change_set(change_set: ProposedChangeSet, root_path: str, host: BaseHost) -> ApplyResult:
    """ 按顺序尽力应用全部操作, 单个失败不影响后续操作 """
    result = ApplyResult()
    for operation in change_set.operations:
        full_path = _resolve_operation_path(operation.path, root_path)
        if full_path is None:
            logger.warning(f"变更路径无效或超出项目目录, 已跳过: {operation.action} {operation.path}")
            succeeded = False
        else:
            try:
                succeeded = _apply_operation(operation, full_path, host)
            except Exception as e:
                logger.warning(f"变更操作异常 {operation.action} {full_path}: {e}")
                succeeded = False
        if succeeded:
            result.succeeded += 1
        else:
            logger.warning(f"变更操作失败: {operation.action} {full_path}")
            result.failed += 1
            result.failed_paths.append(operation.path)
    logger.info(f"变更集 {change_set.id} 已应用: 成功 {result.succeeded}, 失败 {result.failed}")
    return result


def format_apply_result(result: ApplyResult) -> str:
    message = f"### 🚀 Action Complete\nSuccessfully applied **{result.succeeded}** changes."
    if result.failed > 0:
        message += f"\n⚠️ **{result.failed}** operations failed."
    return message


class ChangeSetReview:
    """
    待用户审阅的变更集, 同一时间最多一个
    accept 应用全部操作, reject 直接丢弃且无任何副作用
    """

    def __init__(self, host: BaseHost):
        self.host = host
        self._pending: Optional[ProposedChangeSet] = None

    @property
    def pending(self) -> Optional[ProposedChangeSet]:
        return self._pending

    def propose(self, response: str) -> Optional[ProposedChangeSet]:
        change_set = parse_file_operations(response)
        if change_set is not None:
            if self._pending is not None:
                logger.info(f"新的变更集替换未处理的变更集 {self._pending.id}")
            self._pending = change_set
        return change_set

    def accept(self, root_path: str) -> Optional[ApplyResult]:
        if self._pending is None:
            return None
        change_set, self._pending = self._pending, None
        return apply_change_set(change_set, root_path, self.host)

    def reject(self) -> Optional[ProposedChangeSet]:
        change_set, self._pending = self._pending, None
        if change_set is not None:
            logger.info(f"变更集 {change_set.id} 已丢弃")
        return change_set

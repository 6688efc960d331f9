import os
import sys
from typing import Optional

from loguru import logger


LOG_FILE_NAME = "loopcoder.log"


def default_log_dir(source_dir: Optional[str]) -> str:
    base = source_dir or os.path.expanduser("~")
    return os.path.join(base, ".loopcoder", "logs")


def setup_logging(log_dir: str, level: str = "INFO") -> str:
    """
    替换 loguru 默认的 stderr 输出:
    - 日志文件记录 level 及以上级别, 按 10 MB 轮转, 保留 7 天
    - 终端只输出 WARNING 及以上, 避免干扰 rich 渲染
    返回日志文件路径
    """
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, LOG_FILE_NAME)

    logger.remove()
    logger.add(
        log_file,
        level=level.upper(),
        rotation="10 MB",
        retention="7 days",
        encoding="utf-8",
        enqueue=True,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
    )
    logger.add(sys.stderr, level="WARNING", format="<level>{level: <8}</level> | {message}")
    return log_file

from typing import Optional

from pydantic import BaseModel


class LoopCoderArgs(BaseModel):
    source_dir: Optional[str] = None  # 项目根目录, 所有相对路径都基于此解析

    # 模型相关参数
    provider: Optional[str] = "openai"  # 模型供应商: openai / ollama / gemini
    model: Optional[str] = "gpt-4o"  # 模型名称
    api_key: Optional[str] = None  # 供应商 API Key, 支持 "ENV {{ VAR }}" 形式引用环境变量
    base_url: Optional[str] = None  # 自定义接口地址, ollama 默认 http://localhost:11434

    # Agent 相关参数
    max_iterations: int = 5  # Agent 单次运行的最大迭代次数
    tool_output_limit: int = 2000  # 工具输出写入步骤日志及回传模型时的最大字符数
    transcript_char_limit: int = 60000  # 每轮发送给模型的对话记录上限(字符), 0 表示不限制
    preview_url: Optional[str] = "http://localhost:3000"  # openPreview 未指定 url 时的默认地址
    command_timeout: Optional[int] = 300  # 终端命令超时时间(s)

    # 上下文相关参数
    file_tree_depth: int = 2  # 项目结构摘要的目录深度

    # 日志相关参数
    log_level: Optional[str] = "INFO"
    log_dir: Optional[str] = None  # 默认 <source_dir>/.loopcoder/logs

    class Config:
        protected_namespaces = ()


class EnvInfo(BaseModel):
    os_name: str
    os_version: str
    python_version: str
    virtualenv: Optional[str]
    default_shell: Optional[str]
    home_dir: Optional[str]
    cwd: Optional[str]

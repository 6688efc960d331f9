import os
from typing import List, Optional

from pydantic import BaseModel

from loopcoder.host import BaseHost


IGNORED_DIRS = {"node_modules", ".git", "dist", ".next", "__pycache__", ".cache", "build", ".loopcoder"}
NO_FOLDER_OPENED = "No folder opened"

_FILE_ICONS = {
    "ts": "📘", "tsx": "📘", "js": "📒", "jsx": "📒", "json": "📋", "css": "🎨", "scss": "🎨",
    "html": "🌐", "md": "📝", "py": "🐍", "rs": "🦀", "go": "🔷", "java": "☕",
}

_LANGUAGES = {
    ".py": "python", ".js": "javascript", ".jsx": "javascript", ".ts": "typescript", ".tsx": "typescript",
    ".json": "json", ".html": "html", ".css": "css", ".scss": "scss", ".md": "markdown", ".rs": "rust",
    ".go": "go", ".java": "java", ".c": "c", ".h": "c", ".cpp": "cpp", ".sh": "shell", ".yml": "yaml",
    ".yaml": "yaml", ".toml": "toml", ".sql": "sql",
}


class ProjectContext(BaseModel):
    """ 随指令一起发给模型的项目上下文: 目录结构摘要 + 当前打开的文件 """
    file_tree: Optional[str] = None
    file_path: Optional[str] = None
    language: Optional[str] = None
    code: Optional[str] = None


def detect_language(file_path: str) -> str:
    return _LANGUAGES.get(os.path.splitext(file_path)[1].lower(), "plaintext")


def _file_icon(name: str) -> str:
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return _FILE_ICONS.get(ext, "📄")


def _traverse(host: BaseHost, dir_path: str, lines: List[str], depth: int, max_depth: int):
    if depth > max_depth:
        lines.append(f"{'  ' * depth}...")
        return

    entries = [e for e in host.list_directory(dir_path) if e.name not in IGNORED_DIRS]
    # 目录在前, 文件在后, 同类按名称排序
    entries.sort(key=lambda e: (not e.is_directory, e.name.lower()))
    prefix = "  " * depth
    for entry in entries:
        if entry.is_directory:
            lines.append(f"{prefix}📁 {entry.name}/")
            _traverse(host, entry.path, lines, depth + 1, max_depth)
        else:
            lines.append(f"{prefix}{_file_icon(entry.name)} {entry.name}")


def build_file_tree(host: BaseHost, root_path: Optional[str], max_depth: int = 2) -> str:
    """
    生成项目目录结构的文本摘要
    Args:
        host: 宿主能力
        root_path: 项目根目录
        max_depth: 展开的目录深度, 超出部分以 ... 表示
    """
    if not root_path:
        return NO_FOLDER_OPENED
    root_name = os.path.basename(os.path.normpath(root_path)) or root_path
    lines = [f"📁 {root_name}/"]
    _traverse(host, root_path, lines, 1, max_depth)
    return "\n".join(lines)


def build_project_context(
        host: BaseHost, root_path: Optional[str], file_path: Optional[str] = None, max_depth: int = 2
) -> ProjectContext:
    file_tree = build_file_tree(host, root_path, max_depth) if root_path else None
    if not file_path:
        return ProjectContext(file_tree=file_tree)

    full_path = file_path
    if root_path and not os.path.isabs(file_path):
        full_path = os.path.join(root_path, file_path)
    code = host.read_file(full_path)
    return ProjectContext(
        file_tree=file_tree,
        file_path=file_path,
        language=detect_language(file_path),
        code=code
    )


def format_context_for_ai(context: ProjectContext, selection: Optional[str] = None) -> str:
    """ 渲染为对话动作使用的上下文文本 """
    parts = ["=== PROJECT STRUCTURE ===", context.file_tree or NO_FOLDER_OPENED, ""]

    if context.file_path and context.code is not None:
        parts.extend([
            "=== CURRENT FILE ===",
            f"File: {context.file_path}",
            f"Language: {context.language or ''}",
            "",
            f"```{context.language or ''}",
            context.code,
            "```",
        ])

    if selection:
        parts.extend(["", "=== SELECTED CODE ===", f"```{context.language or ''}", selection, "```"])

    return "\n".join(parts)

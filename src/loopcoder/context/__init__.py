from loopcoder.context.project_context import (
    ProjectContext, build_file_tree, build_project_context, format_context_for_ai, detect_language,
    IGNORED_DIRS, NO_FOLDER_OPENED
)


__all__ = [
    "ProjectContext", "build_file_tree", "build_project_context", "format_context_for_ai", "detect_language",
    "IGNORED_DIRS", "NO_FOLDER_OPENED"
]

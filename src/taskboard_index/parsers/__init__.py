from .checkbox import StatusVocabulary, classify_line, is_task_line
from .frontmatter import extract_frontmatter, extract_frontmatter_tags
from .task_parser import DocumentTasks, build_task, extract_document_tasks

__all__ = [
    "StatusVocabulary",
    "classify_line",
    "is_task_line",
    "extract_frontmatter",
    "extract_frontmatter_tags",
    "DocumentTasks",
    "build_task",
    "extract_document_tasks",
]

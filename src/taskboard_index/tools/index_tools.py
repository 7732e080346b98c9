"""
Index tool handlers.

Core logic lives in handle_* functions (return dicts).
MCP wrappers in register_index_tools() serialize to JSON strings.
The REST API calls the same handlers.
"""

import json
import logging
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

log = logging.getLogger(__name__)


def _task_to_dict(task, partition: Optional[str] = None) -> dict:
    """Serialize a TaskRecord to a JSON-serializable dict."""
    d = task.to_dict()
    if partition:
        d["partition"] = partition
    return d


# ---------------------------------------------------------------------------
# Handler functions (return dicts, shared by MCP tools and REST API)
# ---------------------------------------------------------------------------


def handle_task_list(
    service,
    *,
    partition: Optional[str] = None,
    file_path: Optional[str] = None,
    tag: Optional[str] = None,
    due_before: Optional[str] = None,
    min_priority: Optional[int] = None,
    limit: int = 200,
) -> list[dict]:
    tasks = service.query_tasks(
        partition=partition,
        file_path=file_path,
        tag=tag,
        due_before=due_before,
        min_priority=min_priority,
        limit=limit,
    )
    return [_task_to_dict(task, name) for name, task in tasks]


def handle_task_get(service, *, task_id: int) -> dict:
    entry = service.get_task(task_id)
    if not entry:
        return {"error": f"Task '{task_id}' not found"}
    partition, task = entry
    return _task_to_dict(task, partition)


def handle_document_list(service) -> list[dict]:
    return service.documents()


def handle_index_scan(service) -> dict:
    result = service.scan()
    return result.to_dict()


def handle_index_update(service, *, paths: List[Optional[str]]) -> dict:
    if not paths:
        return {"error": "No document paths given"}
    result = service.update(paths)
    return result.to_dict()


def handle_index_status(service) -> dict:
    return service.status()


# ---------------------------------------------------------------------------
# MCP tool registration (thin wrappers)
# ---------------------------------------------------------------------------


def register_index_tools(mcp: FastMCP, service) -> None:
    """Register all index MCP tools onto the FastMCP instance."""

    @mcp.tool()
    def task_list(
        partition: Optional[str] = None,
        file_path: Optional[str] = None,
        tag: Optional[str] = None,
        due_before: Optional[str] = None,
        min_priority: Optional[int] = None,
        limit: int = 200,
    ) -> str:
        """
        List indexed checklist tasks with optional filtering.

        Args:
            partition: "Pending" or "Completed"; omit for both
            file_path: Vault-relative document path (e.g. "projects/alpha.md")
            tag: Inline or frontmatter tag, with or without the leading "#"
            due_before: ISO date (YYYY-MM-DD); tasks due on or before this date
            min_priority: Only tasks with at least this priority (1-5)
            limit: Maximum number of results (default 200)

        Returns:
            JSON array of task objects
        """
        try:
            return json.dumps(
                handle_task_list(
                    service,
                    partition=partition,
                    file_path=file_path,
                    tag=tag,
                    due_before=due_before,
                    min_priority=min_priority,
                    limit=limit,
                ),
                indent=2,
                ensure_ascii=False,
                default=str,
            )
        except ValueError as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def task_get(task_id: int) -> str:
        """
        Get a single task by its numeric ID.

        Args:
            task_id: The task ID from task_list

        Returns:
            JSON task object, or error message
        """
        return json.dumps(
            handle_task_get(service, task_id=task_id), indent=2, ensure_ascii=False, default=str
        )

    @mcp.tool()
    def index_scan() -> str:
        """
        Rebuild the whole task index from the vault.

        Returns:
            JSON with documents scanned/failed and task counts
        """
        return json.dumps(handle_index_scan(service), indent=2)

    @mcp.tool()
    def index_update(paths: str) -> str:
        """
        Re-scan specific documents and merge them into the index.

        Args:
            paths: Comma-separated vault-relative document paths

        Returns:
            JSON with documents scanned/failed and task counts
        """
        doc_paths = [p.strip() for p in paths.split(",") if p.strip()]
        return json.dumps(handle_index_update(service, paths=doc_paths), indent=2)

    @mcp.tool()
    def index_status() -> str:
        """
        Show index statistics.

        Returns:
            JSON with document count, task counts, last scan time, etc.
        """
        return json.dumps(handle_index_status(service), indent=2)

"""REST API routes for the task index."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from taskboard_index.tools.index_tools import (
    handle_document_list,
    handle_index_scan,
    handle_index_status,
    handle_index_update,
    handle_task_get,
    handle_task_list,
)


class IndexUpdateBody(BaseModel):
    paths: List[Optional[str]]


def register_index_routes(app_router: APIRouter, service) -> None:
    """Attach index REST routes that use the shared IndexService."""

    @app_router.get("/tasks")
    def list_tasks(
        partition: Optional[str] = Query(None),
        file_path: Optional[str] = Query(None),
        tag: Optional[str] = Query(None),
        due_before: Optional[str] = Query(None),
        min_priority: Optional[int] = Query(None),
        limit: int = Query(200),
    ):
        try:
            return handle_task_list(
                service,
                partition=partition,
                file_path=file_path,
                tag=tag,
                due_before=due_before,
                min_priority=min_priority,
                limit=limit,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.get("/tasks/{task_id}")
    def get_task(task_id: int):
        result = handle_task_get(service, task_id=task_id)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.get("/documents")
    def list_documents():
        return handle_document_list(service)

    @app_router.post("/scan")
    def scan():
        return handle_index_scan(service)

    @app_router.post("/update")
    def update(body: IndexUpdateBody):
        result = handle_index_update(service, paths=body.paths)
        if "error" in result:
            raise HTTPException(status_code=400, detail=result["error"])
        return result

    @app_router.get("/status")
    def get_status():
        return handle_index_status(service)

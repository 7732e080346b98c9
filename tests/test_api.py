"""
Tests for the REST API (api/app.py, api/index_routes.py) and the MCP tool
wrappers (tools/index_tools.py).
"""

import json
import sys
from pathlib import Path

# Add src to path so imports work without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from taskboard_index.api.app import create_app
from taskboard_index.cache.index_service import IndexService
from taskboard_index.cache.index_store import MemoryIndexStore
from taskboard_index.cache.scanner import VaultScanner
from taskboard_index.cache.vault import FileSystemVault
from taskboard_index.tools.index_tools import register_index_tools


@pytest.fixture
def vault(tmp_path):
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "inbox.md").write_text(
        "- [ ] Buy milk #errand 📅 2024-09-28\n- [x] Done task\n", encoding="utf-8"
    )
    (vault / "later.md").write_text("Nothing yet\n", encoding="utf-8")
    return vault


@pytest.fixture
def service(vault):
    svc = IndexService(VaultScanner(FileSystemVault(vault), MemoryIndexStore()))
    svc.initialize()
    return svc


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def _missing_id(service):
    ids = service.snapshot().task_ids()
    return next(i for i in range(10) if i not in ids)


# ---------------------------------------------------------------------------
# REST API
# ---------------------------------------------------------------------------

class TestTaskRoutes:
    def test_list(self, client):
        resp = client.get("/api/tasks")
        assert resp.status_code == 200
        data = resp.json()
        assert [t["partition"] for t in data] == ["Pending", "Completed"]
        assert data[0]["filePath"] == "inbox.md"
        assert data[0]["tags"] == ["#errand"]

    def test_list_filtered(self, client):
        data = client.get("/api/tasks", params={"partition": "Completed"}).json()
        assert [t["title"] for t in data] == ["Done task"]
        data = client.get("/api/tasks", params={"tag": "errand"}).json()
        assert [t["title"] for t in data] == ["Buy milk #errand 📅 2024-09-28"]

    def test_invalid_partition(self, client):
        resp = client.get("/api/tasks", params={"partition": "Archived"})
        assert resp.status_code == 400

    def test_get(self, client, service):
        _, task = service.query_tasks(partition="Pending")[0]
        resp = client.get(f"/api/tasks/{task.id}")
        assert resp.status_code == 200
        assert resp.json()["id"] == task.id
        assert resp.json()["partition"] == "Pending"

    def test_get_missing(self, client, service):
        assert client.get(f"/api/tasks/{_missing_id(service)}").status_code == 404


class TestIndexRoutes:
    def test_documents(self, client):
        assert client.get("/api/documents").json() == [
            {"file_path": "inbox.md", "pending": 1, "completed": 1},
            {"file_path": "later.md", "pending": 0, "completed": 0},
        ]

    def test_scan(self, client):
        data = client.post("/api/scan").json()
        assert data["documents_scanned"] == 2
        assert data["tasks_detected"] == 2
        assert data["pending"] == 1
        assert data["completed"] == 1

    def test_update(self, client, vault):
        (vault / "later.md").write_text("- [ ] Now a task\n", encoding="utf-8")
        resp = client.post("/api/update", json={"paths": ["later.md"]})
        assert resp.status_code == 200
        assert resp.json()["documents_scanned"] == 1
        titles = [t["title"] for t in client.get("/api/tasks", params={"file_path": "later.md"}).json()]
        assert titles == ["Now a task"]

    def test_update_with_null_path(self, client):
        resp = client.post("/api/update", json={"paths": [None, "inbox.md"]})
        assert resp.status_code == 200
        assert resp.json()["documents_scanned"] == 1

    def test_update_path_outside_vault_not_indexed(self, client, tmp_path):
        (tmp_path / "outside.md").write_text("- [ ] Secret\n", encoding="utf-8")
        resp = client.post("/api/update", json={"paths": ["../outside.md"]})
        assert resp.status_code == 200
        assert resp.json()["documents_scanned"] == 0
        paths = [d["file_path"] for d in client.get("/api/documents").json()]
        assert paths == ["inbox.md", "later.md"]

    def test_update_without_paths(self, client):
        assert client.post("/api/update", json={"paths": []}).status_code == 400

    def test_status(self, client):
        data = client.get("/api/status").json()
        assert data["documents_indexed"] == 2
        assert data["pending_tasks"] == 1
        assert data["completed_tasks"] == 1


# ---------------------------------------------------------------------------
# MCP tools
# ---------------------------------------------------------------------------

class _FakeMCP:
    """Captures functions registered through @mcp.tool()."""

    def __init__(self):
        self.tools = {}

    def tool(self, *args, **kwargs):
        def decorator(fn):
            self.tools[fn.__name__] = fn
            return fn
        return decorator


@pytest.fixture
def tools(service):
    mcp = _FakeMCP()
    register_index_tools(mcp, service)
    return mcp.tools


class TestMCPTools:
    def test_registered(self, tools):
        assert set(tools) == {"task_list", "task_get", "index_scan", "index_update", "index_status"}

    def test_task_list(self, tools):
        data = json.loads(tools["task_list"](partition="Pending"))
        assert [t["title"] for t in data] == ["Buy milk #errand 📅 2024-09-28"]

    def test_task_list_invalid_partition(self, tools):
        assert "error" in json.loads(tools["task_list"](partition="Archived"))

    def test_task_get(self, tools, service):
        _, task = service.query_tasks(partition="Completed")[0]
        data = json.loads(tools["task_get"](task_id=task.id))
        assert data["title"] == "Done task"
        assert data["partition"] == "Completed"

    def test_task_get_missing(self, tools, service):
        assert "error" in json.loads(tools["task_get"](task_id=_missing_id(service)))

    def test_index_update_comma_separated(self, tools, vault):
        (vault / "later.md").write_text("- [ ] a\n- [ ] b\n", encoding="utf-8")
        data = json.loads(tools["index_update"](paths="later.md, inbox.md"))
        assert data["documents_scanned"] == 2
        assert data["pending"] == 3

    def test_index_update_empty(self, tools):
        assert "error" in json.loads(tools["index_update"](paths=" , "))

    def test_index_scan_and_status(self, tools):
        assert json.loads(tools["index_scan"]())["documents_scanned"] == 2
        assert json.loads(tools["index_status"]())["documents_indexed"] == 2

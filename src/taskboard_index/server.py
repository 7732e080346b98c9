"""
taskboard-index server entry point.

Startup sequence:
1. Read settings from the environment (see config.py)
2. Build the index store, notifier and scanner
3. Full vault scan through the IndexService
4. Start the service worker thread and, with real-time scanning, the watcher
5. Start REST API server in background thread (if API_ENABLED)
6. Run MCP server (stdio transport)
"""

import logging
import os
import sys
import threading

from mcp.server.fastmcp import FastMCP

from taskboard_index.cache.index_service import IndexService
from taskboard_index.cache.index_store import create_store
from taskboard_index.cache.scanner import VaultScanner
from taskboard_index.config import IndexerSettings
from taskboard_index.events import COLUMN_REFRESH, FULL_REFRESH, EventNotifier
from taskboard_index.exceptions import ConfigurationError
from taskboard_index.tools import register_index_tools
from taskboard_index.watcher.vault_watcher import VaultWatcher

log = logging.getLogger(__name__)


def _start_api_server(service, port: int) -> None:
    """Run the FastAPI/uvicorn server in a daemon thread."""
    import uvicorn

    from taskboard_index.api.app import create_app

    app = create_app(service)
    log.info("Starting REST API on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")


def build_service(settings: IndexerSettings, notifier: EventNotifier) -> IndexService:
    """Wire store, scanner and service for the given settings."""
    store = create_store(settings.index_file)
    scanner = VaultScanner.from_settings(settings, store, notifier)
    return IndexService(scanner)


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = IndexerSettings.from_env()
    except ConfigurationError as exc:
        log.error("%s", exc)
        sys.exit(1)

    if not settings.vault_root.is_dir():
        log.error("VAULT_ROOT does not exist or is not a directory: %s", settings.vault_root)
        sys.exit(1)

    log.info("Vault root: %s", settings.vault_root)
    log.info("Excluded dirs: %s", settings.exclude_dirs)
    log.info("Index file: %s", settings.index_file)

    notifier = EventNotifier()
    for topic in (FULL_REFRESH, COLUMN_REFRESH):
        notifier.subscribe(topic, lambda t: log.info("Index event: %s", t))

    service = build_service(settings, notifier)
    log.info("Scanning vault...")
    service.initialize()

    # Start background worker that drains the update queue
    service.start_worker()

    watcher = None
    if settings.real_time_scanning:
        watcher = VaultWatcher(service, service.scanner.vault, settings.poll_interval)
        watcher.start()

    # Start REST API in a daemon thread
    api_enabled = os.environ.get("API_ENABLED", "true").lower() in ("true", "1", "yes")
    if api_enabled:
        api_port = int(os.environ.get("API_PORT", "9400"))
        api_thread = threading.Thread(
            target=_start_api_server, args=(service, api_port), daemon=True
        )
        api_thread.start()

    # Create MCP server and register tools
    mcp = FastMCP("taskboard-index")
    register_index_tools(mcp, service)

    log.info("Starting taskboard-index server")
    try:
        mcp.run(transport="stdio")
    finally:
        if watcher:
            watcher.stop()
        service.stop_worker()


if __name__ == "__main__":
    main()

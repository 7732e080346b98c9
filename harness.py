"""
Interactive harness for testing taskboard-index without MCP integration.

Usage:
    python harness.py <VAULT_ROOT> [--exclude .git,.obsidian] [--index PATH]

Runs a full scan into an in-memory index (or PATH when --index is given),
prints a quick smoke test, then drops you into a REPL over the IndexService.
"""

import json
import sys
from pathlib import Path

# Add src/ to path so imports work
sys.path.insert(0, str(Path(__file__).parent / "src"))

from taskboard_index.cache.index_service import IndexService
from taskboard_index.cache.index_store import create_store
from taskboard_index.cache.scanner import VaultScanner
from taskboard_index.config import IndexerSettings, parse_exclude_dirs


def smoke_test(service: IndexService) -> None:
    """Quick automated checks after initialization."""
    st = service.status()
    print("\n=== Smoke Test ===")
    print(f"  Vault root:      {st['vault_root']}")
    print(f"  Documents:       {st['documents_indexed']}")
    print(f"  Pending tasks:   {st['pending_tasks']}")
    print(f"  Completed tasks: {st['completed_tasks']}")
    print(f"  Exclude dirs:    {st['exclude_dirs']}")

    pending = service.query_tasks(partition="Pending", limit=10)
    print(f"\n  Pending tasks (first 10): {len(pending)}")
    for _, t in pending[:5]:
        print(f"    [{t.id}] {t.title}  ({t.file_path})")

    due = [(p, t) for p, t in service.query_tasks(partition="Pending", limit=9999) if t.due]
    print(f"\n  Pending tasks with a due date: {len(due)}")
    for _, t in sorted(due, key=lambda pt: pt[1].due)[:5]:
        print(f"    {t.due}  {t.title}")

    prioritised = service.query_tasks(partition="Pending", min_priority=1, limit=9999)
    print(f"\n  Pending tasks with a priority: {len(prioritised)}")

    print("\n=== Smoke Test Complete ===\n")


def repl(service: IndexService) -> None:
    """Simple REPL for interactive exploration."""
    print("Interactive mode. Type 'help' for commands, 'quit' to exit.\n")

    commands = {
        "help":    "Show this help",
        "status":  "Show index status",
        "tasks":   "List tasks. Usage: tasks [partition=Pending] [file_path=PATH] [tag=#x] [due_before=DATE] [min_priority=N] [limit=20]",
        "task":    "Get task by ID. Usage: task <id>",
        "docs":    "List indexed documents with task counts",
        "find":    "Search task titles. Usage: find <substring>",
        "update":  "Re-scan documents. Usage: update <path> [<path> ...]",
        "scan":    "Full re-scan",
        "quit":    "Exit",
    }

    while True:
        try:
            line = input("taskboard> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        parts = line.split()
        cmd = parts[0].lower()

        if cmd == "quit" or cmd == "exit":
            break

        elif cmd == "help":
            for k, v in commands.items():
                print(f"  {k:8s} {v}")

        elif cmd == "status":
            print(json.dumps(service.status(), indent=2, default=str))

        elif cmd == "tasks":
            kwargs = {}
            for arg in parts[1:]:
                if "=" in arg:
                    k, v = arg.split("=", 1)
                    kwargs[k] = int(v) if k in ("limit", "min_priority") else v
            try:
                results = service.query_tasks(**kwargs)
            except (TypeError, ValueError) as e:
                print(f"  {e}")
                continue
            print(f"Found {len(results)} tasks:")
            for partition, t in results:
                extras = " ".join(
                    f"{k}={v}" for k, v in (("due", t.due), ("time", t.time), ("p", t.priority)) if v
                )
                print(f"  [{t.status}] {t.id:>10d} {t.title}  {extras}")

        elif cmd == "task":
            if len(parts) < 2 or not parts[1].isdigit():
                print("Usage: task <id>")
                continue
            entry = service.get_task(int(parts[1]))
            if entry:
                partition, t = entry
                d = t.to_dict()
                d["partition"] = partition
                print(json.dumps(d, indent=2, ensure_ascii=False, default=str))
            else:
                print(f"  Task '{parts[1]}' not found")

        elif cmd == "docs":
            for doc in service.documents():
                print(f"  {doc['pending']:4d} / {doc['completed']:4d}  {doc['file_path']}")

        elif cmd == "find":
            if len(parts) < 2:
                print("Usage: find <substring>")
                continue
            needle = " ".join(parts[1:]).lower()
            matches = [(p, t) for p, t in service.query_tasks(limit=9999) if needle in t.title.lower()]
            print(f"Found {len(matches)} matching tasks:")
            for partition, t in matches:
                print(f"  [{partition:9s}] {t.id:>10d} {t.title}")

        elif cmd == "update":
            if len(parts) < 2:
                print("Usage: update <path> [<path> ...]")
                continue
            print(json.dumps(service.update(parts[1:]).to_dict(), indent=2))

        elif cmd == "scan":
            print(json.dumps(service.scan().to_dict(), indent=2))

        else:
            print(f"Unknown command: {cmd}. Type 'help' for available commands.")


def main():
    if len(sys.argv) < 2:
        print("Usage: python harness.py <VAULT_ROOT> [--exclude .git,.obsidian] [--index PATH]")
        sys.exit(1)

    vault_root = Path(sys.argv[1]).resolve()
    if not vault_root.is_dir():
        print(f"Error: {vault_root} is not a directory")
        sys.exit(1)

    args = sys.argv[2:]
    exclude_dirs = {".git", ".obsidian", "node_modules", ".trash"}
    index_file = None
    for i, arg in enumerate(args):
        if arg == "--exclude" and i + 1 < len(args):
            exclude_dirs = parse_exclude_dirs(args[i + 1])
        elif arg == "--index" and i + 1 < len(args):
            index_file = Path(args[i + 1])

    print(f"Scanning: {vault_root}")
    print(f"Exclude dirs: {exclude_dirs}")

    settings = IndexerSettings(vault_root=vault_root, exclude_dirs=exclude_dirs, index_file=index_file)
    store = create_store(index_file)
    service = IndexService(VaultScanner.from_settings(settings, store))
    service.initialize()

    smoke_test(service)
    repl(service)

    print("Done.")


if __name__ == "__main__":
    main()

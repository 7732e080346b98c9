from .index_service import IndexService
from .index_store import IndexStoreInterface, JSONIndexStore, MemoryIndexStore, create_store
from .scanner import ScanResult, VaultScanner
from .vault import DocumentInfo, FileSystemVault

__all__ = [
    "IndexService",
    "IndexStoreInterface",
    "JSONIndexStore",
    "MemoryIndexStore",
    "create_store",
    "ScanResult",
    "VaultScanner",
    "DocumentInfo",
    "FileSystemVault",
]

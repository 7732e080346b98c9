"""
Exception classes for taskboard-index.
"""


class IndexerError(Exception):
    """Base exception for all taskboard-index errors."""
    pass


class ConfigurationError(IndexerError):
    """Raised when configuration is invalid or missing."""
    pass


class DocumentReadError(IndexerError):
    """Raised when a vault document cannot be read."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}" if reason else f"Cannot read {path}")

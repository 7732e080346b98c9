"""Task extraction and indexing for markdown vaults."""

__version__ = "0.1.0"

from .index_tools import register_index_tools

__all__ = ["register_index_tools"]

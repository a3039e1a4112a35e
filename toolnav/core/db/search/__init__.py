"""
Search module for full-text search over tools.
"""

from .fts import FTSManager
from .tools import search_tools

__all__ = [
    "FTSManager",
    "search_tools",
]

"""
toolnav - a catalog of AI tools backed by SQLite with FTS5 search.
"""

__version__ = "0.1.0"

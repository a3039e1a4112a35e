"""
Database constants for the tool directory.

These constants configure FTS5 search, migration batching, and the
statement cache.
"""

# BM25 weights for tools_fts columns
# Higher weights = more important in search ranking
# Column order: name, description, tags, category_name
BM25_WEIGHTS = (10.0, 1.0, 3.0, 2.0)

# Search result limits
DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 100

# Migration
DEFAULT_BATCH_SIZE = 100

# sqlite3 per-connection statement cache; must exceed the registry size
STATEMENT_CACHE_SIZE = 256

# Milliseconds SQLite itself waits on a lock before reporting SQLITE_BUSY
BUSY_TIMEOUT_MS = 5000

# Migration log statuses
STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

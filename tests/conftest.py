"""
Shared fixtures: temporary database files and a small seed document.

The seed has 3 categories and 10 tools. Tags "Chat" and "chat" appear on
different tools so the case-insensitive tag dedup is exercised on load.
"""

import json
import os
import tempfile

import pytest

from toolnav.core.db import ToolDatabase
from toolnav.services.migration import MigrationPipeline


def make_seed(dangling: bool = False) -> dict:
    """Build the seed document; ``dangling`` points the last tool at a missing category."""
    tools = [
        ("tool-001", "ChatGPT", "Conversational assistant by OpenAI", "category-1", ["Chat", "NLP"], 500, True),
        ("tool-002", "Claude", "Helpful assistant for writing and analysis", "category-1", ["chat"], 300, False),
        ("tool-003", "Perplexity", "Chat-based answer engine", "category-1", ["Search"], 200, False),
        ("tool-004", "Midjourney", "Image generation from text prompts", "category-2", ["Image", "Art"], 400, True),
        ("tool-005", "Stable Diffusion", "Open image model", "category-2", ["Image"], 100, False),
        ("tool-006", "Runway", "Video editing with generative models", "category-2", ["Video"], 50, False),
        ("tool-007", "Notion AI", "Writing help inside Notion", "category-3", ["Writing"], 80, False),
        ("tool-008", "Copilot", "Code completion in the editor", "category-3", ["Code"], 250, True),
        ("tool-009", "Cursor", "AI-first code editor", "category-3", ["Code"], 150, False),
        ("tool-010", "ElevenLabs", "Voice synthesis", "category-3", ["Audio"], 20, False),
    ]
    if dangling:
        last = tools[-1]
        tools[-1] = last[:3] + ("category-99",) + last[4:]

    return {
        "siteConfig": {
            "siteName": "AI Tool Navigator",
            "description": "A curated directory of AI tools",
            "keywords": ["AI", "tools", "directory"],
        },
        "categories": [
            {"id": "category-1", "name": "Assistants", "icon": "robot"},
            {"id": "category-2", "name": "Creative", "icon": "palette"},
            {"id": "category-3", "name": "Productivity", "icon": "rocket"},
        ],
        "tools": [
            {
                "id": tool_id,
                "name": name,
                "description": description,
                "logo": f"/logos/{tool_id}.png",
                "url": f"https://example.com/{tool_id}",
                "categoryId": category_id,
                "isFeatured": featured,
                "isNew": tool_id == "tool-010",
                "viewCount": views,
                "addedDate": "2024-01-15",
                "tags": tags,
            }
            for tool_id, name, description, category_id, tags, views, featured in tools
        ],
    }


def write_seed(path, data: dict) -> str:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return str(path)


def remove_db_files(path: str) -> None:
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(path + suffix):
            os.unlink(path + suffix)


@pytest.fixture
def temp_db_path():
    """Path of a temporary database file, removed with its WAL siblings."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    remove_db_files(path)


@pytest.fixture
def temp_db(temp_db_path):
    """Create a temporary empty database for testing."""
    db = ToolDatabase(temp_db_path, retry_delay=0.01)
    yield db
    db.close()


@pytest.fixture
def seed_file(tmp_path):
    return write_seed(tmp_path / "settings.json", make_seed())


@pytest.fixture
def seeded_db_path(temp_db_path, seed_file):
    """Database file populated from the seed document."""
    MigrationPipeline(seed_file, temp_db_path).run()
    return temp_db_path


@pytest.fixture
def seeded_db(seeded_db_path):
    db = ToolDatabase(seeded_db_path, retry_delay=0.01)
    yield db
    db.close()

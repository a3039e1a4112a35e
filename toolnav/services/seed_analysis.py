"""
Pre-flight analysis of a seed JSON file.

Reads the raw document (no model validation) so that missing fields are
reported alongside everything else instead of aborting the analysis.
"""

import json
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from toolnav.core.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class SeedAnalysis:
    """Statistics and problems found in a seed document."""

    categories: int = 0
    tools: int = 0
    keywords: int = 0
    unique_tags: List[str] = field(default_factory=list)
    featured: int = 0
    new: int = 0
    tools_per_category: Dict[str, int] = field(default_factory=dict)
    dangling_tools: List[str] = field(default_factory=list)
    duplicate_tool_ids: List[str] = field(default_factory=list)
    duplicate_category_ids: List[str] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (
            self.dangling_tools
            or self.duplicate_tool_ids
            or self.duplicate_category_ids
            or self.missing_fields
        )

    @property
    def total_records(self) -> int:
        return self.categories + self.tools + len(self.unique_tags) + self.keywords

    def format(self) -> str:
        lines = [
            "Seed statistics",
            "=" * 60,
            f"Categories: {self.categories}",
            f"Tools: {self.tools}",
            f"Keywords: {self.keywords}",
            f"Unique tags: {len(self.unique_tags)}",
            f"Featured tools: {self.featured}",
            f"New tools: {self.new}",
            "",
            "Tools per category:",
        ]
        for name, count in self.tools_per_category.items():
            lines.append(f"  {name}: {count}")

        lines.append("")
        lines.append("Integrity:")
        if self.dangling_tools:
            lines.append(f"  Tools referencing a missing category: {len(self.dangling_tools)}")
            lines.extend(f"    {entry}" for entry in self.dangling_tools)
        if self.duplicate_tool_ids:
            lines.append(f"  Duplicate tool ids: {', '.join(self.duplicate_tool_ids)}")
        if self.duplicate_category_ids:
            lines.append(f"  Duplicate category ids: {', '.join(self.duplicate_category_ids)}")
        if self.missing_fields:
            lines.append("  Missing fields:")
            lines.extend(f"    {entry}" for entry in self.missing_fields)
        if self.ok:
            lines.append("  All checks passed")

        lines.append("")
        lines.append(f"Estimated records: {self.total_records}")
        return "\n".join(lines)


def _duplicates(ids: List[Any]) -> List[str]:
    seen = set()
    duplicates: List[str] = []
    for item in ids:
        if item in seen and item not in duplicates:
            duplicates.append(item)
        seen.add(item)
    return duplicates


def analyze_seed(path: Union[str, Path]) -> SeedAnalysis:
    """
    Collect statistics and integrity problems from a seed file.

    Parameters
    ----------
    path : str or Path
        JSON document with ``siteConfig``, ``categories`` and ``tools``

    Returns
    -------
    SeedAnalysis
        Counts plus any dangling references, duplicate ids, or missing
        required fields

    Raises
    ------
    ValidationError
        If the file is not valid JSON or lacks the top-level sections
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError(f"Seed document must be a JSON object: {path}")

    categories = data.get("categories") or []
    tools = data.get("tools") or []
    site_config = data.get("siteConfig") or {}

    analysis = SeedAnalysis(
        categories=len(categories),
        tools=len(tools),
        keywords=len(site_config.get("keywords") or []),
    )

    tags: "OrderedDict[str, None]" = OrderedDict()
    for tool in tools:
        for tag in tool.get("tags") or []:
            tags[tag] = None
    analysis.unique_tags = list(tags)

    analysis.featured = sum(1 for tool in tools if tool.get("isFeatured"))
    analysis.new = sum(1 for tool in tools if tool.get("isNew"))

    names = {cat.get("id"): cat.get("name") or cat.get("id") for cat in categories}
    distribution = {cat_id: 0 for cat_id in names}
    for tool in tools:
        category_id = tool.get("categoryId")
        if category_id in distribution:
            distribution[category_id] += 1
        else:
            analysis.dangling_tools.append(
                f"{tool.get('id')} ({tool.get('name')}) -> {category_id}"
            )
    analysis.tools_per_category = {names[cat_id]: count for cat_id, count in distribution.items()}

    analysis.duplicate_tool_ids = _duplicates([tool.get("id") for tool in tools])
    analysis.duplicate_category_ids = _duplicates([cat.get("id") for cat in categories])

    for index, tool in enumerate(tools):
        label = tool.get("id") or f"#{index}"
        for key in ("id", "name", "categoryId"):
            if not tool.get(key):
                analysis.missing_fields.append(f"tool {label}: {key}")
    for index, cat in enumerate(categories):
        label = cat.get("id") or f"#{index}"
        for key in ("id", "name", "icon"):
            if not cat.get(key):
                analysis.missing_fields.append(f"category {label}: {key}")

    if analysis.ok:
        logger.info("Seed %s passed analysis (%d tools)", path, analysis.tools)
    else:
        logger.warning("Seed %s has integrity problems", path)
    return analysis

"""
Utility functions for identifiers and batching.
"""
import re
from typing import Iterator, List, Sequence, TypeVar

from toolnav.core.errors import ValidationError

T = TypeVar("T")

_LEGACY_ID_PATTERN = re.compile(r"-(\d+)\Z")


def extract_legacy_id(id_string: str) -> int:
    """
    Extract the numeric legacy id from a slug-style identifier.

    Parameters
    ----
    id_string : str
        Identifier such as "tool-001" or "category-6"

    Returns
    ----
    int
        Trailing number, e.g. 1 or 6

    Raises
    ----
    ValidationError
        If the string does not end in ``-<digits>``
    """
    if not isinstance(id_string, str):
        raise ValidationError(f"Cannot extract legacy id from: {id_string!r}")
    match = _LEGACY_ID_PATTERN.search(id_string)
    if not match:
        raise ValidationError(f"Cannot extract legacy id from: {id_string}")
    return int(match.group(1))


def batched(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of ``items`` with at most ``size`` elements."""
    if size <= 0:
        raise ValueError("batch size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])

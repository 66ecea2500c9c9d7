"""
Backfill Gap Finder

Lists calendar dates that have no ledger entry. Gaps are reported only,
never filled in.
"""

from typing import Any, Dict, List, Optional, Tuple

from .dates import date_range, format_date_key, is_date_key, parse_date_key


def find_gaps(ledger: Dict[str, Any], start_key: str, end_key: str) -> List[str]:
    """
    Dates in ``[start_key, end_key]`` absent from the ledger.

    Args:
        ledger: Ledger to inspect
        start_key: First date of the range (inclusive)
        end_key: Last date of the range (inclusive)

    Returns:
        Missing date keys in chronological order; empty if start is after end
    """
    start = parse_date_key(start_key)
    end = parse_date_key(end_key)
    return [
        key for key in (format_date_key(day) for day in date_range(start, end))
        if key not in ledger
    ]


def backfill_range(ledger: Dict[str, Any], end_key: str) -> Optional[Tuple[str, str]]:
    """Range from the earliest logged date to ``end_key``, or None for an empty ledger."""
    keys = sorted(key for key in ledger if is_date_key(key))
    if not keys:
        return None
    return keys[0], end_key

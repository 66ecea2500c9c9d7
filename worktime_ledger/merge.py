"""
Device Merge

Combines the per-device ledgers into the canonical ledger. Hours logged on
different devices for the same date add up, and the device total replaces
whatever the canonical ledger held for that date.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .dates import is_date_key
from .ledger import (Ledger, LedgerLayout, LoadStatus, coerce_hours, persist, read_ledger,
                     round_hours, sort_ledger, valid_entries)
from .errors import CorruptLedger
from .logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class MergeReport:
    """Result of merging device files into the canonical ledger."""
    ledger: Ledger
    canonical_path: Path
    device_files: List[Path] = field(default_factory=list)
    overridden_dates: List[str] = field(default_factory=list)


def device_totals(device_ledgers: Iterable[Dict[str, Any]]) -> Dict[str, float]:
    """Sum the valid entries of every device ledger per date."""
    totals: Dict[str, float] = defaultdict(float)
    for device_ledger in device_ledgers:
        for date_key, raw_hours in device_ledger.items():
            if not is_date_key(date_key):
                continue
            hours = coerce_hours(raw_hours)
            if hours is None:
                continue
            totals[date_key] += hours
    return dict(totals)


def merge_ledgers(canonical: Dict[str, Any], device_ledgers: Iterable[Dict[str, Any]]) -> Ledger:
    """
    Build the new canonical ledger.

    Args:
        canonical: Current canonical ledger
        device_ledgers: One ledger per device

    Returns:
        Sorted ledger where every date with device data holds the summed
        device hours and every other date keeps its canonical value.
        Malformed entries on either side are skipped.
    """
    merged = valid_entries(canonical)
    for date_key, hours in device_totals(device_ledgers).items():
        total = coerce_hours(hours)
        if total is None:
            continue
        merged[date_key] = round_hours(total)
    return sort_ledger(merged)


def merge_device_files(layout: LedgerLayout) -> Optional[MergeReport]:
    """
    Merge every device file under the layout into the canonical file.

    Args:
        layout: Ledger file locations

    Returns:
        MergeReport, or None if there are no device files (nothing is written)

    Raises:
        CorruptLedger: If the canonical file or any device file is not valid JSON
    """
    device_files = layout.device_paths()
    if not device_files:
        logger.info(f"No device files found in {layout.data_dir}")
        return None

    device_ledgers = []
    for path in device_files:
        result = read_ledger(path)
        if result.status is LoadStatus.CORRUPT:
            logger.error(f"Invalid JSON in {layout.relative(path)}")
            raise CorruptLedger(path, result.error)
        if result.status is LoadStatus.LOADED:
            device_ledgers.append(result.ledger)

    canonical = read_ledger(layout.canonical_path).unwrap()
    merged = merge_ledgers(canonical, device_ledgers)

    previous = valid_entries(canonical)
    overridden = sorted(
        date_key for date_key in device_totals(device_ledgers)
        if date_key in previous and previous[date_key] != merged[date_key]
    )
    for date_key in overridden:
        logger.warning(f"Device totals replaced canonical value for {date_key}: "
                       f"{previous[date_key]}h -> {merged[date_key]}h")

    persist(merged, layout.canonical_path)
    logger.info(f"Merged {len(device_files)} device file(s) into {layout.relative(layout.canonical_path)}")
    return MergeReport(
        ledger=merged,
        canonical_path=layout.canonical_path,
        device_files=device_files,
        overridden_dates=overridden,
    )

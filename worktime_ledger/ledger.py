"""
Worktime Ledger Storage

Reads, updates and writes the date -> hours JSON ledgers. A ledger is a
plain dict with ``YYYY-MM-DD`` keys kept in ascending order.

Writes are a plain overwrite: there is no partial-write protection and
concurrent writers to the same file are not coordinated.
"""

import json
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .dates import is_date_key, parse_date_key
from .errors import CorruptLedger, InvalidInput
from .logging_setup import get_logger

Ledger = Dict[str, float]

CANONICAL_FILE_NAME = 'worktime.json'
DEVICE_FILE_PREFIX = 'worktime.devices.'
DEVICE_FILE_SUFFIX = '.json'

logger = get_logger(__name__)


class LoadStatus(Enum):
    MISSING = 'missing'
    EMPTY = 'empty'
    LOADED = 'loaded'
    CORRUPT = 'corrupt'


@dataclass
class LoadResult:
    """Outcome of reading a ledger file."""
    path: Path
    status: LoadStatus
    ledger: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not LoadStatus.CORRUPT

    def unwrap(self) -> Dict[str, Any]:
        """Return the ledger, raising CorruptLedger if the file was unreadable."""
        if self.status is LoadStatus.CORRUPT:
            raise CorruptLedger(self.path, self.error)
        return self.ledger


def round_hours(value: float) -> float:
    """Round to the nearest tenth, halves rounding up."""
    return math.floor(value * 10 + 0.5) / 10


def coerce_hours(value: Any) -> Optional[float]:
    """Return value as a finite non-negative float, or None if it is not one."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        hours = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    # round_hours needs hours * 10 to stay finite
    if not math.isfinite(hours * 10) or hours < 0:
        return None
    return hours


def sort_ledger(ledger: Dict[str, Any]) -> Dict[str, Any]:
    return dict(sorted(ledger.items()))


def read_ledger(path: Union[str, Path]) -> LoadResult:
    """
    Read a ledger file in one step.

    Args:
        path: Ledger file path

    Returns:
        LoadResult: MISSING or EMPTY with an empty ledger, LOADED with the
        parsed mapping, or CORRUPT with the parse error
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        return LoadResult(path, LoadStatus.MISSING)
    except (UnicodeDecodeError, IsADirectoryError) as e:
        return LoadResult(path, LoadStatus.CORRUPT, error=str(e))

    if not raw.strip():
        return LoadResult(path, LoadStatus.EMPTY)

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        return LoadResult(path, LoadStatus.CORRUPT, error=str(e))

    if not isinstance(payload, dict):
        return LoadResult(path, LoadStatus.CORRUPT, error="expected a JSON object")

    return LoadResult(path, LoadStatus.LOADED, ledger=payload)


def load_ledger(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a ledger; a missing or blank file is an empty ledger."""
    return read_ledger(path).unwrap()


def upsert(ledger: Dict[str, Any], date_key: str, hours: float) -> Ledger:
    """
    Set the hours for one date.

    Args:
        ledger: Existing ledger (left unmodified)
        date_key: Date in ``YYYY-MM-DD`` form
        hours: Non-negative hours, rounded to one decimal before storing

    Returns:
        New ledger sorted by date

    Raises:
        InvalidInput: If the date or hours value is invalid
    """
    parse_date_key(date_key)
    value = coerce_hours(hours)
    if value is None:
        raise InvalidInput(f"Please provide a valid non-negative hours value (got {hours!r}).")

    updated = dict(ledger)
    updated[date_key] = round_hours(value)
    return sort_ledger(updated)


def _serializable(hours: Any) -> Any:
    if isinstance(hours, float) and hours.is_integer():
        return int(hours)
    return hours


def dumps_ledger(ledger: Dict[str, Any]) -> str:
    ordered = {key: _serializable(value) for key, value in sorted(ledger.items())}
    return json.dumps(ordered, indent=2) + '\n'


def persist(ledger: Dict[str, Any], path: Union[str, Path]) -> Path:
    """
    Write a ledger as pretty-printed JSON with ascending keys.

    Args:
        ledger: Ledger to write
        path: Destination file; parent directories are created

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_ledger(ledger), encoding='utf-8')
    logger.debug(f"Wrote {len(ledger)} entries to {path}")
    return path


def valid_entries(ledger: Dict[str, Any]) -> Ledger:
    """Keep only entries with a real date key and usable hours, rounded."""
    entries: Ledger = {}
    for date_key, raw_hours in ledger.items():
        if not is_date_key(date_key):
            continue
        hours = coerce_hours(raw_hours)
        if hours is None:
            continue
        entries[date_key] = round_hours(hours)
    return sort_ledger(entries)


def normalize_device_id(raw: Any) -> str:
    """
    Normalize a device name for use in a file name.

    Lowercases, turns every run of characters outside ``[a-z0-9._-]`` into a
    single dash and strips leading and trailing separators (``.``, ``_``, ``-``).

    Raises:
        InvalidInput: If nothing usable is left
    """
    device = re.sub(r'[^a-z0-9._-]+', '-', str(raw or '').strip().lower())
    device = device.strip('._-')
    if not device:
        raise InvalidInput("Invalid device name. Use letters, numbers, dot, dash, underscore.")
    return device


class LedgerLayout:
    """Locations of the canonical and per-device ledgers under a project root."""

    def __init__(self, project_root: Union[str, Path] = '.', data_dir: Union[str, Path] = 'src/data'):
        self.project_root = Path(project_root)
        self.data_dir = self.project_root / data_dir

    @property
    def canonical_path(self) -> Path:
        return self.data_dir / CANONICAL_FILE_NAME

    def device_path(self, device: str) -> Path:
        return self.data_dir / f"{DEVICE_FILE_PREFIX}{normalize_device_id(device)}{DEVICE_FILE_SUFFIX}"

    def device_paths(self) -> List[Path]:
        """All device ledger files, sorted by name."""
        if not self.data_dir.is_dir():
            return []
        pattern = f"{DEVICE_FILE_PREFIX}*{DEVICE_FILE_SUFFIX}"
        return sorted(
            (p for p in self.data_dir.glob(pattern)
             if p.is_file() and len(p.name) > len(DEVICE_FILE_PREFIX) + len(DEVICE_FILE_SUFFIX)),
            key=lambda p: p.name
        )

    def relative(self, path: Path) -> str:
        """Path relative to the project root when possible, for messages."""
        try:
            return str(path.relative_to(self.project_root))
        except ValueError:
            return str(path)

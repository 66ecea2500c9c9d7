"""
Duration Aggregation

Sums how much of each tracked event falls inside a day window. Events that
straddle midnight are clamped so only the in-window part counts.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, Mapping


@dataclass(frozen=True)
class DayWindow:
    """Half-open interval ``[start, end)`` for one calendar day."""
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Event:
    """One interval reported by the tracking service."""
    timestamp: datetime
    duration: float = 0.0
    data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def end(self) -> datetime:
        return self.timestamp + timedelta(seconds=self.duration)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Event':
        """
        Build an event from the service's JSON representation.

        Args:
            raw: Mapping with ``timestamp``, ``duration`` and ``data`` keys

        Returns:
            Event with an aware timestamp and a non-negative duration

        Raises:
            ValueError: If the timestamp is missing or malformed
        """
        stamp = str(raw['timestamp'])
        if stamp.endswith('Z'):
            stamp = stamp[:-1] + '+00:00'
        timestamp = datetime.fromisoformat(stamp)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        try:
            duration = float(raw.get('duration') or 0)
        except (TypeError, ValueError):
            duration = 0.0
        if not math.isfinite(duration) or duration < 0:
            duration = 0.0

        data = raw.get('data')
        return cls(timestamp=timestamp, duration=duration,
                   data=data if isinstance(data, dict) else {})


Predicate = Callable[[Event], bool]


def always(event: Event) -> bool:
    """Count every event; used for window-watcher buckets."""
    return True


def is_not_afk(event: Event) -> bool:
    """Count only presence events reported as ``not-afk``."""
    return event.data.get('status') == 'not-afk'


def overlap_seconds(start: datetime, end: datetime, window: DayWindow) -> float:
    """Seconds of ``[start, end)`` that fall inside the window, never negative."""
    lower = max(start, window.start)
    upper = min(end, window.end)
    return max(0.0, (upper - lower).total_seconds())


def sum_overlap(events: Iterable[Event], window: DayWindow, predicate: Predicate = always) -> float:
    """
    Total in-window seconds across the events accepted by ``predicate``.

    Args:
        events: Events to aggregate
        window: Day window to clamp against
        predicate: Filter deciding which events count

    Returns:
        Sum of overlap seconds
    """
    total = 0.0
    for event in events:
        if not predicate(event):
            continue
        total += overlap_seconds(event.timestamp, event.end, window)
    return total

"""
ActivityWatch Collector

Reads buckets and events from an ActivityWatch server over its REST API and
reduces one day of events to active seconds.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .aggregation import DayWindow, Event, always, is_not_afk, sum_overlap
from .buckets import AFK_PREFIX, WINDOW_PREFIX, BucketSelector
from .errors import NoSourceFound, ServiceUnavailable
from .logging_setup import get_logger

DEFAULT_SERVER_URL = 'http://localhost:5600'


def _utc_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat()


class ActivityWatchClient:
    """Minimal client for the ActivityWatch ``/api/0`` endpoints."""

    def __init__(self,
                 base_url: str = DEFAULT_SERVER_URL,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            base_url: Server URL, trailing slashes are ignored
            timeout: Request timeout in seconds (None waits indefinitely)
            session: Optional requests session to reuse
        """
        self.logger = get_logger(__name__)
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        self.logger.debug(f"GET {url} params={params}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ServiceUnavailable(f"Request failed for {url}: {e}") from e

        if not response.ok:
            raise ServiceUnavailable(f"Request failed ({response.status_code}) for {url}")

        try:
            return response.json()
        except ValueError as e:
            raise ServiceUnavailable(f"Invalid JSON response from {url}") from e

    def get_info(self) -> Dict[str, Any]:
        return self._get_json('/api/0/info')

    def get_buckets(self) -> Dict[str, Any]:
        """Return the mapping of bucket id to bucket metadata."""
        buckets = self._get_json('/api/0/buckets')
        if not isinstance(buckets, dict):
            raise ServiceUnavailable("Unexpected bucket listing from ActivityWatch")
        return buckets

    def get_events(self, bucket_id: str, start: datetime, end: datetime) -> List[Event]:
        """
        Fetch the events of one bucket between two instants.

        Args:
            bucket_id: Bucket to query
            start: Window start (aware datetime)
            end: Window end (aware datetime)

        Returns:
            Parsed events
        """
        raw_events = self._get_json(
            f"/api/0/buckets/{quote(bucket_id, safe='')}/events",
            params={'start': _utc_iso(start), 'end': _utc_iso(end)}
        )
        if not isinstance(raw_events, list):
            raise ServiceUnavailable(f"Unexpected event listing for bucket {bucket_id}")

        try:
            return [Event.from_dict(raw) for raw in raw_events]
        except (KeyError, TypeError, ValueError) as e:
            raise ServiceUnavailable(f"Malformed event in bucket {bucket_id}: {e}") from e


@dataclass
class CollectionResult:
    """Active time detected for one day."""
    seconds: float
    source_label: str
    bucket_id: str
    event_count: int

    @property
    def hours(self) -> float:
        return self.seconds / 3600


@dataclass
class ProbeResult:
    """Outcome of a connection test against the server."""
    server_url: str
    version: str
    bucket_count: int
    afk_bucket: Optional[str]
    window_bucket: Optional[str]
    collection: CollectionResult


class Collector:
    """Turns a day of ActivityWatch events into active seconds."""

    def __init__(self,
                 client: ActivityWatchClient,
                 afk_prefix: str = AFK_PREFIX,
                 window_prefix: str = WINDOW_PREFIX,
                 selector: Optional[BucketSelector] = None):
        self.logger = get_logger(__name__)
        self.client = client
        self.afk_prefix = afk_prefix
        self.window_prefix = window_prefix
        self.selector = selector or BucketSelector()

    def _select_sources(self, bucket_ids: List[str], hostname: str):
        afk_bucket = self.selector.select(bucket_ids, self.afk_prefix, hostname)
        window_bucket = self.selector.select(bucket_ids, self.window_prefix, hostname)
        return afk_bucket, window_bucket

    def _collect_from(self, afk_bucket: Optional[str], window_bucket: Optional[str],
                      window: DayWindow) -> CollectionResult:
        if afk_bucket:
            events = self.client.get_events(afk_bucket, window.start, window.end)
            seconds = sum_overlap(events, window, is_not_afk)
            return CollectionResult(seconds, f"AFK bucket ({afk_bucket})", afk_bucket, len(events))

        if window_bucket:
            events = self.client.get_events(window_bucket, window.start, window.end)
            seconds = sum_overlap(events, window, always)
            return CollectionResult(seconds, f"Window bucket ({window_bucket})", window_bucket, len(events))

        raise NoSourceFound(
            f"No ActivityWatch bucket found. Expected {self.afk_prefix}* or {self.window_prefix}*."
        )

    def collect(self, hostname: str, window: DayWindow) -> CollectionResult:
        """
        Measure active time for the host inside the day window.

        The AFK bucket is preferred; the window bucket is only used when no
        AFK bucket is selected, and then every window event counts as active.

        Args:
            hostname: Host whose buckets should be used
            window: Day window to measure

        Returns:
            Raw active seconds and a label describing the source

        Raises:
            ServiceUnavailable: If any request fails
            NoSourceFound: If neither an AFK nor a window bucket exists
        """
        bucket_ids = list(self.client.get_buckets().keys())
        afk_bucket = self.selector.select(bucket_ids, self.afk_prefix, hostname)
        # The window bucket is only looked up when presence data is missing.
        window_bucket = None if afk_bucket else self.selector.select(bucket_ids, self.window_prefix, hostname)

        result = self._collect_from(afk_bucket, window_bucket, window)
        self.logger.info(f"Collected {result.seconds:.0f}s from {result.source_label} "
                         f"({result.event_count} events)")
        return result

    def probe(self, hostname: str, window: DayWindow) -> ProbeResult:
        """Check connectivity and report which buckets would be used."""
        info = self.client.get_info()
        bucket_ids = list(self.client.get_buckets().keys())
        afk_bucket, window_bucket = self._select_sources(bucket_ids, hostname)

        collection = self._collect_from(afk_bucket, window_bucket, window)
        return ProbeResult(
            server_url=self.client.base_url,
            version=str(info.get('version', 'unknown')) if isinstance(info, dict) else 'unknown',
            bucket_count=len(bucket_ids),
            afk_bucket=afk_bucket,
            window_bucket=window_bucket,
            collection=collection,
        )

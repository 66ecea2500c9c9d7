"""
Worktime Logger

Coordinates collection, ledger updates, device merging, gap reports and git
sync on behalf of the command line interface.
"""

import socket
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .activitywatch import ActivityWatchClient, CollectionResult, Collector, ProbeResult
from .config import ConfigManager
from .dates import day_window
from .gaps import backfill_range, find_gaps
from .ledger import LedgerLayout, load_ledger, normalize_device_id, persist, round_hours, upsert
from .logging_setup import get_logger
from .merge import MergeReport, merge_device_files
from . import vcs


@dataclass
class LogResult:
    """A single ledger update."""
    date_key: str
    hours: float
    path: Path


class WorktimeLogger:
    """Main entry point tying the worktime components together."""

    def __init__(self, config: ConfigManager, hostname: Optional[str] = None):
        """
        Initialize the worktime logger.

        Args:
            config: Configuration manager instance
            hostname: Host name used for bucket selection (defaults to this machine)
        """
        self.config = config
        self.logger = get_logger(__name__)
        self.hostname = hostname or socket.gethostname()
        self.layout = LedgerLayout(config.get_project_root(), config.get_data_dir())

    def build_collector(self, server_url: Optional[str] = None) -> Collector:
        client = ActivityWatchClient(
            base_url=self.config.get_server_url(server_url),
            timeout=self.config.get_timeout(),
        )
        return Collector(
            client,
            afk_prefix=self.config.get_afk_prefix(),
            window_prefix=self.config.get_window_prefix(),
        )

    def device_id(self, device: Optional[str] = None) -> str:
        return normalize_device_id(self.config.get_device_name(device))

    def resolve_ledger_path(self, device: Optional[str] = None, out: Optional[str] = None) -> Path:
        """
        Pick the ledger file a command works on.

        Args:
            device: Device name; selects that device's ledger
            out: Explicit path relative to the project root

        Returns:
            ``out`` if given, else the device ledger if ``device`` is given,
            else the canonical ledger
        """
        if out:
            return self.layout.project_root / out
        if device:
            return self.layout.device_path(device)
        return self.layout.canonical_path

    def log_hours(self, hours: float, date_key: str, path: Path) -> LogResult:
        """Upsert one date into the ledger at ``path``."""
        ledger = upsert(load_ledger(path), date_key, hours)
        persist(ledger, path)
        self.logger.info(f"Logged {ledger[date_key]}h for {date_key} in {path}")
        return LogResult(date_key=date_key, hours=ledger[date_key], path=path)

    def collect(self, date_key: str, server_url: Optional[str] = None) -> CollectionResult:
        """Measure active time for a date from ActivityWatch."""
        collector = self.build_collector(server_url)
        self.logger.info(f"Collecting {date_key} from {collector.client.base_url} for host {self.hostname}")
        return collector.collect(self.hostname, day_window(date_key))

    def log_collected(self, result: CollectionResult, date_key: str, device: str) -> LogResult:
        return self.log_hours(round_hours(result.hours), date_key, self.layout.device_path(device))

    def probe(self, date_key: str, server_url: Optional[str] = None) -> ProbeResult:
        return self.build_collector(server_url).probe(self.hostname, day_window(date_key))

    def backfill_report(self, path: Path, end_key: str) -> Optional[List[str]]:
        """
        Missing dates between the first logged date and ``end_key``.

        Returns:
            List of missing dates, or None when the ledger has no data yet
        """
        ledger = load_ledger(path)
        span = backfill_range(ledger, end_key)
        if span is None:
            return None
        return find_gaps(ledger, *span)

    def gaps(self, start_key: Optional[str], end_key: str, path: Path) -> Optional[List[str]]:
        if start_key is None:
            return self.backfill_report(path, end_key)
        return find_gaps(load_ledger(path), start_key, end_key)

    def merge_devices(self) -> Optional[MergeReport]:
        return merge_device_files(self.layout)

    def sync(self, result: LogResult, commit: bool = False, push: bool = False, rebase: bool = False) -> None:
        """Commit and optionally push the updated ledger file."""
        cwd = self.layout.project_root
        if commit:
            vcs.commit_ledger(self.layout.relative(result.path), vcs.commit_message(result.date_key, result.hours), cwd)
        if push:
            if rebase:
                vcs.pull_rebase(cwd)
            vcs.push(cwd)

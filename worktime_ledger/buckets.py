"""
Bucket Selection

ActivityWatch registers one bucket per watcher per host, named
``<prefix><hostname>``. The selector picks the bucket for the current host
and tolerates FQDN versus short hostname mismatches.
"""

from typing import Callable, Iterable, List, Optional, Tuple

AFK_PREFIX = 'aw-watcher-afk_'
WINDOW_PREFIX = 'aw-watcher-window_'

# (candidates sorted, prefix, hostname) -> match or None
Strategy = Callable[[List[str], str, str], Optional[str]]


def exact_match(candidates: List[str], prefix: str, hostname: str) -> Optional[str]:
    exact = f"{prefix}{hostname}"
    return exact if exact in candidates else None


def single_candidate(candidates: List[str], prefix: str, hostname: str) -> Optional[str]:
    return candidates[0] if len(candidates) == 1 else None


def short_host_match(candidates: List[str], prefix: str, hostname: str) -> Optional[str]:
    short_host = hostname.split('.')[0]
    for bucket_id in candidates:
        if bucket_id == f"{prefix}{short_host}" or short_host in bucket_id:
            return bucket_id
    return None


def first_candidate(candidates: List[str], prefix: str, hostname: str) -> Optional[str]:
    return candidates[0] if candidates else None


DEFAULT_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ('exact', exact_match),
    ('single', single_candidate),
    ('short_host', short_host_match),
    ('first', first_candidate),
)


class BucketSelector:
    """Chooses a bucket by running named tie-break strategies in order."""

    def __init__(self, strategies: Iterable[Tuple[str, Strategy]] = DEFAULT_STRATEGIES):
        self.strategies = list(strategies)

    def select(self, bucket_ids: Iterable[str], prefix: str, hostname: str) -> Optional[str]:
        """
        Pick the bucket representing ``hostname``.

        Args:
            bucket_ids: Bucket ids reported by the service
            prefix: Watcher prefix, e.g. ``aw-watcher-afk_``
            hostname: Host name of this machine

        Returns:
            The selected bucket id, or None if no id starts with ``prefix``
        """
        candidates = sorted(b for b in set(bucket_ids) if b.startswith(prefix))
        if not candidates:
            return None

        for _name, strategy in self.strategies:
            match = strategy(candidates, prefix, hostname)
            if match is not None:
                return match
        return None


def select_bucket(bucket_ids: Iterable[str], prefix: str, hostname: str) -> Optional[str]:
    return BucketSelector().select(bucket_ids, prefix, hostname)

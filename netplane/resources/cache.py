"""Per-pass cache of observed and desired snapshots."""

from typing import Dict, Optional, Tuple

from netplane.resources.base import ResourceKind, Snapshot

CacheKey = Tuple[ResourceKind, str]


class PassCache:
    """Snapshots computed during one reconciliation pass.

    Entries never expire; a driver starts every pass with a new instance.
    """

    def __init__(self):
        self._actual: Dict[CacheKey, Snapshot] = {}
        self._expected: Dict[CacheKey, Snapshot] = {}

    def get_actual(self, key: CacheKey) -> Optional[Snapshot]:
        return self._actual.get(key)

    def put_actual(self, key: CacheKey, snapshot: Snapshot) -> Snapshot:
        self._actual[key] = snapshot
        return snapshot

    def get_expected(self, key: CacheKey) -> Optional[Snapshot]:
        return self._expected.get(key)

    def put_expected(self, key: CacheKey, snapshot: Snapshot) -> Snapshot:
        self._expected[key] = snapshot
        return snapshot

"""
Recompute controller.

Holds the last successfully computed analytics per (user, family) and
recomputes them on demand or when the store reports changed rows.

Rules:
- A trigger that arrives while the same key is being recomputed does not
  start a second computation; it marks the key dirty and the running
  refresh makes one more pass when it finishes, also after a failed pass.
  An explicit refresh folded into a first computation waits for it
  instead of returning nothing.
- Each pass gets a generation number and its result is only published if
  it is newer than the published one.
- A failed pass leaves the published snapshot untouched and records the
  error. Explicit refreshes re-raise it, change-triggered ones only log.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Set, Tuple

from .db.models import MetricFamily
from .db.store import RecordStore, Unsubscribe
from .service import FamilyResult, InsightsService

logger = logging.getLogger(__name__)

Key = Tuple[str, MetricFamily]


@dataclass
class Snapshot:
    """A published analytics result."""
    user_id: str
    family: MetricFamily
    result: FamilyResult
    generation: int
    computed_at: datetime


class RecomputeController:
    """Cache-aside owner of per-user, per-family analytics."""

    def __init__(self, service: InsightsService, store: Optional[RecordStore] = None):
        self.service = service
        self.store = store or service.store
        self._lock = threading.Lock()
        self._snapshots: Dict[Key, Snapshot] = {}
        self._errors: Dict[Key, Exception] = {}
        self._generations: Dict[Key, int] = {}
        self._in_flight: Set[Key] = set()
        self._dirty: Set[Key] = set()
        self._owners: Dict[Key, int] = {}
        self._idle = threading.Condition(self._lock)
        self._subscriptions: Dict[Key, Unsubscribe] = {}

    @staticmethod
    def _key(user_id: str, family: MetricFamily) -> Key:
        return user_id, MetricFamily(family)

    def snapshot(self, user_id: str, family: MetricFamily) -> Optional[Snapshot]:
        """Last published snapshot, or None if nothing was computed yet."""
        with self._lock:
            return self._snapshots.get(self._key(user_id, family))

    def last_error(self, user_id: str, family: MetricFamily) -> Optional[Exception]:
        """Error of the most recent failed pass, cleared by the next success."""
        with self._lock:
            return self._errors.get(self._key(user_id, family))

    def get(self, user_id: str, family: MetricFamily) -> FamilyResult:
        """Cached result, computed on first access."""
        current = self.snapshot(user_id, family)
        if current is not None:
            return current.result
        return self.refresh(user_id, family)

    def refresh(self, user_id: str, family: MetricFamily, raise_errors: bool = True) -> Optional[FamilyResult]:
        """
        Recompute one family for one user.

        Args:
            user_id: User to recompute
            family: Metric family to recompute
            raise_errors: Re-raise a failed computation (explicit refresh)

        Returns:
            The freshly published result. A coalesced explicit call waits
            for the running pass when nothing is published yet; a coalesced
            change-triggered call returns the published result or None.
        """
        key = self._key(user_id, family)
        with self._lock:
            if key in self._in_flight:
                return self._coalesce(key, raise_errors)
            self._in_flight.add(key)
            self._owners[key] = threading.get_ident()

        finished = False
        try:
            while True:
                with self._lock:
                    self._dirty.discard(key)
                    generation = self._generations.get(key, 0) + 1
                    self._generations[key] = generation

                try:
                    result = self.service.compute(user_id, key[1])
                except Exception as e:
                    logger.warning(
                        "Recompute of %s for %s failed, keeping last snapshot: %s",
                        key[1].value, user_id, e,
                    )
                    with self._lock:
                        self._errors[key] = e
                        if key in self._dirty:
                            continue
                        self._finish(key)
                        finished = True
                        current = self._snapshots.get(key)
                    if raise_errors:
                        raise
                    return current.result if current else None

                with self._lock:
                    published = self._snapshots.get(key)
                    if published is None or generation > published.generation:
                        self._snapshots[key] = Snapshot(
                            user_id=user_id,
                            family=key[1],
                            result=result,
                            generation=generation,
                            computed_at=datetime.now(),
                        )
                        self._errors.pop(key, None)
                    else:
                        logger.debug("Dropped stale result for %s/%s", user_id, key[1].value)

                    if key in self._dirty:
                        continue
                    self._finish(key)
                    finished = True
                    return self._snapshots[key].result
        finally:
            if not finished:
                with self._lock:
                    self._finish(key)

    def _coalesce(self, key: Key, raise_errors: bool) -> Optional[FamilyResult]:
        """Fold a trigger into the running pass. Caller holds the lock."""
        self._dirty.add(key)
        current = self._snapshots.get(key)
        # The running thread itself must not wait on its own pass
        if current is not None or not raise_errors or self._owners.get(key) == threading.get_ident():
            return current.result if current else None

        while key in self._in_flight:
            self._idle.wait()
        current = self._snapshots.get(key)
        if current is not None:
            return current.result
        error = self._errors.get(key)
        if error is not None:
            raise error
        return None

    def _finish(self, key: Key) -> None:
        """Mark a key idle and wake coalesced waiters. Caller holds the lock."""
        self._in_flight.discard(key)
        self._dirty.discard(key)
        self._owners.pop(key, None)
        self._idle.notify_all()

    def _on_change(self, user_id: str, family: MetricFamily) -> None:
        self.refresh(user_id, family, raise_errors=False)

    def watch(self, user_id: str, family: MetricFamily) -> None:
        """Recompute whenever the store reports changed rows."""
        key = self._key(user_id, family)
        with self._lock:
            if key in self._subscriptions:
                return
        unsubscribe = self.store.on_records_changed(
            user_id, key[1], lambda: self._on_change(user_id, key[1])
        )
        with self._lock:
            if key in self._subscriptions:
                unsubscribe()
                return
            self._subscriptions[key] = unsubscribe
        logger.debug("Watching %s for %s", key[1].value, user_id)

    def unwatch(self, user_id: str, family: MetricFamily) -> None:
        with self._lock:
            unsubscribe = self._subscriptions.pop(self._key(user_id, family), None)
        if unsubscribe is not None:
            unsubscribe()

    def close(self) -> None:
        """Drop all subscriptions."""
        with self._lock:
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()
        for unsubscribe in subscriptions:
            unsubscribe()

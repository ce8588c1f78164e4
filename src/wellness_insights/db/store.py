"""Record store interface and change notifications."""

import logging
import threading
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from .models import DailyRecord, MetricFamily

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class RecordStore(Protocol):
    """
    Protocol for the persistence collaborator.

    Records are keyed by user, metric family and day. Change subscriptions
    carry no payload: a callback only means "re-fetch".
    """

    def query_daily_records(
        self,
        user_id: str,
        family: MetricFamily,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[DailyRecord]:
        """Records with ``start <= day_key <= end``; None bounds are open."""
        ...

    def upsert_daily_record(
        self,
        user_id: str,
        day_key: str,
        family: MetricFamily,
        values: Dict[str, Any],
    ) -> DailyRecord:
        """Insert the day's record, or update the existing one."""
        ...

    def add_daily_record(
        self,
        user_id: str,
        family: MetricFamily,
        values: Dict[str, Any],
        created_at: Optional[datetime] = None,
    ) -> DailyRecord:
        """Append a record (journal entries, exercise completions)."""
        ...

    def delete_daily_record(
        self,
        user_id: str,
        record_id: int,
        family: Optional[MetricFamily] = None,
    ) -> bool:
        """Delete one of the user's records; False if there was none."""
        ...

    def on_records_changed(
        self,
        user_id: str,
        family: MetricFamily,
        callback: ChangeCallback,
    ) -> Unsubscribe:
        """Subscribe to row changes for one user and family."""
        ...


class ChangeNotifier:
    """In-process subscribe/notify hub keyed by (user, family).

    Transport agnostic: the SQLite store calls ``notify`` after its own
    writes, the polling scheduler calls it for writes made elsewhere.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Tuple[str, MetricFamily], List[ChangeCallback]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, user_id: str, family: MetricFamily, callback: ChangeCallback) -> Unsubscribe:
        key = (user_id, MetricFamily(family))
        with self._lock:
            self._subscribers[key].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(key, None)

        return unsubscribe

    def subscriptions(self) -> List[Tuple[str, MetricFamily]]:
        """Keys that currently have at least one subscriber."""
        with self._lock:
            return [key for key, callbacks in self._subscribers.items() if callbacks]

    def notify(self, user_id: str, family: MetricFamily) -> int:
        """Invoke every callback for the key; returns how many were called.

        A failing callback is logged and does not stop the others.
        """
        with self._lock:
            callbacks = list(self._subscribers.get((user_id, MetricFamily(family)), []))

        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Change callback failed for %s/%s", user_id, MetricFamily(family).value)
        return len(callbacks)

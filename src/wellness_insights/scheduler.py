"""Change polling scheduler using APScheduler.

Rows written by another process (a mobile client, a sync job) never pass
through this process's store, so nothing notifies the watchers. This
scheduler polls a cheap change signature per watched (user, family) and
fires the store's notifier when it moves.
"""

import logging
from datetime import datetime
from typing import Dict, Optional, Tuple

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import Settings, get_settings
from .db.database import SqliteRecordStore
from .db.models import MetricFamily

logger = logging.getLogger(__name__)

JOB_ID = "record_change_poll"


class ChangePollingScheduler:
    """Polls the store for outside writes.

    Usage:
        scheduler = ChangePollingScheduler(store)
        scheduler.start()
        # ... app runs ...
        scheduler.stop()
    """

    def __init__(self, store: SqliteRecordStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()
        self.scheduler: Optional[BackgroundScheduler] = None
        self._is_running = False
        self._signatures: Dict[Tuple[str, MetricFamily], tuple] = {}
        self._last_poll: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is running."""
        return self._is_running and self.scheduler is not None

    @property
    def last_poll(self) -> Optional[datetime]:
        return self._last_poll

    def start(self) -> None:
        """Start the interval polling job."""
        if self._is_running:
            logger.warning("Change polling scheduler is already running")
            return

        if not self.settings.change_polling_enabled:
            logger.info("Change polling is disabled in configuration")
            return

        interval = self.settings.change_poll_interval_seconds
        self.scheduler = BackgroundScheduler()
        self.scheduler.add_job(
            self.poll,
            IntervalTrigger(seconds=interval),
            id=JOB_ID,
            name="Record change poll",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        self._is_running = True
        logger.info(f"Change polling scheduler started (every {interval}s)")

    def stop(self) -> None:
        """Gracefully shutdown the scheduler."""
        if not self._is_running or self.scheduler is None:
            return

        self.scheduler.shutdown(wait=True)
        self._is_running = False
        self.scheduler = None
        logger.info("Change polling scheduler stopped")

    def poll(self) -> int:
        """Check every watched key once; returns how many changed.

        The first poll of a key only records its signature.
        """
        changed = 0
        watched = self.store.notifier.subscriptions()
        for user_id, family in watched:
            try:
                signature = self.store.change_signature(user_id, family)
            except Exception as e:
                logger.warning(f"Change poll failed for {user_id}/{family.value}: {e}")
                continue

            key = (user_id, family)
            previous = self._signatures.get(key)
            self._signatures[key] = signature
            if previous is not None and previous != signature:
                changed += 1
                self.store.notifier.notify(user_id, family)

        # Forget keys nobody watches anymore
        for key in set(self._signatures) - set(watched):
            del self._signatures[key]

        self._last_poll = datetime.now()
        return changed

    def get_scheduler_status(self) -> dict:
        next_poll = None
        if self.is_running and self.scheduler is not None:
            job = self.scheduler.get_job(JOB_ID)
            if job and job.next_run_time:
                next_poll = job.next_run_time.isoformat()

        return {
            "is_running": self.is_running,
            "polling_enabled": self.settings.change_polling_enabled,
            "interval_seconds": self.settings.change_poll_interval_seconds,
            "watched_keys": len(self._signatures),
            "next_poll_time": next_poll,
            "last_poll": self._last_poll.isoformat() if self._last_poll else None,
        }

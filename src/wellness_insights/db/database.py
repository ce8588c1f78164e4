"""SQLite record store for daily mood, journal, wellness and exercise records."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..dates import day_key as to_day_key
from ..exceptions import DataFetchError, DataWriteError
from .models import DailyRecord, MetricFamily
from .store import ChangeCallback, ChangeNotifier, Unsubscribe

logger = logging.getLogger(__name__)


class SqliteRecordStore:
    """SQLite database manager implementing the ``RecordStore`` protocol."""

    def __init__(self, db_path: str = "wellness_insights.db", notifier: Optional[ChangeNotifier] = None):
        self.db_path = Path(db_path)
        self.notifier = notifier or ChangeNotifier()
        self._init_db()

    def _init_db(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS daily_records (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    family TEXT NOT NULL,
                    day_key TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    values_json TEXT NOT NULL DEFAULT '{}'
                );

                CREATE INDEX IF NOT EXISTS idx_records_user_family_day
                    ON daily_records(user_id, family, day_key);
            """)

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> DailyRecord:
        try:
            values = json.loads(row["values_json"] or "{}")
        except json.JSONDecodeError:
            logger.warning("Unreadable values on record %s, treating as empty", row["id"])
            values = {}
        if not isinstance(values, dict):
            values = {}
        return DailyRecord(
            user_id=row["user_id"],
            family=MetricFamily(row["family"]),
            day_key=row["day_key"],
            created_at=datetime.fromisoformat(row["created_at"]),
            values=values,
            record_id=row["id"],
        )

    def query_daily_records(
        self,
        user_id: str,
        family: MetricFamily,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[DailyRecord]:
        """Get records for a user and family within an inclusive day range."""
        family = MetricFamily(family)
        query = "SELECT * FROM daily_records WHERE user_id = ? AND family = ?"
        params: List[Any] = [user_id, family.value]
        if start is not None:
            query += " AND day_key >= ?"
            params.append(to_day_key(start))
        if end is not None:
            query += " AND day_key <= ?"
            params.append(to_day_key(end))
        query += " ORDER BY day_key ASC, created_at ASC"

        try:
            with self._get_connection() as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise DataFetchError(
                f"Failed to query {family.value} records",
                family=family.value,
                details={"reason": str(e)},
            ) from e

        return [self._row_to_record(row) for row in rows]

    def upsert_daily_record(
        self,
        user_id: str,
        day_key: str,
        family: MetricFamily,
        values: Dict[str, Any],
    ) -> DailyRecord:
        """Save or update the record for a day.

        Values are merged into the existing record so a partial update
        (one wellness field) keeps the other fields.
        """
        family = MetricFamily(family)
        now = datetime.now()
        try:
            with self._get_connection() as conn:
                row = conn.execute("""
                    SELECT * FROM daily_records
                    WHERE user_id = ? AND family = ? AND day_key = ?
                    ORDER BY created_at DESC, id DESC
                    LIMIT 1
                """, (user_id, family.value, day_key)).fetchone()

                if row:
                    merged = {**self._row_to_record(row).values, **values}
                    conn.execute("""
                        UPDATE daily_records
                        SET values_json = ?, updated_at = ?
                        WHERE id = ?
                    """, (json.dumps(merged), now.isoformat(), row["id"]))
                    record_id = row["id"]
                else:
                    cursor = conn.execute("""
                        INSERT INTO daily_records
                        (user_id, family, day_key, created_at, updated_at, values_json)
                        VALUES (?, ?, ?, ?, ?, ?)
                    """, (user_id, family.value, day_key, now.isoformat(), now.isoformat(), json.dumps(values)))
                    record_id = cursor.lastrowid

                saved = conn.execute(
                    "SELECT * FROM daily_records WHERE id = ?", (record_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise DataWriteError(
                f"Failed to save {family.value} record",
                family=family.value,
                details={"reason": str(e)},
            ) from e

        logger.debug("Upserted %s record for %s on %s", family.value, user_id, day_key)
        self.notifier.notify(user_id, family)
        return self._row_to_record(saved)

    def add_daily_record(
        self,
        user_id: str,
        family: MetricFamily,
        values: Dict[str, Any],
        created_at: Optional[datetime] = None,
    ) -> DailyRecord:
        """Append a record stamped with ``created_at`` (default now)."""
        family = MetricFamily(family)
        created_at = created_at or datetime.now()
        key = to_day_key(created_at)
        stamp = created_at.replace(tzinfo=None).isoformat() if created_at.tzinfo is None \
            else created_at.astimezone().replace(tzinfo=None).isoformat()
        try:
            with self._get_connection() as conn:
                cursor = conn.execute("""
                    INSERT INTO daily_records
                    (user_id, family, day_key, created_at, updated_at, values_json)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (user_id, family.value, key, stamp, stamp, json.dumps(values)))
                saved = conn.execute(
                    "SELECT * FROM daily_records WHERE id = ?", (cursor.lastrowid,)
                ).fetchone()
        except sqlite3.Error as e:
            raise DataWriteError(
                f"Failed to save {family.value} record",
                family=family.value,
                details={"reason": str(e)},
            ) from e

        logger.debug("Added %s record for %s on %s", family.value, user_id, key)
        self.notifier.notify(user_id, family)
        return self._row_to_record(saved)

    def delete_daily_record(
        self,
        user_id: str,
        record_id: int,
        family: Optional[MetricFamily] = None,
    ) -> bool:
        """Delete one record; returns False if it did not exist.

        With ``family`` set, a record of another family counts as missing.
        """
        query = "SELECT family FROM daily_records WHERE id = ? AND user_id = ?"
        params: list = [record_id, user_id]
        if family is not None:
            query += " AND family = ?"
            params.append(MetricFamily(family).value)
        try:
            with self._get_connection() as conn:
                row = conn.execute(query, params).fetchone()
                if not row:
                    return False
                conn.execute("DELETE FROM daily_records WHERE id = ?", (record_id,))
        except sqlite3.Error as e:
            raise DataWriteError("Failed to delete record", details={"reason": str(e)}) from e

        self.notifier.notify(user_id, MetricFamily(row["family"]))
        return True

    def on_records_changed(
        self,
        user_id: str,
        family: MetricFamily,
        callback: ChangeCallback,
    ) -> Unsubscribe:
        """Subscribe to changes written through this store or seen by polling."""
        return self.notifier.subscribe(user_id, family, callback)

    def change_signature(self, user_id: str, family: MetricFamily) -> Tuple[int, Optional[str]]:
        """Row count and latest update time, used to detect outside writes."""
        family = MetricFamily(family)
        try:
            with self._get_connection() as conn:
                row = conn.execute("""
                    SELECT COUNT(*) as cnt, MAX(updated_at) as last_update
                    FROM daily_records
                    WHERE user_id = ? AND family = ?
                """, (user_id, family.value)).fetchone()
        except sqlite3.Error as e:
            raise DataFetchError(
                f"Failed to read {family.value} change signature",
                family=family.value,
                details={"reason": str(e)},
            ) from e
        return row["cnt"], row["last_update"]

    def get_stats(self) -> dict:
        """Get database statistics."""
        with self._get_connection() as conn:
            counts = conn.execute("""
                SELECT family, COUNT(*) as cnt FROM daily_records GROUP BY family
            """).fetchall()
            date_range = conn.execute("""
                SELECT MIN(day_key) as min_date, MAX(day_key) as max_date
                FROM daily_records
            """).fetchone()

            return {
                "records": {row["family"]: row["cnt"] for row in counts},
                "earliest_date": date_range["min_date"],
                "latest_date": date_range["max_date"],
                "db_path": str(self.db_path),
            }

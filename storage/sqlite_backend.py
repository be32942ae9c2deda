import json
import os
import sqlite3
import threading
from typing import Any

from ingestor.emitter import MetricSample

from .base import MetricSink, SinkError


class SQLiteSink(MetricSink):
    def __init__(self, db_path="openvpn_samples.db", max_db_size_mb=100):
        """
        SQLite sink for emitted samples.
        :param db_path: Path to sqlite db file (":memory:" works too).
        :param max_db_size_mb: Maximum DB size before pruning oldest rows.
        """
        self.db_path = db_path
        self.max_db_size_mb = max_db_size_mb
        self.conn = None
        self._lock = threading.Lock()

    def connect(self):
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._create_schema()
        return self

    def _create_schema(self):
        cur = self.conn.cursor()
        cur.execute("""
        CREATE TABLE IF NOT EXISTS samples (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            plugin TEXT NOT NULL,
            category TEXT NOT NULL,
            scope TEXT NOT NULL,
            subscope TEXT,
            sample_values TEXT NOT NULL,
            sample_time TEXT
        )
        """)
        cur.execute("CREATE INDEX IF NOT EXISTS idx_samples_scope ON samples (scope)")
        self.conn.commit()

    def _db_size_mb(self) -> float:
        """Return current DB size in MB (0 if not created yet or in memory)."""
        if self.db_path != ":memory:" and os.path.exists(self.db_path):
            return os.path.getsize(self.db_path) / (1024 * 1024)
        return 0.0

    def _prune_oldest_rows(self, target_size_mb: float = None):
        """
        Delete oldest rows until DB size is under target_size_mb.
        Runs in 1000-row chunks to avoid long locks.
        """
        if target_size_mb is None:
            target_size_mb = self.max_db_size_mb * 0.9  # leave a 10% buffer

        cur = self.conn.cursor()
        while self._db_size_mb() > target_size_mb:
            cur.execute(
                "DELETE FROM samples WHERE id IN (SELECT id FROM samples ORDER BY id ASC LIMIT 1000)"
            )
            self.conn.commit()
            if cur.rowcount <= 0:
                break
            cur.execute("VACUUM")

    def write_batch(self, samples: list[MetricSample]) -> None:
        """Write samples, pruning if DB exceeds max size."""
        if not samples:
            return
        rows = [
            {
                "plugin": s.plugin,
                "category": s.category,
                "scope": s.scope,
                "subscope": s.subscope,
                "sample_values": json.dumps(list(s.values)),
                "sample_time": s.time.isoformat() if s.time else None,
            }
            for s in samples
        ]
        try:
            with self._lock:
                cur = self.conn.cursor()
                cur.executemany(
                    """
                INSERT INTO samples (plugin, category, scope, subscope, sample_values, sample_time)
                VALUES (:plugin, :category, :scope, :subscope, :sample_values, :sample_time)
                """,
                    rows,
                )
                self.conn.commit()

                if self._db_size_mb() > self.max_db_size_mb:
                    self._prune_oldest_rows()
        except sqlite3.Error as e:
            raise SinkError(f"sqlite write failed: {e}") from e

    def query_samples(self, filters: dict[str, Any]) -> list[dict[str, Any]]:
        query = "SELECT * FROM samples WHERE 1=1"
        params = []

        if "category" in filters:
            query += " AND category = ?"
            params.append(filters["category"])
        if "scope" in filters:
            query += " AND scope = ?"
            params.append(filters["scope"])
        query += " ORDER BY id DESC LIMIT ?"
        params.append(int(filters.get("limit", 200)))

        with self._lock:
            cur = self.conn.cursor()
            cur.execute(query, params)
            rows = cur.fetchall()

        out = []
        for row in rows:
            d = dict(row)
            d["values"] = json.loads(d.pop("sample_values"))
            d["time"] = d.pop("sample_time")
            out.append(d)
        return out

    def close(self):
        if self.conn:
            self.conn.close()
            self.conn = None

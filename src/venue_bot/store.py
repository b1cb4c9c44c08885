"""
SQLite-backed message queue and session store.

Both live in the same database file so the ingress process and the worker
process share them without any other broker.
"""

import asyncio
import json
import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .errors import SessionMiss
from .models import VenueSummary

logger = logging.getLogger(__name__)

ANSWERS_FIELD = "answers"


class Store:
    """Shared connection handling for the SQLite tables."""

    def __init__(self, db_path: Path, busy_timeout: float = 5.0):
        self.db_path = db_path
        self.busy_timeout = busy_timeout

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout)
        conn.row_factory = sqlite3.Row
        return conn


class MessageQueue(Store):
    """Durable FIFO of raw inbound message payloads."""

    def __init__(
        self,
        db_path: Path,
        poll_interval: float = 0.2,
        busy_timeout: float = 5.0,
    ):
        super().__init__(db_path, busy_timeout)
        self.poll_interval = poll_interval

    def push(self, payload: str) -> int:
        """Append a payload to the tail. Committed before returning."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                "INSERT INTO queue_messages (payload, enqueued_ts) VALUES (?, ?)",
                (payload, datetime.now(UTC).isoformat()),
            )
            conn.commit()
            return cursor.lastrowid
        finally:
            conn.close()

    def pop(self) -> str | None:
        """Remove and return the head payload, or None if the queue is empty."""
        conn = self._connect()
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT id, payload FROM queue_messages ORDER BY id ASC LIMIT 1"
            ).fetchone()
            if row is None:
                conn.execute("COMMIT")
                return None
            conn.execute("DELETE FROM queue_messages WHERE id = ?", (row["id"],))
            conn.execute("COMMIT")
            return row["payload"]
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    async def pop_or_wait(self) -> str:
        """
        Wait for the next payload.

        Sleeps ``poll_interval`` between attempts while the queue is empty
        or the database is unavailable.
        """
        while True:
            try:
                payload = self.pop()
            except sqlite3.Error as e:
                logger.warning(f"Queue unavailable, retrying: {e}")
                payload = None

            if payload is not None:
                return payload
            await asyncio.sleep(self.poll_interval)

    def __len__(self) -> int:
        conn = self._connect()
        try:
            return conn.execute("SELECT COUNT(*) FROM queue_messages").fetchone()[0]
        finally:
            conn.close()


class SessionStore(Store):
    """Per-conversation key/value state."""

    def write(self, conversation_id: int | str, field: str, value: Any) -> None:
        """Store a JSON-serializable value, replacing any previous one."""
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO sessions (conversation_id, field, value_json, updated_ts)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (conversation_id, field) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_ts = excluded.updated_ts
                """,
                (
                    str(conversation_id),
                    field,
                    json.dumps(value),
                    datetime.now(UTC).isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def read(self, conversation_id: int | str, field: str) -> Any | None:
        """Return the stored value, or None when absent."""
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT value_json FROM sessions WHERE conversation_id = ? AND field = ?",
                (str(conversation_id), field),
            ).fetchone()
        finally:
            conn.close()
        return json.loads(row["value_json"]) if row else None

    def save_results(self, conversation_id: int | str, venues: list[VenueSummary]) -> None:
        """Cache the latest search results for a conversation."""
        self.write(conversation_id, ANSWERS_FIELD, [v.to_dict() for v in venues])

    def load_results(self, conversation_id: int | str) -> list[VenueSummary]:
        """Load the cached search results. Raises SessionMiss if none exist."""
        data = self.read(conversation_id, ANSWERS_FIELD)
        if data is None:
            raise SessionMiss(f"No cached results for conversation {conversation_id}")
        return [VenueSummary.from_dict(v) for v in data]

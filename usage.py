from __future__ import annotations

"""Persistent ledger of LLM token usage and cost."""

import math
import sqlite3
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from loguru import logger

from config import DEFAULT_TOKEN_COST, TOKEN_COST_PER_MODEL

SCHEMA = """
CREATE TABLE IF NOT EXISTS token_usage (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    operation_type TEXT NOT NULL,
    model TEXT NOT NULL,
    tokens_used INTEGER NOT NULL,
    cost_usd REAL NOT NULL,
    brief_description TEXT,
    session_id TEXT,
    created_at REAL NOT NULL
)
"""

TRACKING_RETRIES = 3
QUEUE_RETRY_AFTER = 60.0
QUEUE_MAX_ATTEMPTS = 5


def calculate_token_cost(tokens: int, model: str) -> float:
    return tokens * TOKEN_COST_PER_MODEL.get(model, DEFAULT_TOKEN_COST)


def estimate_token_count(text: str) -> int:
    # Roughly four characters per token for English text.
    return math.ceil(len(text) / 4)


class UsageLedger:
    def __init__(self, db_path: Path | str, *, sleep: Callable[[float], None] = time.sleep):
        raw_path = Path(db_path)
        self.path = raw_path.expanduser()
        parent = self.path.parent if self.path.parent != Path("") else Path(".")
        parent.mkdir(parents=True, exist_ok=True)
        self._sleep = sleep
        self.failed_queue: List[Dict[str, object]] = []
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(self.path, timeout=5, check_same_thread=False)
        except sqlite3.OperationalError as exc:
            raise sqlite3.OperationalError(f"{exc} (path={self.path})") from exc

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(SCHEMA)

    def _insert(self, record: Dict[str, object]) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO token_usage
                    (user_id, operation_type, model, tokens_used, cost_usd, brief_description, session_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record["user_id"],
                    record["operation_type"],
                    record["model"],
                    record["tokens_used"],
                    record["cost_usd"],
                    record.get("brief_description"),
                    record.get("session_id"),
                    time.time(),
                ),
            )

    def _queue_key(self, record: Dict[str, object]) -> tuple:
        return (record["user_id"], record["operation_type"], record["tokens_used"])

    def _enqueue(self, record: Dict[str, object]) -> None:
        key = self._queue_key(record)
        for item in self.failed_queue:
            if self._queue_key(item) == key:
                item["attempts"] = int(item["attempts"]) + 1
                item["last_attempt"] = time.time()
                return
        self.failed_queue.append({**record, "attempts": 1, "last_attempt": time.time()})

    def _dequeue(self, record: Dict[str, object]) -> None:
        key = self._queue_key(record)
        self.failed_queue = [item for item in self.failed_queue if self._queue_key(item) != key]

    def track_token_usage(
        self,
        *,
        user_id: str,
        tokens: int,
        model: str,
        operation: str,
        brief_description: str | None = None,
        session_id: str | None = None,
    ) -> float:
        """Record one LLM call; returns its cost in USD.

        Failed writes are retried with 1s/2s/4s backoff and stay queued for
        ``retry_failed_tracking`` if every attempt fails.
        """
        if not user_id or not tokens or tokens <= 0 or not model or not operation:
            logger.error(
                "Invalid token tracking parameters: user={} tokens={} model={} operation={}",
                user_id,
                tokens,
                model,
                operation,
            )
            raise ValueError("Invalid parameters for token tracking")

        cost = calculate_token_cost(tokens, model)
        record: Dict[str, object] = {
            "user_id": user_id,
            "operation_type": operation,
            "model": model,
            "tokens_used": tokens,
            "cost_usd": cost,
            "brief_description": brief_description,
            "session_id": session_id,
        }
        logger.debug("Tracking token usage: {} tokens for {} ({})", tokens, operation, model)

        for attempt in range(TRACKING_RETRIES + 1):
            try:
                self._insert(record)
            except sqlite3.Error as exc:
                logger.warning("Token tracking failed (attempt {}): {}", attempt + 1, exc)
                self._enqueue(record)
                if attempt == TRACKING_RETRIES:
                    raise RuntimeError(
                        f"Failed to track token usage after {attempt + 1} attempts."
                    ) from exc
                self._sleep(2**attempt)
                continue
            self._dequeue(record)
            return cost
        raise RuntimeError("token tracking loop exited without return or raise")

    def retry_failed_tracking(self, *, now: float | None = None) -> int:
        """Replay queued records older than a minute; returns how many were written."""
        if not self.failed_queue:
            return 0
        current = now if now is not None else time.time()
        written = 0
        for item in list(self.failed_queue):
            if int(item["attempts"]) >= QUEUE_MAX_ATTEMPTS:
                continue
            if current - float(item["last_attempt"]) <= QUEUE_RETRY_AFTER:
                continue
            try:
                self._insert(item)
            except sqlite3.Error as exc:
                logger.error("Background retry failed for token tracking: {}", exc)
                item["attempts"] = int(item["attempts"]) + 1
                item["last_attempt"] = current
                continue
            self.failed_queue.remove(item)
            written += 1

        exhausted = [item for item in self.failed_queue if int(item["attempts"]) >= QUEUE_MAX_ATTEMPTS]
        if exhausted:
            logger.warning(
                "Removing {} token tracking attempts that failed {} times",
                len(exhausted),
                QUEUE_MAX_ATTEMPTS,
            )
            self.failed_queue = [
                item for item in self.failed_queue if int(item["attempts"]) < QUEUE_MAX_ATTEMPTS
            ]
        return written

    def tracking_queue_status(self) -> Dict[str, Optional[float]]:
        oldest = min((float(item["last_attempt"]) for item in self.failed_queue), default=None)
        return {
            "queue_length": len(self.failed_queue),
            "oldest_failure": oldest,
            "total_failed_tokens": sum(int(item["tokens_used"]) for item in self.failed_queue),
        }

    def summary(self, *, session_id: str | None = None) -> List[Dict[str, object]]:
        query = (
            "SELECT operation_type, model, COUNT(*), SUM(tokens_used), SUM(cost_usd) FROM token_usage"
        )
        params: tuple = ()
        if session_id:
            query += " WHERE session_id=?"
            params = (session_id,)
        query += " GROUP BY operation_type, model ORDER BY operation_type"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        keys = ["operation_type", "model", "calls", "tokens_used", "cost_usd"]
        return [dict(zip(keys, row)) for row in rows]


__all__ = [
    "UsageLedger",
    "calculate_token_cost",
    "estimate_token_count",
]

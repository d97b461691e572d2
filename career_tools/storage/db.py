from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel

from career_tools.core.errors import PersistenceError
from career_tools.schemas.common import AnalysisKind
from career_tools.schemas.interview import InterviewSession

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_json(value: BaseModel | dict[str, Any]) -> str:
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True)
    return json.dumps(value, ensure_ascii=False)


class SQLiteStore:
    """Analysis rows and interview sessions in a single SQLite file.

    Every call opens a short-lived connection. Sessions are stored as one JSON
    document per row; ``user_id`` and ``status`` are duplicated into columns
    so they can be queried without decoding the document.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with sqlite3.connect(self.db_path) as conn:
                yield conn
                conn.commit()
        except sqlite3.Error as exc:
            logger.error("persistence_failed path=%s error=%s", self.db_path, exc)
            raise PersistenceError(f"Storage operation failed: {exc}") from exc

    def init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS analyses (
                    id TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    request_json TEXT NOT NULL,
                    result_json TEXT NOT NULL,
                    used_fallback INTEGER NOT NULL,
                    error_code TEXT,
                    model TEXT,
                    latency_ms INTEGER
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_analyses_user_created
                ON analyses (user_id, created_at)
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS interview_sessions (
                    id TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    status TEXT NOT NULL,
                    session_json TEXT NOT NULL
                )
                """
            )

    def insert(
        self,
        kind: AnalysisKind,
        request: BaseModel,
        result: BaseModel,
        *,
        user_id: str,
        used_fallback: bool,
        error_code: str | None = None,
        model: str | None = None,
        latency_ms: int | None = None,
    ) -> tuple[str, datetime]:
        record_id = uuid.uuid4().hex
        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO analyses (
                    id, created_at, user_id, kind, request_json, result_json,
                    used_fallback, error_code, model, latency_ms
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record_id,
                    created_at.isoformat(),
                    user_id,
                    kind.value,
                    _to_json(request),
                    _to_json(result),
                    1 if used_fallback else 0,
                    error_code,
                    model,
                    latency_ms,
                ),
            )
        return record_id, created_at

    def get_analysis(self, record_id: str) -> dict[str, Any] | None:
        with self._connect() as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute("SELECT * FROM analyses WHERE id = ?", (record_id,)).fetchone()
        if row is None:
            return None
        data = dict(row)
        data["request"] = json.loads(data.pop("request_json"))
        data["result"] = json.loads(data.pop("result_json"))
        data["used_fallback"] = bool(data["used_fallback"])
        return data

    def delete_analysis(self, record_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM analyses WHERE id = ?", (record_id,))

    def create_session(self, session: InterviewSession) -> str:
        now = _utc_now()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO interview_sessions (id, created_at, updated_at, user_id, status, session_json)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (session.id, now, now, session.user_id, session.status, _to_json(session)),
            )
        return session.id

    def get(self, session_id: str) -> InterviewSession | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT session_json FROM interview_sessions WHERE id = ?", (session_id,)
            ).fetchone()
        if row is None:
            return None
        return InterviewSession.model_validate_json(row[0])

    def update(self, session_id: str, fields: dict[str, Any]) -> InterviewSession:
        """Merge ``fields`` (snake_case attribute names) into the stored session."""
        current = self.get(session_id)
        if current is None:
            raise PersistenceError(f"Interview session '{session_id}' does not exist")
        merged = InterviewSession.model_validate({**current.model_dump(), **fields})
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE interview_sessions
                SET updated_at = ?, status = ?, session_json = ?
                WHERE id = ?
                """,
                (_utc_now(), merged.status, _to_json(merged), session_id),
            )
        return merged

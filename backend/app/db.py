import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def ensure_db(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS attempts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                task_type TEXT NOT NULL,
                created_at TEXT NOT NULL,
                payload_json TEXT NOT NULL
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_attempts_created ON attempts(created_at);"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_attempts_type_created ON attempts(task_type, created_at);"
        )


def insert_attempt(db_path: Path, attempt: dict[str, Any]) -> tuple[int, str]:
    created_at = utc_now_iso()
    payload = {k: v for k, v in attempt.items() if k not in ("id", "timestamp")}
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO attempts (user_id, task_type, created_at, payload_json)
            VALUES (?, ?, ?, ?)
            """,
            (
                str(attempt.get("userId") or "anonymous"),
                str(attempt.get("taskType") or ""),
                created_at,
                json.dumps(payload, ensure_ascii=False, separators=(",", ":")),
            ),
        )
        conn.commit()
        return int(cur.lastrowid), created_at


def read_attempts(db_path: Path) -> list[dict[str, Any]]:
    if not db_path.exists():
        return []

    with sqlite3.connect(f"file:{db_path}?mode=ro", uri=True) as conn:
        cur = conn.cursor()
        rows = cur.execute(
            """
            SELECT id, created_at, payload_json
            FROM attempts
            ORDER BY created_at DESC, id DESC
            """
        ).fetchall()

    documents: list[dict[str, Any]] = []
    for attempt_id, created_at, payload_json in rows:
        try:
            payload = json.loads(payload_json) if payload_json else {}
        except json.JSONDecodeError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {"raw_payload": payload}
        payload["id"] = attempt_id
        payload["timestamp"] = created_at
        documents.append(payload)
    return documents

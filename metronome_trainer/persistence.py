from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import sqlite3
import time

from .aggregator import NO_RESPONSE_TASK_AVERAGE
from .results import SessionRecord
from .timing_core import FeedbackCategory

LOGGER = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass(frozen=True, slots=True)
class HistoryRow:
    session_id: int
    created_at_utc: str
    pattern: str
    modality: str
    bpm: int
    task_average: float
    class_level: int
    aborted: bool


@dataclass(frozen=True, slots=True)
class ProgressSummary:
    sessions: int
    best_task_average: float | None
    best_class: int | None
    average_task_average: float | None
    total_beats: int
    total_perfect: int


def open_db(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    _migrate(conn)
    return conn


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS session (
                id INTEGER PRIMARY KEY,
                created_at_utc TEXT NOT NULL,
                app_version TEXT NOT NULL,
                pattern TEXT NOT NULL,
                modality TEXT NOT NULL,
                body_part TEXT NOT NULL,
                training_range TEXT NOT NULL,
                bpm INTEGER NOT NULL,
                duration_seconds INTEGER NOT NULL,
                user_age INTEGER NOT NULL,
                aborted INTEGER NOT NULL,
                task_average REAL NOT NULL,
                class_level INTEGER NOT NULL
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS metric (
                session_id INTEGER NOT NULL REFERENCES session(id) ON DELETE CASCADE,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                PRIMARY KEY (session_id, key)
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS beat (
                id INTEGER PRIMARY KEY,
                session_id INTEGER NOT NULL REFERENCES session(id) ON DELETE CASCADE,
                beat_number INTEGER NOT NULL,
                expected_time_ms REAL NOT NULL,
                expected_channels TEXT NOT NULL,
                actual_channel TEXT,
                actual_time_ms REAL,
                source TEXT,
                deviation_ms REAL,
                is_correct_channel INTEGER NOT NULL,
                category TEXT NOT NULL,
                points REAL NOT NULL
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_beat_session_number ON beat(session_id, beat_number);")
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")


def record_session(*, db_path: Path, record: SessionRecord, app_version: str) -> int:
    """
    Persist one finished session:
      session -> metric + beat
    """
    conn = open_db(db_path)
    try:
        session_id = _insert_session(conn=conn, record=record, app_version=app_version)
    finally:
        conn.close()
    LOGGER.info(
        "Recorded session %d (%s, TA=%.1fms)",
        session_id,
        record.pattern,
        record.result.task_average,
        extra={"session_id": session_id, "pattern": record.pattern, "bpm": record.bpm},
    )
    return session_id


def _insert_session(*, conn: sqlite3.Connection, record: SessionRecord, app_version: str) -> int:
    result = record.result

    with conn:
        cur = conn.execute(
            """
            INSERT INTO session(
                created_at_utc, app_version, pattern, modality, body_part,
                training_range, bpm, duration_seconds, user_age, aborted,
                task_average, class_level
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                _utc_now_iso(),
                app_version,
                record.pattern,
                record.modality,
                record.body_part,
                record.training_range,
                int(record.bpm),
                int(record.duration_seconds),
                int(record.user_age),
                1 if record.aborted else 0,
                float(result.task_average),
                int(result.class_level),
            ),
        )
        session_id = int(cur.lastrowid)

        metrics = {
            "task_average": f"{result.task_average:.6f}",
            "class_level": str(result.class_level),
            "early_hit_percent": f"{result.early_hit_percent:.6f}",
            "late_hit_percent": f"{result.late_hit_percent:.6f}",
            "on_target_percent": f"{result.on_target_percent:.6f}",
            "total_beats": str(result.total_beats),
            "responded_beats": str(result.responded_beats),
            "missed_beats": str(result.missed_beats),
            "wrong_channel_beats": str(result.wrong_channel_beats),
            "response_rate": f"{result.response_rate:.6f}",
            "accuracy_rate": f"{result.accuracy_rate:.6f}",
            "average_points": f"{result.average_points:.6f}",
            "consistency": f"{result.consistency:.6f}",
        }
        for category in FeedbackCategory:
            metrics[f"count_{category.value}"] = str(result.count(category))
        for k, v in metrics.items():
            conn.execute("INSERT INTO metric(session_id, key, value) VALUES (?, ?, ?)", (session_id, k, v))

        for b in record.beats:
            category = b.feedback.category if b.feedback is not None else FeedbackCategory.MISS
            conn.execute(
                """
                INSERT INTO beat(
                    session_id, beat_number, expected_time_ms, expected_channels,
                    actual_channel, actual_time_ms, source, deviation_ms,
                    is_correct_channel, category, points
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session_id,
                    int(b.beat_number),
                    float(b.expected_time_ms),
                    ",".join(str(c) for c in b.expected_input.channels),
                    None if b.actual_channel is None else str(b.actual_channel),
                    b.actual_time_ms,
                    None if b.source is None else str(b.source),
                    b.deviation_ms,
                    1 if b.is_correct_channel else 0,
                    str(category.value),
                    0.0 if b.feedback is None else float(b.feedback.points),
                ),
            )

    return session_id


def load_metrics(*, db_path: Path, session_id: int) -> dict[str, str]:
    conn = open_db(db_path)
    try:
        rows = conn.execute("SELECT key, value FROM metric WHERE session_id = ?", (int(session_id),)).fetchall()
    finally:
        conn.close()
    return {str(k): str(v) for k, v in rows}


def load_history(*, db_path: Path, limit: int | None = None) -> list[HistoryRow]:
    """Sessions oldest-first, for task-average / class trend displays."""

    sql = (
        "SELECT id, created_at_utc, pattern, modality, bpm, task_average, class_level, aborted "
        "FROM session ORDER BY id"
    )
    conn = open_db(db_path)
    try:
        rows = conn.execute(sql).fetchall()
    finally:
        conn.close()
    if limit is not None:
        rows = rows[-int(limit):] if limit > 0 else []
    return [
        HistoryRow(
            session_id=int(r[0]),
            created_at_utc=str(r[1]),
            pattern=str(r[2]),
            modality=str(r[3]),
            bpm=int(r[4]),
            task_average=float(r[5]),
            class_level=int(r[6]),
            aborted=bool(r[7]),
        )
        for r in rows
    ]


def progress_summary(*, db_path: Path) -> ProgressSummary:
    history = load_history(db_path=db_path)
    conn = open_db(db_path)
    try:
        total_beats, total_perfect = conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(CASE WHEN category = ? THEN 1 ELSE 0 END), 0) FROM beat",
            (FeedbackCategory.PERFECT.value,),
        ).fetchone()
    finally:
        conn.close()

    # Sessions without a single correct response carry the sentinel TA.
    scored = [h for h in history if h.task_average < NO_RESPONSE_TASK_AVERAGE]
    return ProgressSummary(
        sessions=len(history),
        best_task_average=min((h.task_average for h in scored), default=None),
        best_class=max((h.class_level for h in history), default=None),
        average_task_average=(sum(h.task_average for h in scored) / len(scored)) if scored else None,
        total_beats=int(total_beats),
        total_perfect=int(total_perfect),
    )

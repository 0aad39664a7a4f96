"""SQLite persistence for session snapshots."""

from __future__ import annotations

from pathlib import Path
import json
import logging
import sqlite3

from checkpoint.session.snapshot import (
    SAVE_VERSION,
    AlertRecord,
    DecisionRecord,
    SessionSnapshot,
    ShiftStats,
)

logger = logging.getLogger(__name__)

_TABLES = (
    "session_state",
    "shift_stats",
    "decision_history",
    "decision_log",
    "alert_log",
)


class SessionStore:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.conn = sqlite3.connect(self.path)
        self.conn.row_factory = sqlite3.Row
        self._ensure_schema()

    def close(self) -> None:
        self.conn.close()

    def clear(self) -> None:
        cur = self.conn.cursor()
        for table in _TABLES:
            cur.execute(f"DELETE FROM {table}")
        self.conn.commit()
        logger.info("Session save cleared")

    def has_save(self) -> bool:
        cur = self.conn.cursor()
        cur.execute("SELECT 1 FROM session_state WHERE id = 1")
        return cur.fetchone() is not None

    def save_snapshot(self, snapshot: SessionSnapshot) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            INSERT INTO session_state (
                id, version, current_subject_index, total_decisions, total_correct,
                accuracy, infractions, credits, run_complete, shift_decisions, pattern_tracker
            )
            VALUES (1, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                version = excluded.version,
                current_subject_index = excluded.current_subject_index,
                total_decisions = excluded.total_decisions,
                total_correct = excluded.total_correct,
                accuracy = excluded.accuracy,
                infractions = excluded.infractions,
                credits = excluded.credits,
                run_complete = excluded.run_complete,
                shift_decisions = excluded.shift_decisions,
                pattern_tracker = excluded.pattern_tracker
            """,
            (
                snapshot.version,
                snapshot.current_subject_index,
                snapshot.total_decisions,
                snapshot.total_correct,
                snapshot.accuracy,
                snapshot.infractions,
                snapshot.credits,
                int(snapshot.run_complete),
                json.dumps([record.to_dict() for record in snapshot.shift_decisions]),
                json.dumps(snapshot.pattern_tracker),
            ),
        )
        stats = snapshot.shift_stats
        cur.execute(
            """
            INSERT INTO shift_stats (id, approved, denied, correct)
            VALUES (1, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                approved = excluded.approved,
                denied = excluded.denied,
                correct = excluded.correct
            """,
            (stats.approved, stats.denied, stats.correct),
        )
        cur.execute("DELETE FROM decision_history")
        cur.executemany(
            "INSERT INTO decision_history (subject_id, decision) VALUES (?, ?)",
            list(snapshot.decision_history.items()),
        )
        cur.execute("DELETE FROM decision_log")
        cur.executemany(
            """
            INSERT INTO decision_log (
                seq, subject_id, subject_name, decision, correct, tier, warrants, severity
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    seq,
                    record.subject_id,
                    record.subject_name,
                    record.decision,
                    int(record.correct),
                    record.tier,
                    record.warrants,
                    record.severity,
                )
                for seq, record in enumerate(snapshot.decision_log)
            ],
        )
        cur.execute("DELETE FROM alert_log")
        cur.executemany(
            """
            INSERT INTO alert_log (seq, subject_id, warning_type, count, message)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (seq, alert.subject_id, alert.warning_type, alert.count, alert.message)
                for seq, alert in enumerate(snapshot.alert_log)
            ],
        )
        self.conn.commit()

    def load_snapshot(self) -> SessionSnapshot | None:
        """Return the saved snapshot; a save from another version is discarded."""
        cur = self.conn.cursor()
        cur.execute(
            "SELECT version, current_subject_index, total_decisions, total_correct, accuracy, "
            "infractions, credits, run_complete, shift_decisions, pattern_tracker "
            "FROM session_state WHERE id = 1"
        )
        row = cur.fetchone()
        if row is None:
            return None
        version = int(row["version"])
        if version != SAVE_VERSION:
            logger.warning(
                "Discarding save version %s (expected %s)", version, SAVE_VERSION
            )
            self.clear()
            return None

        snapshot = SessionSnapshot(
            current_subject_index=int(row["current_subject_index"]),
            total_decisions=int(row["total_decisions"]),
            total_correct=int(row["total_correct"]),
            accuracy=float(row["accuracy"]),
            infractions=int(row["infractions"]),
            credits=int(row["credits"]),
            run_complete=bool(row["run_complete"]),
            shift_decisions=[
                DecisionRecord.from_dict(item)
                for item in json.loads(row["shift_decisions"] or "[]")
            ],
            pattern_tracker=json.loads(row["pattern_tracker"] or "{}"),
            version=version,
        )
        cur.execute("SELECT approved, denied, correct FROM shift_stats WHERE id = 1")
        stats = cur.fetchone()
        if stats is not None:
            snapshot.shift_stats = ShiftStats(
                approved=int(stats["approved"]),
                denied=int(stats["denied"]),
                correct=int(stats["correct"]),
            )
        cur.execute("SELECT subject_id, decision FROM decision_history")
        for entry in cur.fetchall():
            snapshot.decision_history[entry["subject_id"]] = entry["decision"]
        cur.execute(
            "SELECT subject_id, subject_name, decision, correct, tier, warrants, severity "
            "FROM decision_log ORDER BY seq"
        )
        for entry in cur.fetchall():
            snapshot.decision_log.append(
                DecisionRecord(
                    subject_id=entry["subject_id"],
                    subject_name=entry["subject_name"],
                    decision=entry["decision"],
                    correct=bool(entry["correct"]),
                    tier=entry["tier"],
                    warrants=entry["warrants"],
                    severity=int(entry["severity"]),
                )
            )
        cur.execute(
            "SELECT subject_id, warning_type, count, message FROM alert_log ORDER BY seq"
        )
        for entry in cur.fetchall():
            snapshot.alert_log.append(
                AlertRecord(
                    subject_id=entry["subject_id"],
                    warning_type=entry["warning_type"],
                    count=int(entry["count"]),
                    message=entry["message"],
                )
            )
        return snapshot

    def _ensure_schema(self) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS session_state (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                version INTEGER NOT NULL,
                current_subject_index INTEGER NOT NULL,
                total_decisions INTEGER NOT NULL,
                total_correct INTEGER NOT NULL,
                accuracy REAL NOT NULL,
                infractions INTEGER NOT NULL,
                credits INTEGER NOT NULL,
                run_complete INTEGER NOT NULL,
                shift_decisions TEXT,
                pattern_tracker TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS shift_stats (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                approved INTEGER NOT NULL,
                denied INTEGER NOT NULL,
                correct INTEGER NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS decision_history (
                subject_id TEXT PRIMARY KEY,
                decision TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS decision_log (
                seq INTEGER PRIMARY KEY,
                subject_id TEXT NOT NULL,
                subject_name TEXT NOT NULL,
                decision TEXT NOT NULL,
                correct INTEGER NOT NULL,
                tier TEXT NOT NULL,
                warrants TEXT NOT NULL,
                severity INTEGER NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS alert_log (
                seq INTEGER PRIMARY KEY,
                subject_id TEXT NOT NULL,
                warning_type TEXT NOT NULL,
                count INTEGER NOT NULL,
                message TEXT NOT NULL
            )
            """
        )
        self.conn.commit()

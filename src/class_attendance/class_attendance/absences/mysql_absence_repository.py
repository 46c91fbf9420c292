from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import JustificationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_list, to_hhmm
from .model import AbsenceEntry, Justification, SessionKey, SessionRecord, Student
from .repository import AbsenceRepository, RosterRepository

logger = logging.getLogger(__name__)


def _find_record(cur, key: SessionKey) -> Optional[dict]:
    cur.execute(
        """
        SELECT record_id, subject_label
        FROM session_records
        WHERE class_id=%s AND year_id=%s AND term=%s AND session_date=%s
          AND subject_id=%s AND start_time=%s AND end_time=%s
        """,
        (key.class_id, key.year_id, key.term, key.day, key.subject_id, key.start, key.end),
    )
    return fetchone(cur)


class MySQLAbsenceRepository(AbsenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_session_record(self, key: SessionKey) -> Optional[SessionRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            rec = _find_record(cur, key)
            if not rec:
                return None
            record_id = int(rec["record_id"])

            cur.execute(
                """
                SELECT student_id, student_name, start_time, end_time, room, teacher, subject_label, recorded_at
                FROM absence_entries
                WHERE record_id=%s
                ORDER BY entry_id ASC
                """,
                (record_id,),
            )
            entry_rows = fetchall(cur)

            cur.execute(
                """
                SELECT student_id, content, documents, status, submitted_at, decided_at
                FROM justifications
                WHERE record_id=%s
                """,
                (record_id,),
            )
            justification_rows = fetchall(cur)

        absences: dict[str, list[AbsenceEntry]] = {}
        for r in entry_rows:
            sid = str(r["student_id"])
            absences.setdefault(sid, []).append(
                AbsenceEntry(
                    student_id=sid,
                    student_name=r.get("student_name") or "",
                    start=to_hhmm(r.get("start_time")),
                    end=to_hhmm(r.get("end_time")),
                    room=r.get("room") or "",
                    teacher=r.get("teacher") or "",
                    subject_label=r.get("subject_label") or "",
                    recorded_at=r.get("recorded_at"),
                )
            )

        justifications: dict[str, Justification] = {}
        for r in justification_rows:
            try:
                status = JustificationStatus(str(r["status"]).upper())
            except ValueError:
                logger.warning("Ignoring justification of %s with status %r", r["student_id"], r["status"])
                continue
            justifications[str(r["student_id"])] = Justification(
                student_id=str(r["student_id"]),
                content=r.get("content") or "",
                status=status,
                documents=load_json_list(r.get("documents")),
                submitted_at=r.get("submitted_at"),
                decided_at=r.get("decided_at"),
            )

        return SessionRecord(
            key=key,
            subject_label=rec.get("subject_label") or "",
            absences={sid: tuple(entries) for sid, entries in absences.items()},
            justifications=justifications,
        )

    def save_pending_justification(
        self,
        *,
        key: SessionKey,
        student_id: str,
        content: str,
        documents: Sequence[str],
        submitted_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            rec = _find_record(cur, key)
            if not rec:
                return False
            record_id = int(rec["record_id"])

            # Only a PENDING row may be overwritten.
            cur.execute(
                """
                INSERT INTO justifications (record_id, student_id, content, documents, status, submitted_at)
                VALUES (%s, %s, %s, %s, 'PENDING', %s)
                ON DUPLICATE KEY UPDATE
                    content = IF(status='PENDING', VALUES(content), content),
                    documents = IF(status='PENDING', VALUES(documents), documents),
                    submitted_at = IF(status='PENDING', VALUES(submitted_at), submitted_at)
                """,
                (record_id, student_id, content, json.dumps(list(documents)), submitted_at),
            )
            cur.execute(
                "SELECT status FROM justifications WHERE record_id=%s AND student_id=%s",
                (record_id, student_id),
            )
            r = fetchone(cur)
            return bool(r) and str(r["status"]).upper() == JustificationStatus.PENDING.value

    def decide_justification(
        self,
        *,
        key: SessionKey,
        student_id: str,
        status: JustificationStatus,
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            rec = _find_record(cur, key)
            if not rec:
                return False
            cur.execute(
                """
                UPDATE justifications
                SET status=%s, decided_at=%s
                WHERE record_id=%s AND student_id=%s AND status='PENDING'
                """,
                (status.value, decided_at, int(rec["record_id"]), student_id),
            )
            return cur.rowcount > 0


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_roster(self, class_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, last_name, first_name
                FROM students
                WHERE class_id=%s AND is_active=1
                ORDER BY last_name ASC, first_name ASC
                """,
                (class_id,),
            )
            rows = fetchall(cur)

        return [
            Student(
                student_id=str(r["student_id"]),
                full_name=f"{r.get('last_name') or ''} {r.get('first_name') or ''}".strip(),
            )
            for r in rows
        ]

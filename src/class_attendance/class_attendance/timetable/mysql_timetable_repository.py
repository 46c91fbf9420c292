from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, to_hhmm
from .model import TimetableSlot
from .repository import TimetableRepository


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_timetable(self, class_id: str, year_id: str, term: str) -> Sequence[TimetableSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, subject_id, subject_label, weekday, start_time, end_time, room, teacher
                FROM timetable_slots
                WHERE class_id=%s AND year_id=%s AND term=%s
                ORDER BY weekday ASC, start_time ASC
                """,
                (class_id, year_id, term),
            )
            rows = fetchall(cur)

        return [
            TimetableSlot(
                class_id=str(r["class_id"]),
                subject_id=str(r["subject_id"]),
                weekday=int(r["weekday"]),
                start=to_hhmm(r["start_time"]),
                end=to_hhmm(r["end_time"]),
                subject_label=r.get("subject_label") or "",
                room=r.get("room") or "",
                teacher=r.get("teacher") or "",
            )
            for r in rows
        ]

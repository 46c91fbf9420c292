from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import ClosureScope, OverrideType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_date, to_hhmm
from .holidays import DEFAULT_FIXED_HOLIDAYS
from .model import (
    AcademicYear,
    CancelOverride,
    ClosureRule,
    FixedHoliday,
    MakeupSession,
    RescheduleOverride,
    SessionOverride,
)
from .repository import CalendarRepository

logger = logging.getLogger(__name__)


class MySQLCalendarRepository(CalendarRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_academic_year(self, year_id: str) -> Optional[AcademicYear]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT year_id, start_date, end_date FROM academic_years WHERE year_id=%s", (year_id,))
            r = fetchone(cur)
            if not r:
                return None
            return AcademicYear(
                year_id=str(r["year_id"]),
                start_date=to_date(r.get("start_date")),
                end_date=to_date(r.get("end_date")),
            )

    def get_closures(self, year_id: str) -> Sequence[ClosureRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT closure_id, scope, program_id, class_id, subject_id,
                       start_date, end_date, start_time, end_time, label
                FROM closures
                WHERE year_id=%s
                ORDER BY closure_id ASC
                """,
                (year_id,),
            )
            rows = fetchall(cur)

        out: list[ClosureRule] = []
        for r in rows:
            try:
                scope = ClosureScope(str(r["scope"]).lower())
            except ValueError:
                logger.warning("Skipping closure %s with unknown scope %r", r["closure_id"], r["scope"])
                continue
            out.append(
                ClosureRule(
                    rule_id=str(r["closure_id"]),
                    scope=scope,
                    start_date=to_date(r["start_date"]),
                    end_date=to_date(r["end_date"]),
                    class_id=r.get("class_id"),
                    subject_id=r.get("subject_id"),
                    program_id=r.get("program_id"),
                    start_time=to_hhmm(r.get("start_time")),
                    end_time=to_hhmm(r.get("end_time")),
                    label=r.get("label") or None,
                )
            )
        return out

    def get_overrides(self, year_id: str) -> Sequence[SessionOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT override_id, type, class_id, subject_id, session_date, start_time, end_time,
                       new_date, new_start, new_end, reason
                FROM session_overrides
                WHERE year_id=%s
                ORDER BY override_id ASC
                """,
                (year_id,),
            )
            rows = fetchall(cur)

        out: list[SessionOverride] = []
        for r in rows:
            kind = str(r["type"]).lower()
            common = dict(
                override_id=str(r["override_id"]),
                class_id=str(r["class_id"]),
                subject_id=str(r["subject_id"]),
                day=to_date(r["session_date"]),
                start=to_hhmm(r["start_time"]),
                end=to_hhmm(r["end_time"]),
                reason=r.get("reason") or None,
            )
            if kind == OverrideType.CANCEL.value:
                out.append(CancelOverride(**common))
            elif kind == OverrideType.RESCHEDULE.value:
                if not (r.get("new_date") and r.get("new_start") is not None and r.get("new_end") is not None):
                    logger.warning("Skipping reschedule %s without a target slot", r["override_id"])
                    continue
                out.append(
                    RescheduleOverride(
                        **common,
                        new_date=to_date(r["new_date"]),
                        new_start=to_hhmm(r["new_start"]),
                        new_end=to_hhmm(r["new_end"]),
                    )
                )
            elif kind != OverrideType.MAKEUP.value:
                logger.warning("Skipping override %s with unknown type %r", r["override_id"], r["type"])
        return out

    def get_makeup_sessions(self, class_id: str, start: date, end: date) -> Sequence[MakeupSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT makeup_id, term, class_id, subject_id, subject_label, session_date,
                       start_time, end_time, room, teacher
                FROM makeup_sessions
                WHERE class_id=%s AND session_date BETWEEN %s AND %s
                ORDER BY session_date ASC, start_time ASC
                """,
                (class_id, start, end),
            )
            rows = fetchall(cur)

        return [
            MakeupSession(
                override_id=str(r["makeup_id"]),
                class_id=str(r["class_id"]),
                subject_id=str(r["subject_id"]),
                day=to_date(r["session_date"]),
                start=to_hhmm(r["start_time"]),
                end=to_hhmm(r["end_time"]),
                subject_label=r.get("subject_label") or "",
                room=r.get("room") or "",
                teacher=r.get("teacher") or "",
                term=r.get("term") or None,
            )
            for r in rows
        ]

    def get_fixed_holidays(self) -> Sequence[FixedHoliday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT month, day, label FROM fixed_holidays ORDER BY month ASC, day ASC")
            rows = fetchall(cur)
        if not rows:
            return DEFAULT_FIXED_HOLIDAYS
        return tuple(FixedHoliday(month=int(r["month"]), day=int(r["day"]), label=str(r["label"])) for r in rows)

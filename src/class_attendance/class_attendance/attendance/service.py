from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..absences.model import AbsenceEntry, SessionKey, SessionRecord
from ..absences.repository import AbsenceRepository, RosterRepository
from ..calendar.model import CalendarFacts, NeutralizationResult, SessionUnderEvaluation
from ..calendar.service import CalendarService
from ..common.datetime_utils import iter_days, parse_hhmm
from ..common.text import name_sort_key
from ..core.constants import UNKNOWN_STUDENT_NAME
from ..core.exceptions import SessionNeutralizedError
from ..timetable.model import CandidateSession, ClassContext
from ..timetable.resolver import TimetableResolver, expand_day
from .model import (
    AbsenceDetail,
    AbsenteeRow,
    AttendanceReport,
    SessionAbsenceRow,
    SessionStatus,
    StudentAbsenceSummary,
)

logger = logging.getLogger(__name__)


def session_key(ctx: ClassContext, day: date, session: CandidateSession) -> SessionKey:
    return SessionKey(
        class_id=ctx.class_id,
        year_id=ctx.year_id,
        term=ctx.term,
        day=day,
        subject_id=session.subject_id,
        start=session.start,
        end=session.end,
    )


def entry_minutes(entry: AbsenceEntry, session: CandidateSession) -> int:
    start = entry.start or session.start
    end = entry.end or session.end
    return max(0, parse_hhmm(end) - parse_hhmm(start))


def summary_sort_key(s: StudentAbsenceSummary) -> tuple:
    return -s.missed_count, -s.missed_minutes, name_sort_key(s.full_name), s.student_id


class AttendanceService:
    """Active sessions of a class and absence totals over a period."""

    def __init__(
        self,
        resolver: TimetableResolver,
        calendar: CalendarService,
        absences: AbsenceRepository,
        roster: RosterRepository,
    ):
        self._resolver = resolver
        self._calendar = calendar
        self._absences = absences
        self._roster = roster

    def _evaluate(self, ctx: ClassContext, day: date, session: CandidateSession, facts: CalendarFacts) -> NeutralizationResult:
        return self._calendar.evaluate(
            SessionUnderEvaluation(
                class_id=ctx.class_id,
                subject_id=session.subject_id,
                day=day,
                start=session.start,
                end=session.end,
                program_id=ctx.program_id,
            ),
            facts,
        )

    def evaluate_session(self, ctx: ClassContext, day: date, session: CandidateSession) -> NeutralizationResult:
        return self._evaluate(ctx, day, session, self._calendar.load_facts(ctx.year_id))

    def sessions_with_status(self, ctx: ClassContext, day: date) -> list[SessionStatus]:
        candidates = self._resolver.sessions_for_date(ctx, day)
        if not candidates:
            return []
        facts = self._calendar.load_facts(ctx.year_id)
        return [SessionStatus(day=day, session=c, result=self._evaluate(ctx, day, c, facts)) for c in candidates]

    def list_active_sessions(self, ctx: ClassContext, day: date) -> list[CandidateSession]:
        return [st.session for st in self.sessions_with_status(ctx, day) if not st.neutralized]

    def ensure_recordable(self, ctx: ClassContext, day: date, session: CandidateSession) -> None:
        """Guard for absence capture: refuse sessions that are neutralized right now."""
        result = self.evaluate_session(ctx, day, session)
        if result.neutralized:
            raise SessionNeutralizedError(result.reason or "neutralized")

    def list_absentees(self, ctx: ClassContext, day: date, session: CandidateSession) -> list[AbsenteeRow]:
        if self.evaluate_session(ctx, day, session).neutralized:
            return []
        record = self._absences.get_session_record(session_key(ctx, day, session))
        if record is None:
            return []
        names = {s.student_id: s.full_name for s in self._roster.get_roster(ctx.class_id)}
        return self._absentee_rows(record, session, names)

    def _absentee_rows(self, record: SessionRecord, session: CandidateSession, names: dict[str, str]) -> list[AbsenteeRow]:
        rows: list[AbsenteeRow] = []
        for student_id, entries in record.absences.items():
            if not entries:
                continue
            name = names.get(student_id) or entries[0].student_name or UNKNOWN_STUDENT_NAME
            rows.append(
                AbsenteeRow(
                    student_id=student_id,
                    full_name=name,
                    entries=tuple(entries),
                    missed_minutes=sum(entry_minutes(e, session) for e in entries),
                    justification=record.justifications.get(student_id),
                )
            )
        rows.sort(key=lambda r: (name_sort_key(r.full_name), r.student_id))
        return rows

    def aggregate(self, ctx: ClassContext, start: date, end: date) -> AttendanceReport:
        roster = list(self._roster.get_roster(ctx.class_id))
        names = {s.student_id: s.full_name for s in roster}
        counts = {s.student_id: 0 for s in roster}
        minutes = {s.student_id: 0 for s in roster}
        details: dict[str, list[AbsenceDetail]] = {s.student_id: [] for s in roster}
        per_session: list[SessionAbsenceRow] = []
        seen: set[SessionKey] = set()

        if start <= end:
            facts = self._calendar.load_facts(ctx.year_id)
            slots = self._resolver.load_slots(ctx)
            makeups = self._resolver.load_makeups(ctx, start, end)
        else:
            facts, slots, makeups = None, [], []

        for day in iter_days(start, end):
            candidates = expand_day(day, class_id=ctx.class_id, slots=slots, makeups=makeups, term=ctx.term)
            for session in candidates:
                if self._evaluate(ctx, day, session, facts).neutralized:
                    continue

                key = session_key(ctx, day, session)
                if key in seen:
                    # one record per key, already folded
                    continue
                seen.add(key)

                record = self._absences.get_session_record(key)
                if record is None:
                    per_session.append(SessionAbsenceRow(key=key, session=session))
                    continue

                absentees = self._absentee_rows(record, session, names)
                per_session.append(SessionAbsenceRow(key=key, session=session, absentees=tuple(absentees)))

                for row in absentees:
                    if row.student_id not in counts:
                        logger.warning("Absence for %s in %s is not on the class roster; totalled under %r", row.student_id, key, row.full_name)
                        names[row.student_id] = row.full_name
                        counts[row.student_id] = 0
                        minutes[row.student_id] = 0
                        details[row.student_id] = []
                    for entry in row.entries:
                        m = entry_minutes(entry, session)
                        counts[row.student_id] += 1
                        minutes[row.student_id] += m
                        details[row.student_id].append(
                            AbsenceDetail(day=day, subject_id=session.subject_id, entry=entry, minutes=m)
                        )

        per_student = {
            sid: StudentAbsenceSummary(
                student_id=sid,
                full_name=names[sid],
                missed_count=counts[sid],
                missed_minutes=minutes[sid],
                details=tuple(details[sid]),
            )
            for sid in names
        }
        summaries = sorted(per_student.values(), key=summary_sort_key)
        return AttendanceReport(start=start, end=end, per_student=per_student, summaries=summaries, per_session=per_session)

    def find_session(self, ctx: ClassContext, day: date, *, subject_id: str, start: str, end: str) -> Optional[CandidateSession]:
        for session in self._resolver.sessions_for_date(ctx, day):
            if session.subject_id == subject_id and session.start == start and session.end == end:
                return session
        return None

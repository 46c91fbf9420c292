from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Sequence

from ..calendar.model import MakeupSession
from ..calendar.repository import CalendarRepository
from ..common.datetime_utils import iso_weekday, parse_hhmm
from ..core.constants import REST_WEEKDAY
from ..core.enums import SessionSource
from .model import CandidateSession, ClassContext, TimetableSlot
from .repository import TimetableRepository

logger = logging.getLogger(__name__)


def _sort_key(s: CandidateSession) -> tuple[int, int]:
    return parse_hhmm(s.start), parse_hhmm(s.end)


def expand_day(
    day: date,
    *,
    class_id: str,
    slots: Iterable[TimetableSlot],
    makeups: Iterable[MakeupSession],
    term: str | None = None,
) -> list[CandidateSession]:
    """Weekly slots of the day's weekday plus that day's makeups, ordered by start then end."""

    weekday = iso_weekday(day)
    if weekday == REST_WEEKDAY:
        return []

    out: list[CandidateSession] = []
    for s in slots:
        if s.class_id != class_id or s.weekday != weekday:
            continue
        out.append(
            CandidateSession(
                subject_id=s.subject_id,
                start=s.start,
                end=s.end,
                subject_label=s.subject_label,
                room=s.room,
                teacher=s.teacher,
                source=SessionSource.TIMETABLE,
            )
        )

    for m in makeups:
        if m.class_id != class_id or m.day != day:
            continue
        if term and m.term and m.term != term:
            continue
        out.append(
            CandidateSession(
                subject_id=m.subject_id,
                start=m.start,
                end=m.end,
                subject_label=m.subject_label,
                room=m.room,
                teacher=m.teacher,
                source=SessionSource.MAKEUP,
            )
        )

    out.sort(key=_sort_key)
    return out


class TimetableResolver:
    """Expands the weekly table plus makeup sessions into concrete sessions."""

    def __init__(self, timetables: TimetableRepository, calendar: CalendarRepository):
        self._timetables = timetables
        self._calendar = calendar

    def load_slots(self, ctx: ClassContext) -> Sequence[TimetableSlot]:
        slots = list(self._timetables.get_timetable(ctx.class_id, ctx.year_id, ctx.term))
        valid = [s for s in slots if 1 <= int(s.weekday) <= 7]
        if len(valid) != len(slots):
            logger.warning("Ignored %s slot(s) with invalid weekday for class %s", len(slots) - len(valid), ctx.class_id)
        return valid

    def load_makeups(self, ctx: ClassContext, start: date, end: date) -> Sequence[MakeupSession]:
        return list(self._calendar.get_makeup_sessions(ctx.class_id, start, end))

    def sessions_for_date(self, ctx: ClassContext, day: date) -> list[CandidateSession]:
        if iso_weekday(day) == REST_WEEKDAY:
            return []
        return expand_day(
            day,
            class_id=ctx.class_id,
            slots=self.load_slots(ctx),
            makeups=self.load_makeups(ctx, day, day),
            term=ctx.term,
        )

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..absences.model import AbsenceEntry, Justification, SessionKey
from ..calendar.model import NeutralizationResult
from ..common.datetime_utils import format_minutes
from ..timetable.model import CandidateSession


@dataclass(frozen=True)
class SessionStatus:
    """Day-view row: a candidate session and whether it takes place."""

    day: date
    session: CandidateSession
    result: NeutralizationResult

    @property
    def neutralized(self) -> bool:
        return self.result.neutralized


@dataclass(frozen=True)
class AbsenteeRow:
    student_id: str
    full_name: str
    entries: tuple[AbsenceEntry, ...]
    missed_minutes: int
    justification: Optional[Justification] = None


@dataclass(frozen=True)
class SessionAbsenceRow:
    """Read-model: one active session with its absentees."""

    key: SessionKey
    session: CandidateSession
    absentees: tuple[AbsenteeRow, ...] = ()


@dataclass(frozen=True)
class AbsenceDetail:
    day: date
    subject_id: str
    entry: AbsenceEntry
    minutes: int


@dataclass(frozen=True)
class StudentAbsenceSummary:
    student_id: str
    full_name: str
    missed_count: int = 0
    missed_minutes: int = 0
    details: tuple[AbsenceDetail, ...] = ()

    @property
    def missed_hours(self) -> str:
        return format_minutes(self.missed_minutes)


@dataclass(frozen=True)
class AttendanceReport:
    start: date
    end: date
    per_student: dict[str, StudentAbsenceSummary]
    summaries: list[StudentAbsenceSummary]
    per_session: list[SessionAbsenceRow]

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import SessionSource


@dataclass(frozen=True)
class TimetableSlot:
    """Recurring weekly slot (weekday: Monday=1 ... Sunday=7)."""

    class_id: str
    subject_id: str
    weekday: int
    start: str
    end: str
    subject_label: str = ""
    room: str = ""
    teacher: str = ""


@dataclass(frozen=True)
class CandidateSession:
    """A session scheduled for one class on one date, before neutralization."""

    subject_id: str
    start: str
    end: str
    subject_label: str = ""
    room: str = ""
    teacher: str = ""
    source: SessionSource = SessionSource.TIMETABLE


@dataclass(frozen=True)
class ClassContext:
    """Which class/year/term a lookup is about."""

    class_id: str
    year_id: str
    term: str
    program_id: Optional[str] = None

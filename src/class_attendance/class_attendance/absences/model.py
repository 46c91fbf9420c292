from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import JustificationStatus


@dataclass(frozen=True)
class SessionKey:
    """Identity of one concrete session (and of its SessionRecord)."""

    class_id: str
    year_id: str
    term: str
    day: date
    subject_id: str
    start: str
    end: str


@dataclass(frozen=True)
class AbsenceEntry:
    """One student missing one session; start/end default to the session's."""

    student_id: str
    student_name: str = ""
    start: Optional[str] = None
    end: Optional[str] = None
    room: str = ""
    teacher: str = ""
    subject_label: str = ""
    recorded_at: Optional[datetime] = None


@dataclass(frozen=True)
class Justification:
    student_id: str
    content: str
    status: JustificationStatus
    documents: tuple[str, ...] = ()
    submitted_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionRecord:
    """Absences captured for one session (created on first absence)."""

    key: SessionKey
    subject_label: str = ""
    absences: dict[str, tuple[AbsenceEntry, ...]] = field(default_factory=dict)
    justifications: dict[str, Justification] = field(default_factory=dict)


@dataclass(frozen=True)
class Student:
    student_id: str
    full_name: str

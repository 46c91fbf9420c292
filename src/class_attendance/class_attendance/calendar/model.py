from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from ..core.enums import ClosureScope


@dataclass(frozen=True)
class AcademicYear:
    """Domain entity: academic year bounds (either may be unknown)."""

    year_id: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class ClosureRule:
    """Administrative "no class" period, inclusive at day granularity.

    A rule without both start_time and end_time covers the whole day.
    """

    rule_id: str
    scope: ClosureScope
    start_date: date
    end_date: date
    class_id: Optional[str] = None
    subject_id: Optional[str] = None
    program_id: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    label: Optional[str] = None

    @property
    def has_time_window(self) -> bool:
        return bool(self.start_time) and bool(self.end_time)


@dataclass(frozen=True)
class CancelOverride:
    override_id: str
    class_id: str
    subject_id: str
    day: date
    start: str
    end: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class RescheduleOverride:
    override_id: str
    class_id: str
    subject_id: str
    day: date
    start: str
    end: str
    new_date: date
    new_start: str
    new_end: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class MakeupSession:
    """One-off session added outside the weekly pattern."""

    override_id: str
    class_id: str
    subject_id: str
    day: date
    start: str
    end: str
    subject_label: str = ""
    room: str = ""
    teacher: str = ""
    term: Optional[str] = None
    reason: Optional[str] = None


SessionOverride = Union[CancelOverride, RescheduleOverride, MakeupSession]


@dataclass(frozen=True)
class FixedHoliday:
    month: int
    day: int
    label: str


@dataclass(frozen=True)
class SessionSlot:
    day: date
    start: str
    end: str


@dataclass(frozen=True)
class SessionUnderEvaluation:
    """One concrete session as seen by the neutralization rules."""

    class_id: str
    subject_id: str
    day: date
    start: str
    end: str
    program_id: Optional[str] = None


@dataclass(frozen=True)
class NeutralizationResult:
    neutralized: bool
    reason: Optional[str] = None
    replacement: Optional[SessionSlot] = None


ACTIVE = NeutralizationResult(neutralized=False)


@dataclass(frozen=True)
class CalendarFacts:
    """Everything the rules consult for one academic year."""

    year: AcademicYear
    closures: tuple[ClosureRule, ...] = ()
    overrides: tuple[SessionOverride, ...] = ()
    holidays: tuple[FixedHoliday, ...] = ()

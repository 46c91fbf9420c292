from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AcademicYear, ClosureRule, FixedHoliday, MakeupSession, SessionOverride


class CalendarRepository(Protocol):
    """Read-only calendar fact store.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_academic_year(self, year_id: str) -> Optional[AcademicYear]:
        raise NotImplementedError

    def get_closures(self, year_id: str) -> Sequence[ClosureRule]:
        raise NotImplementedError

    def get_overrides(self, year_id: str) -> Sequence[SessionOverride]:
        """Cancel/reschedule overrides in store order."""

        raise NotImplementedError

    def get_makeup_sessions(self, class_id: str, start: date, end: date) -> Sequence[MakeupSession]:
        raise NotImplementedError

    def get_fixed_holidays(self) -> Sequence[FixedHoliday]:
        raise NotImplementedError

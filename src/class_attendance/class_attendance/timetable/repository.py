from __future__ import annotations

from typing import Protocol, Sequence

from .model import TimetableSlot


class TimetableRepository(Protocol):
    def get_timetable(self, class_id: str, year_id: str, term: str) -> Sequence[TimetableSlot]:
        """Active weekly table of a class for one (year, term)."""

        raise NotImplementedError

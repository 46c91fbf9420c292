from __future__ import annotations

from typing import Optional

from .evaluator import NeutralizationEvaluator
from .model import AcademicYear, CalendarFacts, NeutralizationResult, SessionUnderEvaluation
from .repository import CalendarRepository


class CalendarService:
    """Loads calendar facts of a year and evaluates sessions against them."""

    def __init__(self, calendar: CalendarRepository, *, evaluator: Optional[NeutralizationEvaluator] = None):
        self._calendar = calendar
        self._evaluator = evaluator or NeutralizationEvaluator()

    def load_facts(self, year_id: str) -> CalendarFacts:
        year = self._calendar.get_academic_year(year_id) or AcademicYear(year_id=year_id)
        return CalendarFacts(
            year=year,
            closures=tuple(self._calendar.get_closures(year_id)),
            overrides=tuple(self._calendar.get_overrides(year_id)),
            holidays=tuple(self._calendar.get_fixed_holidays()),
        )

    def evaluate(self, session: SessionUnderEvaluation, facts: CalendarFacts) -> NeutralizationResult:
        return self._evaluator.evaluate(session, facts)

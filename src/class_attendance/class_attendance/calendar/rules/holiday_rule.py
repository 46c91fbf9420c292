from __future__ import annotations

from typing import Optional

from ..holidays import holiday_label_for
from ..model import CalendarFacts, NeutralizationResult, SessionUnderEvaluation
from .base import NeutralizationRule


class FixedHolidayRule(NeutralizationRule):
    def evaluate(self, session: SessionUnderEvaluation, facts: CalendarFacts) -> Optional[NeutralizationResult]:
        label = holiday_label_for(
            session.day,
            facts.holidays,
            year_start=facts.year.start_date,
            year_end=facts.year.end_date,
        )
        if label is None:
            return None
        return NeutralizationResult(neutralized=True, reason=f"holiday ({label})")

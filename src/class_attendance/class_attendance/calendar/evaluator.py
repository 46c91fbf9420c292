from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .holidays import DEFAULT_FIXED_HOLIDAYS
from .model import (
    ACTIVE,
    AcademicYear,
    CalendarFacts,
    ClosureRule,
    FixedHoliday,
    NeutralizationResult,
    SessionOverride,
    SessionUnderEvaluation,
)
from .rules.base import NeutralizationRule
from .rules.closure_rule import ClosureMatchRule
from .rules.holiday_rule import FixedHolidayRule
from .rules.override_rule import OverrideRule


def default_rules() -> list[NeutralizationRule]:
    """Precedence order: session override, then closure, then fixed holiday."""
    return [OverrideRule(), ClosureMatchRule(), FixedHolidayRule()]


class NeutralizationEvaluator:
    """Decides whether a concrete session takes place.

    Pure: no I/O, never raises; identical inputs give identical results.
    """

    def __init__(self, rules: Optional[Sequence[NeutralizationRule]] = None):
        self._rules = list(rules) if rules is not None else default_rules()

    def evaluate(self, session: SessionUnderEvaluation, facts: CalendarFacts) -> NeutralizationResult:
        for rule in self._rules:
            result = rule.evaluate(session, facts)
            if result is not None:
                return result
        return ACTIVE


def evaluate_neutralization(
    session: SessionUnderEvaluation,
    *,
    closures: Iterable[ClosureRule] = (),
    overrides: Iterable[SessionOverride] = (),
    year: Optional[AcademicYear] = None,
    holidays: Iterable[FixedHoliday] = DEFAULT_FIXED_HOLIDAYS,
) -> NeutralizationResult:
    facts = CalendarFacts(
        year=year or AcademicYear(year_id=""),
        closures=tuple(closures),
        overrides=tuple(overrides),
        holidays=tuple(holidays),
    )
    return NeutralizationEvaluator().evaluate(session, facts)

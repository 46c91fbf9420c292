from __future__ import annotations

from typing import Optional

from ...common.datetime_utils import parse_hhmm, ranges_overlap
from ...core.enums import ClosureScope
from ..model import CalendarFacts, ClosureRule, NeutralizationResult, SessionUnderEvaluation
from .base import NeutralizationRule


def scope_matches(rule: ClosureRule, session: SessionUnderEvaluation) -> bool:
    if rule.scope == ClosureScope.GLOBAL:
        return True
    if rule.scope == ClosureScope.CLASS:
        return rule.class_id == session.class_id
    if rule.scope == ClosureScope.SUBJECT:
        return rule.subject_id == session.subject_id
    if rule.scope == ClosureScope.PROGRAM:
        return session.program_id is not None and rule.program_id == session.program_id
    return False


class ClosureMatchRule(NeutralizationRule):
    """Scoped closures over a day range, optionally restricted to a time window."""

    def evaluate(self, session: SessionUnderEvaluation, facts: CalendarFacts) -> Optional[NeutralizationResult]:
        for rule in facts.closures:
            if not scope_matches(rule, session):
                continue
            if not (rule.start_date <= session.day <= rule.end_date):
                continue

            if rule.has_time_window:
                overlap = ranges_overlap(
                    parse_hhmm(session.start),
                    parse_hhmm(session.end),
                    parse_hhmm(rule.start_time),
                    parse_hhmm(rule.end_time),
                )
                if not overlap:
                    continue

            return NeutralizationResult(neutralized=True, reason=rule.label or "closure")
        return None

from __future__ import annotations

from typing import Optional

from ..model import (
    CalendarFacts,
    CancelOverride,
    NeutralizationResult,
    RescheduleOverride,
    SessionSlot,
    SessionUnderEvaluation,
)
from .base import NeutralizationRule


class OverrideRule(NeutralizationRule):
    """Per-session cancel/reschedule; first match in store order wins."""

    def evaluate(self, session: SessionUnderEvaluation, facts: CalendarFacts) -> Optional[NeutralizationResult]:
        for ov in facts.overrides:
            if not isinstance(ov, (CancelOverride, RescheduleOverride)):
                continue
            if (
                ov.class_id != session.class_id
                or ov.subject_id != session.subject_id
                or ov.day != session.day
                or ov.start != session.start
                or ov.end != session.end
            ):
                continue

            if isinstance(ov, CancelOverride):
                return NeutralizationResult(neutralized=True, reason=ov.reason or "cancelled")
            return NeutralizationResult(
                neutralized=True,
                reason="moved",
                replacement=SessionSlot(day=ov.new_date, start=ov.new_start, end=ov.new_end),
            )
        return None

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..model import CalendarFacts, NeutralizationResult, SessionUnderEvaluation


class NeutralizationRule(ABC):
    """Strategy Pattern: one way a session can be neutralized.

    Returns None when the rule does not apply, so the next rule is tried.
    """

    @abstractmethod
    def evaluate(self, session: SessionUnderEvaluation, facts: CalendarFacts) -> Optional[NeutralizationResult]:
        raise NotImplementedError

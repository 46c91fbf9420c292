from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import JustificationStatus
from .model import SessionKey, SessionRecord, Student


class AbsenceRepository(Protocol):
    def get_session_record(self, key: SessionKey) -> Optional[SessionRecord]:
        raise NotImplementedError

    def save_pending_justification(
        self,
        *,
        key: SessionKey,
        student_id: str,
        content: str,
        documents: Sequence[str],
        submitted_at: datetime,
    ) -> bool:
        """Create or replace a PENDING justification; False if it is already decided."""

        raise NotImplementedError

    def decide_justification(
        self,
        *,
        key: SessionKey,
        student_id: str,
        status: JustificationStatus,
        decided_at: datetime,
    ) -> bool:
        """Compare-and-set PENDING -> status. Returns False when nothing changed."""

        raise NotImplementedError


class RosterRepository(Protocol):
    def get_roster(self, class_id: str) -> Sequence[Student]:
        raise NotImplementedError

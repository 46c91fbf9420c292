from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..absences.model import SessionKey
from ..core.enums import JustificationStatus

JUSTIFICATION_EVENT = "justification"


def justification_dedup_key(*, student_id: str, key: SessionKey, status: JustificationStatus) -> str:
    outcome = "approved" if status == JustificationStatus.APPROVED else "rejected"
    return f"justification::{student_id}::{key.day.isoformat()}::{key.start}-{key.end}::{outcome}"


@dataclass(frozen=True)
class NotificationEvent:
    """Outgoing message for an external delivery channel."""

    type: str
    student_id: str
    decision: JustificationStatus
    session: SessionKey
    dedup_key: str
    title: str
    body: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "student_id": self.student_id,
            "decision": self.decision.value,
            "session": {
                "class_id": self.session.class_id,
                "year_id": self.session.year_id,
                "term": self.session.term,
                "date": self.session.day.isoformat(),
                "subject_id": self.session.subject_id,
                "start": self.session.start,
                "end": self.session.end,
            },
            "dedup_key": self.dedup_key,
            "title": self.title,
            "body": self.body,
            "created_at": self.created_at.isoformat(),
        }

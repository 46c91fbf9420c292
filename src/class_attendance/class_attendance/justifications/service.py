from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..absences.model import Justification, SessionKey
from ..absences.repository import AbsenceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..core.enums import JustificationStatus
from ..core.exceptions import ClosedJustification, ValidationError
from ..notifications.model import JUSTIFICATION_EVENT, NotificationEvent, justification_dedup_key
from ..notifications.outbox import NotificationOutbox
from ..timetable.model import ClassContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionResult:
    """Outcome of a decide call; changed=False means nothing happened."""

    changed: bool
    status: Optional[JustificationStatus] = None
    justification: Optional[Justification] = None
    notification: Optional[NotificationEvent] = None


@dataclass(frozen=True)
class PendingJustification:
    key: SessionKey
    student_id: str
    full_name: str
    justification: Justification


class JustificationService:
    """Workflow per (session, student): none -> PENDING -> APPROVED | REJECTED."""

    def __init__(
        self,
        absences: AbsenceRepository,
        outbox: NotificationOutbox,
        *,
        attendance: Optional[AttendanceService] = None,
    ):
        self._absences = absences
        self._outbox = outbox
        self._attendance = attendance

    def _current(self, key: SessionKey, student_id: str) -> Optional[Justification]:
        record = self._absences.get_session_record(key)
        if record is None:
            return None
        return record.justifications.get(student_id)

    def submit(
        self,
        *,
        key: SessionKey,
        student_id: str,
        content: str,
        documents: Sequence[str] = (),
        now: Optional[datetime] = None,
    ) -> Justification:
        now = now or now_local()
        content = (content or "").strip()
        documents = tuple(d.strip() for d in documents if d and d.strip())
        if not content and not documents:
            raise ValidationError("A justification needs a message or a document")

        record = self._absences.get_session_record(key)
        if record is None or not record.absences.get(student_id):
            raise ValidationError("No absence recorded for this student and session")

        existing = record.justifications.get(student_id)
        if existing and existing.status.is_terminal:
            raise ClosedJustification(f"Justification already {existing.status.value.lower()}")

        saved = self._absences.save_pending_justification(
            key=key,
            student_id=student_id,
            content=content,
            documents=documents,
            submitted_at=now,
        )
        if not saved:
            # decided between our read and the write
            raise ClosedJustification("Justification already decided")

        return Justification(
            student_id=student_id,
            content=content,
            status=JustificationStatus.PENDING,
            documents=documents,
            submitted_at=now,
        )

    def decide(
        self,
        *,
        key: SessionKey,
        student_id: str,
        approved: bool,
        subject_label: str = "",
        now: Optional[datetime] = None,
    ) -> DecisionResult:
        current = self._current(key, student_id)
        if current is None or current.status != JustificationStatus.PENDING:
            return DecisionResult(changed=False, status=current.status if current else None, justification=current)

        now = now or now_local()
        status = JustificationStatus.APPROVED if approved else JustificationStatus.REJECTED
        if not self._absences.decide_justification(key=key, student_id=student_id, status=status, decided_at=now):
            return DecisionResult(changed=False, status=current.status, justification=current)

        decided = replace(current, status=status, decided_at=now)
        event = self._build_event(key=key, student_id=student_id, status=status, subject_label=subject_label, now=now)
        published = self._outbox.publish(event)
        logger.info("Justification %s for %s at %s (notified=%s)", status.value, student_id, key, published)

        return DecisionResult(
            changed=True,
            status=status,
            justification=decided,
            notification=event if published else None,
        )

    def _build_event(
        self,
        *,
        key: SessionKey,
        student_id: str,
        status: JustificationStatus,
        subject_label: str,
        now: datetime,
    ) -> NotificationEvent:
        title = "Justification approved" if status == JustificationStatus.APPROVED else "Justification rejected"
        body = f"{key.day.isoformat()} • {subject_label or key.subject_id} ({key.start}-{key.end})"
        return NotificationEvent(
            type=JUSTIFICATION_EVENT,
            student_id=student_id,
            decision=status,
            session=key,
            dedup_key=justification_dedup_key(student_id=student_id, key=key, status=status),
            title=title,
            body=body,
            created_at=now,
        )

    def list_pending(self, ctx: ClassContext, start: date, end: date) -> list[PendingJustification]:
        """Pending justifications on the active sessions of a period."""
        if self._attendance is None:
            raise ValidationError("Attendance service is not configured")

        report = self._attendance.aggregate(ctx, start, end)
        out: list[PendingJustification] = []
        for row in report.per_session:
            for absentee in row.absentees:
                j = absentee.justification
                if j and j.status == JustificationStatus.PENDING:
                    out.append(
                        PendingJustification(
                            key=row.key,
                            student_id=absentee.student_id,
                            full_name=absentee.full_name,
                            justification=j,
                        )
                    )
        return out

from __future__ import annotations

from enum import Enum


class ClosureScope(str, Enum):
    """Which sessions a closure applies to."""

    GLOBAL = "global"
    PROGRAM = "program"
    CLASS = "class"
    SUBJECT = "subject"


class OverrideType(str, Enum):
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"
    MAKEUP = "makeup"


class SessionSource(str, Enum):
    """Where a candidate session comes from."""

    TIMETABLE = "timetable"
    MAKEUP = "makeup"


class JustificationStatus(str, Enum):
    """Justification review status (APPROVED and REJECTED are final)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in {JustificationStatus.APPROVED, JustificationStatus.REJECTED}

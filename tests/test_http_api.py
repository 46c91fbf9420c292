from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest
from flask import Flask

from src.class_attendance.class_attendance.absences.model import (
    AbsenceEntry,
    Justification,
    SessionKey,
    SessionRecord,
    Student,
)
from src.class_attendance.class_attendance.attendance.controller import register as register_attendance
from src.class_attendance.class_attendance.attendance.service import AttendanceService
from src.class_attendance.class_attendance.calendar.cached_repository import CachedCalendarRepository
from src.class_attendance.class_attendance.calendar.model import AcademicYear, CancelOverride
from src.class_attendance.class_attendance.calendar.service import CalendarService
from src.class_attendance.class_attendance.common.cache import MemoryTTLCache
from src.class_attendance.class_attendance.core.enums import JustificationStatus
from src.class_attendance.class_attendance.justifications.controller import register as register_justifications
from src.class_attendance.class_attendance.justifications.service import JustificationService
from src.class_attendance.class_attendance.timetable.cached_repository import CachedTimetableRepository
from src.class_attendance.class_attendance.timetable.model import TimetableSlot
from src.class_attendance.class_attendance.timetable.resolver import TimetableResolver


class FakeCalendarRepo:
    def __init__(self):
        self.overrides = []

    def get_academic_year(self, year_id):
        return AcademicYear(year_id=year_id)

    def get_closures(self, year_id):
        return []

    def get_overrides(self, year_id):
        return list(self.overrides)

    def get_makeup_sessions(self, class_id, start, end):
        return []

    def get_fixed_holidays(self):
        return []


class FakeTimetableRepo:
    def get_timetable(self, class_id, year_id, term):
        return [
            TimetableSlot("C", "MAT", 1, "08:00", "10:00", subject_label="Maths"),
            TimetableSlot("C", "ENG", 1, "10:00", "12:00", subject_label="English"),
        ]


class FakeAbsenceRepo:
    def __init__(self, record):
        self.record = record
        self.status = None

    def get_session_record(self, key):
        if key != self.record.key:
            return None
        if self.status is None:
            return self.record
        return SessionRecord(
            key=self.record.key,
            absences=self.record.absences,
            justifications={"S1": Justification("S1", "sick", self.status)},
        )

    def save_pending_justification(self, *, key, student_id, content, documents, submitted_at):
        if self.status not in (None, JustificationStatus.PENDING):
            return False
        self.status = JustificationStatus.PENDING
        return True

    def decide_justification(self, *, key, student_id, status, decided_at):
        if self.status != JustificationStatus.PENDING:
            return False
        self.status = status
        return True


class FakeRosterRepo:
    def get_roster(self, class_id):
        return [Student("S1", "Martin Alice"), Student("S2", "Durand Bob")]


class FakeOutbox:
    def __init__(self):
        self.keys = set()

    def publish(self, event):
        if event.dedup_key in self.keys:
            return False
        self.keys.add(event.dedup_key)
        return True


MONDAY = date(2025, 3, 10)
KEY = SessionKey("C", "2024-2025", "S2", MONDAY, "MAT", "08:00", "10:00")
QS = "year=2024-2025&term=S2"
BODY = {
    "class_id": "C",
    "year_id": "2024-2025",
    "term": "S2",
    "date": "2025-03-10",
    "subject_id": "MAT",
    "start": "08:00",
    "end": "10:00",
    "student_id": "S1",
}


@pytest.fixture()
def env():
    cache = MemoryTTLCache(default_ttl=60)
    calendar_inner = FakeCalendarRepo()
    calendar_repo = CachedCalendarRepository(calendar_inner, cache)
    timetable_repo = CachedTimetableRepository(FakeTimetableRepo(), cache)
    absences = FakeAbsenceRepo(SessionRecord(key=KEY, absences={"S1": (AbsenceEntry("S1"),)}))

    attendance = AttendanceService(
        TimetableResolver(timetable_repo, calendar_repo),
        CalendarService(calendar_repo),
        absences,
        FakeRosterRepo(),
    )
    container = SimpleNamespace(
        calendar_repo=calendar_repo,
        timetable_repo=timetable_repo,
        attendance_service=attendance,
        justification_service=JustificationService(absences, FakeOutbox(), attendance=attendance),
    )

    app = Flask(__name__)
    register_attendance(app, container)
    register_justifications(app, container)
    return SimpleNamespace(client=app.test_client(), calendar=calendar_inner, absences=absences)


def test_sessions_endpoint_lists_status(env):
    env.calendar.overrides.append(CancelOverride("o1", "C", "ENG", MONDAY, "10:00", "12:00"))

    res = env.client.get(f"/api/classes/C/sessions?date=2025-03-10&{QS}")
    data = res.get_json()

    assert res.status_code == 200
    assert [(s["subject_id"], s["neutralized"], s["reason"]) for s in data["sessions"]] == [
        ("MAT", False, None),
        ("ENG", True, "cancelled"),
    ]


def test_sessions_endpoint_requires_year_and_term(env):
    res = env.client.get("/api/classes/C/sessions?date=2025-03-10")

    assert res.status_code == 400
    assert res.get_json()["success"] is False


def test_report_endpoint(env):
    res = env.client.get(f"/api/classes/C/report?start=2025-03-10&end=2025-03-10&{QS}")
    data = res.get_json()

    assert res.status_code == 200
    assert [(s["student_id"], s["missed_count"], s["missed_hours"]) for s in data["students"]] == [
        ("S1", 1, "2h00"),
        ("S2", 0, "0h00"),
    ]
    assert len(data["sessions"]) == 2


def test_absentees_endpoint_404_for_unknown_session(env):
    res = env.client.get(f"/api/classes/C/absentees?date=2025-03-10&subject=PHY&start=08:00&end=10:00&{QS}")

    assert res.status_code == 404


def test_justification_flow_over_http(env):
    res = env.client.post("/api/justifications", json={**BODY, "content": "sick"})
    assert res.status_code == 201

    res = env.client.get(f"/api/classes/C/justifications/pending?start=2025-03-10&end=2025-03-10&{QS}")
    assert [p["student_id"] for p in res.get_json()["pending"]] == ["S1"]

    first = env.client.post("/api/justifications/decide", json={**BODY, "approved": True}).get_json()
    second = env.client.post("/api/justifications/decide", json={**BODY, "approved": True}).get_json()
    assert first["changed"] is True
    assert first["notification"]["dedup_key"] == "justification::S1::2025-03-10::08:00-10:00::approved"
    assert second["changed"] is False

    res = env.client.post("/api/justifications", json={**BODY, "content": "again"})
    assert res.status_code == 409


def test_unpadded_times_address_the_same_session(env):
    res = env.client.post("/api/justifications", json={**BODY, "start": "8:00", "content": "sick"})
    assert res.status_code == 201

    first = env.client.post("/api/justifications/decide", json={**BODY, "start": "8:00", "approved": True}).get_json()
    second = env.client.post("/api/justifications/decide", json={**BODY, "approved": True}).get_json()
    assert first["notification"]["dedup_key"] == "justification::S1::2025-03-10::08:00-10:00::approved"
    assert second["changed"] is False

    res = env.client.get(f"/api/classes/C/absentees?date=2025-03-10&subject=MAT&start=8:00&end=10:00&{QS}")
    assert res.status_code == 200
    assert [a["student_id"] for a in res.get_json()["absentees"]] == ["S1"]


def test_justification_rejects_malformed_time(env):
    res = env.client.post("/api/justifications", json={**BODY, "start": "8h", "content": "sick"})

    assert res.status_code == 400


def test_cache_invalidate_endpoint(env):
    env.client.get(f"/api/classes/C/sessions?date=2025-03-10&{QS}")

    res = env.client.post("/api/cache/invalidate", json={"family": "overrides", "year_id": "2024-2025"})
    assert res.get_json() == {"success": True, "removed": 1}

    res = env.client.post("/api/cache/invalidate", json={"family": "bogus"})
    assert res.status_code == 400

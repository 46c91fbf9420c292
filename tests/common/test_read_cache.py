from __future__ import annotations

from datetime import date

from src.class_attendance.class_attendance.calendar.cached_repository import CachedCalendarRepository
from src.class_attendance.class_attendance.calendar.model import ClosureRule, MakeupSession
from src.class_attendance.class_attendance.common.cache import MemoryTTLCache, get_or_load
from src.class_attendance.class_attendance.core.enums import ClosureScope
from src.class_attendance.class_attendance.timetable.cached_repository import CachedTimetableRepository
from src.class_attendance.class_attendance.timetable.model import TimetableSlot


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class CountingCalendarRepo:
    def __init__(self):
        self.calls: dict[str, int] = {}
        self.closures = [ClosureRule("r1", ClosureScope.GLOBAL, date(2025, 3, 10), date(2025, 3, 10))]

    def _hit(self, name):
        self.calls[name] = self.calls.get(name, 0) + 1

    def get_academic_year(self, year_id):
        self._hit("year")
        return None

    def get_closures(self, year_id):
        self._hit("closures")
        return list(self.closures)

    def get_overrides(self, year_id):
        self._hit("overrides")
        return []

    def get_makeup_sessions(self, class_id, start, end):
        self._hit("makeups")
        return [MakeupSession("m1", class_id, "MAT", start, "08:00", "10:00")]

    def get_fixed_holidays(self):
        self._hit("holidays")
        return []


class CountingTimetableRepo:
    def __init__(self):
        self.calls = 0

    def get_timetable(self, class_id, year_id, term):
        self.calls += 1
        return [TimetableSlot(class_id, "MAT", 1, "08:00", "10:00")]


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = MemoryTTLCache(default_ttl=60, clock=clock)
    cache.set("closures:y1", ["a"])

    clock.now += 59
    assert cache.get("closures:y1") == ["a"]

    clock.now += 1
    assert cache.get("closures:y1") is None
    assert len(cache) == 0


def test_per_entry_ttl_overrides_default():
    clock = FakeClock()
    cache = MemoryTTLCache(default_ttl=60, clock=clock)
    cache.set("holidays", ["x"], ttl_seconds=600)

    clock.now += 300
    assert cache.get("holidays") == ["x"]


def test_invalidate_prefix_only_touches_matching_keys():
    cache = MemoryTTLCache(default_ttl=60, clock=FakeClock())
    cache.set("closures:y1", 1)
    cache.set("closures:y2", 2)
    cache.set("overrides:y1", 3)

    assert cache.invalidate_prefix("closures:") == 2
    assert cache.get("closures:y1") is None
    assert cache.get("overrides:y1") == 3


def test_get_or_load_caches_falsy_values():
    cache = MemoryTTLCache(default_ttl=60, clock=FakeClock())
    loads = []

    def loader():
        loads.append(1)
        return None

    assert get_or_load(cache, "year:y1", loader) is None
    assert get_or_load(cache, "year:y1", loader) is None
    assert len(loads) == 1


def test_cached_calendar_repo_reads_once_until_invalidated():
    inner = CountingCalendarRepo()
    repo = CachedCalendarRepository(inner, MemoryTTLCache(default_ttl=60, clock=FakeClock()))

    repo.get_closures("y1")
    repo.get_closures("y1")
    assert inner.calls["closures"] == 1

    inner.closures = []
    assert len(repo.get_closures("y1")) == 1

    assert repo.invalidate_closures("y1") == 1
    assert list(repo.get_closures("y1")) == []
    assert inner.calls["closures"] == 2


def test_cached_calendar_repo_makeups_invalidated_per_class():
    inner = CountingCalendarRepo()
    repo = CachedCalendarRepository(inner, MemoryTTLCache(default_ttl=60, clock=FakeClock()))
    day = date(2025, 3, 10)

    repo.get_makeup_sessions("C", day, day)
    repo.get_makeup_sessions("D", day, day)

    assert repo.invalidate_makeups("C") == 1
    repo.get_makeup_sessions("C", day, day)
    repo.get_makeup_sessions("D", day, day)
    assert inner.calls["makeups"] == 3


def test_cached_timetable_repo():
    inner = CountingTimetableRepo()
    repo = CachedTimetableRepository(inner, MemoryTTLCache(default_ttl=60, clock=FakeClock()))

    repo.get_timetable("C", "y1", "S1")
    repo.get_timetable("C", "y1", "S1")
    repo.get_timetable("C", "y1", "S2")
    assert inner.calls == 2

    assert repo.invalidate("C") == 2
    repo.get_timetable("C", "y1", "S1")
    assert inner.calls == 3

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.cache import ReadCache, get_or_load
from .model import AcademicYear, ClosureRule, FixedHoliday, MakeupSession, SessionOverride
from .repository import CalendarRepository


class CachedCalendarRepository(CalendarRepository):
    """Decorator: memoizes calendar reads in a ReadCache."""

    def __init__(self, inner: CalendarRepository, cache: ReadCache):
        self._inner = inner
        self._cache = cache

    def get_academic_year(self, year_id: str) -> Optional[AcademicYear]:
        return get_or_load(self._cache, f"year:{year_id}", lambda: self._inner.get_academic_year(year_id))

    def get_closures(self, year_id: str) -> Sequence[ClosureRule]:
        return get_or_load(self._cache, f"closures:{year_id}", lambda: tuple(self._inner.get_closures(year_id)))

    def get_overrides(self, year_id: str) -> Sequence[SessionOverride]:
        return get_or_load(self._cache, f"overrides:{year_id}", lambda: tuple(self._inner.get_overrides(year_id)))

    def get_makeup_sessions(self, class_id: str, start: date, end: date) -> Sequence[MakeupSession]:
        key = f"makeups:{class_id}:{start.isoformat()}:{end.isoformat()}"
        return get_or_load(self._cache, key, lambda: tuple(self._inner.get_makeup_sessions(class_id, start, end)))

    def get_fixed_holidays(self) -> Sequence[FixedHoliday]:
        return get_or_load(self._cache, "holidays", lambda: tuple(self._inner.get_fixed_holidays()))

    # Invalidation hooks for writers
    def invalidate_closures(self, year_id: str) -> int:
        return self._cache.invalidate_prefix(f"closures:{year_id}")

    def invalidate_overrides(self, year_id: str) -> int:
        return self._cache.invalidate_prefix(f"overrides:{year_id}")

    def invalidate_makeups(self, class_id: Optional[str] = None) -> int:
        return self._cache.invalidate_prefix(f"makeups:{class_id}:" if class_id else "makeups:")

    def invalidate_year(self, year_id: str) -> int:
        return self._cache.invalidate_prefix(f"year:{year_id}") + self._cache.invalidate_prefix("holidays")

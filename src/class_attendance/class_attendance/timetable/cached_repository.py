from __future__ import annotations

from typing import Optional, Sequence

from ..common.cache import ReadCache, get_or_load
from .model import TimetableSlot
from .repository import TimetableRepository


class CachedTimetableRepository(TimetableRepository):
    def __init__(self, inner: TimetableRepository, cache: ReadCache):
        self._inner = inner
        self._cache = cache

    def get_timetable(self, class_id: str, year_id: str, term: str) -> Sequence[TimetableSlot]:
        key = f"timetable:{class_id}:{year_id}:{term}"
        return get_or_load(self._cache, key, lambda: tuple(self._inner.get_timetable(class_id, year_id, term)))

    def invalidate(self, class_id: Optional[str] = None) -> int:
        return self._cache.invalidate_prefix(f"timetable:{class_id}:" if class_id else "timetable:")

from __future__ import annotations

from dataclasses import dataclass

from .absences.mysql_absence_repository import MySQLAbsenceRepository, MySQLRosterRepository
from .attendance.service import AttendanceService
from .calendar.cached_repository import CachedCalendarRepository
from .calendar.mysql_calendar_repository import MySQLCalendarRepository
from .calendar.service import CalendarService
from .common.cache import MemoryTTLCache
from .core.constants import DEFAULT_CACHE_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .justifications.service import JustificationService
from .notifications.mysql_outbox import MySQLNotificationOutbox
from .timetable.cached_repository import CachedTimetableRepository
from .timetable.mysql_timetable_repository import MySQLTimetableRepository
from .timetable.resolver import TimetableResolver


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    cache: MemoryTTLCache

    calendar_repo: CachedCalendarRepository
    timetable_repo: CachedTimetableRepository
    absences_repo: MySQLAbsenceRepository
    roster_repo: MySQLRosterRepository
    outbox: MySQLNotificationOutbox

    calendar_service: CalendarService
    resolver: TimetableResolver
    attendance_service: AttendanceService
    justification_service: JustificationService


def build_container(*, db_config: dict, cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    cache = MemoryTTLCache(default_ttl=cache_ttl_seconds)

    calendar_repo = CachedCalendarRepository(MySQLCalendarRepository(conn), cache)
    timetable_repo = CachedTimetableRepository(MySQLTimetableRepository(conn), cache)
    absences_repo = MySQLAbsenceRepository(conn)
    roster_repo = MySQLRosterRepository(conn)
    outbox = MySQLNotificationOutbox(conn)

    calendar_service = CalendarService(calendar_repo)
    resolver = TimetableResolver(timetable_repo, calendar_repo)
    attendance_service = AttendanceService(resolver, calendar_service, absences_repo, roster_repo)
    justification_service = JustificationService(absences_repo, outbox, attendance=attendance_service)

    return Container(
        conn=conn,
        cache=cache,
        calendar_repo=calendar_repo,
        timetable_repo=timetable_repo,
        absences_repo=absences_repo,
        roster_repo=roster_repo,
        outbox=outbox,
        calendar_service=calendar_service,
        resolver=resolver,
        attendance_service=attendance_service,
        justification_service=justification_service,
    )

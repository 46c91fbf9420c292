"""Example: drive the service layer directly (no Flask).

Prints one class's active sessions for today and its absence ranking
over the last week.
"""

import importlib
from datetime import date, timedelta

from config import get_settings_module

from src.class_attendance.class_attendance.container import build_container
from src.class_attendance.class_attendance.timetable.model import ClassContext


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    ctx = ClassContext(class_id="BTS-SIO-1", year_id="2025-2026", term="S1")

    today = date.today()
    for s in container.attendance_service.list_active_sessions(ctx, today):
        print(f"{s.start}-{s.end} {s.subject_label} ({s.room})")

    report = container.attendance_service.aggregate(ctx, today - timedelta(days=6), today)
    for row in report.summaries:
        print(f"{row.full_name}: {row.missed_count} absences, {row.missed_hours}")


if __name__ == "__main__":
    main()

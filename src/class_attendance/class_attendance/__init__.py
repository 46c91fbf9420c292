"""Class Attendance package.

Session neutralization and attendance aggregation for a school console,
organized by feature modules (calendar, timetable, absences, attendance,
justifications) with thin Flask controllers over service/repository layers.
"""

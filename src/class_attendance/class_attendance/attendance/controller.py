from __future__ import annotations

import logging
from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..calendar.model import NeutralizationResult
from ..common.datetime_utils import format_hhmm, parse_hhmm, parse_iso_date
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.exceptions import ValidationError
from ..container import Container
from ..timetable.model import CandidateSession, ClassContext
from .model import AbsenteeRow, StudentAbsenceSummary

logger = logging.getLogger(__name__)


def class_context_from_args(class_id: str) -> ClassContext:
    year_id = (request.args.get("year") or "").strip()
    term = (request.args.get("term") or "").strip()
    if not year_id or not term:
        raise ValidationError("year and term are required")
    return ClassContext(
        class_id=class_id,
        year_id=year_id,
        term=term,
        program_id=(request.args.get("program") or "").strip() or None,
    )


def date_arg(name: str, default: date) -> date:
    value = request.args.get(name)
    if not value:
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def session_to_dict(s: CandidateSession) -> dict:
    return {
        "subject_id": s.subject_id,
        "subject_label": s.subject_label,
        "start": s.start,
        "end": s.end,
        "room": s.room,
        "teacher": s.teacher,
        "source": s.source.value,
    }


def result_to_dict(r: NeutralizationResult) -> dict:
    out: dict = {"neutralized": r.neutralized, "reason": r.reason}
    if r.replacement:
        out["replacement"] = {
            "date": r.replacement.day.isoformat(),
            "start": r.replacement.start,
            "end": r.replacement.end,
        }
    return out


def absentee_to_dict(a: AbsenteeRow) -> dict:
    j = a.justification
    return {
        "student_id": a.student_id,
        "full_name": a.full_name,
        "entries": len(a.entries),
        "missed_minutes": a.missed_minutes,
        "justification": None
        if j is None
        else {
            "content": j.content,
            "documents": list(j.documents),
            "status": j.status.value,
            "decided_at": j.decided_at.isoformat() if j.decided_at else None,
        },
    }


def summary_to_dict(s: StudentAbsenceSummary) -> dict:
    return {
        "student_id": s.student_id,
        "full_name": s.full_name,
        "missed_count": s.missed_count,
        "missed_minutes": s.missed_minutes,
        "missed_hours": s.missed_hours,
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.route("/api/classes/<class_id>/sessions", methods=["GET"], endpoint="class_sessions")
    def class_sessions(class_id: str):
        ctx = class_context_from_args(class_id)
        day = date_arg("date", date.today())
        rows = service.sessions_with_status(ctx, day)
        return jsonify(
            {
                "success": True,
                "date": day.isoformat(),
                "sessions": [{**session_to_dict(r.session), **result_to_dict(r.result)} for r in rows],
            }
        )

    @app.route("/api/classes/<class_id>/absentees", methods=["GET"], endpoint="class_absentees")
    def class_absentees(class_id: str):
        ctx = class_context_from_args(class_id)
        day = date_arg("date", date.today())
        subject_id = (request.args.get("subject") or "").strip()
        start = format_hhmm(parse_hhmm(request.args.get("start"), strict=True))
        end = format_hhmm(parse_hhmm(request.args.get("end"), strict=True))

        session = service.find_session(ctx, day, subject_id=subject_id, start=start, end=end)
        if session is None:
            return jsonify({"success": False, "message": "No such session on that date"}), 404

        rows = service.list_absentees(ctx, day, session)
        return jsonify({"success": True, "absentees": [absentee_to_dict(a) for a in rows]})

    @app.route("/api/classes/<class_id>/report", methods=["GET"], endpoint="class_report")
    def class_report(class_id: str):
        ctx = class_context_from_args(class_id)
        today = date.today()
        end = date_arg("end", today)
        start = date_arg("start", end - timedelta(days=DEFAULT_REPORT_DAYS - 1))

        report = service.aggregate(ctx, start, end)
        return jsonify(
            {
                "success": True,
                "start": report.start.isoformat(),
                "end": report.end.isoformat(),
                "students": [summary_to_dict(s) for s in report.summaries],
                "sessions": [
                    {
                        "date": row.key.day.isoformat(),
                        **session_to_dict(row.session),
                        "absentees": [absentee_to_dict(a) for a in row.absentees],
                    }
                    for row in report.per_session
                ],
            }
        )

    @app.route("/api/cache/invalidate", methods=["POST"], endpoint="cache_invalidate")
    def cache_invalidate():
        data = request.get_json(silent=True) or {}
        family = str(data.get("family") or "").strip()
        year_id = str(data.get("year_id") or "").strip()
        class_id = str(data.get("class_id") or "").strip() or None

        if family == "closures" and year_id:
            removed = container.calendar_repo.invalidate_closures(year_id)
        elif family == "overrides" and year_id:
            removed = container.calendar_repo.invalidate_overrides(year_id)
        elif family == "makeups":
            removed = container.calendar_repo.invalidate_makeups(class_id)
        elif family == "timetables":
            removed = container.timetable_repo.invalidate(class_id)
        elif family == "years" and year_id:
            removed = container.calendar_repo.invalidate_year(year_id)
        else:
            raise ValidationError("Unknown cache family or missing year_id")

        return jsonify({"success": True, "removed": removed})

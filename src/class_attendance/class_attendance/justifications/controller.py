from __future__ import annotations

import logging
from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..absences.model import SessionKey
from ..attendance.controller import class_context_from_args, date_arg
from ..common.datetime_utils import format_hhmm, parse_hhmm, parse_iso_date
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.exceptions import ClosedJustification, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def session_key_from_json(data: dict) -> SessionKey:
    try:
        day = parse_iso_date(str(data.get("date") or ""))
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")

    start = format_hhmm(parse_hhmm(require_non_empty(str(data.get("start") or ""), "start"), strict=True))
    end = format_hhmm(parse_hhmm(require_non_empty(str(data.get("end") or ""), "end"), strict=True))

    return SessionKey(
        class_id=require_non_empty(str(data.get("class_id") or ""), "class_id"),
        year_id=require_non_empty(str(data.get("year_id") or ""), "year_id"),
        term=require_non_empty(str(data.get("term") or ""), "term"),
        day=day,
        subject_id=require_non_empty(str(data.get("subject_id") or ""), "subject_id"),
        start=start,
        end=end,
    )


def register(app: Flask, container: Container) -> None:
    service = container.justification_service

    @app.errorhandler(ClosedJustification)
    def _closed(e: ClosedJustification):
        return jsonify({"success": False, "message": str(e)}), 409

    @app.route("/api/justifications", methods=["POST"], endpoint="justification_submit")
    def justification_submit():
        data = request.get_json(silent=True) or {}
        key = session_key_from_json(data)
        student_id = require_non_empty(str(data.get("student_id") or ""), "student_id")
        documents = data.get("documents") or []
        if not isinstance(documents, list):
            raise ValidationError("documents must be a list")

        j = service.submit(
            key=key,
            student_id=student_id,
            content=str(data.get("content") or ""),
            documents=[str(d) for d in documents],
        )
        return jsonify({"success": True, "status": j.status.value}), 201

    @app.route("/api/justifications/decide", methods=["POST"], endpoint="justification_decide")
    def justification_decide():
        data = request.get_json(silent=True) or {}
        key = session_key_from_json(data)
        student_id = require_non_empty(str(data.get("student_id") or ""), "student_id")
        if not isinstance(data.get("approved"), bool):
            raise ValidationError("approved must be true or false")

        result = service.decide(
            key=key,
            student_id=student_id,
            approved=data["approved"],
            subject_label=str(data.get("subject_label") or ""),
        )
        return jsonify(
            {
                "success": True,
                "changed": result.changed,
                "status": result.status.value if result.status else None,
                "notification": result.notification.to_dict() if result.notification else None,
            }
        )

    @app.route("/api/classes/<class_id>/justifications/pending", methods=["GET"], endpoint="justifications_pending")
    def justifications_pending(class_id: str):
        ctx = class_context_from_args(class_id)
        end = date_arg("end", date.today())
        start = date_arg("start", end - timedelta(days=DEFAULT_REPORT_DAYS - 1))

        rows = service.list_pending(ctx, start, end)
        return jsonify(
            {
                "success": True,
                "pending": [
                    {
                        "date": p.key.day.isoformat(),
                        "subject_id": p.key.subject_id,
                        "start": p.key.start,
                        "end": p.key.end,
                        "student_id": p.student_id,
                        "full_name": p.full_name,
                        "content": p.justification.content,
                        "documents": list(p.justification.documents),
                    }
                    for p in rows
                ],
            }
        )

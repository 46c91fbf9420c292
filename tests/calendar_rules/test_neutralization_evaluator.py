from __future__ import annotations

from datetime import date

from src.class_attendance.class_attendance.calendar.evaluator import NeutralizationEvaluator, evaluate_neutralization
from src.class_attendance.class_attendance.calendar.holidays import DEFAULT_FIXED_HOLIDAYS
from src.class_attendance.class_attendance.calendar.model import (
    AcademicYear,
    CalendarFacts,
    CancelOverride,
    ClosureRule,
    MakeupSession,
    RescheduleOverride,
    SessionSlot,
    SessionUnderEvaluation,
)
from src.class_attendance.class_attendance.core.enums import ClosureScope


def _session(day: date, start: str = "08:00", end: str = "10:00", *, class_id="C", subject_id="M", program_id=None):
    return SessionUnderEvaluation(
        class_id=class_id,
        subject_id=subject_id,
        day=day,
        start=start,
        end=end,
        program_id=program_id,
    )


def _closure(scope: ClosureScope, start: date, end: date, **kwargs) -> ClosureRule:
    return ClosureRule(rule_id=kwargs.pop("rule_id", "r1"), scope=scope, start_date=start, end_date=end, **kwargs)


def test_new_year_session_is_a_holiday():
    result = evaluate_neutralization(_session(date(2025, 1, 1)))

    assert result.neutralized is True
    assert "holiday" in result.reason


def test_class_closure_covers_whole_day():
    closure = _closure(ClosureScope.CLASS, date(2025, 3, 10), date(2025, 3, 10), class_id="C")

    for start, end in [("08:00", "10:00"), ("14:00", "16:00"), ("18:30", "19:30")]:
        result = evaluate_neutralization(_session(date(2025, 3, 10), start, end), closures=[closure])
        assert result.neutralized is True
        assert result.reason == "closure"


def test_class_closure_does_not_touch_other_classes_or_days():
    closure = _closure(ClosureScope.CLASS, date(2025, 3, 10), date(2025, 3, 10), class_id="C")

    assert evaluate_neutralization(_session(date(2025, 3, 10), class_id="D"), closures=[closure]).neutralized is False
    assert evaluate_neutralization(_session(date(2025, 3, 11)), closures=[closure]).neutralized is False


def test_reschedule_reports_replacement_without_cascading():
    override = RescheduleOverride(
        override_id="o1",
        class_id="C",
        subject_id="M",
        day=date(2025, 4, 1),
        start="08:00",
        end="10:00",
        new_date=date(2025, 4, 3),
        new_start="08:00",
        new_end="10:00",
    )

    original = evaluate_neutralization(_session(date(2025, 4, 1)), overrides=[override])
    assert original.neutralized is True
    assert original.reason == "moved"
    assert original.replacement == SessionSlot(day=date(2025, 4, 3), start="08:00", end="10:00")

    replacement = evaluate_neutralization(_session(date(2025, 4, 3)), overrides=[override])
    assert replacement.neutralized is False
    assert replacement.replacement is None


def test_cancel_uses_its_reason_or_default():
    day = date(2025, 3, 11)
    with_reason = CancelOverride("o1", "C", "M", day, "08:00", "10:00", reason="teacher sick")
    without = CancelOverride("o2", "C", "M", day, "10:00", "12:00")

    assert evaluate_neutralization(_session(day), overrides=[with_reason]).reason == "teacher sick"
    assert evaluate_neutralization(_session(day, "10:00", "12:00"), overrides=[without]).reason == "cancelled"


def test_override_needs_exact_identity():
    day = date(2025, 3, 11)
    ov = CancelOverride("o1", "C", "M", day, "08:00", "10:00")

    assert evaluate_neutralization(_session(day, "08:00", "09:59"), overrides=[ov]).neutralized is False
    assert evaluate_neutralization(_session(day, subject_id="X"), overrides=[ov]).neutralized is False


def test_makeup_never_neutralizes():
    day = date(2025, 3, 12)
    makeup = MakeupSession("o1", "C", "M", day, "08:00", "10:00")

    assert evaluate_neutralization(_session(day), overrides=[makeup]).neutralized is False


def test_override_wins_over_closure_and_holiday():
    day = date(2025, 5, 1)
    ov = CancelOverride("o1", "C", "M", day, "08:00", "10:00", reason="strike")
    closure = _closure(ClosureScope.GLOBAL, day, day, label="Bridge day")

    result = evaluate_neutralization(_session(day), overrides=[ov], closures=[closure])
    assert result.reason == "strike"

    result = evaluate_neutralization(_session(day), closures=[closure])
    assert result.reason == "Bridge day"


def test_first_matching_closure_wins():
    day = date(2025, 3, 12)
    first = _closure(ClosureScope.GLOBAL, day, day, rule_id="a", label="First")
    second = _closure(ClosureScope.CLASS, day, day, rule_id="b", class_id="C", label="Second")

    assert evaluate_neutralization(_session(day), closures=[first, second]).reason == "First"
    assert evaluate_neutralization(_session(day), closures=[second, first]).reason == "Second"


def test_time_window_uses_half_open_overlap():
    day = date(2025, 3, 12)
    closure = _closure(ClosureScope.GLOBAL, day, day, start_time="10:00", end_time="12:00")

    assert evaluate_neutralization(_session(day, "08:00", "10:00"), closures=[closure]).neutralized is False
    assert evaluate_neutralization(_session(day, "09:00", "10:30"), closures=[closure]).neutralized is True
    assert evaluate_neutralization(_session(day, "11:30", "13:00"), closures=[closure]).neutralized is True
    assert evaluate_neutralization(_session(day, "12:00", "14:00"), closures=[closure]).neutralized is False


def test_closure_with_one_time_bound_is_whole_day():
    day = date(2025, 3, 12)
    closure = _closure(ClosureScope.GLOBAL, day, day, start_time="10:00")

    assert evaluate_neutralization(_session(day, "14:00", "16:00"), closures=[closure]).neutralized is True


def test_subject_and_program_scopes():
    day = date(2025, 3, 12)
    subject = _closure(ClosureScope.SUBJECT, day, day, subject_id="M")
    program = _closure(ClosureScope.PROGRAM, day, day, program_id="BTS")

    assert evaluate_neutralization(_session(day), closures=[subject]).neutralized is True
    assert evaluate_neutralization(_session(day, subject_id="X"), closures=[subject]).neutralized is False

    assert evaluate_neutralization(_session(day, program_id="BTS"), closures=[program]).neutralized is True
    assert evaluate_neutralization(_session(day), closures=[program]).neutralized is False


def test_holiday_outside_academic_year_is_ignored():
    year = AcademicYear(year_id="2024-2025", start_date=date(2024, 9, 1), end_date=date(2024, 12, 20))

    assert evaluate_neutralization(_session(date(2025, 1, 1)), year=year).neutralized is False
    assert evaluate_neutralization(_session(date(2024, 11, 1)), year=year).neutralized is True


def test_plain_day_is_active():
    result = evaluate_neutralization(_session(date(2025, 3, 12)))

    assert result.neutralized is False
    assert result.reason is None


def test_evaluation_is_repeatable():
    day = date(2025, 4, 1)
    facts = CalendarFacts(
        year=AcademicYear(year_id="y"),
        overrides=(CancelOverride("o1", "C", "M", day, "08:00", "10:00"),),
        holidays=DEFAULT_FIXED_HOLIDAYS,
    )
    evaluator = NeutralizationEvaluator()

    assert evaluator.evaluate(_session(day), facts) == evaluator.evaluate(_session(day), facts)

from datetime import datetime

import pytest

from app.models.models import ExamStatus
from app.services.performance_service import (
    HistoricalMatching,
    HistoricalResult,
    MatchingRunStatus,
    Trend,
    calculate_trend,
    compute_instructor_performance,
    matchings_in_window,
    month_window,
    monthly_instructor_performance,
    success_rate,
)

P = ExamStatus.PASSED
F = ExamStatus.FAILED
N = ExamStatus.NOT_TAKEN


def _result(instructor_id, student_id, written=P, driving=P):
    return HistoricalResult(
        instructor_id=instructor_id,
        instructor_name=f"Instructor {instructor_id}",
        student_id=student_id,
        written_exam_status=written,
        driving_exam_status=driving
    )


@pytest.mark.parametrize("current, previous, expected", [
    (90, 80, Trend.UP),
    (70, 80, Trend.DOWN),
    (82, 80, Trend.STABLE),
    (75, None, Trend.STABLE),
    (80, 74, Trend.UP),
    (79, 74, Trend.STABLE),
    (74, 80, Trend.DOWN),
    (75, 80, Trend.STABLE),
    (40, 0, Trend.STABLE),
])
def test_calculate_trend(current, previous, expected):
    assert calculate_trend(current, previous) == expected


def test_calculate_trend_custom_threshold():
    assert calculate_trend(90, 80, threshold=10) == Trend.STABLE
    assert calculate_trend(91, 80, threshold=10) == Trend.UP


def test_success_rate_rounds_half_up():
    assert success_rate(1, 8) == 13
    assert success_rate(2, 3) == 67
    assert success_rate(1, 3) == 33
    assert success_rate(0, 0) == 0
    assert success_rate(4, 4) == 100
    with pytest.raises(ValueError):
        success_rate(-1, 2)


def test_month_window():
    assert month_window(datetime(2026, 1, 15, 13, 5)) == (
        datetime(2026, 1, 1), datetime(2026, 2, 1)
    )
    assert month_window(datetime(2026, 1, 15), months_back=1) == (
        datetime(2025, 12, 1), datetime(2026, 1, 1)
    )
    assert month_window(datetime(2025, 12, 31)) == (
        datetime(2025, 12, 1), datetime(2026, 1, 1)
    )


def test_matchings_in_window_filters_status():
    applied = HistoricalMatching(id="m1", created_at=datetime(2026, 10, 2))
    pending = HistoricalMatching(
        id="m2", created_at=datetime(2026, 10, 3), status=MatchingRunStatus.PENDING
    )
    outside = HistoricalMatching(id="m3", created_at=datetime(2026, 9, 30, 23, 59))

    start, end = month_window(datetime(2026, 10, 19))

    assert [m.id for m in matchings_in_window([applied, pending, outside], start, end)] == ["m1"]
    assert len(matchings_in_window([applied, pending], start, end, status=None)) == 2


def test_compute_instructor_performance_ranks_by_success_rate():
    current = [
        _result("i1", "s1", driving=F),
        _result("i1", "s2", driving=N),
        _result("i2", "s3"),
        _result("i2", "s4", written=F, driving=N),
    ]

    stats = compute_instructor_performance(current)

    assert [(s.instructor_id, s.rank) for s in stats] == [("i2", 1), ("i1", 2)]
    i2, i1 = stats
    assert (i2.total_students, i2.passed_students, i2.failed_students) == (2, 1, 1)
    assert i2.success_rate == 50
    assert (i1.passed_students, i1.failed_students, i1.success_rate) == (0, 1, 0)
    assert i1.previous_success_rate is None
    assert i1.trend == Trend.STABLE


def test_monthly_instructor_performance():
    matchings = [
        HistoricalMatching(id="m1", created_at=datetime(2026, 10, 5), results=[
            _result("i1", "s1"),
            _result("i1", "s2"),
            _result("i1", "s3", driving=F),
            _result("i2", "s4"),
            _result("i2", "s5", driving=N),
        ]),
        HistoricalMatching(id="m2", created_at=datetime(2026, 10, 10), results=[
            _result("i1", "s6"),
        ]),
        HistoricalMatching(
            id="m3",
            created_at=datetime(2026, 10, 11),
            status=MatchingRunStatus.PENDING,
            results=[_result("i2", f"p{n}") for n in range(10)]
        ),
        HistoricalMatching(id="m4", created_at=datetime(2026, 9, 20), results=[
            _result("i1", "s7"),
            _result("i1", "s8", driving=F),
            _result("i2", "s9"),
            _result("i2", "s10"),
        ]),
    ]

    stats = monthly_instructor_performance(matchings, datetime(2026, 10, 19))

    assert [s.instructor_id for s in stats] == ["i1", "i2"]
    i1, i2 = stats
    assert (i1.total_students, i1.passed_students, i1.failed_students) == (4, 3, 1)
    assert i1.success_rate == 75
    assert i1.previous_success_rate == 50
    assert i1.trend == Trend.UP
    assert i1.matching_count == 2
    assert i2.success_rate == 50
    assert i2.previous_success_rate == 100
    assert i2.trend == Trend.DOWN
    assert i2.matching_count == 1
    assert i2.rank == 2


def test_monthly_performance_empty_month():
    matchings = [HistoricalMatching(id="m1", created_at=datetime(2026, 8, 1), results=[
        _result("i1", "s1"),
    ])]
    assert monthly_instructor_performance(matchings, datetime(2026, 10, 19)) == []

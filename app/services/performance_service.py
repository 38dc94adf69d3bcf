"""
Driving School Matching - Instructor Performance Service
Success rates, rankings and trends from historical (applied) matchings.

SUCCESS RATE:
    round(100 x passed / total), half-up, where "passed" means both the
    written and the driving exam are PASSED for the student record.

TREND:
    current - previous >  threshold -> up
    current - previous < -threshold -> down
    otherwise (or no previous data) -> stable
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple
import enum
import logging
import math

from app.models.models import ExamStatus

logger = logging.getLogger(__name__)

DEFAULT_TREND_THRESHOLD = 5


class Trend(str, enum.Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class MatchingRunStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPLIED = "APPLIED"
    CANCELLED = "CANCELLED"
    ARCHIVED = "ARCHIVED"


@dataclass
class HistoricalResult:
    """A persisted match with the student's exam state at report time."""
    instructor_id: str
    instructor_name: str
    student_id: str
    written_exam_status: ExamStatus = ExamStatus.NOT_TAKEN
    driving_exam_status: ExamStatus = ExamStatus.NOT_TAKEN

    @property
    def passed(self) -> bool:
        return (
            self.written_exam_status == ExamStatus.PASSED
            and self.driving_exam_status == ExamStatus.PASSED
        )

    @property
    def failed(self) -> bool:
        return (
            self.written_exam_status == ExamStatus.FAILED
            or self.driving_exam_status == ExamStatus.FAILED
        )


@dataclass
class HistoricalMatching:
    id: str
    created_at: datetime
    status: MatchingRunStatus = MatchingRunStatus.APPLIED
    name: Optional[str] = None
    results: List[HistoricalResult] = field(default_factory=list)


@dataclass
class InstructorPerformance:
    instructor_id: str
    instructor_name: str
    total_students: int
    passed_students: int
    failed_students: int
    success_rate: int
    rank: int = 0
    trend: Trend = Trend.STABLE
    previous_success_rate: Optional[int] = None
    matching_count: int = 0


# ============================================
# Pure Calculations
# ============================================

def success_rate(passed: int, total: int) -> int:
    """Percentage of passed students, rounded half-up; 0 when empty."""
    if passed < 0 or total < 0:
        raise ValueError("Student counts cannot be negative")
    if total == 0:
        return 0
    return math.floor(100 * passed / total + 0.5)


def calculate_trend(
    current_rate: float,
    previous_rate: Optional[float],
    threshold: float = DEFAULT_TREND_THRESHOLD
) -> Trend:
    """
    Compare two success rates.

    Missing or zero previous data is not treated as a decline.
    """
    if not previous_rate:
        return Trend.STABLE

    diff = current_rate - previous_rate
    if diff > threshold:
        return Trend.UP
    if diff < -threshold:
        return Trend.DOWN
    return Trend.STABLE


# ============================================
# Period Helpers
# ============================================

def month_window(reference: datetime, months_back: int = 0) -> Tuple[datetime, datetime]:
    """
    Calendar month containing `reference`, shifted `months_back` months.

    Returns (start, end) with `end` exclusive.
    """
    month_index = reference.year * 12 + (reference.month - 1) - months_back
    year, month = divmod(month_index, 12)
    start = reference.replace(year=year, month=month + 1, day=1,
                              hour=0, minute=0, second=0, microsecond=0)
    next_year, next_month = divmod(month_index + 1, 12)
    end = start.replace(year=next_year, month=next_month + 1)
    return start, end


def matchings_in_window(
    matchings: List[HistoricalMatching],
    start: datetime,
    end: datetime,
    status: Optional[MatchingRunStatus] = MatchingRunStatus.APPLIED
) -> List[HistoricalMatching]:
    return [
        m for m in matchings
        if start <= m.created_at < end
        and (status is None or m.status == status)
    ]


# ============================================
# Aggregation
# ============================================

def _group_by_instructor(results: List[HistoricalResult]) -> Dict[str, List[HistoricalResult]]:
    groups: Dict[str, List[HistoricalResult]] = {}
    for result in results:
        groups.setdefault(result.instructor_id, []).append(result)
    return groups


def compute_instructor_performance(
    current_results: List[HistoricalResult],
    previous_results: Optional[List[HistoricalResult]] = None,
    threshold: float = DEFAULT_TREND_THRESHOLD
) -> List[InstructorPerformance]:
    """
    Rank instructors by success rate for the current period.

    Previous-period results are pooled per instructor to compute the
    comparison rate. Ranks are 1..n by success rate descending.
    """
    previous_rates = {
        instructor_id: success_rate(sum(r.passed for r in group), len(group))
        for instructor_id, group in _group_by_instructor(previous_results or []).items()
    }

    stats = []
    for instructor_id, group in _group_by_instructor(current_results).items():
        passed = sum(1 for r in group if r.passed)
        rate = success_rate(passed, len(group))
        previous = previous_rates.get(instructor_id)
        stats.append(InstructorPerformance(
            instructor_id=instructor_id,
            instructor_name=group[0].instructor_name or "Unknown",
            total_students=len(group),
            passed_students=passed,
            failed_students=sum(1 for r in group if r.failed),
            success_rate=rate,
            trend=calculate_trend(rate, previous, threshold),
            previous_success_rate=previous
        ))

    stats.sort(key=lambda s: s.success_rate, reverse=True)
    for i, stat in enumerate(stats):
        stat.rank = i + 1

    return stats


def monthly_instructor_performance(
    matchings: List[HistoricalMatching],
    reference: datetime,
    threshold: float = DEFAULT_TREND_THRESHOLD
) -> List[InstructorPerformance]:
    """Current calendar month of applied matchings, trended against the month before."""
    current_start, current_end = month_window(reference)
    previous_start, previous_end = month_window(reference, months_back=1)

    current = matchings_in_window(matchings, current_start, current_end)
    previous = matchings_in_window(matchings, previous_start, previous_end)

    logger.info(
        f"Instructor performance for {current_start:%Y-%m}: "
        f"{len(current)} matchings (previous month: {len(previous)})"
    )

    if not current:
        return []

    stats = compute_instructor_performance(
        [r for m in current for r in m.results],
        [r for m in previous for r in m.results],
        threshold=threshold
    )

    matching_ids: Dict[str, set] = {}
    for matching in current:
        for result in matching.results:
            matching_ids.setdefault(result.instructor_id, set()).add(matching.id)
    for stat in stats:
        stat.matching_count = len(matching_ids.get(stat.instructor_id, ()))

    return stats

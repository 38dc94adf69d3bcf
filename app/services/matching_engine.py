"""
Driving School Matching - Matching Engine
Student-instructor matching for one snapshot of rosters.

PIPELINE:
    1. Eligibility Filter: license type, exam status, active assignments
    2. Capacity Planner: even quota split (+ gender sub-quotas)
    3. Allocator: greedy least-loaded assignment with overflow
    4. Statistics Aggregator: per-instructor utilization summary

BUSINESS OUTCOMES ARE DATA:
    Empty eligible sets and full instructors become MatchingError
    entries. Only malformed requests raise (InvalidMatchingRequest).

The engine never fetches rosters and never persists results; each run
builds its own working set, so independent runs can execute concurrently.
"""

from typing import Dict, Iterable, List, Optional
import logging

from app.config import Settings
from app.models.models import (
    Gender,
    Instructor,
    MatchingError,
    MatchingErrorReason,
    MatchingOutcome,
    MatchingRequest,
    MatchingResult,
    Student,
)
from app.services.allocation_service import (
    Allocator,
    Clock,
    TieBreakStrategy,
    build_tie_break,
)
from app.services.capacity_planner import plan_capacity
from app.services.eligibility import EligibilityFilter
from app.services.matching_stats import (
    DEFAULT_UTILIZATION_PER_ASSIGNMENT,
    compute_matching_stats,
)

logger = logging.getLogger(__name__)


class InvalidMatchingRequest(ValueError):
    """Raised for malformed engine input (an integration bug, not a business outcome)."""


def validate_request(request: MatchingRequest) -> None:
    if not request.license_types:
        raise InvalidMatchingRequest("Matching request needs at least one license type")
    if any(not (code or "").strip() for code in request.license_types):
        raise InvalidMatchingRequest("License type codes cannot be blank")


def _reject_duplicate_ids(kind: str, ids: List[str]) -> None:
    seen = set()
    for entity_id in ids:
        if entity_id in seen:
            raise InvalidMatchingRequest(f"Duplicate {kind} id in roster: {entity_id}")
        seen.add(entity_id)


class MatchingEngine:
    """
    Student-Instructor Matching Engine.

    Key Methods:
    - match_and_allocate(): Full filter -> plan -> allocate -> stats run
    """

    def __init__(
        self,
        tie_break: Optional[TieBreakStrategy] = None,
        clock: Optional[Clock] = None,
        utilization_per_assignment: int = DEFAULT_UTILIZATION_PER_ASSIGNMENT
    ):
        self.eligibility = EligibilityFilter()
        self.allocator = Allocator(tie_break=tie_break, clock=clock)
        self.utilization_per_assignment = utilization_per_assignment

    @classmethod
    def from_settings(cls, settings: Settings, clock: Optional[Clock] = None) -> "MatchingEngine":
        return cls(
            tie_break=build_tie_break(settings.matching_tie_break, settings.matching_seed),
            clock=clock,
            utilization_per_assignment=settings.utilization_per_assignment
        )

    def match_and_allocate(
        self,
        students: List[Student],
        instructors: List[Instructor],
        request: MatchingRequest,
        selected_student_ids: Optional[Iterable[str]] = None,
        selected_instructor_ids: Optional[Iterable[str]] = None,
        current_loads: Optional[Dict[str, int]] = None
    ) -> MatchingOutcome:
        """
        Run one complete matching pass.

        Args:
            students: Full student roster snapshot
            instructors: Full instructor roster snapshot
            request: License types and gender/first-attempt options
            selected_student_ids: Optional narrowing selection (empty = all)
            selected_instructor_ids: Optional narrowing selection (empty = all)
            current_loads: Optional pre-existing student counts per instructor

        Returns:
            MatchingOutcome with matches, errors and stats
        """
        validate_request(request)
        if current_loads and any(v < 0 for v in current_loads.values()):
            raise InvalidMatchingRequest("Current instructor loads cannot be negative")
        _reject_duplicate_ids("student", [s.id for s in students])
        _reject_duplicate_ids("instructor", [i.id for i in instructors])

        eligible = self.eligibility.filter(
            students,
            instructors,
            request,
            selected_student_ids=selected_student_ids,
            selected_instructor_ids=selected_instructor_ids
        )
        licenses = ", ".join(request.license_types)

        if not eligible.students:
            logger.warning(f"No eligible students for license types {licenses}")
            return MatchingOutcome(
                matches=[],
                errors=[MatchingError(
                    reason=MatchingErrorReason.NO_ELIGIBLE_STUDENTS,
                    details=f"No eligible students found for license types {licenses}"
                )],
                stats=self._stats([], eligible.instructors, [], current_loads)
            )

        if not eligible.instructors:
            logger.warning(
                f"No suitable instructor for {len(eligible.students)} students ({licenses})"
            )
            errors = [
                MatchingError(
                    reason=MatchingErrorReason.NO_SUITABLE_INSTRUCTOR,
                    details=f"No suitable instructor found for license type {s.license_type}",
                    student_id=s.id,
                    student_name=s.full_name
                )
                for s in eligible.students
            ]
            return MatchingOutcome(
                matches=[],
                errors=errors,
                stats=self._stats(eligible.students, [], [], current_loads)
            )

        working_set = plan_capacity(
            eligible.instructors,
            len(eligible.students),
            request.consider_gender,
            male_count=sum(1 for s in eligible.students if s.gender == Gender.MALE),
            female_count=sum(1 for s in eligible.students if s.gender == Gender.FEMALE)
        )
        matches = self.allocator.allocate(working_set, eligible.students)
        errors = self._unmatched_errors(eligible.students, matches)
        stats = self._stats(eligible.students, eligible.instructors, matches, current_loads)

        logger.info(
            f"Matching finished: {len(matches)} matches, {len(errors)} errors "
            f"({licenses}, gender={'on' if request.consider_gender else 'off'})"
        )

        return MatchingOutcome(matches=matches, errors=errors, stats=stats)

    def _unmatched_errors(
        self,
        students: List[Student],
        matches: List[MatchingResult]
    ) -> List[MatchingError]:
        matched_ids = {m.student_id for m in matches}
        return [
            MatchingError(
                reason=MatchingErrorReason.INSTRUCTOR_FULL,
                details="All selected instructors have reached their capacity",
                student_id=s.id,
                student_name=s.full_name
            )
            for s in students
            if s.id not in matched_ids
        ]

    def _stats(self, students, instructors, matches, current_loads):
        return compute_matching_stats(
            students,
            instructors,
            matches,
            current_loads=current_loads,
            utilization_per_assignment=self.utilization_per_assignment
        )


def match_and_allocate(
    students: List[Student],
    instructors: List[Instructor],
    request: MatchingRequest,
    selected_student_ids: Optional[Iterable[str]] = None,
    selected_instructor_ids: Optional[Iterable[str]] = None,
    current_loads: Optional[Dict[str, int]] = None,
    tie_break: Optional[TieBreakStrategy] = None,
    clock: Optional[Clock] = None
) -> MatchingOutcome:
    """Convenience wrapper running a single match with a throwaway engine."""
    return MatchingEngine(tie_break=tie_break, clock=clock).match_and_allocate(
        students,
        instructors,
        request,
        selected_student_ids=selected_student_ids,
        selected_instructor_ids=selected_instructor_ids,
        current_loads=current_loads
    )

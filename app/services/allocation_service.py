"""
Driving School Matching - Allocation Service
Greedy assignment of eligible students to instructor quotas.

GENDERED MODE (males first, then females):
    1. Order the students with the configured tie-break strategy
    2. Pick the least-loaded instructor still below both its gender
       sub-target and its total target (ties: list order)
    3. Otherwise overflow: least-loaded instructor below its total target
    4. Otherwise the student stays unassigned

CAPACITY-ONLY MODE:
    One pass over all students, least-loaded instructor below target.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol
import logging
import random

from app.models.models import Gender, Instructor, MatchingResult, Student
from app.services.capacity_planner import AllocationWorkingSet, InstructorTarget

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================
# Tie-Break Strategies
# ============================================

class TieBreakStrategy(Protocol):
    def order(self, students: List[Student]) -> List[Student]:
        ...


class ShuffleTieBreak:
    """Random processing order; pass a seed to make runs reproducible."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def order(self, students: List[Student]) -> List[Student]:
        shuffled = list(students)
        self._random.shuffle(shuffled)
        return shuffled


class StableTieBreak:
    """Deterministic processing order by student id."""

    def order(self, students: List[Student]) -> List[Student]:
        return sorted(students, key=lambda s: s.id)


def build_tie_break(name: str, seed: Optional[int] = None) -> TieBreakStrategy:
    key = (name or "").strip().lower()
    if key == "shuffle":
        return ShuffleTieBreak(seed)
    if key == "stable":
        return StableTieBreak()
    raise ValueError(f"Unknown tie-break strategy: {name!r}")


# ============================================
# Allocator
# ============================================

def build_match(student: Student, instructor: Instructor, match_date: datetime) -> MatchingResult:
    """Snapshot student and instructor data into a MatchingResult."""
    return MatchingResult(
        student_id=student.id,
        instructor_id=instructor.id,
        student_name=student.full_name,
        instructor_name=instructor.full_name,
        student_gender=student.gender,
        instructor_gender=instructor.gender,
        student_status=student.status,
        license_type=student.license_type,
        match_date=match_date,
        vehicle_plate=instructor.vehicle_plate,
        vehicle_model=instructor.vehicle_model,
        written_exam_attempts=student.written_exam.attempts,
        written_exam_max_attempts=student.written_exam.max_attempts,
        written_exam_status=student.written_exam.status,
        driving_exam_attempts=student.driving_exam.attempts,
        driving_exam_max_attempts=student.driving_exam.max_attempts,
        driving_exam_status=student.driving_exam.status
    )


def _least_loaded(candidates: List[InstructorTarget]) -> Optional[InstructorTarget]:
    # min() keeps the first of equal keys, so ties resolve in list order
    if not candidates:
        return None
    return min(candidates, key=lambda t: t.assigned_students)


class Allocator:
    """
    Assigns students to the quotas of an AllocationWorkingSet.

    The working set is mutated in place; the returned matches are the
    only output.
    """

    def __init__(
        self,
        tie_break: Optional[TieBreakStrategy] = None,
        clock: Optional[Clock] = None
    ):
        self.tie_break = tie_break or ShuffleTieBreak()
        self.clock = clock or utc_now

    def allocate(
        self,
        working_set: AllocationWorkingSet,
        students: List[Student]
    ) -> List[MatchingResult]:
        matches: List[MatchingResult] = []

        if working_set.consider_gender:
            males = [s for s in students if s.gender == Gender.MALE]
            females = [s for s in students if s.gender == Gender.FEMALE]
            logger.info(
                f"Allocating {len(students)} students "
                f"(Male: {len(males)}, Female: {len(females)}) "
                f"to {len(working_set)} instructors"
            )
            self._allocate_gender(working_set, males, Gender.MALE, matches)
            self._allocate_gender(working_set, females, Gender.FEMALE, matches)
        else:
            logger.info(
                f"Allocating {len(students)} students to {len(working_set)} instructors"
            )
            for student in self.tie_break.order(students):
                target = _least_loaded([t for t in working_set.targets if t.has_capacity])
                if target is None:
                    logger.debug(f"No capacity left for {student.full_name}")
                    continue
                self._assign(student, target, matches)

        logger.info(f"Allocated {len(matches)} of {len(students)} students")
        return matches

    def _allocate_gender(
        self,
        working_set: AllocationWorkingSet,
        students: List[Student],
        gender: Gender,
        matches: List[MatchingResult]
    ) -> None:
        for student in self.tie_break.order(students):
            target = _least_loaded([
                t for t in working_set.targets
                if t.has_gender_capacity(gender) and t.has_capacity
            ])
            overflow = False
            if target is None:
                target = _least_loaded([t for t in working_set.targets if t.has_capacity])
                overflow = True
            if target is None:
                logger.debug(f"No capacity left for {student.full_name} ({gender.value})")
                continue
            self._assign(student, target, matches, overflow=overflow)

    def _assign(
        self,
        student: Student,
        target: InstructorTarget,
        matches: List[MatchingResult],
        overflow: bool = False
    ) -> None:
        matches.append(build_match(student, target.instructor, self.clock()))
        target.record_assignment(student.gender)
        logger.debug(
            f"{'Overflow assigned' if overflow else 'Assigned'} {student.full_name} "
            f"({student.gender.value}) to {target.instructor.full_name}"
        )

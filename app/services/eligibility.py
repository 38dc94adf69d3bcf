"""
Driving School Matching - Eligibility Filter
Selects the students and instructors that take part in a matching run.

STUDENT RULES:
    - License type is one of the requested types
    - Written exam passed, driving exam not yet passed
    - Student status is active
    - No active instructor assignment
    - Optionally: no driving exam attempt recorded yet

INSTRUCTOR RULES:
    - Instructor status is active
    - Teaches at least one of the requested license types
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Set
import logging

from app.models.models import (
    ExamStatus,
    Instructor,
    InstructorStatus,
    MatchingRequest,
    Student,
    StudentStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class EligibilityResult:
    students: List[Student]
    instructors: List[Instructor]


def is_student_eligible(student: Student, request: MatchingRequest) -> bool:
    """Check a single student against the request's eligibility rules."""
    if student.license_type not in request.license_types:
        return False
    if student.written_exam.status != ExamStatus.PASSED:
        return False
    if student.driving_exam.status == ExamStatus.PASSED:
        return False
    if student.status != StudentStatus.ACTIVE:
        return False
    if student.has_active_assignment:
        return False
    if request.prioritize_first_driving_attempt and student.driving_exam.attempts != 0:
        return False
    return True


def is_instructor_eligible(instructor: Instructor, request: MatchingRequest) -> bool:
    """Active instructors teaching at least one requested license type."""
    if instructor.status != InstructorStatus.ACTIVE:
        return False
    return bool(set(instructor.license_types or []) & set(request.license_types))


def _as_selection(ids: Optional[Iterable[str]]) -> Set[str]:
    return set(ids) if ids else set()


class EligibilityFilter:
    """
    Narrows full rosters down to the candidates of one matching run.

    A caller-supplied selection only ever narrows the computed eligible
    set; an empty selection means "no restriction".
    """

    def filter(
        self,
        students: List[Student],
        instructors: List[Instructor],
        request: MatchingRequest,
        selected_student_ids: Optional[Iterable[str]] = None,
        selected_instructor_ids: Optional[Iterable[str]] = None
    ) -> EligibilityResult:
        student_selection = _as_selection(selected_student_ids)
        instructor_selection = _as_selection(selected_instructor_ids)

        eligible_students = [
            s for s in students
            if is_student_eligible(s, request)
            and (not student_selection or s.id in student_selection)
        ]
        eligible_instructors = [
            i for i in instructors
            if is_instructor_eligible(i, request)
            and (not instructor_selection or i.id in instructor_selection)
        ]

        logger.info(
            f"Eligibility for {','.join(request.license_types)}: "
            f"{len(eligible_students)}/{len(students)} students, "
            f"{len(eligible_instructors)}/{len(instructors)} instructors"
        )

        return EligibilityResult(
            students=eligible_students,
            instructors=eligible_instructors
        )

"""
Driving School Matching - Match Adjustments
Manual changes to a computed match list before and while it is applied.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional
import logging

from app.models.models import (
    Instructor,
    MatchingError,
    MatchingErrorReason,
    MatchingResult,
)
from app.services.allocation_service import utc_now

logger = logging.getLogger(__name__)

DEFAULT_MAX_STUDENTS_PER_PERIOD = 10


class StudentNotInMatching(ValueError):
    """Raised when a transfer names a student the match list does not contain."""


@dataclass
class TransferOutcome:
    matches: List[MatchingResult]
    error: Optional[MatchingError] = None

    @property
    def transferred(self) -> bool:
        return self.error is None


@dataclass
class StudentAssignmentUpdate:
    """What the persistence layer writes onto a student when a matching is applied."""
    matching_id: str
    student_id: str
    instructor_id: str
    instructor_name: str
    assigned_at: datetime
    vehicle_plate: Optional[str] = None
    vehicle_model: Optional[str] = None


def transfer_student(
    matches: List[MatchingResult],
    student_id: str,
    source_instructor_id: str,
    target_instructor: Instructor,
    default_max_students: int = DEFAULT_MAX_STUDENTS_PER_PERIOD,
    require_same_gender: bool = False
) -> TransferOutcome:
    """
    Move one matched student to another instructor.

    Refusals come back as a MatchingError on the outcome with the
    original match list unchanged. The input list is never mutated.
    """
    if target_instructor.id == source_instructor_id:
        raise ValueError("Source and target instructor are the same")

    match = next((m for m in matches if m.student_id == student_id), None)
    if match is None:
        raise StudentNotInMatching(f"Student {student_id} is not part of this matching")
    if match.instructor_id != source_instructor_id:
        raise ValueError(
            f"Student {student_id} is matched to {match.instructor_id}, not {source_instructor_id}"
        )

    def refuse(reason: MatchingErrorReason, details: str) -> TransferOutcome:
        logger.warning(f"Transfer of {match.student_name} refused: {details}")
        return TransferOutcome(
            matches=list(matches),
            error=MatchingError(
                reason=reason,
                details=details,
                student_id=match.student_id,
                student_name=match.student_name
            )
        )

    if match.license_type not in (target_instructor.license_types or []):
        return refuse(
            MatchingErrorReason.LICENSE_TYPE_MISMATCH,
            f"{target_instructor.full_name} does not teach license type {match.license_type}"
        )

    if require_same_gender and target_instructor.gender != match.student_gender:
        return refuse(
            MatchingErrorReason.GENDER_MISMATCH,
            f"{target_instructor.full_name} does not match the student's gender"
        )

    max_students = target_instructor.max_students_per_period or default_max_students
    assigned = sum(1 for m in matches if m.instructor_id == target_instructor.id)
    if assigned >= max_students:
        return refuse(
            MatchingErrorReason.INSTRUCTOR_FULL,
            f"{target_instructor.full_name} already has {assigned}/{max_students} students"
        )

    updated = [
        replace(
            m,
            instructor_id=target_instructor.id,
            instructor_name=target_instructor.full_name,
            instructor_gender=target_instructor.gender,
            vehicle_plate=target_instructor.vehicle_plate,
            vehicle_model=target_instructor.vehicle_model
        ) if m is match else m
        for m in matches
    ]
    logger.info(
        f"Transferred {match.student_name} from {match.instructor_name} "
        f"to {target_instructor.full_name}"
    )
    return TransferOutcome(matches=updated)


def apply_matching(
    matching_id: str,
    matches: List[MatchingResult],
    applied_at: Optional[datetime] = None
) -> List[StudentAssignmentUpdate]:
    """
    Turn a match list into the student assignment updates for `matching_id`.

    The matching id is always passed in explicitly by the caller.
    """
    if not matching_id:
        raise ValueError("A matching id is required to apply a matching")

    applied_at = applied_at or utc_now()
    seen = set()
    updates = []
    for match in matches:
        if match.student_id in seen:
            raise ValueError(f"Student {match.student_id} appears twice in matching {matching_id}")
        seen.add(match.student_id)
        updates.append(StudentAssignmentUpdate(
            matching_id=matching_id,
            student_id=match.student_id,
            instructor_id=match.instructor_id,
            instructor_name=match.instructor_name,
            assigned_at=applied_at,
            vehicle_plate=match.vehicle_plate,
            vehicle_model=match.vehicle_model
        ))

    logger.info(f"Prepared {len(updates)} assignment updates for matching {matching_id}")
    return updates

"""
Driving School Matching - Matching Engine Router
API endpoints for student-instructor matching.
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
import logging

from app.config import Settings, get_settings
from app.models.models import (
    ExamRecord,
    Instructor,
    InstructorAssignment,
    MatchingError,
    MatchingRequest,
    MatchingResult,
    Student,
)
from app.services.match_adjustments import (
    StudentNotInMatching,
    apply_matching,
    transfer_student,
)
from app.services.matching_engine import InvalidMatchingRequest, MatchingEngine
from app.services.matching_stats import rank_instructors
from app.schemas.matching_schemas import (
    ApplyMatchingRequest,
    ApplyMatchingResponse,
    ExamRecordSchema,
    InstructorSchema,
    MatchingCalculateRequest,
    MatchingCalculateResponse,
    MatchingErrorSchema,
    MatchingResultSchema,
    MatchingStatsSchema,
    StudentAssignmentUpdateSchema,
    StudentSchema,
    TransferRequest,
    TransferResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_matching_engine(settings: Settings = Depends(get_settings)) -> MatchingEngine:
    """
    FastAPI dependency that provides a configured matching engine.
    A fresh engine per request keeps runs independent.
    """
    return MatchingEngine.from_settings(settings)


# ============================================
# Schema <-> Domain Conversion
# ============================================

def _exam_from_schema(exam: ExamRecordSchema) -> ExamRecord:
    return ExamRecord(status=exam.status, attempts=exam.attempts, max_attempts=exam.max_attempts)


def _student_from_schema(student: StudentSchema) -> Student:
    return Student(
        id=student.id,
        name=student.name,
        surname=student.surname,
        gender=student.gender,
        license_type=student.license_type,
        status=student.status,
        written_exam=_exam_from_schema(student.written_exam),
        driving_exam=_exam_from_schema(student.driving_exam),
        instructor_assignments=[
            InstructorAssignment(
                instructor_id=a.instructor_id,
                is_active=a.is_active,
                assigned_date=a.assigned_date
            ) for a in student.instructor_assignments
        ]
    )


def _instructor_from_schema(instructor: InstructorSchema) -> Instructor:
    return Instructor(**instructor.model_dump())


def _match_from_schema(match: MatchingResultSchema) -> MatchingResult:
    return MatchingResult(**match.model_dump())


def _match_to_schema(match: MatchingResult) -> MatchingResultSchema:
    return MatchingResultSchema.model_validate(match, from_attributes=True)


def _error_to_schema(error: Optional[MatchingError]) -> Optional[MatchingErrorSchema]:
    if error is None:
        return None
    return MatchingErrorSchema.model_validate(error, from_attributes=True)


# ============================================
# Matching Endpoints
# ============================================

@router.post("/matching/calculate", response_model=MatchingCalculateResponse)
async def calculate_matching(
    request: MatchingCalculateRequest,
    engine: MatchingEngine = Depends(get_matching_engine)
):
    """
    **Compute a Student-Instructor Matching (preview, nothing is saved)**

    ## Algorithm

    1. **Eligibility**: written exam passed, driving exam not passed,
       active, no active instructor, requested license type
    2. **Quotas**: students split evenly over eligible instructors,
       remainder to the first instructors (optionally per gender)
    3. **Allocation**: least-loaded instructor first, males then
       females, overflow to any instructor with capacity left
    4. **Stats**: per-instructor new assignments and utilization

    Unmatched students are reported in `errors`, never dropped.
    """
    try:
        outcome = engine.match_and_allocate(
            students=[_student_from_schema(s) for s in request.students],
            instructors=[_instructor_from_schema(i) for i in request.instructors],
            request=MatchingRequest(
                license_types=request.license_types,
                consider_gender=request.consider_gender,
                prioritize_first_driving_attempt=request.prioritize_first_driving_attempt
            ),
            selected_student_ids=request.selected_student_ids,
            selected_instructor_ids=request.selected_instructor_ids,
            current_loads=request.current_loads
        )
    except InvalidMatchingRequest as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Matching failed")
        raise HTTPException(status_code=500, detail=f"Matching error: {str(e)}")

    stats = outcome.stats
    summary = (
        f"Matched {stats.matched_students} of {stats.total_students} students "
        f"to {stats.total_instructors} instructors"
    )
    ranked = rank_instructors(stats)
    if ranked and ranked[0].new_assignments:
        summary += f"; busiest: {ranked[0].instructor_name} ({ranked[0].new_assignments} new)"

    return MatchingCalculateResponse(
        matches=[_match_to_schema(m) for m in outcome.matches],
        errors=[_error_to_schema(e) for e in outcome.errors],
        stats=MatchingStatsSchema.model_validate(stats, from_attributes=True),
        summary=summary
    )


@router.post("/matching/transfer", response_model=TransferResponse)
async def transfer_matched_student(
    request: TransferRequest,
    settings: Settings = Depends(get_settings)
):
    """
    **Move a Matched Student to Another Instructor**

    Refused transfers return `transferred: false` with the reason
    (`LICENSE_TYPE_MISMATCH`, `INSTRUCTOR_FULL`, `GENDER_MISMATCH`)
    and the match list unchanged.

    An unknown student is a 404; a source instructor that does not hold
    the student, or a target equal to the source, is a 422.
    """
    try:
        outcome = transfer_student(
            [_match_from_schema(m) for m in request.matches],
            student_id=request.student_id,
            source_instructor_id=request.source_instructor_id,
            target_instructor=_instructor_from_schema(request.target_instructor),
            default_max_students=settings.default_max_students_per_period,
            require_same_gender=request.require_same_gender
        )
    except StudentNotInMatching as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return TransferResponse(
        transferred=outcome.transferred,
        matches=[_match_to_schema(m) for m in outcome.matches],
        error=_error_to_schema(outcome.error)
    )


@router.post("/matching/{matching_id}/apply", response_model=ApplyMatchingResponse)
async def apply_saved_matching(matching_id: str, request: ApplyMatchingRequest):
    """
    **Build Student Assignment Updates for a Matching**

    Returns the per-student instructor/vehicle assignments that the
    persistence service writes for `matching_id`.
    """
    try:
        updates = apply_matching(
            matching_id,
            [_match_from_schema(m) for m in request.matches]
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ApplyMatchingResponse(
        matching_id=matching_id,
        updates=[
            StudentAssignmentUpdateSchema.model_validate(u, from_attributes=True)
            for u in updates
        ],
        total_updates=len(updates)
    )

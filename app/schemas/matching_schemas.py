"""
Driving School Matching - Matching Engine Schemas
Pydantic models for the matching engine API.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime

from app.models.models import (
    ExamStatus,
    Gender,
    InstructorStatus,
    MatchingErrorReason,
    StudentStatus,
)


# ============================================
# Roster Input
# ============================================

class ExamRecordSchema(BaseModel):
    status: ExamStatus = ExamStatus.NOT_TAKEN
    attempts: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=4, ge=0)


class InstructorAssignmentSchema(BaseModel):
    instructor_id: str
    is_active: bool = True
    assigned_date: Optional[datetime] = None


class StudentSchema(BaseModel):
    id: str
    name: str
    surname: str
    gender: Gender
    license_type: str
    status: StudentStatus = StudentStatus.ACTIVE
    written_exam: ExamRecordSchema = Field(default_factory=ExamRecordSchema)
    driving_exam: ExamRecordSchema = Field(default_factory=ExamRecordSchema)
    instructor_assignments: List[InstructorAssignmentSchema] = Field(default_factory=list)


class InstructorSchema(BaseModel):
    id: str
    first_name: str
    last_name: str
    gender: Gender
    status: InstructorStatus = InstructorStatus.ACTIVE
    license_types: List[str] = Field(default_factory=list)
    vehicle_plate: Optional[str] = None
    vehicle_model: Optional[str] = None
    max_students_per_period: Optional[int] = Field(default=None, ge=1)


class MatchingCalculateRequest(BaseModel):
    """Request for a matching preview."""
    students: List[StudentSchema]
    instructors: List[InstructorSchema]
    license_types: List[str] = Field(..., min_length=1)
    consider_gender: bool = True
    prioritize_first_driving_attempt: bool = False
    selected_student_ids: List[str] = Field(default_factory=list)
    selected_instructor_ids: List[str] = Field(default_factory=list)
    current_loads: Dict[str, int] = Field(default_factory=dict)


# ============================================
# Engine Output
# ============================================

class MatchingResultSchema(BaseModel):
    student_id: str
    instructor_id: str
    student_name: str
    instructor_name: str
    student_gender: Gender
    instructor_gender: Gender
    student_status: StudentStatus
    license_type: str
    match_date: datetime
    vehicle_plate: Optional[str] = None
    vehicle_model: Optional[str] = None
    written_exam_attempts: int = 0
    written_exam_max_attempts: int = 4
    written_exam_status: ExamStatus = ExamStatus.NOT_TAKEN
    driving_exam_attempts: int = 0
    driving_exam_max_attempts: int = 4
    driving_exam_status: ExamStatus = ExamStatus.NOT_TAKEN

    model_config = ConfigDict(from_attributes=True)


class MatchingErrorSchema(BaseModel):
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    reason: MatchingErrorReason
    details: str

    model_config = ConfigDict(from_attributes=True)


class InstructorUtilizationSchema(BaseModel):
    instructor_id: str
    instructor_name: str
    current_students: int
    new_assignments: int
    utilization: int
    license_types: List[str]
    gender: Gender

    model_config = ConfigDict(from_attributes=True)


class MatchingStatsSchema(BaseModel):
    total_students: int
    total_instructors: int
    matched_students: int
    unmatched_students: int
    instructor_utilization: List[InstructorUtilizationSchema]

    model_config = ConfigDict(from_attributes=True)


class MatchingCalculateResponse(BaseModel):
    """Response from the matching engine."""
    matches: List[MatchingResultSchema]
    errors: List[MatchingErrorSchema]
    stats: MatchingStatsSchema
    summary: str


# ============================================
# Adjustments
# ============================================

class TransferRequest(BaseModel):
    matches: List[MatchingResultSchema]
    student_id: str
    source_instructor_id: str
    target_instructor: InstructorSchema
    require_same_gender: bool = False


class TransferResponse(BaseModel):
    transferred: bool
    matches: List[MatchingResultSchema]
    error: Optional[MatchingErrorSchema] = None


class ApplyMatchingRequest(BaseModel):
    matches: List[MatchingResultSchema]


class StudentAssignmentUpdateSchema(BaseModel):
    matching_id: str
    student_id: str
    instructor_id: str
    instructor_name: str
    assigned_at: datetime
    vehicle_plate: Optional[str] = None
    vehicle_model: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ApplyMatchingResponse(BaseModel):
    matching_id: str
    updates: List[StudentAssignmentUpdateSchema]
    total_updates: int

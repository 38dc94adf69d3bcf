"""
Driving School Matching - Report Schemas
Pydantic models for instructor performance reporting.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime

from app.models.models import ExamStatus
from app.services.performance_service import MatchingRunStatus, Trend


class HistoricalResultSchema(BaseModel):
    instructor_id: str
    instructor_name: str = "Unknown"
    student_id: str
    written_exam_status: ExamStatus = ExamStatus.NOT_TAKEN
    driving_exam_status: ExamStatus = ExamStatus.NOT_TAKEN

    @field_validator("written_exam_status", "driving_exam_status", mode="before")
    @classmethod
    def normalize_exam_status(cls, value):
        # Persisted results use upper-case statuses ("PASSED")
        if isinstance(value, str):
            return ExamStatus(value)
        return value


class HistoricalMatchingSchema(BaseModel):
    id: str
    name: Optional[str] = None
    created_at: datetime
    status: MatchingRunStatus = MatchingRunStatus.APPLIED
    results: List[HistoricalResultSchema] = Field(default_factory=list)


class InstructorPerformanceRequest(BaseModel):
    matchings: List[HistoricalMatchingSchema]
    reference_date: Optional[datetime] = None


class InstructorPerformanceSchema(BaseModel):
    instructor_id: str
    instructor_name: str
    total_students: int
    passed_students: int
    failed_students: int
    success_rate: int
    rank: int
    trend: Trend
    previous_success_rate: Optional[int] = None
    matching_count: int

    model_config = ConfigDict(from_attributes=True)


class InstructorPerformanceResponse(BaseModel):
    period_start: datetime
    period_end: datetime
    instructors: List[InstructorPerformanceSchema]


class TrendRequest(BaseModel):
    current_rate: float = Field(..., ge=0, le=100)
    previous_rate: Optional[float] = Field(default=None, ge=0, le=100)


class TrendResponse(BaseModel):
    current_rate: float
    previous_rate: Optional[float]
    trend: Trend

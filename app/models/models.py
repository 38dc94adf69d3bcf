"""
Driving School Matching - Domain Models
Plain data entities consumed and produced by the matching engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import enum


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


class StudentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"
    FAILED = "failed"


class InstructorStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class ExamStatus(str, enum.Enum):
    NOT_TAKEN = "not-taken"
    PASSED = "passed"
    FAILED = "failed"

    @classmethod
    def _missing_(cls, value):
        # Persisted records use "PASSED" / "NOT_TAKEN"
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class MatchingErrorReason(str, enum.Enum):
    NO_SUITABLE_INSTRUCTOR = "NO_SUITABLE_INSTRUCTOR"
    INSTRUCTOR_FULL = "INSTRUCTOR_FULL"
    LICENSE_TYPE_MISMATCH = "LICENSE_TYPE_MISMATCH"
    GENDER_MISMATCH = "GENDER_MISMATCH"
    NO_ELIGIBLE_STUDENTS = "NO_ELIGIBLE_STUDENTS"


DEFAULT_MAX_EXAM_ATTEMPTS = 4


# ============================================
# Roster Entities (read-only to the engine)
# ============================================

@dataclass
class ExamRecord:
    status: ExamStatus = ExamStatus.NOT_TAKEN
    attempts: int = 0
    max_attempts: int = DEFAULT_MAX_EXAM_ATTEMPTS


@dataclass
class InstructorAssignment:
    instructor_id: str
    is_active: bool = True
    assigned_date: Optional[datetime] = None


@dataclass
class Student:
    id: str
    name: str
    surname: str
    gender: Gender
    license_type: str
    status: StudentStatus = StudentStatus.ACTIVE
    written_exam: ExamRecord = field(default_factory=ExamRecord)
    driving_exam: ExamRecord = field(default_factory=ExamRecord)
    instructor_assignments: List[InstructorAssignment] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}"

    @property
    def has_active_assignment(self) -> bool:
        return any(a.is_active for a in self.instructor_assignments)


@dataclass
class Instructor:
    id: str
    first_name: str
    last_name: str
    gender: Gender
    status: InstructorStatus = InstructorStatus.ACTIVE
    license_types: List[str] = field(default_factory=list)
    vehicle_plate: Optional[str] = None
    vehicle_model: Optional[str] = None
    max_students_per_period: Optional[int] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ============================================
# Engine Input / Output
# ============================================

@dataclass
class MatchingRequest:
    """Caller-built description of one matching run."""
    license_types: List[str]
    consider_gender: bool = True
    prioritize_first_driving_attempt: bool = False


@dataclass
class MatchingResult:
    """One student-instructor pairing, frozen at match time."""
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
    written_exam_max_attempts: int = DEFAULT_MAX_EXAM_ATTEMPTS
    written_exam_status: ExamStatus = ExamStatus.NOT_TAKEN
    driving_exam_attempts: int = 0
    driving_exam_max_attempts: int = DEFAULT_MAX_EXAM_ATTEMPTS
    driving_exam_status: ExamStatus = ExamStatus.NOT_TAKEN


@dataclass
class MatchingError:
    reason: MatchingErrorReason
    details: str
    student_id: Optional[str] = None
    student_name: Optional[str] = None


@dataclass
class InstructorUtilization:
    instructor_id: str
    instructor_name: str
    current_students: int
    new_assignments: int
    utilization: int  # display heuristic, not a capacity percentage
    license_types: List[str]
    gender: Gender


@dataclass
class MatchingStats:
    total_students: int
    total_instructors: int
    matched_students: int
    unmatched_students: int
    instructor_utilization: List[InstructorUtilization] = field(default_factory=list)


@dataclass
class MatchingOutcome:
    matches: List[MatchingResult]
    errors: List[MatchingError]
    stats: MatchingStats

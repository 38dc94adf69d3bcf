# tests/conftest.py
"""
Shared factories and fixtures for the matching engine tests.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import List

import pytest

# Deterministic engine for API tests; set before app.config is imported
os.environ.setdefault("MATCHING_TIE_BREAK", "stable")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.models.models import (  # noqa: E402
    ExamRecord,
    ExamStatus,
    Gender,
    Instructor,
    InstructorAssignment,
    InstructorStatus,
    MatchingRequest,
    Student,
    StudentStatus,
)
from app.services.allocation_service import StableTieBreak  # noqa: E402
from app.services.matching_engine import MatchingEngine  # noqa: E402

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def make_student(
    student_id: str,
    gender: Gender = Gender.MALE,
    license_type: str = "B",
    status: StudentStatus = StudentStatus.ACTIVE,
    written: ExamStatus = ExamStatus.PASSED,
    driving: ExamStatus = ExamStatus.NOT_TAKEN,
    driving_attempts: int = 0,
    active_instructor: bool = False,
) -> Student:
    """Student that is eligible for a "B" run unless told otherwise."""
    assignments = []
    if active_instructor:
        assignments.append(InstructorAssignment(instructor_id="existing", is_active=True))
    return Student(
        id=student_id,
        name=f"Name{student_id}",
        surname=f"Surname{student_id}",
        gender=gender,
        license_type=license_type,
        status=status,
        written_exam=ExamRecord(status=written, attempts=1),
        driving_exam=ExamRecord(status=driving, attempts=driving_attempts),
        instructor_assignments=assignments,
    )


def make_instructor(
    instructor_id: str,
    gender: Gender = Gender.MALE,
    license_types: List[str] | None = None,
    status: InstructorStatus = InstructorStatus.ACTIVE,
    max_students: int | None = None,
) -> Instructor:
    return Instructor(
        id=instructor_id,
        first_name=f"First{instructor_id}",
        last_name=f"Last{instructor_id}",
        gender=gender,
        status=status,
        license_types=license_types if license_types is not None else ["B"],
        vehicle_plate=f"34 ABC {instructor_id}",
        vehicle_model="Fiat Egea",
        max_students_per_period=max_students,
    )


def make_students(males: int, females: int, prefix: str = "s") -> List[Student]:
    students = [make_student(f"{prefix}{i:02d}", Gender.MALE) for i in range(males)]
    students += [
        make_student(f"{prefix}{males + i:02d}", Gender.FEMALE) for i in range(females)
    ]
    return students


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def engine(clock) -> MatchingEngine:
    """Engine with deterministic ordering and a frozen clock."""
    return MatchingEngine(tie_break=StableTieBreak(), clock=clock)


@pytest.fixture
def b_request() -> MatchingRequest:
    return MatchingRequest(license_types=["B"], consider_gender=True)

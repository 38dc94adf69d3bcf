"""
Driving School Matching - Statistics Aggregator
Summarises one matching run per instructor.
"""

from collections import Counter
from typing import Dict, List, Optional

from app.models.models import (
    Instructor,
    InstructorUtilization,
    MatchingResult,
    MatchingStats,
    Student,
)

DEFAULT_UTILIZATION_PER_ASSIGNMENT = 10


def compute_matching_stats(
    students: List[Student],
    instructors: List[Instructor],
    matches: List[MatchingResult],
    current_loads: Optional[Dict[str, int]] = None,
    utilization_per_assignment: int = DEFAULT_UTILIZATION_PER_ASSIGNMENT
) -> MatchingStats:
    """
    Build MatchingStats for a run.

    `current_loads` carries pre-existing student counts per instructor
    when the caller knows them; otherwise every instructor starts at 0.
    Utilization is `new_assignments * utilization_per_assignment`, a
    display hint rather than a real capacity percentage.
    """
    current_loads = current_loads or {}
    per_instructor = Counter(m.instructor_id for m in matches)

    utilization = []
    for instructor in instructors:
        new_assignments = per_instructor.get(instructor.id, 0)
        utilization.append(InstructorUtilization(
            instructor_id=instructor.id,
            instructor_name=instructor.full_name,
            current_students=current_loads.get(instructor.id, 0),
            new_assignments=new_assignments,
            utilization=new_assignments * utilization_per_assignment,
            license_types=list(instructor.license_types or []),
            gender=instructor.gender
        ))

    matched = len({m.student_id for m in matches})

    return MatchingStats(
        total_students=len(students),
        total_instructors=len(instructors),
        matched_students=matched,
        unmatched_students=len(students) - matched,
        instructor_utilization=utilization
    )


def rank_instructors(stats: MatchingStats) -> List[InstructorUtilization]:
    """Utilization records, busiest instructor first (stable on ties)."""
    return sorted(
        stats.instructor_utilization,
        key=lambda u: u.new_assignments,
        reverse=True
    )

#!/usr/bin/env python3
"""
+==============================================================================+
|           DRIVING SCHOOL MATCHING - ENGINE DEMO                              |
|                                                                              |
|  Runs one matching over a small in-memory roster and prints the pairings,    |
|  the instructor load and any students left unmatched.                        |
|                                                                              |
|  Run from the repository root: python matching_demo.py                       |
+==============================================================================+
"""

import argparse
from typing import List, Tuple

from app.models.models import (
    ExamRecord,
    ExamStatus,
    Gender,
    Instructor,
    InstructorAssignment,
    MatchingOutcome,
    MatchingRequest,
    Student,
)
from app.services.allocation_service import ShuffleTieBreak
from app.services.matching_engine import MatchingEngine


# =============================================================================
# DEMO DATA
# =============================================================================

def create_demo_data() -> Tuple[List[Student], List[Instructor]]:
    """Ten students (two ineligible) and three instructors."""
    names = [
        ("Mehmet", "Kaya", Gender.MALE),
        ("Ayse", "Demir", Gender.FEMALE),
        ("Emre", "Sahin", Gender.MALE),
        ("Zeynep", "Celik", Gender.FEMALE),
        ("Burak", "Yildiz", Gender.MALE),
        ("Elif", "Aydin", Gender.FEMALE),
        ("Can", "Ozturk", Gender.MALE),
        ("Selin", "Arslan", Gender.FEMALE),
        ("Kerem", "Dogan", Gender.MALE),
        ("Deniz", "Kilic", Gender.FEMALE),
    ]
    students = [
        Student(
            id=f"stu-{n + 1:02d}",
            name=first,
            surname=last,
            gender=gender,
            license_type="B",
            written_exam=ExamRecord(status=ExamStatus.PASSED, attempts=1),
            driving_exam=ExamRecord(
                status=ExamStatus.FAILED if n % 4 == 0 else ExamStatus.NOT_TAKEN,
                attempts=1 if n % 4 == 0 else 0
            )
        )
        for n, (first, last, gender) in enumerate(names)
    ]

    # Not eligible: already with an instructor / written exam pending
    students[8].instructor_assignments.append(InstructorAssignment(instructor_id="ins-1"))
    students[9].written_exam = ExamRecord(status=ExamStatus.NOT_TAKEN)

    instructors = [
        Instructor(id="ins-1", first_name="Hasan", last_name="Yilmaz", gender=Gender.MALE,
                   license_types=["B"], vehicle_plate="34 AB 101", vehicle_model="Fiat Egea"),
        Instructor(id="ins-2", first_name="Fatma", last_name="Koc", gender=Gender.FEMALE,
                   license_types=["A2", "B"], vehicle_plate="34 AB 202", vehicle_model="Renault Clio"),
        Instructor(id="ins-3", first_name="Murat", last_name="Polat", gender=Gender.MALE,
                   license_types=["B", "C"], vehicle_plate="34 AB 303", vehicle_model="Toyota Corolla"),
    ]
    return students, instructors


# =============================================================================
# DISPLAY FUNCTIONS
# =============================================================================

def print_header():
    print("\n" + "#" * 75)
    print("#" + "  DRIVING SCHOOL MATCHING - ENGINE DEMO".center(73) + "#")
    print("#" * 75)


def print_input_data(students: List[Student], instructors: List[Instructor]):
    print("\n" + "=" * 75)
    print(" INPUT DATA")
    print("=" * 75)

    print(f"\nSTUDENTS ({len(students)}):")
    print("-" * 75)
    print(f"{'ID':<8}{'Name':<22}{'Gender':<8}{'Written':<11}{'Driving':<11}{'Status':<8}")
    print("-" * 75)
    for s in students:
        status = "assigned" if s.has_active_assignment else s.status.value
        print(f"{s.id:<8}{s.full_name:<22}{s.gender.value:<8}"
              f"{s.written_exam.status.value:<11}{s.driving_exam.status.value:<11}{status:<8}")

    print(f"\nINSTRUCTORS ({len(instructors)}):")
    print("-" * 75)
    for i in instructors:
        print(f"{i.id:<8}{i.full_name:<22}{i.gender.value:<8}{','.join(i.license_types):<10}{i.vehicle_model}")


def print_results(outcome: MatchingOutcome):
    stats = outcome.stats
    print("\n" + "=" * 75)
    print(" MATCHING RESULTS")
    print("=" * 75)
    print(f"\nEligible students: {stats.total_students}  "
          f"Instructors: {stats.total_instructors}  "
          f"Matched: {stats.matched_students}  Unmatched: {stats.unmatched_students}")

    print("\n" + "-" * 75)
    print(f"{'Student':<22}{'->':<4}{'Instructor':<20}{'Vehicle':<18}{'Plate'}")
    print("-" * 75)
    for m in outcome.matches:
        print(f"{m.student_name:<22}{'->':<4}{m.instructor_name:<20}{m.vehicle_model or '-':<18}{m.vehicle_plate or '-'}")

    print("\n" + "-" * 75)
    print(" INSTRUCTOR LOAD")
    print("-" * 75)
    for u in stats.instructor_utilization:
        bar = "█" * u.new_assignments
        print(f"  {u.instructor_name:<20} │ {bar:<12} {u.new_assignments} new ({u.utilization})")

    for error in outcome.errors:
        print(f"\n⚠️  {error.reason.value}: {error.student_name or '-'} ({error.details})")


# =============================================================================
# MAIN EXECUTION
# =============================================================================

def main():
    parser = argparse.ArgumentParser(description="Run a demo student-instructor matching")
    parser.add_argument("--seed", type=int, default=42, help="shuffle seed")
    parser.add_argument("--ignore-gender", action="store_true", help="capacity-only allocation")
    args = parser.parse_args()

    print_header()

    students, instructors = create_demo_data()
    print_input_data(students, instructors)

    engine = MatchingEngine(tie_break=ShuffleTieBreak(seed=args.seed))
    outcome = engine.match_and_allocate(
        students,
        instructors,
        MatchingRequest(license_types=["B"], consider_gender=not args.ignore_gender)
    )

    print_results(outcome)
    print("\n" + "#" * 75 + "\n")
    return outcome


if __name__ == "__main__":
    main()

from collections import Counter

import pytest

from app.models.models import ExamStatus, Gender
from app.services.allocation_service import (
    Allocator,
    ShuffleTieBreak,
    StableTieBreak,
    build_tie_break,
)
from app.services.capacity_planner import plan_capacity
from conftest import FIXED_NOW, make_instructor, make_student, make_students


def _allocator():
    return Allocator(tie_break=StableTieBreak(), clock=lambda: FIXED_NOW)


def _gendered_set(instructors, students):
    males = sum(1 for s in students if s.gender == Gender.MALE)
    return plan_capacity(instructors, len(students), True, males, len(students) - males)


def test_even_split_balances_genders():
    students = make_students(males=6, females=4)
    instructors = [make_instructor("i1"), make_instructor("i2", Gender.FEMALE)]
    working_set = _gendered_set(instructors, students)

    matches = _allocator().allocate(working_set, students)

    assert len(matches) == 10
    for target in working_set.targets:
        assert target.assigned_students == 5
        assert target.assigned_males == 3
        assert target.assigned_females == 2


def test_males_are_allocated_before_females():
    students = make_students(males=0, females=2, prefix="f") + make_students(males=2, females=0)
    working_set = _gendered_set([make_instructor("i1"), make_instructor("i2")], students)

    matches = _allocator().allocate(working_set, students)

    assert [m.student_gender for m in matches] == [
        Gender.MALE, Gender.MALE, Gender.FEMALE, Gender.FEMALE
    ]


def test_overflow_uses_remaining_total_capacity():
    # gender sub-targets all scale down to zero here
    students = make_students(males=1, females=1)
    working_set = _gendered_set([make_instructor("i1"), make_instructor("i2")], students)

    matches = _allocator().allocate(working_set, students)

    assert {m.student_id: m.instructor_id for m in matches} == {"s00": "i1", "s01": "i2"}
    assert all(t.assigned_students == t.target_student_count for t in working_set.targets)


def test_capacity_only_least_loaded_in_list_order():
    students = make_students(males=4, females=3)
    instructors = [make_instructor("i1"), make_instructor("i2"), make_instructor("i3")]
    working_set = plan_capacity(instructors, len(students), consider_gender=False)

    matches = _allocator().allocate(working_set, students)

    assert [m.instructor_id for m in matches] == ["i1", "i2", "i3", "i1", "i2", "i3", "i1"]
    assert Counter(m.instructor_id for m in matches) == {"i1": 3, "i2": 2, "i3": 2}


def test_students_beyond_capacity_stay_unassigned():
    students = make_students(males=3, females=0)
    working_set = plan_capacity([make_instructor("i1")], 2, consider_gender=False)

    matches = _allocator().allocate(working_set, students)

    assert len(matches) == 2
    assert working_set[0].assigned_students == 2


def test_match_is_a_snapshot_of_filter_time_data():
    student = make_student("s1", Gender.FEMALE, driving=ExamStatus.FAILED, driving_attempts=2)
    instructor = make_instructor("i1", Gender.FEMALE)
    working_set = plan_capacity([instructor], 1, consider_gender=False)

    match = _allocator().allocate(working_set, [student])[0]
    student.driving_exam.attempts = 3
    student.driving_exam.status = ExamStatus.PASSED

    assert match.student_name == "Names1 Surnames1"
    assert match.instructor_name == "Firsti1 Lasti1"
    assert match.vehicle_plate == "34 ABC i1"
    assert match.vehicle_model == "Fiat Egea"
    assert match.match_date == FIXED_NOW
    assert match.written_exam_status == ExamStatus.PASSED
    assert match.written_exam_attempts == 1
    assert match.driving_exam_attempts == 2
    assert match.driving_exam_status == ExamStatus.FAILED
    assert match.driving_exam_max_attempts == 4


def test_seeded_shuffle_is_reproducible():
    students = make_students(males=10, females=10)

    first = ShuffleTieBreak(seed=7).order(students)
    second = ShuffleTieBreak(seed=7).order(students)

    assert [s.id for s in first] == [s.id for s in second]
    assert sorted(s.id for s in first) == [s.id for s in students]


def test_stable_tie_break_sorts_by_id():
    students = [make_student("s3"), make_student("s1"), make_student("s2")]
    assert [s.id for s in StableTieBreak().order(students)] == ["s1", "s2", "s3"]


def test_build_tie_break():
    assert isinstance(build_tie_break("stable"), StableTieBreak)
    assert isinstance(build_tie_break("Shuffle", seed=1), ShuffleTieBreak)
    with pytest.raises(ValueError):
        build_tie_break("alphabetical")

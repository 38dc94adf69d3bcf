from app.models.models import Gender
from app.services.allocation_service import build_match
from app.services.matching_stats import compute_matching_stats, rank_instructors
from conftest import FIXED_NOW, make_instructor, make_students


def test_stats_count_new_assignments_per_instructor():
    students = make_students(males=3, females=1)
    i1 = make_instructor("i1", license_types=["A", "B"])
    i2 = make_instructor("i2", Gender.FEMALE)
    i3 = make_instructor("i3")
    matches = [
        build_match(students[0], i1, FIXED_NOW),
        build_match(students[1], i2, FIXED_NOW),
        build_match(students[2], i2, FIXED_NOW),
    ]

    stats = compute_matching_stats(students, [i1, i2, i3], matches)

    assert stats.total_students == 4
    assert stats.total_instructors == 3
    assert stats.matched_students == 3
    assert stats.unmatched_students == 1

    utilization = {u.instructor_id: u for u in stats.instructor_utilization}
    assert utilization["i1"].new_assignments == 1
    assert utilization["i1"].utilization == 10
    assert utilization["i1"].license_types == ["A", "B"]
    assert utilization["i2"].new_assignments == 2
    assert utilization["i2"].gender == Gender.FEMALE
    assert utilization["i3"].utilization == 0
    assert all(u.current_students == 0 for u in stats.instructor_utilization)

    assert [u.instructor_id for u in rank_instructors(stats)] == ["i2", "i1", "i3"]


def test_stats_with_external_loads_and_custom_heuristic():
    students = make_students(males=1, females=0)
    instructor = make_instructor("i1")

    stats = compute_matching_stats(
        students,
        [instructor],
        [build_match(students[0], instructor, FIXED_NOW)],
        current_loads={"i1": 7},
        utilization_per_assignment=25
    )

    assert stats.instructor_utilization[0].current_students == 7
    assert stats.instructor_utilization[0].utilization == 25

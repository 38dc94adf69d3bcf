import pytest

from app.models.models import Gender
from app.services.capacity_planner import plan_capacity, split_evenly
from conftest import make_instructor


def _instructors(count):
    return [make_instructor(f"i{n}") for n in range(count)]


def test_split_evenly_gives_remainder_to_first_buckets():
    assert split_evenly(7, 3) == [3, 2, 2]
    assert split_evenly(10, 2) == [5, 5]
    assert split_evenly(0, 3) == [0, 0, 0]
    assert split_evenly(2, 5) == [1, 1, 0, 0, 0]


@pytest.mark.parametrize("buckets", [1, 2, 3, 7])
@pytest.mark.parametrize("total", [0, 1, 5, 13, 100])
def test_quotas_sum_to_total(total, buckets):
    working_set = plan_capacity(_instructors(buckets), total, consider_gender=False)

    assert working_set.total_target == total
    quotas = [t.target_student_count for t in working_set.targets]
    assert max(quotas) - min(quotas) <= 1


def test_split_evenly_rejects_bad_input():
    with pytest.raises(ValueError):
        split_evenly(5, 0)
    with pytest.raises(ValueError):
        split_evenly(-1, 2)


def test_remainder_distribution_in_list_order():
    working_set = plan_capacity(_instructors(3), 7, consider_gender=False)

    assert [t.target_student_count for t in working_set.targets] == [3, 2, 2]
    assert working_set.consider_gender is False
    assert all(t.target_males == 0 and t.target_females == 0 for t in working_set.targets)


def test_gender_targets_even_split():
    working_set = plan_capacity(_instructors(2), 10, True, male_count=6, female_count=4)

    assert [t.target_student_count for t in working_set.targets] == [5, 5]
    assert [t.target_males for t in working_set.targets] == [3, 3]
    assert [t.target_females for t in working_set.targets] == [2, 2]
    assert working_set.total_assigned == 0


def test_gender_targets_scaled_down_when_exceeding_capacity():
    # totals [2, 2, 1, 1], males [1, 1, 1, 0], females [1, 1, 1, 0]
    working_set = plan_capacity(_instructors(4), 6, True, male_count=3, female_count=3)

    targets = working_set.targets
    assert [t.target_student_count for t in targets] == [2, 2, 1, 1]
    assert [t.target_males for t in targets] == [1, 1, 0, 0]
    assert [t.target_females for t in targets] == [1, 1, 0, 0]
    for t in targets:
        assert t.target_males + t.target_females <= t.target_student_count


def test_single_male_single_female_over_two_instructors():
    working_set = plan_capacity(_instructors(2), 2, True, male_count=1, female_count=1)

    assert [t.target_student_count for t in working_set.targets] == [1, 1]
    assert [(t.target_males, t.target_females) for t in working_set.targets] == [(0, 0), (0, 0)]


def test_working_set_does_not_touch_instructors():
    instructors = _instructors(2)
    working_set = plan_capacity(instructors, 3, False)
    working_set[0].record_assignment(Gender.FEMALE)

    assert working_set[0].assigned_students == 1
    assert working_set[0].assigned_females == 1
    assert not hasattr(instructors[0], "assigned_students")


def test_plan_capacity_rejects_malformed_input():
    with pytest.raises(ValueError):
        plan_capacity([], 3, False)
    with pytest.raises(ValueError):
        plan_capacity(_instructors(2), 3, True, male_count=1, female_count=1)
    with pytest.raises(ValueError):
        plan_capacity(_instructors(2), -1, False)

"""
Driving School Matching - Capacity Planner
Computes how many students each instructor receives in one run.

QUOTA FORMULA:
    base = T // N, remainder = T % N
    the first `remainder` instructors (list order) get base + 1

GENDER SPLIT (optional):
    males and females are split the same way, independently.
    If males + females exceed an instructor's total quota, both are
    scaled down with floor division so the total quota always wins.
"""

from dataclasses import dataclass, field
from typing import List
import logging

from app.models.models import Gender, Instructor

logger = logging.getLogger(__name__)


@dataclass
class InstructorTarget:
    """Per-run quota and counters for one instructor."""
    instructor: Instructor
    target_student_count: int
    target_males: int = 0
    target_females: int = 0
    assigned_students: int = 0
    assigned_males: int = 0
    assigned_females: int = 0

    @property
    def has_capacity(self) -> bool:
        return self.assigned_students < self.target_student_count

    def has_gender_capacity(self, gender: Gender) -> bool:
        if gender == Gender.MALE:
            return self.assigned_males < self.target_males
        return self.assigned_females < self.target_females

    def record_assignment(self, gender: Gender) -> None:
        self.assigned_students += 1
        if gender == Gender.MALE:
            self.assigned_males += 1
        else:
            self.assigned_females += 1


@dataclass
class AllocationWorkingSet:
    """
    Working quotas for a single allocation run.

    Built fresh for every run and indexed by instructor position.
    Instructor entities are only read, so no counter ever leaks back
    into the caller's roster.
    """
    targets: List[InstructorTarget] = field(default_factory=list)
    consider_gender: bool = False

    @property
    def total_target(self) -> int:
        return sum(t.target_student_count for t in self.targets)

    @property
    def total_assigned(self) -> int:
        return sum(t.assigned_students for t in self.targets)

    def __len__(self) -> int:
        return len(self.targets)

    def __getitem__(self, index: int) -> InstructorTarget:
        return self.targets[index]


def split_evenly(total: int, buckets: int) -> List[int]:
    """
    Split `total` units over `buckets` slots.

    Example: split_evenly(7, 3) -> [3, 2, 2]
    """
    if buckets <= 0:
        raise ValueError(f"Cannot split over {buckets} buckets")
    if total < 0:
        raise ValueError(f"Cannot split a negative total ({total})")

    base, remainder = divmod(total, buckets)
    return [base + (1 if i < remainder else 0) for i in range(buckets)]


def _fit_gender_targets(males: int, females: int, capacity: int):
    if males + females <= capacity:
        return males, females
    combined = males + females
    return males * capacity // combined, females * capacity // combined


def plan_capacity(
    instructors: List[Instructor],
    total_students: int,
    consider_gender: bool,
    male_count: int = 0,
    female_count: int = 0
) -> AllocationWorkingSet:
    """
    Build the working set of quotas for one allocation run.

    Args:
        instructors: Eligible instructors, in allocation order
        total_students: Number of eligible students (T)
        consider_gender: Whether to compute male/female sub-targets
        male_count: Eligible male students (gendered mode only)
        female_count: Eligible female students (gendered mode only)

    Returns:
        AllocationWorkingSet with all assigned counters at zero
    """
    if not instructors:
        raise ValueError("Capacity planning needs at least one instructor")
    if male_count < 0 or female_count < 0:
        raise ValueError("Gender counts cannot be negative")
    if consider_gender and male_count + female_count != total_students:
        raise ValueError(
            f"Gender counts ({male_count}+{female_count}) do not add up to {total_students}"
        )

    totals = split_evenly(total_students, len(instructors))
    targets = [
        InstructorTarget(instructor=instructor, target_student_count=quota)
        for instructor, quota in zip(instructors, totals)
    ]

    if consider_gender:
        male_split = split_evenly(male_count, len(instructors))
        female_split = split_evenly(female_count, len(instructors))
        for target, males, females in zip(targets, male_split, female_split):
            fitted = _fit_gender_targets(males, females, target.target_student_count)
            if fitted != (males, females):
                logger.debug(
                    f"Scaled gender targets for {target.instructor.full_name}: "
                    f"{males}M/{females}F -> {fitted[0]}M/{fitted[1]}F"
                )
            target.target_males, target.target_females = fitted

    logger.info(
        "Instructor targets: " + ", ".join(
            f"{t.instructor.full_name}: {t.target_student_count}"
            + (f" ({t.target_males}M, {t.target_females}F)" if consider_gender else "")
            for t in targets
        )
    )

    return AllocationWorkingSet(targets=targets, consider_gender=consider_gender)

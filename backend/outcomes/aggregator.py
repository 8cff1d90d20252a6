"""
aggregator.py — Per-class outcome counters.

Folds a class offering's enrollments through the classifier into one
CategoryStatistics. The fold is order-independent, so partial results
can be combined with `+` / merge().
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from outcomes.classifier import Enrollment, OutcomeCategory, classify

logger = logging.getLogger(__name__)

# OutcomeCategory value → CategoryStatistics attribute
_COUNTER_FIELDS = {
    OutcomeCategory.APPROVED_BY_AVERAGE: "approved_by_average",
    OutcomeCategory.FAILED_BY_AVERAGE: "failed_by_average",
    OutcomeCategory.APPROVED_BY_GRADE: "approved_by_grade",
    OutcomeCategory.FAILED_BY_GRADE: "failed_by_grade",
    OutcomeCategory.FAILED_BY_ATTENDANCE: "failed_by_attendance",
}


@dataclass(frozen=True)
class CategoryStatistics:
    """Outcome counts for one class offering (or a merge of several)."""

    approved_by_average: int = 0
    failed_by_average: int = 0
    approved_by_grade: int = 0
    failed_by_grade: int = 0
    failed_by_attendance: int = 0
    total_students: int = 0

    def __add__(self, other: "CategoryStatistics") -> "CategoryStatistics":
        if not isinstance(other, CategoryStatistics):
            return NotImplemented
        return CategoryStatistics(**{
            f.name: getattr(self, f.name) + getattr(other, f.name)
            for f in fields(self)
        })

    def count(self, category: OutcomeCategory) -> int:
        return getattr(self, _COUNTER_FIELDS[OutcomeCategory(category)])

    @property
    def classified(self) -> int:
        """Sum of the five outcome counters (<= total_students)."""
        return sum(getattr(self, name) for name in _COUNTER_FIELDS.values())

    @property
    def approved(self) -> int:
        return self.approved_by_average + self.approved_by_grade

    @property
    def failed(self) -> int:
        return self.failed_by_average + self.failed_by_grade + self.failed_by_attendance

    def pass_rate(self) -> Optional[float]:
        """Approved share of total_students in percent, or None for an empty class."""
        if self.total_students == 0:
            return None
        return round(self.approved / self.total_students * 100, 2)

    def fail_rate(self) -> Optional[float]:
        if self.total_students == 0:
            return None
        return round(self.failed / self.total_students * 100, 2)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict keyed by the category names plus totalStudents."""
        data: Dict[str, Any] = {
            category.value: getattr(self, name)
            for category, name in _COUNTER_FIELDS.items()
        }
        data["totalStudents"] = self.total_students
        data["passRate"] = self.pass_rate()
        data["failRate"] = self.fail_rate()
        return data


def aggregate(
    enrollments: Optional[Sequence[Enrollment]],
    classifier: Callable[[Enrollment], Optional[OutcomeCategory]] = classify,
) -> CategoryStatistics:
    """
    Count the outcome of every enrollment.

    total_students is the length of the input, taken before classifying,
    so an enrollment the classifier leaves unlabelled is still counted
    there but in no outcome bucket.
    """
    enrollments = list(enrollments or ())
    counts = {name: 0 for name in _COUNTER_FIELDS.values()}

    for enrollment in enrollments:
        category = classifier(enrollment)
        if category is None:
            logger.debug("Enrollment left unclassified: %r", enrollment)
            continue
        counts[_COUNTER_FIELDS[category]] += 1

    return CategoryStatistics(total_students=len(enrollments), **counts)


def merge(statistics: Iterable[CategoryStatistics]) -> CategoryStatistics:
    """Sum any number of statistics; an empty iterable gives all zeros."""
    total = CategoryStatistics()
    for stats in statistics:
        total = total + stats
    return total

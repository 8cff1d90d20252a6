"""
classifier.py — Per-student outcome classification.

Maps one enrollment's pre-computed grade fields to exactly one outcome:

- failedByAttendance — disqualified by absence (overrides every grade)
- approvedByAverage  — pre-final average >= 7.0, no final exam needed
- approvedByGrade    — pre-final average in [3.0, 7.0) and final >= 5.0
- failedByGrade      — pre-final average in [3.0, 7.0) and final < 5.0
- failedByAverage    — pre-final average < 3.0

The averages themselves are computed upstream; this module only compares.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


# ── Thresholds ──────────────────────────────────────────────────────

APPROVAL_AVERAGE = 7.0
REMEDIAL_AVERAGE = 3.0
FINAL_EXAM_PASS = 5.0


class OutcomeCategory(str, Enum):
    """The five mutually exclusive outcomes of an enrollment."""

    APPROVED_BY_AVERAGE = "approvedByAverage"
    FAILED_BY_AVERAGE = "failedByAverage"
    APPROVED_BY_GRADE = "approvedByGrade"
    FAILED_BY_GRADE = "failedByGrade"
    FAILED_BY_ATTENDANCE = "failedByAttendance"


@dataclass(frozen=True)
class Enrollment:
    """
    Grade fields of one student in one class offering.

    Every field has a default so partially populated records still
    classify: missing averages count as 0.0 and a missing attendance flag
    as False. student_id / student_name are carried for display only.
    """

    pre_final_average: float = 0.0
    post_final_average: float = 0.0
    failed_by_attendance: bool = False
    student_id: Optional[str] = None
    student_name: Optional[str] = None


# ── Decision table ──────────────────────────────────────────────────
# Evaluated top to bottom, first match wins. Attendance must stay first.

_Rule = Tuple[Callable[[Enrollment], bool], OutcomeCategory]

_RULES: List[_Rule] = [
    (
        lambda e: e.failed_by_attendance,
        OutcomeCategory.FAILED_BY_ATTENDANCE,
    ),
    (
        lambda e: e.pre_final_average >= APPROVAL_AVERAGE,
        OutcomeCategory.APPROVED_BY_AVERAGE,
    ),
    (
        lambda e: REMEDIAL_AVERAGE <= e.pre_final_average < APPROVAL_AVERAGE
        and e.post_final_average >= FINAL_EXAM_PASS,
        OutcomeCategory.APPROVED_BY_GRADE,
    ),
    (
        lambda e: REMEDIAL_AVERAGE <= e.pre_final_average < APPROVAL_AVERAGE,
        OutcomeCategory.FAILED_BY_GRADE,
    ),
    # pre_final_average < 3.0, and anything not comparable (NaN)
    (
        lambda e: True,
        OutcomeCategory.FAILED_BY_AVERAGE,
    ),
]


def classify(enrollment: Enrollment) -> Optional[OutcomeCategory]:
    """
    Return the outcome category of one enrollment.

    The last rule accepts everything, so the shipped table never yields
    None; callers still have to tolerate it.
    """
    for matches, category in _RULES:
        if matches(enrollment):
            return category
    logger.debug("No outcome rule matched enrollment %r", enrollment)
    return None


def classify_all(enrollments: Iterable[Enrollment]) -> List[Optional[OutcomeCategory]]:
    """Classify each enrollment, preserving input order."""
    return [classify(e) for e in enrollments]

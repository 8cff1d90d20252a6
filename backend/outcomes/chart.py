"""
chart.py — Chart-ready projection of an analytics series.

One flat record per period with the five outcome counts under short
display keys. The keys are shared with the frontend chart and must not
change between releases.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from outcomes.classifier import OutcomeCategory
from outcomes.periods import AnalyticsEntry

# (display key, category, description), in chart stacking order.
CHART_SERIES = [
    ("APV. M", OutcomeCategory.APPROVED_BY_AVERAGE, "Approved by average (>= 7.0)"),
    ("APV. N", OutcomeCategory.APPROVED_BY_GRADE, "Approved on the final exam (>= 5.0)"),
    ("REP. N", OutcomeCategory.FAILED_BY_GRADE, "Failed on the final exam (< 5.0)"),
    ("REP. M", OutcomeCategory.FAILED_BY_AVERAGE, "Failed by average (< 3.0)"),
    ("REP. F", OutcomeCategory.FAILED_BY_ATTENDANCE, "Failed by attendance"),
]

CHART_KEYS = [key for key, _, _ in CHART_SERIES]


@dataclass(frozen=True)
class ChartRecord:
    period: str
    approved_by_average: int
    approved_by_grade: int
    failed_by_grade: int
    failed_by_average: int
    failed_by_attendance: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "APV. M": self.approved_by_average,
            "APV. N": self.approved_by_grade,
            "REP. N": self.failed_by_grade,
            "REP. M": self.failed_by_average,
            "REP. F": self.failed_by_attendance,
        }


def project(series: Sequence[AnalyticsEntry]) -> List[ChartRecord]:
    """Reshape each entry into a ChartRecord. Same length, same order."""
    return [
        ChartRecord(
            period=entry.period_label,
            approved_by_average=entry.statistics.approved_by_average,
            approved_by_grade=entry.statistics.approved_by_grade,
            failed_by_grade=entry.statistics.failed_by_grade,
            failed_by_average=entry.statistics.failed_by_average,
            failed_by_attendance=entry.statistics.failed_by_attendance,
        )
        for entry in series
    ]


def chart_legend() -> List[Dict[str, str]]:
    """Display key, category and description for every chart series."""
    return [
        {"key": key, "category": category.value, "description": description}
        for key, category, description in CHART_SERIES
    ]

"""
periods.py — Per-subject analytics series.

Filters class offerings by subject (case-insensitive), orders them by
(year, semester) and attaches the aggregated outcome statistics of each,
producing a chronological series for tables and charts.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from outcomes.aggregator import CategoryStatistics, aggregate, merge
from outcomes.classifier import Enrollment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassOffering:
    """One class of a subject in a given year/semester, with its enrollments."""

    subject: str
    year: int
    semester: int
    enrollments: Tuple[Enrollment, ...] = field(default_factory=tuple)
    name: Optional[str] = None


@dataclass(frozen=True)
class AnalyticsEntry:
    subject: str
    period_label: str
    year: int
    semester: int
    statistics: CategoryStatistics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "periodLabel": self.period_label,
            "year": self.year,
            "semester": self.semester,
            "statistics": self.statistics.to_dict(),
        }


# ── Helpers ─────────────────────────────────────────────────────────

def period_label(year: int, semester: int) -> str:
    """Human-readable period, e.g. 2023.1."""
    return f"{year}.{semester}"


def filter_by_subject(
    class_offerings: Sequence[ClassOffering], subject: str
) -> List[ClassOffering]:
    """Keep offerings whose subject equals `subject` after lowercasing both."""
    wanted = subject.lower()
    return [o for o in class_offerings if o.subject.lower() == wanted]


def sort_by_period(class_offerings: Sequence[ClassOffering]) -> List[ClassOffering]:
    """Stable ascending sort by (year, semester) on a copy of the input."""
    return sorted(class_offerings, key=lambda o: (o.year, o.semester))


def list_subjects(class_offerings: Sequence[ClassOffering]) -> List[str]:
    """Distinct subjects, case-insensitively de-duplicated, first-seen casing kept."""
    seen: Dict[str, str] = {}
    for offering in class_offerings:
        seen.setdefault(offering.subject.lower(), offering.subject)
    return sorted(seen.values(), key=str.lower)


# ── Series ──────────────────────────────────────────────────────────

def build_series(
    subject: str, class_offerings: Sequence[ClassOffering]
) -> List[AnalyticsEntry]:
    """
    Build the chronological analytics series for one subject.

    Offerings sharing a (year, semester) keep their input order. The
    caller's collection is never reordered.
    """
    matching = filter_by_subject(class_offerings, subject)
    ordered = sort_by_period(matching)
    logger.debug(
        "Series for %r: %d of %d offerings matched",
        subject, len(ordered), len(class_offerings),
    )

    return [
        AnalyticsEntry(
            subject=offering.subject,
            period_label=period_label(offering.year, offering.semester),
            year=offering.year,
            semester=offering.semester,
            statistics=aggregate(offering.enrollments or ()),
        )
        for offering in ordered
    ]


def series_totals(series: Sequence[AnalyticsEntry]) -> CategoryStatistics:
    """Statistics of the whole series merged into one."""
    return merge(entry.statistics for entry in series)

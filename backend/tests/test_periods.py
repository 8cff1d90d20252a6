"""
Tests for outcomes/periods.py — subject filtering, chronological ordering, series.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from outcomes.aggregator import CategoryStatistics
from outcomes.classifier import Enrollment
from outcomes.periods import (
    ClassOffering,
    build_series,
    filter_by_subject,
    list_subjects,
    period_label,
    series_totals,
    sort_by_period,
)


@pytest.fixture
def math_offerings():
    """Two Math classes, newest first; the older one has no students."""
    return [
        ClassOffering(
            subject="Math", year=2023, semester=2,
            enrollments=(
                Enrollment(pre_final_average=8.0),
                Enrollment(pre_final_average=5.0, post_final_average=6.0),
                Enrollment(failed_by_attendance=True),
            ),
        ),
        ClassOffering(subject="Math", year=2023, semester=1, enrollments=()),
    ]


@pytest.fixture
def mixed_offerings():
    return [
        ClassOffering(subject="Physics", year=2022, semester=2, name="P-A"),
        ClassOffering(subject="calculus", year=2024, semester=1, name="C-late"),
        ClassOffering(subject="Calculus", year=2022, semester=2, name="C-first"),
        ClassOffering(subject="CALCULUS", year=2022, semester=2, name="C-second"),
        ClassOffering(subject="Calculus", year=2022, semester=1, name="C-early"),
    ]


class TestBuildSeries:
    """Tests for build_series."""

    def test_two_math_periods(self, math_offerings):
        series = build_series("math", math_offerings)
        assert [e.period_label for e in series] == ["2023.1", "2023.2"]
        assert series[0].statistics == CategoryStatistics()
        assert series[1].statistics == CategoryStatistics(
            approved_by_average=1,
            approved_by_grade=1,
            failed_by_attendance=1,
            total_students=3,
        )

    def test_entry_copies_offering_fields(self, math_offerings):
        entry = build_series("MATH", math_offerings)[1]
        assert entry.subject == "Math"
        assert entry.year == 2023
        assert entry.semester == 2

    def test_sorted_by_year_then_semester(self, mixed_offerings):
        series = build_series("calculus", mixed_offerings)
        keys = [(e.year, e.semester) for e in series]
        assert keys == sorted(keys)
        assert [e.period_label for e in series] == ["2022.1", "2022.2", "2022.2", "2024.1"]

    def test_equal_periods_keep_input_order(self, mixed_offerings):
        ordered = sort_by_period(filter_by_subject(mixed_offerings, "Calculus"))
        assert [o.name for o in ordered] == ["C-early", "C-first", "C-second", "C-late"]

    def test_input_not_mutated(self, mixed_offerings):
        before = list(mixed_offerings)
        build_series("calculus", mixed_offerings)
        assert mixed_offerings == before

    def test_no_match_gives_empty_series(self, mixed_offerings):
        assert build_series("Chemistry", mixed_offerings) == []

    def test_empty_input_gives_empty_series(self):
        assert build_series("Math", []) == []

    def test_no_trimming_in_subject_match(self, mixed_offerings):
        assert build_series(" calculus", mixed_offerings) == []

    def test_idempotent(self, math_offerings):
        assert build_series("math", math_offerings) == build_series("math", math_offerings)


class TestHelpers:
    def test_period_label(self):
        assert period_label(2023, 1) == "2023.1"
        assert period_label(-1, 3) == "-1.3"

    def test_filter_is_case_insensitive(self, mixed_offerings):
        result = filter_by_subject(mixed_offerings, "calculus")
        assert len(result) == 4
        assert all(o.subject.lower() == "calculus" for o in result)

    def test_list_subjects(self, mixed_offerings):
        assert list_subjects(mixed_offerings) == ["calculus", "Physics"]

    def test_series_totals(self, math_offerings):
        totals = series_totals(build_series("math", math_offerings))
        assert totals.total_students == 3
        assert totals.approved == 2

    def test_entry_to_dict(self, math_offerings):
        data = build_series("math", math_offerings)[1].to_dict()
        assert data["periodLabel"] == "2023.2"
        assert data["statistics"]["approvedByGrade"] == 1

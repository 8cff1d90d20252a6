"""
Tests for outcomes/aggregator.py — per-class counters and merging.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from outcomes.aggregator import CategoryStatistics, aggregate, merge
from outcomes.classifier import Enrollment, OutcomeCategory


@pytest.fixture
def mixed_class():
    """One enrollment per outcome, plus a second direct pass."""
    return [
        Enrollment(pre_final_average=8.0),
        Enrollment(pre_final_average=9.5),
        Enrollment(pre_final_average=5.0, post_final_average=6.0),
        Enrollment(pre_final_average=5.0, post_final_average=3.0),
        Enrollment(pre_final_average=1.0),
        Enrollment(pre_final_average=8.0, failed_by_attendance=True),
    ]


class TestAggregate:
    """Tests for the aggregate function."""

    def test_counts_each_category(self, mixed_class):
        stats = aggregate(mixed_class)
        assert stats.approved_by_average == 2
        assert stats.approved_by_grade == 1
        assert stats.failed_by_grade == 1
        assert stats.failed_by_average == 1
        assert stats.failed_by_attendance == 1
        assert stats.total_students == 6

    def test_counters_sum_to_total(self, mixed_class):
        stats = aggregate(mixed_class)
        assert stats.classified == stats.total_students

    def test_empty_class_is_all_zero(self):
        assert aggregate([]) == CategoryStatistics()
        assert aggregate([]).total_students == 0

    def test_none_is_treated_as_empty(self):
        assert aggregate(None) == CategoryStatistics()

    def test_unclassified_enrollment_counts_only_in_total(self, mixed_class):
        def picky(enrollment):
            if enrollment.pre_final_average >= 7.0 and not enrollment.failed_by_attendance:
                return OutcomeCategory.APPROVED_BY_AVERAGE
            return None

        stats = aggregate(mixed_class, classifier=picky)
        assert stats.approved_by_average == 2
        assert stats.total_students == 6
        assert stats.classified == 2

    def test_order_does_not_matter(self, mixed_class):
        assert aggregate(mixed_class) == aggregate(list(reversed(mixed_class)))

    def test_count_by_category(self, mixed_class):
        stats = aggregate(mixed_class)
        assert stats.count(OutcomeCategory.APPROVED_BY_AVERAGE) == 2
        assert stats.count("failedByGrade") == 1


class TestMerge:
    """Tests for combining statistics."""

    def test_split_then_merge_equals_whole(self, mixed_class):
        whole = aggregate(mixed_class)
        parts = merge([aggregate(mixed_class[:2]), aggregate(mixed_class[2:])])
        assert parts == whole

    def test_merge_of_nothing_is_zero(self):
        assert merge([]) == CategoryStatistics()

    def test_addition(self):
        a = CategoryStatistics(approved_by_average=1, total_students=1)
        b = CategoryStatistics(failed_by_attendance=2, total_students=3)
        assert a + b == CategoryStatistics(
            approved_by_average=1, failed_by_attendance=2, total_students=4
        )


class TestRatesAndDict:
    def test_rates(self, mixed_class):
        stats = aggregate(mixed_class)
        assert stats.pass_rate() == 50.0
        assert stats.fail_rate() == 50.0

    def test_rates_none_for_empty_class(self):
        assert CategoryStatistics().pass_rate() is None
        assert CategoryStatistics().fail_rate() is None

    def test_to_dict_keys(self, mixed_class):
        data = aggregate(mixed_class).to_dict()
        for key in (
            "approvedByAverage", "failedByAverage", "approvedByGrade",
            "failedByGrade", "failedByAttendance", "totalStudents",
        ):
            assert key in data
        assert data["totalStudents"] == 6

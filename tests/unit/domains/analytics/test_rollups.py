# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for system-wide analytics rollups."""

import pytest

from src.domains.analytics.rollups import (
    OverallStats,
    aggregate_academic_year_trends,
    aggregate_department_trends,
    aggregate_division_performance,
    aggregate_faculty_performance,
    aggregate_semester_trends,
    aggregate_subject_ratings,
    calculate_overall_stats,
)


@pytest.fixture
def subject_s_records(make_record, lab_record):
    """Two lab scores of 4 and one theory score of 3 for one subject."""
    return [
        lab_record(subject_id="sub-s", subject_name="Subject S", response_value="4"),
        lab_record(subject_id="sub-s", subject_name="Subject S", response_value='{"score": 4}'),
        make_record(subject_id="sub-s", subject_name="Subject S", response_value="3"),
    ]


class TestCalculateOverallStats:
    """Tests for calculate_overall_stats."""

    def test_empty_input_returns_zeroes(self) -> None:
        """Test that no records produce all-zero stats."""
        assert calculate_overall_stats([]) == OverallStats()

    def test_counts_only_positive_scores(self, make_record) -> None:
        """Test that excluded scores do not reach any count."""
        records = [
            make_record(student_id="s1", subject_id="sub-1", response_value="4"),
            make_record(student_id="s2", subject_id="sub-2", response_value="5"),
            make_record(student_id="s3", subject_id="sub-3", response_value="0"),
            make_record(student_id="s4", subject_id="sub-4", response_value="oops"),
        ]

        stats = calculate_overall_stats(records)

        assert stats.total_responses == 2
        assert stats.average_rating == 4.5
        assert stats.unique_subjects == 2
        assert stats.unique_students == 2
        assert stats.unique_faculties == 1
        assert stats.unique_divisions == 1

    def test_only_invalid_scores_returns_zeroes(self, make_record) -> None:
        """Test that a dataset with no counted score behaves like empty."""
        stats = calculate_overall_stats([make_record(response_value="0")])

        assert stats.total_responses == 0
        assert stats.average_rating == 0.0


class TestAggregateSubjectRatings:
    """Tests for aggregate_subject_ratings."""

    def test_lecture_lab_split(self, subject_s_records) -> None:
        """Test the lecture/lab/overall split of a mixed subject."""
        rows = aggregate_subject_ratings(subject_s_records)

        assert len(rows) == 1
        row = rows[0]
        assert row.lab_rating == 4.0
        assert row.lecture_rating == 3.0
        assert row.overall_rating == 3.67
        assert (row.lab_responses, row.lecture_responses, row.total_responses) == (2, 1, 3)

    def test_lecture_only_subject_has_no_lab_rating(self, make_record) -> None:
        """Test that a subject without lab feedback reports lab_rating None."""
        rows = aggregate_subject_ratings([make_record(response_value="4")])

        assert rows[0].lab_rating is None
        assert rows[0].lab_responses == 0

    def test_sorted_by_overall_rating(self, make_record) -> None:
        """Test that subjects are ordered best first."""
        records = [
            make_record(subject_id="sub-low", response_value="2"),
            make_record(subject_id="sub-high", response_value="5"),
        ]

        rows = aggregate_subject_ratings(records)

        assert [r.subject_id for r in rows] == ["sub-high", "sub-low"]

    def test_distinct_counts_ignore_excluded_scores(self, make_record) -> None:
        """Test that faculty reached only through zero scores are not counted."""
        records = [
            make_record(faculty_id="fac-1", division_id="div-a", response_value="4"),
            make_record(faculty_id="fac-2", division_id="div-b", response_value="0"),
        ]

        row = aggregate_subject_ratings(records)[0]

        assert row.faculty_count == 1
        assert row.division_count == 1

    def test_idempotent(self, subject_s_records) -> None:
        """Test that repeated calls produce identical rows."""
        assert aggregate_subject_ratings(subject_s_records) == aggregate_subject_ratings(
            subject_s_records
        )


class TestAggregateFacultyPerformance:
    """Tests for aggregate_faculty_performance."""

    def test_rank_with_tie(self, make_record) -> None:
        """Test ranks for means 4.8, 4.8 and 4.2."""
        records = [
            make_record(faculty_id="fac-2", faculty_name="Two", response_value="4.8"),
            make_record(faculty_id="fac-3", faculty_name="Three", response_value="4.2"),
            make_record(faculty_id="fac-1", faculty_name="One", response_value="4.8"),
        ]

        rows = aggregate_faculty_performance(records)

        assert [(r.faculty_id, r.rank) for r in rows] == [
            ("fac-1", 1),
            ("fac-2", 2),
            ("fac-3", 3),
        ]

    def test_missing_designation_defaults(self, make_record) -> None:
        """Test that a missing designation is rendered as N/A."""
        rows = aggregate_faculty_performance([make_record(faculty_designation=None)])

        assert rows[0].designation == "N/A"

    def test_counts_subjects_and_divisions(self, make_record) -> None:
        """Test distinct subject and division counts per faculty."""
        records = [
            make_record(subject_id="sub-1", division_id="div-a"),
            make_record(subject_id="sub-2", division_id="div-a"),
            make_record(subject_id="sub-2", division_id="div-b"),
        ]

        row = aggregate_faculty_performance(records)[0]

        assert row.subject_count == 2
        assert row.division_count == 2
        assert row.total_responses == 3


class TestAggregateDivisionPerformance:
    """Tests for aggregate_division_performance."""

    def test_sorted_by_division_name(self, make_record) -> None:
        """Test that divisions are ordered by name."""
        records = [
            make_record(division_id="div-c", division_name="C", response_value="5"),
            make_record(division_id="div-a", division_name="A", response_value="3"),
        ]

        rows = aggregate_division_performance(records)

        assert [r.division_name for r in rows] == ["A", "C"]
        assert rows[0].average_rating == 3.0
        assert rows[0].department_name == "Computer Engineering"


class TestAggregateAcademicYearTrends:
    """Tests for aggregate_academic_year_trends."""

    def test_sorted_by_year_label(self, make_record) -> None:
        """Test one row per academic year, ordered by label."""
        records = [
            make_record(academic_year_id="ay-25", academic_year_string="2025-2026", response_value="5"),
            make_record(academic_year_id="ay-24", academic_year_string="2024-2025", response_value="3"),
            make_record(academic_year_id="ay-24", academic_year_string="2024-2025", response_value="4"),
        ]

        rows = aggregate_academic_year_trends(records)

        assert [r.academic_year_string for r in rows] == ["2024-2025", "2025-2026"]
        assert rows[0].average_rating == 3.5
        assert rows[0].total_responses == 2
        assert rows[0].department_count == 1


class TestAggregateSemesterTrends:
    """Tests for aggregate_semester_trends."""

    def test_nested_by_semester_then_year(self, make_record) -> None:
        """Test semester entries hold per-year points in label order."""
        records = [
            make_record(semester_number=5, academic_year_id="ay-25", academic_year_string="2025-2026"),
            make_record(semester_number=3, academic_year_id="ay-25", academic_year_string="2025-2026"),
            make_record(semester_number=3, academic_year_id="ay-24", academic_year_string="2024-2025"),
        ]

        trends = aggregate_semester_trends(records)

        assert [t.semester_number for t in trends] == [3, 5]
        assert [p.academic_year_string for p in trends[0].academic_year_data] == [
            "2024-2025",
            "2025-2026",
        ]
        assert trends[0].academic_year_data[0].response_count == 1


class TestAggregateDepartmentTrends:
    """Tests for aggregate_department_trends."""

    def test_nested_by_year_then_department(self, make_record) -> None:
        """Test year entries hold departments ordered by name."""
        records = [
            make_record(department_id="dept-me", department_name="Mechanical", response_value="2"),
            make_record(department_id="dept-ce", department_name="Computer Engineering"),
            make_record(
                academic_year_id="ay-23",
                academic_year_string="2023-2024",
                department_id="dept-me",
                department_name="Mechanical",
            ),
        ]

        trends = aggregate_department_trends(records)

        assert [t.academic_year_string for t in trends] == ["2023-2024", "2024-2025"]
        latest = trends[1].department_data
        assert [d.department_name for d in latest] == ["Computer Engineering", "Mechanical"]
        assert latest[1].average_rating == 2.0

    def test_to_dict_is_plain_data(self, make_record) -> None:
        """Test that rows serialize to nested dictionaries."""
        trend = aggregate_department_trends([make_record()])[0]

        data = trend.to_dict()

        assert data["academic_year_string"] == "2024-2025"
        assert data["department_data"][0]["department_id"] == "dept-ce"

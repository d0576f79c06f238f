# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for single-entity drill-downs."""

import pytest

from src.domains.analytics.details import (
    build_academic_year_detail,
    build_division_detail,
    build_faculty_detail,
    build_subject_detail,
)
from src.domains.analytics.records import LectureType


class TestBuildSubjectDetail:
    """Tests for build_subject_detail."""

    def test_empty_records_rejected(self) -> None:
        """Test that an empty record set raises ValueError."""
        with pytest.raises(ValueError):
            build_subject_detail([])

    def test_ratings_and_header(self, make_record, lab_record) -> None:
        """Test the subject header and lecture/lab/overall ratings."""
        records = [
            lab_record(response_value="4"),
            lab_record(response_value="4"),
            make_record(response_value="3"),
        ]

        detail = build_subject_detail(records)

        assert detail.subject.id == "sub-ds"
        assert detail.subject.code == "CE301"
        assert detail.lab_rating == 4.0
        assert detail.lecture_rating == 3.0
        assert detail.overall_rating == 3.67
        assert (detail.lab_responses, detail.lecture_responses, detail.total_responses) == (
            2,
            1,
            3,
        )

    def test_faculty_breakdown_per_lecture_type(self, make_record, lab_record) -> None:
        """Test faculty rows keyed by faculty and lecture type with unique divisions."""
        records = [
            make_record(division_name="B", division_id="div-b"),
            make_record(division_name="A", division_id="div-a"),
            make_record(division_name="B", division_id="div-b"),
            lab_record(division_name="A", division_id="div-a", response_value="5"),
        ]

        detail = build_subject_detail(records)

        rows = {(r.faculty_id, r.lecture_type): r for r in detail.faculty_breakdown}
        lecture = rows[("fac-rao", LectureType.LECTURE)]
        lab = rows[("fac-rao", LectureType.LAB)]
        assert lecture.divisions == ["B", "A"]
        assert lecture.responses == 3
        assert lab.rating == 5.0

    def test_division_and_question_breakdown(self, make_record, lab_record) -> None:
        """Test division split and category grouping, skipping uncategorized."""
        records = [
            make_record(response_value="3"),
            lab_record(response_value="5"),
            make_record(question_category_id=None, response_value="1"),
        ]

        detail = build_subject_detail(records)

        division = detail.division_breakdown[0]
        assert division.lecture_rating == 2.0
        assert division.lab_rating == 5.0
        assert division.total_rating == 3.0
        assert division.responses == 3
        assert [q.category_id for q in detail.question_breakdown] == ["cat-theory", "cat-lab"]
        assert detail.question_breakdown[0].question_count == 1

    def test_no_counted_scores(self, make_record) -> None:
        """Test that records with only excluded scores still build a detail."""
        detail = build_subject_detail([make_record(response_value="0")])

        assert detail.overall_rating == 0.0
        assert detail.lecture_rating is None
        assert detail.faculty_breakdown == []


class TestBuildFacultyDetail:
    """Tests for build_faculty_detail."""

    def test_rank_comes_from_ranking_records(self, make_record) -> None:
        """Test that rank reflects standing among all faculty."""
        own = [make_record(faculty_id="fac-2", response_value="4.8")]
        ranking = [
            make_record(faculty_id="fac-1", response_value="4.8"),
            make_record(faculty_id="fac-2", response_value="4.8"),
            make_record(faculty_id="fac-3", response_value="4.2"),
        ]

        detail = build_faculty_detail(own, ranking)

        assert detail.rank == 2
        assert detail.total_faculty == 3

    def test_rank_zero_when_absent_from_ranking(self, make_record) -> None:
        """Test that a faculty member missing from the ranking set has rank 0."""
        own = [make_record(faculty_id="fac-9")]
        ranking = [make_record(faculty_id="fac-1")]

        detail = build_faculty_detail(own, ranking)

        assert detail.rank == 0
        assert detail.total_faculty == 1

    def test_designation_preference(self, make_record) -> None:
        """Test entity designation over record designation, then empty string."""
        records = [make_record(faculty_designation="Professor")]

        assert build_faculty_detail(records, records, designation="HOD").faculty.designation == "HOD"
        assert build_faculty_detail(records, records).faculty.designation == "Professor"

        bare = [make_record(faculty_designation=None)]
        assert build_faculty_detail(bare, bare).faculty.designation == ""

    def test_breakdowns(self, make_record, lab_record) -> None:
        """Test subject, division and category breakdowns."""
        records = [
            make_record(subject_id="sub-1", subject_name="One", response_value="4"),
            lab_record(subject_id="sub-1", subject_name="One", response_value="2"),
            make_record(subject_id="sub-2", subject_name="Two", division_id="div-b", response_value="5"),
            make_record(question_category_name=None, response_value="3"),
        ]

        detail = build_faculty_detail(records, records)

        assert [(s.subject_id, s.lecture_type) for s in detail.subject_breakdown] == [
            ("sub-1", LectureType.LECTURE),
            ("sub-1", LectureType.LAB),
            ("sub-2", LectureType.LECTURE),
            ("sub-ds", LectureType.LECTURE),
        ]
        assert detail.subject_breakdown[0].semester == 3
        assert len(detail.division_breakdown) == 4
        categories = {c.category: c for c in detail.question_category_breakdown}
        assert set(categories) == {"Theory", "Lab Performance"}
        assert categories["Theory"].question_count == 2

    def test_trend_sorted_by_year_then_semester(self, make_record) -> None:
        """Test chronological trend points."""
        records = [
            make_record(academic_year_id="ay-25", academic_year_string="2025-2026", semester_number=1),
            make_record(semester_number=5),
            make_record(semester_number=3),
        ]

        detail = build_faculty_detail(records, records)

        assert [(p.academic_year, p.semester) for p in detail.trend_data] == [
            ("2024-2025", 3),
            ("2024-2025", 5),
            ("2025-2026", 1),
        ]


class TestBuildDivisionDetail:
    """Tests for build_division_detail."""

    def test_breakdowns(self, make_record, lab_record) -> None:
        """Test header, faculty, subject and academic year views."""
        records = [
            make_record(academic_year_id="ay-25", academic_year_string="2025-2026", response_value="5"),
            make_record(response_value="3"),
            lab_record(response_value="4"),
        ]

        detail = build_division_detail(records)

        assert detail.division.name == "A"
        assert detail.division.semester_number == 3
        assert detail.overall_rating == 4.0
        assert len(detail.faculty_breakdown) == 2
        subject = detail.subject_breakdown[0]
        assert subject.lecture_rating == 4.0
        assert subject.lab_rating == 4.0
        assert [c.academic_year_string for c in detail.academic_year_comparison] == [
            "2024-2025",
            "2025-2026",
        ]

    def test_empty_records_rejected(self) -> None:
        """Test that an empty record set raises ValueError."""
        with pytest.raises(ValueError):
            build_division_detail([])


class TestBuildAcademicYearDetail:
    """Tests for build_academic_year_detail."""

    def test_best_performers(self, make_record) -> None:
        """Test top faculty per department and best subject per semester."""
        records = [
            make_record(faculty_id="fac-b", faculty_name="B", response_value="5"),
            make_record(faculty_id="fac-a", faculty_name="A", response_value="5"),
            make_record(faculty_id="fac-c", faculty_name="C", response_value="2"),
            make_record(subject_id="sub-x", subject_name="X", semester_number=5, response_value="4"),
        ]

        detail = build_academic_year_detail(records)

        assert detail.academic_year.year_string == "2024-2025"
        department = detail.department_breakdown[0]
        assert department.top_faculty.name == "A"
        assert department.top_faculty.rating == 5.0
        assert [s.semester_number for s in detail.semester_breakdown] == [3, 5]
        assert detail.semester_breakdown[0].best_subject.name == "Data Structures"
        assert detail.semester_breakdown[1].best_subject.name == "X"

    def test_sorted_sections(self, make_record) -> None:
        """Test departments and divisions ordered by name."""
        records = [
            make_record(department_id="dept-me", department_name="Mechanical", division_id="div-z", division_name="Z"),
            make_record(),
        ]

        detail = build_academic_year_detail(records)

        assert [d.department_name for d in detail.department_breakdown] == [
            "Computer Engineering",
            "Mechanical",
        ]
        assert [d.division_name for d in detail.division_breakdown] == ["A", "Z"]

    def test_no_counted_scores_has_no_best(self, make_record) -> None:
        """Test that sections are empty when nothing counts."""
        detail = build_academic_year_detail([make_record(response_value="0")])

        assert detail.total_responses == 0
        assert detail.department_breakdown == []

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""System-wide analytics rollups.

Each builder consumes the full filtered record collection and returns
one rollup table. Builders are independent pure functions: they do not
share state or depend on each other's output, and calling one twice on
the same input yields the same rows.

Shared rules:
- Only records with a counted score (> 0) participate, including in
  distinct counts.
- Display fields of a group come from the first record seen in it.
- Means are rounded to two decimals at the output boundary only.

Usage:
    from src.domains.analytics.rollups import aggregate_subject_ratings

    rows = aggregate_subject_ratings(records)
    payload = [row.to_dict() for row in rows]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from src.domains.analytics.grouping import (
    ScoreBucket,
    SplitBucket,
    group_by,
    rank_faculty,
    scored,
)
from src.domains.analytics.records import FeedbackRecord

_DEFAULT_DESIGNATION = "N/A"


@dataclass
class OverallStats:
    """Headline numbers for the whole filtered dataset."""

    total_responses: int = 0
    average_rating: float = 0.0
    unique_subjects: int = 0
    unique_faculties: int = 0
    unique_students: int = 0
    unique_divisions: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class SubjectRating:
    """Per-subject rating split into lecture and lab feedback."""

    subject_id: str
    subject_name: str
    subject_abbreviation: str
    subject_code: str
    lecture_rating: float | None
    lab_rating: float | None
    overall_rating: float
    lecture_responses: int
    lab_responses: int
    total_responses: int
    faculty_count: int
    division_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class FacultyPerformance:
    """Per-faculty rating with its position among all faculty."""

    faculty_id: str
    faculty_name: str
    faculty_abbreviation: str
    designation: str
    average_rating: float
    total_responses: int
    rank: int
    subject_count: int
    division_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class DivisionPerformance:
    """Per-division rating."""

    division_id: str
    division_name: str
    department_name: str
    semester_number: int
    average_rating: float
    total_responses: int
    faculty_count: int
    subject_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class AcademicYearTrend:
    """Per-academic-year rating."""

    academic_year_id: str
    academic_year_string: str
    average_rating: float
    total_responses: int
    department_count: int
    division_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class SemesterYearPoint:
    """Rating of one semester number within one academic year."""

    academic_year_id: str
    academic_year_string: str
    average_rating: float
    response_count: int


@dataclass
class SemesterTrend:
    """Ratings of one semester number across academic years."""

    semester_number: int
    academic_year_data: list[SemesterYearPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class DepartmentYearPoint:
    """Rating of one department within one academic year."""

    department_id: str
    department_name: str
    average_rating: float
    response_count: int


@dataclass
class DepartmentTrend:
    """Department ratings within one academic year."""

    academic_year_string: str
    department_data: list[DepartmentYearPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def calculate_overall_stats(records: Sequence[FeedbackRecord]) -> OverallStats:
    """Summarize every counted score in *records*.

    Args:
        records: Filtered feedback records.

    Returns:
        OverallStats with the response count, mean rating and distinct
        subject/faculty/student/division counts.
    """
    pairs = list(scored(records))
    if not pairs:
        return OverallStats()

    bucket = ScoreBucket.of(pairs)
    counted = [record for record, _ in pairs]
    return OverallStats(
        total_responses=bucket.count,
        average_rating=bucket.mean(),
        unique_subjects=len({r.subject_id for r in counted}),
        unique_faculties=len({r.faculty_id for r in counted}),
        unique_students=len({r.student_id for r in counted if r.student_id}),
        unique_divisions=len({r.division_id for r in counted}),
    )


def aggregate_subject_ratings(records: Sequence[FeedbackRecord]) -> list[SubjectRating]:
    """Rate each subject, split by lecture and lab feedback.

    Returns:
        Subject rows ordered by overall rating, highest first. Equal
        ratings keep first-seen order.
    """
    rows: list[SubjectRating] = []
    for pairs in group_by(scored(records), lambda p: p[0].subject_id).values():
        first = pairs[0][0]
        split = SplitBucket.of(pairs)
        combined = split.combined
        rows.append(
            SubjectRating(
                subject_id=first.subject_id,
                subject_name=first.subject_name,
                subject_abbreviation=first.subject_abbreviation,
                subject_code=first.subject_code,
                lecture_rating=split.lecture.mean(default=None),
                lab_rating=split.lab.mean(default=None),
                overall_rating=combined.mean(),
                lecture_responses=split.lecture.count,
                lab_responses=split.lab.count,
                total_responses=combined.count,
                faculty_count=len({r.faculty_id for r, _ in pairs}),
                division_count=len({r.division_id for r, _ in pairs}),
            )
        )
    rows.sort(key=lambda row: row.overall_rating, reverse=True)
    return rows


def aggregate_faculty_performance(
    records: Sequence[FeedbackRecord],
) -> list[FacultyPerformance]:
    """Rate and rank each faculty member.

    Faculty are ordered as rank_faculty orders them: unrounded average
    rating, highest first, with faculty id as tie-break.
    """
    groups = group_by(scored(records), lambda p: p[0].faculty_id)
    rows: list[FacultyPerformance] = []
    for standing in rank_faculty(records):
        pairs = groups[standing.faculty_id]
        first = pairs[0][0]
        rows.append(
            FacultyPerformance(
                faculty_id=first.faculty_id,
                faculty_name=first.faculty_name,
                faculty_abbreviation=first.faculty_abbreviation,
                designation=first.faculty_designation or _DEFAULT_DESIGNATION,
                average_rating=standing.average_rating,
                total_responses=standing.total_responses,
                rank=standing.rank,
                subject_count=len({r.subject_id for r, _ in pairs}),
                division_count=len({r.division_id for r, _ in pairs}),
            )
        )
    return rows


def aggregate_division_performance(
    records: Sequence[FeedbackRecord],
) -> list[DivisionPerformance]:
    """Rate each division, ordered by division name."""
    rows: list[DivisionPerformance] = []
    for pairs in group_by(scored(records), lambda p: p[0].division_id).values():
        first = pairs[0][0]
        bucket = ScoreBucket.of(pairs)
        rows.append(
            DivisionPerformance(
                division_id=first.division_id,
                division_name=first.division_name,
                department_name=first.department_name,
                semester_number=first.semester_number,
                average_rating=bucket.mean(),
                total_responses=bucket.count,
                faculty_count=len({r.faculty_id for r, _ in pairs}),
                subject_count=len({r.subject_id for r, _ in pairs}),
            )
        )
    rows.sort(key=lambda row: row.division_name)
    return rows


def aggregate_academic_year_trends(
    records: Sequence[FeedbackRecord],
) -> list[AcademicYearTrend]:
    """Rate each academic year, ordered by year label."""
    rows: list[AcademicYearTrend] = []
    for pairs in group_by(scored(records), lambda p: p[0].academic_year_id).values():
        first = pairs[0][0]
        bucket = ScoreBucket.of(pairs)
        rows.append(
            AcademicYearTrend(
                academic_year_id=first.academic_year_id,
                academic_year_string=first.academic_year_string,
                average_rating=bucket.mean(),
                total_responses=bucket.count,
                department_count=len({r.department_id for r, _ in pairs}),
                division_count=len({r.division_id for r, _ in pairs}),
            )
        )
    rows.sort(key=lambda row: row.academic_year_string)
    return rows


def aggregate_semester_trends(records: Sequence[FeedbackRecord]) -> list[SemesterTrend]:
    """Rate each semester number per academic year.

    Returns:
        One entry per semester number (ascending), each holding the
        academic years it has data for, ordered by year label.
    """
    trends: list[SemesterTrend] = []
    by_semester = group_by(scored(records), lambda p: p[0].semester_number)
    for semester_number, semester_pairs in sorted(by_semester.items()):
        points: list[SemesterYearPoint] = []
        for pairs in group_by(semester_pairs, lambda p: p[0].academic_year_id).values():
            first = pairs[0][0]
            bucket = ScoreBucket.of(pairs)
            points.append(
                SemesterYearPoint(
                    academic_year_id=first.academic_year_id,
                    academic_year_string=first.academic_year_string,
                    average_rating=bucket.mean(),
                    response_count=bucket.count,
                )
            )
        points.sort(key=lambda point: point.academic_year_string)
        trends.append(SemesterTrend(semester_number=semester_number, academic_year_data=points))
    return trends


def aggregate_department_trends(
    records: Sequence[FeedbackRecord],
) -> list[DepartmentTrend]:
    """Rate each department per academic year label.

    Returns:
        One entry per academic year label (ascending), each holding its
        departments ordered by name.
    """
    trends: list[DepartmentTrend] = []
    by_year = group_by(scored(records), lambda p: p[0].academic_year_string)
    for year_string, year_pairs in sorted(by_year.items()):
        points: list[DepartmentYearPoint] = []
        for pairs in group_by(year_pairs, lambda p: p[0].department_id).values():
            first = pairs[0][0]
            bucket = ScoreBucket.of(pairs)
            points.append(
                DepartmentYearPoint(
                    department_id=first.department_id,
                    department_name=first.department_name,
                    average_rating=bucket.mean(),
                    response_count=bucket.count,
                )
            )
        points.sort(key=lambda point: point.department_name)
        trends.append(DepartmentTrend(academic_year_string=year_string, department_data=points))
    return trends

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Drill-down analytics scoped to a single entity.

Detail builders are narrower versions of the rollups: they receive the
records of one subject, faculty member, division or academic year and
break them down further by faculty, division, subject, question
category and time.

Builders expect a non-empty record collection. Explaining an empty one
(missing entity, deleted entity, or no matching feedback) is the
service's job, since it needs the base entity store.
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
    sort_by_rating,
)
from src.domains.analytics.records import FeedbackRecord, LectureType
from src.domains.analytics.scoring import classify_lecture_type


def _require_records(records: Sequence[FeedbackRecord]) -> FeedbackRecord:
    if not records:
        raise ValueError("Detail builders require at least one feedback record")
    return records[0]


# =============================================================================
# Subject detail
# =============================================================================


@dataclass
class SubjectHeader:
    id: str
    name: str
    abbreviation: str
    code: str


@dataclass
class SubjectFacultyBreakdown:
    """One faculty member teaching the subject in one lecture type."""

    faculty_id: str
    faculty_name: str
    faculty_abbreviation: str
    lecture_type: LectureType
    rating: float
    responses: int
    divisions: list[str] = field(default_factory=list)


@dataclass
class SubjectDivisionBreakdown:
    division_id: str
    division_name: str
    lecture_rating: float | None
    lab_rating: float | None
    total_rating: float
    responses: int


@dataclass
class QuestionCategoryBreakdown:
    category_id: str
    category_name: str | None
    avg_rating: float
    question_count: int


@dataclass
class SubjectDetail:
    """Drill-down for one subject."""

    subject: SubjectHeader
    overall_rating: float
    lecture_rating: float | None
    lab_rating: float | None
    total_responses: int
    lecture_responses: int
    lab_responses: int
    faculty_breakdown: list[SubjectFacultyBreakdown] = field(default_factory=list)
    division_breakdown: list[SubjectDivisionBreakdown] = field(default_factory=list)
    question_breakdown: list[QuestionCategoryBreakdown] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return asdict(self)


def build_subject_detail(records: Sequence[FeedbackRecord]) -> SubjectDetail:
    """Build the drill-down for the subject that *records* belong to.

    Args:
        records: Non-empty records of a single subject.

    Returns:
        SubjectDetail with lecture/lab/overall ratings and faculty,
        division and question-category breakdowns.

    Raises:
        ValueError: If *records* is empty.
    """
    first = _require_records(records)
    pairs = list(scored(records))
    split = SplitBucket.of(pairs)
    combined = split.combined

    faculty_breakdown = []
    by_faculty = group_by(pairs, lambda p: (p[0].faculty_id, classify_lecture_type(p[0])))
    for (_, lecture_type), group in by_faculty.items():
        head = group[0][0]
        bucket = ScoreBucket.of(group)
        faculty_breakdown.append(
            SubjectFacultyBreakdown(
                faculty_id=head.faculty_id,
                faculty_name=head.faculty_name,
                faculty_abbreviation=head.faculty_abbreviation,
                lecture_type=lecture_type,
                rating=bucket.mean(),
                responses=bucket.count,
                divisions=list(dict.fromkeys(r.division_name for r, _ in group)),
            )
        )

    division_breakdown = []
    for group in group_by(pairs, lambda p: p[0].division_id).values():
        head = group[0][0]
        division_split = SplitBucket.of(group)
        division_breakdown.append(
            SubjectDivisionBreakdown(
                division_id=head.division_id,
                division_name=head.division_name,
                lecture_rating=division_split.lecture.mean(default=None),
                lab_rating=division_split.lab.mean(default=None),
                total_rating=division_split.combined.mean(),
                responses=division_split.combined.count,
            )
        )

    question_breakdown = []
    categorized = [p for p in pairs if p[0].question_category_id]
    for category_id, group in group_by(categorized, lambda p: p[0].question_category_id).items():
        bucket = ScoreBucket.of(group)
        question_breakdown.append(
            QuestionCategoryBreakdown(
                category_id=category_id,
                category_name=group[0][0].question_category_name,
                avg_rating=bucket.mean(),
                question_count=bucket.count,
            )
        )

    return SubjectDetail(
        subject=SubjectHeader(
            id=first.subject_id,
            name=first.subject_name,
            abbreviation=first.subject_abbreviation,
            code=first.subject_code,
        ),
        overall_rating=combined.mean(),
        lecture_rating=split.lecture.mean(default=None),
        lab_rating=split.lab.mean(default=None),
        total_responses=combined.count,
        lecture_responses=split.lecture.count,
        lab_responses=split.lab.count,
        faculty_breakdown=faculty_breakdown,
        division_breakdown=division_breakdown,
        question_breakdown=question_breakdown,
    )


# =============================================================================
# Faculty detail
# =============================================================================


@dataclass
class FacultyHeader:
    id: str
    name: str
    abbreviation: str
    designation: str


@dataclass
class FacultySubjectBreakdown:
    subject_id: str
    subject_name: str
    subject_abbreviation: str
    lecture_type: LectureType
    rating: float
    responses: int
    semester: int
    academic_year: str


@dataclass
class FacultyDivisionBreakdown:
    division_id: str
    division_name: str
    subject_name: str
    lecture_type: LectureType
    rating: float
    responses: int


@dataclass
class CategoryRating:
    category: str
    avg_rating: float
    question_count: int


@dataclass
class FacultyTrendPoint:
    academic_year_id: str
    academic_year: str
    semester: int
    rating: float
    responses: int


@dataclass
class FacultyDetail:
    """Drill-down for one faculty member.

    Attributes:
        rank: Position among all faculty in the ranking record set, or 0
            if the faculty member has no counted score there.
        total_faculty: Number of ranked faculty in that record set.
    """

    faculty: FacultyHeader
    overall_rating: float
    total_responses: int
    rank: int
    total_faculty: int
    subject_breakdown: list[FacultySubjectBreakdown] = field(default_factory=list)
    division_breakdown: list[FacultyDivisionBreakdown] = field(default_factory=list)
    question_category_breakdown: list[CategoryRating] = field(default_factory=list)
    trend_data: list[FacultyTrendPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return asdict(self)


def build_faculty_detail(
    records: Sequence[FeedbackRecord],
    ranking_records: Sequence[FeedbackRecord],
    designation: str | None = None,
) -> FacultyDetail:
    """Build the drill-down for the faculty member *records* belong to.

    The rank is computed against *ranking_records*, a wider record set
    covering all faculty, so it reflects global standing rather than
    the faculty member's own filtered subset.

    Args:
        records: Non-empty records of a single faculty member.
        ranking_records: Records of all faculty used for ranking.
        designation: Designation from the base entity store, if known.
            Falls back to the designation carried on the records.

    Returns:
        FacultyDetail with rank, subject/division/category breakdowns and
        a chronological trend.

    Raises:
        ValueError: If *records* is empty.
    """
    first = _require_records(records)
    pairs = list(scored(records))
    overall = ScoreBucket.of(pairs)

    standings = rank_faculty(ranking_records)
    rank = next((s.rank for s in standings if s.faculty_id == first.faculty_id), 0)

    subject_breakdown = []
    by_subject = group_by(pairs, lambda p: (p[0].subject_id, classify_lecture_type(p[0])))
    for (_, lecture_type), group in by_subject.items():
        head = group[0][0]
        bucket = ScoreBucket.of(group)
        subject_breakdown.append(
            FacultySubjectBreakdown(
                subject_id=head.subject_id,
                subject_name=head.subject_name,
                subject_abbreviation=head.subject_abbreviation,
                lecture_type=lecture_type,
                rating=bucket.mean(),
                responses=bucket.count,
                semester=head.semester_number,
                academic_year=head.academic_year_string,
            )
        )

    division_breakdown = []
    by_division = group_by(
        pairs,
        lambda p: (p[0].division_id, p[0].subject_id, classify_lecture_type(p[0])),
    )
    for (_, _, lecture_type), group in by_division.items():
        head = group[0][0]
        bucket = ScoreBucket.of(group)
        division_breakdown.append(
            FacultyDivisionBreakdown(
                division_id=head.division_id,
                division_name=head.division_name,
                subject_name=head.subject_name,
                lecture_type=lecture_type,
                rating=bucket.mean(),
                responses=bucket.count,
            )
        )

    named = [p for p in pairs if p[0].question_category_name]
    category_breakdown = [
        CategoryRating(
            category=category,
            avg_rating=ScoreBucket.of(group).mean(),
            question_count=len(group),
        )
        for category, group in group_by(named, lambda p: p[0].question_category_name).items()
    ]

    trend_data = []
    by_term = group_by(pairs, lambda p: (p[0].academic_year_id, p[0].semester_number))
    for group in by_term.values():
        head = group[0][0]
        bucket = ScoreBucket.of(group)
        trend_data.append(
            FacultyTrendPoint(
                academic_year_id=head.academic_year_id,
                academic_year=head.academic_year_string,
                semester=head.semester_number,
                rating=bucket.mean(),
                responses=bucket.count,
            )
        )
    trend_data.sort(key=lambda point: (point.academic_year, point.semester))

    return FacultyDetail(
        faculty=FacultyHeader(
            id=first.faculty_id,
            name=first.faculty_name,
            abbreviation=first.faculty_abbreviation,
            designation=designation or first.faculty_designation or "",
        ),
        overall_rating=overall.mean(),
        total_responses=overall.count,
        rank=rank,
        total_faculty=len(standings),
        subject_breakdown=subject_breakdown,
        division_breakdown=division_breakdown,
        question_category_breakdown=category_breakdown,
        trend_data=trend_data,
    )


# =============================================================================
# Division detail
# =============================================================================


@dataclass
class DivisionHeader:
    id: str
    name: str
    department_name: str
    semester_number: int


@dataclass
class DivisionFacultyBreakdown:
    faculty_id: str
    faculty_name: str
    faculty_abbreviation: str
    subject_name: str
    lecture_type: LectureType
    rating: float
    responses: int


@dataclass
class DivisionSubjectBreakdown:
    subject_id: str
    subject_name: str
    subject_abbreviation: str
    lecture_rating: float | None
    lab_rating: float | None
    total_rating: float
    responses: int


@dataclass
class AcademicYearComparison:
    academic_year_id: str
    academic_year_string: str
    rating: float
    responses: int


@dataclass
class DivisionDetail:
    """Drill-down for one division."""

    division: DivisionHeader
    overall_rating: float
    total_responses: int
    faculty_breakdown: list[DivisionFacultyBreakdown] = field(default_factory=list)
    subject_breakdown: list[DivisionSubjectBreakdown] = field(default_factory=list)
    academic_year_comparison: list[AcademicYearComparison] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return asdict(self)


def build_division_detail(records: Sequence[FeedbackRecord]) -> DivisionDetail:
    """Build the drill-down for the division *records* belong to.

    Raises:
        ValueError: If *records* is empty.
    """
    first = _require_records(records)
    pairs = list(scored(records))
    overall = ScoreBucket.of(pairs)

    faculty_breakdown = []
    by_faculty = group_by(
        pairs,
        lambda p: (p[0].faculty_id, p[0].subject_id, classify_lecture_type(p[0])),
    )
    for (_, _, lecture_type), group in by_faculty.items():
        head = group[0][0]
        bucket = ScoreBucket.of(group)
        faculty_breakdown.append(
            DivisionFacultyBreakdown(
                faculty_id=head.faculty_id,
                faculty_name=head.faculty_name,
                faculty_abbreviation=head.faculty_abbreviation,
                subject_name=head.subject_name,
                lecture_type=lecture_type,
                rating=bucket.mean(),
                responses=bucket.count,
            )
        )

    subject_breakdown = []
    for group in group_by(pairs, lambda p: p[0].subject_id).values():
        head = group[0][0]
        split = SplitBucket.of(group)
        subject_breakdown.append(
            DivisionSubjectBreakdown(
                subject_id=head.subject_id,
                subject_name=head.subject_name,
                subject_abbreviation=head.subject_abbreviation,
                lecture_rating=split.lecture.mean(default=None),
                lab_rating=split.lab.mean(default=None),
                total_rating=split.combined.mean(),
                responses=split.combined.count,
            )
        )

    comparison = []
    for group in group_by(pairs, lambda p: p[0].academic_year_id).values():
        head = group[0][0]
        bucket = ScoreBucket.of(group)
        comparison.append(
            AcademicYearComparison(
                academic_year_id=head.academic_year_id,
                academic_year_string=head.academic_year_string,
                rating=bucket.mean(),
                responses=bucket.count,
            )
        )
    comparison.sort(key=lambda row: row.academic_year_string)

    return DivisionDetail(
        division=DivisionHeader(
            id=first.division_id,
            name=first.division_name,
            department_name=first.department_name,
            semester_number=first.semester_number,
        ),
        overall_rating=overall.mean(),
        total_responses=overall.count,
        faculty_breakdown=faculty_breakdown,
        subject_breakdown=subject_breakdown,
        academic_year_comparison=comparison,
    )


# =============================================================================
# Academic year detail
# =============================================================================


@dataclass
class AcademicYearHeader:
    id: str
    year_string: str


@dataclass
class NamedRating:
    """Display name and rating of a best performer."""

    name: str
    rating: float


@dataclass
class DepartmentBreakdown:
    department_id: str
    department_name: str
    rating: float
    responses: int
    top_faculty: NamedRating | None = None


@dataclass
class SemesterBreakdown:
    semester_number: int
    rating: float
    responses: int
    best_subject: NamedRating | None = None


@dataclass
class YearDivisionBreakdown:
    division_id: str
    division_name: str
    department_name: str
    rating: float
    responses: int


@dataclass
class AcademicYearDetail:
    """Drill-down for one academic year."""

    academic_year: AcademicYearHeader
    overall_rating: float
    total_responses: int
    department_breakdown: list[DepartmentBreakdown] = field(default_factory=list)
    semester_breakdown: list[SemesterBreakdown] = field(default_factory=list)
    division_breakdown: list[YearDivisionBreakdown] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return asdict(self)


def _best_of(pairs, key_fn, name_fn) -> NamedRating | None:
    """Return the highest-rated group of *pairs*, ties broken by key."""
    groups = group_by(pairs, key_fn)
    if not groups:
        return None
    key, group = sort_by_rating(
        groups.items(),
        rating=lambda item: ScoreBucket.of(item[1]).mean(),
        identifier=lambda item: item[0],
    )[0]
    return NamedRating(name=name_fn(group[0][0]), rating=ScoreBucket.of(group).mean())


def build_academic_year_detail(records: Sequence[FeedbackRecord]) -> AcademicYearDetail:
    """Build the drill-down for the academic year *records* belong to.

    Departments carry their top-rated faculty member and semesters their
    best-rated subject; ties go to the lower identifier.

    Raises:
        ValueError: If *records* is empty.
    """
    first = _require_records(records)
    pairs = list(scored(records))
    overall = ScoreBucket.of(pairs)

    departments = []
    for group in group_by(pairs, lambda p: p[0].department_id).values():
        head = group[0][0]
        bucket = ScoreBucket.of(group)
        departments.append(
            DepartmentBreakdown(
                department_id=head.department_id,
                department_name=head.department_name,
                rating=bucket.mean(),
                responses=bucket.count,
                top_faculty=_best_of(group, lambda p: p[0].faculty_id, lambda r: r.faculty_name),
            )
        )
    departments.sort(key=lambda row: row.department_name)

    semesters = []
    by_semester = group_by(pairs, lambda p: p[0].semester_number)
    for semester_number, group in sorted(by_semester.items()):
        bucket = ScoreBucket.of(group)
        semesters.append(
            SemesterBreakdown(
                semester_number=semester_number,
                rating=bucket.mean(),
                responses=bucket.count,
                best_subject=_best_of(group, lambda p: p[0].subject_id, lambda r: r.subject_name),
            )
        )

    divisions = []
    for group in group_by(pairs, lambda p: p[0].division_id).values():
        head = group[0][0]
        bucket = ScoreBucket.of(group)
        divisions.append(
            YearDivisionBreakdown(
                division_id=head.division_id,
                division_name=head.division_name,
                department_name=head.department_name,
                rating=bucket.mean(),
                responses=bucket.count,
            )
        )
    divisions.sort(key=lambda row: row.division_name)

    return AcademicYearDetail(
        academic_year=AcademicYearHeader(
            id=first.academic_year_id,
            year_string=first.academic_year_string,
        ),
        overall_rating=overall.mean(),
        total_responses=overall.count,
        department_breakdown=departments,
        semester_breakdown=semesters,
        division_breakdown=divisions,
    )

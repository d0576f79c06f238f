# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Focused analytics reports built on the shared reduction helpers.

These complement the rollups with narrower views used by the semester
and faculty report screens:
- Subject ratings split by lecture type
- Subject ratings per semester number
- Lecture vs. lab comparison
- High-impact feedback areas (questions drawing many low ratings)
- Faculty ratings per semester within an academic year
- Division x student batch comparison and single-semester rating
- Response counts per semester and per division
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from src.domains.analytics.grouping import ScoreBucket, group_by, scored
from src.domains.analytics.records import FeedbackRecord, LectureType
from src.domains.analytics.scoring import classify_lecture_type

_LECTURE_TYPE_ORDER = {LectureType.LECTURE: 0, LectureType.LAB: 1}
_UNKNOWN_BATCH = "Unknown"


@dataclass
class SubjectLectureTypeRating:
    subject_id: str
    subject_name: str
    lecture_type: LectureType
    average_rating: float
    response_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class SubjectSemesterTrend:
    semester_number: int
    subject_id: str
    subject_name: str
    academic_year_string: str
    average_rating: float
    response_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class LectureTypeComparison:
    lecture_type: LectureType
    average_rating: float
    response_count: int
    form_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class HighImpactArea:
    """A question that drew a significant number of low ratings."""

    question_id: str
    question: str
    category: str
    faculty: str
    subject: str
    low_rating_count: int
    average_rating: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class FacultySemesterPerformance:
    """Faculty ratings per semester number.

    ``semesters`` only holds semester numbers that have counted scores;
    consumers render the missing ones as empty.
    """

    faculty_id: str
    faculty_name: str
    academic_year: str
    total_average: float | None
    total_responses: int
    semesters: dict[int, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def aggregate_subject_lecture_type_ratings(
    records: Sequence[FeedbackRecord],
) -> list[SubjectLectureTypeRating]:
    """Rate each subject separately for lecture and lab feedback.

    Returns:
        Rows ordered by subject name, lecture before lab.
    """
    rows = []
    groups = group_by(scored(records), lambda p: (p[0].subject_id, classify_lecture_type(p[0])))
    for (subject_id, lecture_type), pairs in groups.items():
        bucket = ScoreBucket.of(pairs)
        rows.append(
            SubjectLectureTypeRating(
                subject_id=subject_id,
                subject_name=pairs[0][0].subject_name,
                lecture_type=lecture_type,
                average_rating=bucket.mean(),
                response_count=bucket.count,
            )
        )
    rows.sort(key=lambda row: (row.subject_name, _LECTURE_TYPE_ORDER[row.lecture_type]))
    return rows


def aggregate_subject_semester_trends(
    records: Sequence[FeedbackRecord],
) -> list[SubjectSemesterTrend]:
    """Rate each subject per semester number, ordered by semester then name."""
    rows = []
    groups = group_by(scored(records), lambda p: (p[0].semester_number, p[0].subject_id))
    for (semester_number, subject_id), pairs in groups.items():
        head = pairs[0][0]
        bucket = ScoreBucket.of(pairs)
        rows.append(
            SubjectSemesterTrend(
                semester_number=semester_number,
                subject_id=subject_id,
                subject_name=head.subject_name,
                academic_year_string=head.academic_year_string,
                average_rating=bucket.mean(),
                response_count=bucket.count,
            )
        )
    rows.sort(key=lambda row: (row.semester_number, row.subject_name))
    return rows


def compare_lecture_types(records: Sequence[FeedbackRecord]) -> list[LectureTypeComparison]:
    """Compare lecture and lab feedback.

    Only lecture types with counted scores are returned, lecture first.
    """
    rows = []
    groups = group_by(scored(records), lambda p: classify_lecture_type(p[0]))
    for lecture_type in sorted(groups, key=_LECTURE_TYPE_ORDER.__getitem__):
        pairs = groups[lecture_type]
        bucket = ScoreBucket.of(pairs)
        rows.append(
            LectureTypeComparison(
                lecture_type=lecture_type,
                average_rating=bucket.mean(),
                response_count=bucket.count,
                form_count=len({r.form_id for r, _ in pairs if r.form_id}),
            )
        )
    return rows


def find_high_impact_areas(
    records: Sequence[FeedbackRecord],
    low_rating_threshold: float = 3.0,
    min_low_ratings: int = 5,
) -> list[HighImpactArea]:
    """Find questions that drew a significant number of low ratings.

    Args:
        records: Feedback records to scan.
        low_rating_threshold: Scores strictly below this are low.
        min_low_ratings: Minimum number of low scores for a question to
            be reported.

    Returns:
        Areas ordered by low-rating count (descending), then by average
        rating (ascending).
    """
    areas = []
    with_question = (p for p in scored(records) if p[0].question_id)
    for question_id, pairs in group_by(with_question, lambda p: p[0].question_id).items():
        low_count = sum(1 for _, score in pairs if score < low_rating_threshold)
        if low_count < min_low_ratings:
            continue
        head = pairs[0][0]
        areas.append(
            HighImpactArea(
                question_id=question_id,
                question=head.question_text or "",
                category=head.question_category_name or "N/A",
                faculty=head.faculty_name or "N/A",
                subject=head.subject_name or "N/A",
                low_rating_count=low_count,
                average_rating=ScoreBucket.of(pairs).mean(),
            )
        )
    areas.sort(key=lambda area: (-area.low_rating_count, area.average_rating))
    return areas


def aggregate_faculty_semester_performance(
    records: Sequence[FeedbackRecord],
) -> list[FacultySemesterPerformance]:
    """Rate each faculty member per semester number.

    Returns:
        Rows ordered by faculty name, then faculty id.
    """
    rows = []
    for faculty_id, pairs in group_by(scored(records), lambda p: p[0].faculty_id).items():
        head = pairs[0][0]
        total = ScoreBucket.of(pairs)
        by_semester = group_by(pairs, lambda p: p[0].semester_number)
        rows.append(
            FacultySemesterPerformance(
                faculty_id=faculty_id,
                faculty_name=head.faculty_name,
                academic_year=head.academic_year_string,
                total_average=total.mean(default=None),
                total_responses=total.count,
                semesters={
                    number: ScoreBucket.of(group).mean()
                    for number, group in sorted(by_semester.items())
                },
            )
        )
    rows.sort(key=lambda row: (row.faculty_name, row.faculty_id))
    return rows


@dataclass
class DivisionBatchComparison:
    division_id: str
    division_name: str
    batch: str
    average_rating: float
    response_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class SemesterRating:
    semester_id: str
    average_rating: float
    total_responses: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class SemesterResponseCount:
    """How many counted responses one semester has collected."""

    semester_id: str
    semester_number: int
    academic_year_id: str
    academic_year_string: str
    department_id: str
    department_name: str
    department_abbreviation: str
    response_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class DivisionResponseCount:
    division_id: str
    division_name: str
    response_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class SemesterDivisionResponses:
    """Divisions of one semester that have counted responses."""

    semester_id: str
    semester_number: int
    academic_year_id: str
    academic_year_string: str
    divisions: list[DivisionResponseCount] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def compare_division_batches(records: Sequence[FeedbackRecord]) -> list[DivisionBatchComparison]:
    """Rate each (division, student batch) pair.

    Students without a batch are reported under "Unknown".

    Returns:
        Rows ordered by division name, then batch.
    """
    rows = []
    groups = group_by(
        scored(records),
        lambda p: (p[0].division_id, p[0].student_batch or _UNKNOWN_BATCH),
    )
    for (division_id, batch), pairs in groups.items():
        bucket = ScoreBucket.of(pairs)
        rows.append(
            DivisionBatchComparison(
                division_id=division_id,
                division_name=pairs[0][0].division_name,
                batch=batch,
                average_rating=bucket.mean(),
                response_count=bucket.count,
            )
        )
    rows.sort(key=lambda row: (row.division_name, row.batch))
    return rows


def calculate_semester_rating(
    records: Sequence[FeedbackRecord],
    semester_id: str,
) -> SemesterRating:
    """Rate one semester as a whole.

    Args:
        records: Records already narrowed to the semester (and optionally
            to a division or student batch).
        semester_id: Semester the records belong to.

    Returns:
        SemesterRating; ``total_responses`` is 0 when no score counts.
    """
    bucket = ScoreBucket.of(scored(records))
    return SemesterRating(
        semester_id=semester_id,
        average_rating=bucket.mean(),
        total_responses=bucket.count,
    )


def count_semester_responses(records: Sequence[FeedbackRecord]) -> list[SemesterResponseCount]:
    """Count counted responses per semester, latest semester number first."""
    rows = []
    for semester_id, pairs in group_by(scored(records), lambda p: p[0].semester_id).items():
        head = pairs[0][0]
        rows.append(
            SemesterResponseCount(
                semester_id=semester_id,
                semester_number=head.semester_number,
                academic_year_id=head.academic_year_id,
                academic_year_string=head.academic_year_string,
                department_id=head.department_id,
                department_name=head.department_name,
                department_abbreviation=head.department_abbreviation,
                response_count=len(pairs),
            )
        )
    rows.sort(key=lambda row: (-row.semester_number, row.academic_year_string, row.department_name))
    return rows


def count_semester_division_responses(
    records: Sequence[FeedbackRecord],
) -> list[SemesterDivisionResponses]:
    """Count counted responses per division, nested by semester.

    Returns:
        Semesters ordered by semester number then year label, each with
        its divisions ordered by name.
    """
    rows = []
    for semester_id, pairs in group_by(scored(records), lambda p: p[0].semester_id).items():
        head = pairs[0][0]
        divisions = [
            DivisionResponseCount(
                division_id=division_id,
                division_name=group[0][0].division_name,
                response_count=len(group),
            )
            for division_id, group in group_by(pairs, lambda p: p[0].division_id).items()
        ]
        divisions.sort(key=lambda division: (division.division_name, division.division_id))
        rows.append(
            SemesterDivisionResponses(
                semester_id=semester_id,
                semester_number=head.semester_number,
                academic_year_id=head.academic_year_id,
                academic_year_string=head.academic_year_string,
                divisions=divisions,
            )
        )
    rows.sort(key=lambda row: (row.semester_number, row.academic_year_string))
    return rows

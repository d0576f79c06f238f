# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Feedback record types consumed by the analytics engine.

A FeedbackRecord is one denormalized row joining a single student
response to every contextual dimension (academic year, department,
semester, division, subject, faculty, question). Records are produced
by the data-access layer and are never mutated by the engine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class LectureType(str, Enum):
    """Derived session category of a feedback record."""

    LECTURE = "LECTURE"
    LAB = "LAB"


class EntityKind(str, Enum):
    """Base entities that detail views can be scoped to."""

    SUBJECT = "subject"
    FACULTY = "faculty"
    DIVISION = "division"
    ACADEMIC_YEAR = "academic_year"

    @property
    def label(self) -> str:
        """Human-readable label used in error messages."""
        return {
            EntityKind.SUBJECT: "Subject",
            EntityKind.FACULTY: "Faculty",
            EntityKind.DIVISION: "Division",
            EntityKind.ACADEMIC_YEAR: "Academic year",
        }[self]


@dataclass(frozen=True, slots=True)
class FeedbackRecord:
    """One student response to one feedback question, fully joined.

    Attributes:
        id: Response identifier.
        academic_year_id: Academic year identifier.
        academic_year_string: Display label such as "2024-2025".
        department_id: Department identifier.
        department_name: Department display name.
        semester_id: Semester identifier.
        semester_number: Semester ordinal (1..8 observed).
        division_id: Division identifier.
        division_name: Division display name.
        subject_id: Subject identifier.
        subject_name: Subject display name.
        faculty_id: Faculty identifier.
        faculty_name: Faculty display name.
        student_batch: Lab batch the responding student belongs to.
        response_value: Raw response value (string, number or mapping).
    """

    id: str
    academic_year_id: str
    academic_year_string: str
    department_id: str
    department_name: str
    semester_id: str
    semester_number: int
    division_id: str
    division_name: str
    subject_id: str
    subject_name: str
    faculty_id: str
    faculty_name: str
    response_value: Any = None
    department_abbreviation: str = ""
    subject_abbreviation: str = ""
    subject_code: str = ""
    faculty_abbreviation: str = ""
    faculty_designation: str | None = None
    student_id: str | None = None
    student_batch: str | None = None
    form_id: str | None = None
    question_id: str | None = None
    question_text: str | None = None
    question_category_id: str | None = None
    question_category_name: str | None = None
    question_batch: str | None = None


@dataclass(frozen=True, slots=True)
class FeedbackFilter:
    """Filter set resolved by the data-access layer.

    Every field is optional; ``None`` means "do not narrow on this
    dimension". Soft-deleted rows are excluded unless ``include_deleted``
    is set. ``ranking_scope`` narrows the soft-delete check to the
    response, its form and its faculty member, which is what the faculty
    ranking considers.
    """

    academic_year_id: str | None = None
    department_id: str | None = None
    subject_id: str | None = None
    semester_id: str | None = None
    division_id: str | None = None
    faculty_id: str | None = None
    lecture_type: LectureType | None = None
    student_batch: str | None = None
    include_deleted: bool = False
    ranking_scope: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the active filters, dropping unset ones."""
        data = asdict(self)
        if self.lecture_type is not None:
            data["lecture_type"] = self.lecture_type.value
        return {k: v for k, v in data.items() if v is not None and v is not False}


@dataclass(frozen=True, slots=True)
class EntityRef:
    """Minimal view of a base entity used to explain empty results."""

    id: str
    name: str
    is_deleted: bool = False
    designation: str | None = None

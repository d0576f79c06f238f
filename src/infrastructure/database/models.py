# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models read by the analytics repository.

The feedback store is owned by the feedback collection service; this
package only reads from it. ``FeedbackSnapshot`` is the denormalized
per-response table joining every dimension, and the entity tables are
used to explain empty results (missing vs. deleted entities).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for feedback store models."""


class SoftDeleteMixin:
    """Adds the ``is_deleted`` flag used across the feedback store."""

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class FeedbackSnapshot(SoftDeleteMixin, Base):
    """One student response to one question, joined with its context.

    Each ``*_is_deleted`` column mirrors the soft-delete flag of the
    joined entity at snapshot time.
    """

    __tablename__ = "feedback_snapshots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    academic_year_id: Mapped[str] = mapped_column(String(36), index=True)
    academic_year_string: Mapped[str] = mapped_column(String(20))
    department_id: Mapped[str] = mapped_column(String(36), index=True)
    department_name: Mapped[str] = mapped_column(String(255))
    department_abbreviation: Mapped[str | None] = mapped_column(String(50))
    semester_id: Mapped[str] = mapped_column(String(36), index=True)
    semester_number: Mapped[int] = mapped_column(Integer)
    division_id: Mapped[str] = mapped_column(String(36), index=True)
    division_name: Mapped[str] = mapped_column(String(100))
    subject_id: Mapped[str] = mapped_column(String(36), index=True)
    subject_name: Mapped[str] = mapped_column(String(255))
    subject_abbreviation: Mapped[str | None] = mapped_column(String(50))
    subject_code: Mapped[str | None] = mapped_column(String(50))
    faculty_id: Mapped[str] = mapped_column(String(36), index=True)
    faculty_name: Mapped[str] = mapped_column(String(255))
    faculty_abbreviation: Mapped[str | None] = mapped_column(String(50))
    faculty_designation: Mapped[str | None] = mapped_column(String(100))
    student_id: Mapped[str | None] = mapped_column(String(36))
    student_batch: Mapped[str | None] = mapped_column(String(50))
    form_id: Mapped[str | None] = mapped_column(String(36))
    question_id: Mapped[str | None] = mapped_column(String(36))
    question_text: Mapped[str | None] = mapped_column(Text)
    question_category_id: Mapped[str | None] = mapped_column(String(36))
    question_category_name: Mapped[str | None] = mapped_column(String(255))
    question_batch: Mapped[str | None] = mapped_column(String(50))
    lecture_type: Mapped[str | None] = mapped_column(String(10))
    response_value: Mapped[Any] = mapped_column(JSON)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    form_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    question_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    semester_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    division_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    subject_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    faculty_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    department_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    academic_year_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    student_is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)


class Subject(SoftDeleteMixin, Base):
    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))


class Faculty(SoftDeleteMixin, Base):
    __tablename__ = "faculties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    designation: Mapped[str | None] = mapped_column(String(100))


class Division(SoftDeleteMixin, Base):
    __tablename__ = "divisions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    division_name: Mapped[str] = mapped_column(String(100))


class AcademicYear(SoftDeleteMixin, Base):
    __tablename__ = "academic_years"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    year_string: Mapped[str] = mapped_column(String(20))

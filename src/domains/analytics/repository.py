# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data access for the analytics engine.

The engine needs exactly two things from storage:
- fetch all feedback records matching a filter set
- look up a base entity to explain an empty result

FeedbackRepository describes that contract; SqlAlchemyFeedbackRepository
implements it over the feedback store.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.analytics.records import (
    EntityKind,
    EntityRef,
    FeedbackFilter,
    FeedbackRecord,
)
from src.infrastructure.database.models import (
    AcademicYear,
    Division,
    Faculty,
    FeedbackSnapshot,
    Subject,
)

logger = logging.getLogger(__name__)

_SOFT_DELETE_FLAGS = (
    FeedbackSnapshot.is_deleted,
    FeedbackSnapshot.form_is_deleted,
    FeedbackSnapshot.question_is_deleted,
    FeedbackSnapshot.semester_is_deleted,
    FeedbackSnapshot.division_is_deleted,
    FeedbackSnapshot.subject_is_deleted,
    FeedbackSnapshot.faculty_is_deleted,
    FeedbackSnapshot.department_is_deleted,
    FeedbackSnapshot.academic_year_is_deleted,
    FeedbackSnapshot.student_is_deleted,
)

_RANKING_FLAGS = (
    FeedbackSnapshot.is_deleted,
    FeedbackSnapshot.form_is_deleted,
    FeedbackSnapshot.faculty_is_deleted,
)


class FeedbackRepository(Protocol):
    """Storage contract the analytics service depends on."""

    async def fetch_records(self, filters: FeedbackFilter) -> list[FeedbackRecord]:
        """Return all records matching *filters*, or an empty list."""
        ...

    async def get_entity(self, kind: EntityKind, entity_id: str) -> EntityRef | None:
        """Return the base entity regardless of soft-deletion, or None."""
        ...


class SqlAlchemyFeedbackRepository:
    """FeedbackRepository backed by the feedback store.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            db: Async database session for the feedback store.
        """
        self.db = db

    async def fetch_records(self, filters: FeedbackFilter) -> list[FeedbackRecord]:
        """Fetch feedback records matching *filters*.

        Args:
            filters: Filter set to apply.

        Returns:
            Records ordered by submission time, then id.
        """
        query = select(FeedbackSnapshot)

        if not filters.include_deleted:
            flags = _RANKING_FLAGS if filters.ranking_scope else _SOFT_DELETE_FLAGS
            query = query.where(*(flag.is_(False) for flag in flags))

        if filters.academic_year_id:
            query = query.where(FeedbackSnapshot.academic_year_id == filters.academic_year_id)
        if filters.department_id:
            query = query.where(FeedbackSnapshot.department_id == filters.department_id)
        if filters.subject_id:
            query = query.where(FeedbackSnapshot.subject_id == filters.subject_id)
        if filters.semester_id:
            query = query.where(FeedbackSnapshot.semester_id == filters.semester_id)
        if filters.division_id:
            query = query.where(FeedbackSnapshot.division_id == filters.division_id)
        if filters.faculty_id:
            query = query.where(FeedbackSnapshot.faculty_id == filters.faculty_id)
        if filters.lecture_type is not None:
            query = query.where(FeedbackSnapshot.lecture_type == filters.lecture_type.value)
        if filters.student_batch:
            query = query.where(FeedbackSnapshot.student_batch == filters.student_batch)

        query = query.order_by(FeedbackSnapshot.submitted_at, FeedbackSnapshot.id)

        result = await self.db.execute(query)
        snapshots = result.scalars().all()

        logger.debug("Fetched %d feedback snapshots for filters=%s", len(snapshots), filters.to_dict())

        return [self._to_record(snapshot) for snapshot in snapshots]

    async def get_entity(self, kind: EntityKind, entity_id: str) -> EntityRef | None:
        """Look up a base entity by id, including soft-deleted ones.

        Args:
            kind: Entity type.
            entity_id: Entity identifier.

        Returns:
            EntityRef or None if no such entity exists.
        """
        if kind is EntityKind.SUBJECT:
            query = select(Subject.id, Subject.name, Subject.is_deleted).where(Subject.id == entity_id)
        elif kind is EntityKind.FACULTY:
            query = select(Faculty.id, Faculty.name, Faculty.is_deleted, Faculty.designation).where(
                Faculty.id == entity_id
            )
        elif kind is EntityKind.DIVISION:
            query = select(Division.id, Division.division_name, Division.is_deleted).where(
                Division.id == entity_id
            )
        else:
            query = select(AcademicYear.id, AcademicYear.year_string, AcademicYear.is_deleted).where(
                AcademicYear.id == entity_id
            )

        result = await self.db.execute(query)
        row = result.one_or_none()

        if row is None:
            return None

        return EntityRef(
            id=row[0],
            name=row[1],
            is_deleted=bool(row[2]),
            designation=row[3] if len(row) > 3 else None,
        )

    @staticmethod
    def _to_record(snapshot: FeedbackSnapshot) -> FeedbackRecord:
        """Convert a snapshot row to an immutable FeedbackRecord."""
        return FeedbackRecord(
            id=snapshot.id,
            academic_year_id=snapshot.academic_year_id,
            academic_year_string=snapshot.academic_year_string,
            department_id=snapshot.department_id,
            department_name=snapshot.department_name,
            department_abbreviation=snapshot.department_abbreviation or "",
            semester_id=snapshot.semester_id,
            semester_number=snapshot.semester_number,
            division_id=snapshot.division_id,
            division_name=snapshot.division_name,
            subject_id=snapshot.subject_id,
            subject_name=snapshot.subject_name,
            subject_abbreviation=snapshot.subject_abbreviation or "",
            subject_code=snapshot.subject_code or "",
            faculty_id=snapshot.faculty_id,
            faculty_name=snapshot.faculty_name,
            faculty_abbreviation=snapshot.faculty_abbreviation or "",
            faculty_designation=snapshot.faculty_designation,
            student_id=snapshot.student_id,
            student_batch=snapshot.student_batch,
            form_id=snapshot.form_id,
            question_id=snapshot.question_id,
            question_text=snapshot.question_text,
            question_category_id=snapshot.question_category_id,
            question_category_name=snapshot.question_category_name,
            question_batch=snapshot.question_batch,
            response_value=snapshot.response_value,
        )

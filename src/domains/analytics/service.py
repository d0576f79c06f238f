# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics service module.

This module provides the main analytics service for building the
system-wide feedback overview, entity drill-downs and the narrower
insight reports.

The AnalyticsService fetches records through a FeedbackRepository and
hands them to the pure builders in rollups, details and insights. It
owns the error contract: empty drill-downs are explained through the
base entity store, and any other failure is reported with a fixed
per-operation message.

Usage:
    from src.domains.analytics import AnalyticsService, FeedbackFilter

    service = AnalyticsService(repository=SqlAlchemyFeedbackRepository(db))

    # System-wide overview
    overview = await service.get_analytics_overview(
        FeedbackFilter(academic_year_id="ay-2024"),
    )

    # Drill into one subject
    detail = await service.get_subject_detail("sub-1", academic_year_id="ay-2024")
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, NoReturn

from src.core.config.settings import Settings, get_settings
from src.domains.analytics.details import (
    AcademicYearDetail,
    DivisionDetail,
    FacultyDetail,
    SubjectDetail,
    build_academic_year_detail,
    build_division_detail,
    build_faculty_detail,
    build_subject_detail,
)
from src.domains.analytics.insights import (
    DivisionBatchComparison,
    FacultySemesterPerformance,
    HighImpactArea,
    LectureTypeComparison,
    SemesterDivisionResponses,
    SemesterRating,
    SemesterResponseCount,
    SubjectLectureTypeRating,
    SubjectSemesterTrend,
    aggregate_faculty_semester_performance,
    aggregate_subject_lecture_type_ratings,
    aggregate_subject_semester_trends,
    calculate_semester_rating,
    compare_division_batches,
    compare_lecture_types,
    count_semester_division_responses,
    count_semester_responses,
    find_high_impact_areas,
)
from src.domains.analytics.records import (
    EntityKind,
    FeedbackFilter,
    FeedbackRecord,
)
from src.domains.analytics.repository import FeedbackRepository
from src.domains.analytics.rollups import (
    AcademicYearTrend,
    DepartmentTrend,
    DivisionPerformance,
    FacultyPerformance,
    OverallStats,
    SemesterTrend,
    SubjectRating,
    aggregate_academic_year_trends,
    aggregate_department_trends,
    aggregate_division_performance,
    aggregate_faculty_performance,
    aggregate_semester_trends,
    aggregate_subject_ratings,
    calculate_overall_stats,
)
from src.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)


class AnalyticsServiceError(Exception):
    """Base exception for analytics service errors.

    Attributes:
        message: Client-facing error message.
        status_code: HTTP-style status code for the failure.
    """

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {"message": self.message, "status_code": self.status_code}


class AnalyticsNotFoundError(AnalyticsServiceError):
    """Raised when a drill-down has no records to report on."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


class AnalyticsAggregationError(AnalyticsServiceError):
    """Raised when fetching or aggregating feedback fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500)


@dataclass
class AnalyticsOverview:
    """All system-wide rollups for one filter set."""

    overall_stats: OverallStats
    subject_ratings: list[SubjectRating] = field(default_factory=list)
    faculty_performance: list[FacultyPerformance] = field(default_factory=list)
    division_performance: list[DivisionPerformance] = field(default_factory=list)
    academic_year_trends: list[AcademicYearTrend] = field(default_factory=list)
    semester_trends: list[SemesterTrend] = field(default_factory=list)
    department_trends: list[DepartmentTrend] = field(default_factory=list)
    filters: dict[str, Any] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "overall_stats": self.overall_stats.to_dict(),
            "subject_ratings": [r.to_dict() for r in self.subject_ratings],
            "faculty_performance": [r.to_dict() for r in self.faculty_performance],
            "division_performance": [r.to_dict() for r in self.division_performance],
            "academic_year_trends": [r.to_dict() for r in self.academic_year_trends],
            "semester_trends": [r.to_dict() for r in self.semester_trends],
            "department_trends": [r.to_dict() for r in self.department_trends],
            "filters": self.filters,
            "generated_at": format_iso(self.generated_at),
        }


class AnalyticsService:
    """Service for feedback analytics reports.

    Every public operation either returns its report or raises an
    AnalyticsServiceError subclass; no partial results are returned.

    Attributes:
        _repository: Source of feedback records and base entities.
        _settings: Application settings (analytics thresholds).
    """

    def __init__(
        self,
        repository: FeedbackRepository,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the analytics service.

        Args:
            repository: Feedback data access.
            settings: Application settings. Defaults to get_settings().
        """
        self._repository = repository
        self._settings = settings or get_settings()

    # =========================================================================
    # Overview
    # =========================================================================

    async def get_analytics_overview(
        self,
        filters: FeedbackFilter | None = None,
    ) -> AnalyticsOverview:
        """Build every system-wide rollup for a filter set.

        An empty result is not an error: the overview is returned with
        zeroed stats and empty tables.

        Args:
            filters: Filter set. Defaults to no filtering.

        Returns:
            AnalyticsOverview with all seven rollups.

        Raises:
            AnalyticsAggregationError: If fetching or aggregation fails.
        """
        filters = filters or FeedbackFilter()

        with self._failure_boundary("get_analytics_overview", "Failed to retrieve analytics data."):
            records = await self._fetch("get_analytics_overview", filters)

            return AnalyticsOverview(
                overall_stats=calculate_overall_stats(records),
                subject_ratings=aggregate_subject_ratings(records),
                faculty_performance=aggregate_faculty_performance(records),
                division_performance=aggregate_division_performance(records),
                academic_year_trends=aggregate_academic_year_trends(records),
                semester_trends=aggregate_semester_trends(records),
                department_trends=aggregate_department_trends(records),
                filters=filters.to_dict(),
            )

    # =========================================================================
    # Drill-downs
    # =========================================================================

    async def get_subject_detail(
        self,
        subject_id: str,
        academic_year_id: str | None = None,
        semester_id: str | None = None,
        department_id: str | None = None,
    ) -> SubjectDetail:
        """Get the drill-down for one subject.

        Args:
            subject_id: Subject identifier.
            academic_year_id: Optional academic year filter.
            semester_id: Optional semester filter.
            department_id: Optional department filter.

        Returns:
            SubjectDetail for the subject.

        Raises:
            AnalyticsNotFoundError: If the subject is missing, deleted, or
                has no matching feedback.
            AnalyticsAggregationError: If fetching or aggregation fails.
        """
        filters = FeedbackFilter(
            subject_id=subject_id,
            academic_year_id=academic_year_id,
            semester_id=semester_id,
            department_id=department_id,
        )

        with self._failure_boundary(
            "get_subject_detail", "Failed to retrieve subject detailed analytics."
        ):
            records = await self._fetch("get_subject_detail", filters)
            if not records:
                await self._raise_not_found(EntityKind.SUBJECT, subject_id)

            return build_subject_detail(records)

    async def get_faculty_detail(
        self,
        faculty_id: str,
        academic_year_id: str | None = None,
    ) -> FacultyDetail:
        """Get the drill-down for one faculty member.

        The faculty rank is computed against all faculty in the same
        academic year, so a second, wider fetch is made for ranking.

        Args:
            faculty_id: Faculty identifier.
            academic_year_id: Optional academic year filter.

        Returns:
            FacultyDetail for the faculty member.

        Raises:
            AnalyticsNotFoundError: If the faculty member is missing,
                deleted, or has no matching feedback.
            AnalyticsAggregationError: If fetching or aggregation fails.
        """
        filters = FeedbackFilter(faculty_id=faculty_id, academic_year_id=academic_year_id)

        with self._failure_boundary(
            "get_faculty_detail", "Failed to retrieve faculty detailed analytics."
        ):
            records = await self._fetch("get_faculty_detail", filters)
            if not records:
                await self._raise_not_found(EntityKind.FACULTY, faculty_id)

            ranking_records = await self._fetch(
                "get_faculty_detail.ranking",
                FeedbackFilter(academic_year_id=academic_year_id, ranking_scope=True),
            )

            entity = await self._repository.get_entity(EntityKind.FACULTY, faculty_id)
            designation = entity.designation if entity else None

            return build_faculty_detail(records, ranking_records, designation=designation)

    async def get_division_detail(
        self,
        division_id: str,
        academic_year_id: str | None = None,
    ) -> DivisionDetail:
        """Get the drill-down for one division.

        Raises:
            AnalyticsNotFoundError: If the division is missing, deleted,
                or has no matching feedback.
            AnalyticsAggregationError: If fetching or aggregation fails.
        """
        filters = FeedbackFilter(division_id=division_id, academic_year_id=academic_year_id)

        with self._failure_boundary(
            "get_division_detail", "Failed to retrieve division detailed analytics."
        ):
            records = await self._fetch("get_division_detail", filters)
            if not records:
                await self._raise_not_found(EntityKind.DIVISION, division_id)

            return build_division_detail(records)

    async def get_academic_year_detail(
        self,
        academic_year_id: str,
        department_id: str | None = None,
    ) -> AcademicYearDetail:
        """Get the drill-down for one academic year.

        Raises:
            AnalyticsNotFoundError: If the academic year is missing,
                deleted, or has no matching feedback.
            AnalyticsAggregationError: If fetching or aggregation fails.
        """
        filters = FeedbackFilter(academic_year_id=academic_year_id, department_id=department_id)

        with self._failure_boundary(
            "get_academic_year_detail", "Failed to retrieve academic year detailed analytics."
        ):
            records = await self._fetch("get_academic_year_detail", filters)
            if not records:
                await self._raise_not_found(EntityKind.ACADEMIC_YEAR, academic_year_id)

            return build_academic_year_detail(records)

    # =========================================================================
    # Insights
    # =========================================================================

    async def get_subject_lecture_type_ratings(
        self,
        filters: FeedbackFilter | None = None,
    ) -> list[SubjectLectureTypeRating]:
        """Get subject ratings split by lecture type."""
        filters = filters or FeedbackFilter()

        with self._failure_boundary(
            "get_subject_lecture_type_ratings",
            "Failed to retrieve subject ratings by lecture type.",
        ):
            records = await self._fetch("get_subject_lecture_type_ratings", filters)
            return aggregate_subject_lecture_type_ratings(records)

    async def get_subject_semester_trends(
        self,
        filters: FeedbackFilter | None = None,
    ) -> list[SubjectSemesterTrend]:
        """Get subject ratings per semester number."""
        filters = filters or FeedbackFilter()

        with self._failure_boundary(
            "get_subject_semester_trends", "Failed to retrieve subject semester trends."
        ):
            records = await self._fetch("get_subject_semester_trends", filters)
            return aggregate_subject_semester_trends(records)

    async def get_lecture_type_comparison(
        self,
        filters: FeedbackFilter | None = None,
    ) -> list[LectureTypeComparison]:
        """Compare lecture and lab ratings side by side."""
        filters = filters or FeedbackFilter()

        with self._failure_boundary(
            "get_lecture_type_comparison", "Failed to retrieve lecture type comparison."
        ):
            records = await self._fetch("get_lecture_type_comparison", filters)
            return compare_lecture_types(records)

    async def get_high_impact_areas(
        self,
        filters: FeedbackFilter | None = None,
    ) -> list[HighImpactArea]:
        """Find questions that repeatedly receive low ratings.

        Thresholds come from the analytics settings.

        Args:
            filters: Filter set. Defaults to no filtering.

        Returns:
            High-impact questions, most low ratings first.
        """
        filters = filters or FeedbackFilter()
        analytics = self._settings.analytics

        with self._failure_boundary(
            "get_high_impact_areas", "Failed to retrieve high impact feedback areas."
        ):
            records = await self._fetch("get_high_impact_areas", filters)
            return find_high_impact_areas(
                records,
                low_rating_threshold=analytics.low_rating_threshold,
                min_low_ratings=analytics.min_low_ratings,
            )

    async def get_faculty_semester_performance(
        self,
        academic_year_id: str,
        faculty_id: str | None = None,
    ) -> list[FacultySemesterPerformance]:
        """Get per-semester ratings of faculty in one academic year.

        Args:
            academic_year_id: Academic year identifier.
            faculty_id: Optional single faculty member.

        Returns:
            One entry per faculty member with data, ordered by name.
        """
        filters = FeedbackFilter(academic_year_id=academic_year_id, faculty_id=faculty_id)

        with self._failure_boundary(
            "get_faculty_semester_performance",
            "Failed to retrieve faculty semester performance.",
        ):
            records = await self._fetch("get_faculty_semester_performance", filters)
            return aggregate_faculty_semester_performance(records)

    # =========================================================================
    # Semester reports
    # =========================================================================

    async def get_division_batch_comparisons(
        self,
        semester_id: str,
    ) -> list[DivisionBatchComparison]:
        """Compare ratings across divisions and student batches of a semester.

        Raises:
            AnalyticsNotFoundError: If the semester has no feedback.
            AnalyticsAggregationError: If fetching or aggregation fails.
        """
        filters = FeedbackFilter(semester_id=semester_id)

        with self._failure_boundary(
            "get_division_batch_comparisons", "Failed to retrieve division batch comparisons."
        ):
            records = await self._fetch("get_division_batch_comparisons", filters)
            if not records:
                self._raise_empty(
                    "get_division_batch_comparisons",
                    "No comparison data available for the given semester.",
                )

            return compare_division_batches(records)

    async def get_overall_semester_rating(
        self,
        semester_id: str,
        division_id: str | None = None,
        batch: str | None = None,
    ) -> SemesterRating:
        """Rate one semester, optionally narrowed to a division or batch.

        Args:
            semester_id: Semester identifier.
            division_id: Optional division filter.
            batch: Optional student batch filter.

        Returns:
            SemesterRating with the mean and count of counted scores.

        Raises:
            AnalyticsNotFoundError: If nothing matches, or nothing that
                matches carries a counted score.
            AnalyticsAggregationError: If fetching or aggregation fails.
        """
        filters = FeedbackFilter(
            semester_id=semester_id,
            division_id=division_id,
            student_batch=batch,
        )

        with self._failure_boundary(
            "get_overall_semester_rating", "Failed to retrieve overall semester rating."
        ):
            records = await self._fetch("get_overall_semester_rating", filters)
            if not records:
                self._raise_empty(
                    "get_overall_semester_rating",
                    "No responses found for the given semester and filters.",
                )

            rating = calculate_semester_rating(records, semester_id)
            if rating.total_responses == 0:
                self._raise_empty(
                    "get_overall_semester_rating",
                    "No numeric responses found for calculation.",
                )
            return rating

    async def get_semesters_with_responses(
        self,
        academic_year_id: str | None = None,
        department_id: str | None = None,
    ) -> list[SemesterResponseCount]:
        """List semesters that have collected counted responses."""
        filters = FeedbackFilter(academic_year_id=academic_year_id, department_id=department_id)

        with self._failure_boundary(
            "get_semesters_with_responses", "Failed to retrieve semesters with responses."
        ):
            records = await self._fetch("get_semesters_with_responses", filters)
            return count_semester_responses(records)

    async def get_semester_division_response_counts(
        self,
        academic_year_id: str | None = None,
    ) -> list[SemesterDivisionResponses]:
        """Count responses per division for every semester with feedback."""
        filters = FeedbackFilter(academic_year_id=academic_year_id)

        with self._failure_boundary(
            "get_semester_division_response_counts", "Error fetching semester divisions data."
        ):
            records = await self._fetch("get_semester_division_response_counts", filters)
            return count_semester_division_responses(records)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _fetch(self, operation: str, filters: FeedbackFilter) -> list[FeedbackRecord]:
        records = await self._repository.fetch_records(filters)
        logger.debug(
            "%s: fetched %d records (filters=%s)",
            operation,
            len(records),
            filters.to_dict(),
        )
        return records

    async def _raise_not_found(self, kind: EntityKind, entity_id: str) -> NoReturn:
        """Explain an empty drill-down through the base entity store.

        Raises:
            AnalyticsNotFoundError: Always, with a message naming whether
                the entity is missing, deleted, or merely has no data.
        """
        entity = await self._repository.get_entity(kind, entity_id)

        if entity is None:
            message = f"{kind.label} with ID {entity_id} does not exist."
        elif entity.is_deleted:
            message = f'{kind.label} "{entity.name}" has been deleted.'
        else:
            message = (
                f'{kind.label} "{entity.name}" has no feedback data '
                "matching the selected filters."
            )

        logger.info("%s %s not reportable: %s", kind.value, entity_id, message)
        raise AnalyticsNotFoundError(message)

    def _raise_empty(self, operation: str, message: str) -> NoReturn:
        logger.info("%s: %s", operation, message)
        raise AnalyticsNotFoundError(message)

    @contextmanager
    def _failure_boundary(self, operation: str, message: str) -> Iterator[None]:
        """Map unexpected failures to AnalyticsAggregationError.

        Service errors pass through unchanged. The original exception is
        logged but not chained, so its details never reach the caller.
        """
        try:
            yield
        except AnalyticsServiceError:
            raise
        except Exception:
            logger.error("%s failed", operation, exc_info=True)
            raise AnalyticsAggregationError(message) from None


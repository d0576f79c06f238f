# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Feedback analytics domain.

This package turns denormalized student feedback records into:
- System-wide rollups (subjects, faculty, divisions, trends)
- Drill-downs for one subject, faculty member, division or academic year
- Insight reports (lecture vs lab, semester trends, high-impact questions)

Scores are parsed leniently, only positive scores are counted, and every
mean is rounded to two decimals when it leaves a builder.

Usage:
    from src.domains.analytics import (
        AnalyticsService,
        FeedbackFilter,
        SqlAlchemyFeedbackRepository,
    )

    async with get_session() as db:
        service = AnalyticsService(SqlAlchemyFeedbackRepository(db))
        overview = await service.get_analytics_overview(
            FeedbackFilter(academic_year_id="ay-2024"),
        )

    # Builders can also be used directly on in-memory records
    from src.domains.analytics import aggregate_subject_ratings

    rows = aggregate_subject_ratings(records)
"""

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
from src.domains.analytics.grouping import (
    FacultyStanding,
    ScoreBucket,
    SplitBucket,
    group_by,
    rank_faculty,
)
from src.domains.analytics.insights import (
    DivisionBatchComparison,
    DivisionResponseCount,
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
    EntityRef,
    FeedbackFilter,
    FeedbackRecord,
    LectureType,
)
from src.domains.analytics.repository import (
    FeedbackRepository,
    SqlAlchemyFeedbackRepository,
)
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
from src.domains.analytics.scoring import (
    classify_lecture_type,
    counted_score,
    parse_score,
    round_rating,
)
from src.domains.analytics.service import (
    AnalyticsAggregationError,
    AnalyticsNotFoundError,
    AnalyticsOverview,
    AnalyticsService,
    AnalyticsServiceError,
)

__all__ = [
    # Records
    "FeedbackRecord",
    "FeedbackFilter",
    "LectureType",
    "EntityKind",
    "EntityRef",
    # Scoring
    "parse_score",
    "counted_score",
    "classify_lecture_type",
    "round_rating",
    # Grouping
    "group_by",
    "ScoreBucket",
    "SplitBucket",
    "FacultyStanding",
    "rank_faculty",
    # Rollups
    "OverallStats",
    "SubjectRating",
    "FacultyPerformance",
    "DivisionPerformance",
    "AcademicYearTrend",
    "SemesterTrend",
    "DepartmentTrend",
    "calculate_overall_stats",
    "aggregate_subject_ratings",
    "aggregate_faculty_performance",
    "aggregate_division_performance",
    "aggregate_academic_year_trends",
    "aggregate_semester_trends",
    "aggregate_department_trends",
    # Details
    "SubjectDetail",
    "FacultyDetail",
    "DivisionDetail",
    "AcademicYearDetail",
    "build_subject_detail",
    "build_faculty_detail",
    "build_division_detail",
    "build_academic_year_detail",
    # Insights
    "SubjectLectureTypeRating",
    "SubjectSemesterTrend",
    "LectureTypeComparison",
    "HighImpactArea",
    "FacultySemesterPerformance",
    "aggregate_subject_lecture_type_ratings",
    "aggregate_subject_semester_trends",
    "compare_lecture_types",
    "find_high_impact_areas",
    "aggregate_faculty_semester_performance",
    "DivisionBatchComparison",
    "SemesterRating",
    "SemesterResponseCount",
    "DivisionResponseCount",
    "SemesterDivisionResponses",
    "compare_division_batches",
    "calculate_semester_rating",
    "count_semester_responses",
    "count_semester_division_responses",
    # Data access
    "FeedbackRepository",
    "SqlAlchemyFeedbackRepository",
    # Service
    "AnalyticsService",
    "AnalyticsOverview",
    "AnalyticsServiceError",
    "AnalyticsNotFoundError",
    "AnalyticsAggregationError",
]

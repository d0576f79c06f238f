# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across the unit tests:
- A feedback record factory with realistic defaults
- Environment variables for settings tests
"""

import itertools
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from src.core.config.settings import clear_settings_cache
from src.domains.analytics.records import FeedbackRecord

RecordFactory = Callable[..., FeedbackRecord]


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_environment() -> dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "ENVIRONMENT": "development",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
        "FEEDBACK_DB_USER": "feedback",
        "FEEDBACK_DB_PASSWORD": "feedback_test_password",
        "FEEDBACK_DB_HOST": "localhost",
        "FEEDBACK_DB_PORT": "35432",
        "ANALYTICS_LOW_RATING_THRESHOLD": "3",
        "ANALYTICS_MIN_LOW_RATINGS": "5",
    }


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Make every test start from freshly loaded settings."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires a feedback store)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Record Fixtures
# =============================================================================


@pytest.fixture
def make_record() -> RecordFactory:
    """Provide a factory for FeedbackRecord with overridable defaults.

    Defaults describe a theory-question response for subject "sub-ds"
    taught by "fac-rao" to division A in semester 3 of 2024-2025.
    """
    counter = itertools.count(1)

    def _make(**overrides: Any) -> FeedbackRecord:
        number = next(counter)
        values: dict[str, Any] = {
            "id": f"resp-{number}",
            "academic_year_id": "ay-2024",
            "academic_year_string": "2024-2025",
            "department_id": "dept-ce",
            "department_name": "Computer Engineering",
            "department_abbreviation": "CE",
            "semester_id": "sem-3",
            "semester_number": 3,
            "division_id": "div-a",
            "division_name": "A",
            "subject_id": "sub-ds",
            "subject_name": "Data Structures",
            "subject_abbreviation": "DS",
            "subject_code": "CE301",
            "faculty_id": "fac-rao",
            "faculty_name": "Dr. Rao",
            "faculty_abbreviation": "AR",
            "faculty_designation": "Professor",
            "student_id": f"stu-{number}",
            "form_id": "form-1",
            "question_id": "q-clarity",
            "question_text": "Clarity of explanation",
            "question_category_id": "cat-theory",
            "question_category_name": "Theory",
            "question_batch": None,
            "response_value": "4",
        }
        values.update(overrides)
        return FeedbackRecord(**values)

    return _make


@pytest.fixture
def lab_record(make_record: RecordFactory) -> RecordFactory:
    """Provide a factory for lab feedback records."""

    def _make(**overrides: Any) -> FeedbackRecord:
        values: dict[str, Any] = {
            "question_id": "q-lab",
            "question_text": "Lab experiments were well prepared",
            "question_category_id": "cat-lab",
            "question_category_name": "Lab Performance",
        }
        values.update(overrides)
        return make_record(**values)

    return _make

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for grouping and ranking helpers."""

from src.domains.analytics.grouping import (
    ScoreBucket,
    SplitBucket,
    group_by,
    rank_faculty,
    scored,
    sort_by_rating,
)


class TestScored:
    """Tests for scored."""

    def test_drops_records_without_counted_score(self, make_record) -> None:
        """Test that invalid and non-positive scores are dropped."""
        records = [
            make_record(response_value="4"),
            make_record(response_value="0"),
            make_record(response_value="skip"),
            make_record(response_value=-3),
            make_record(response_value={"score": 5}),
        ]

        pairs = list(scored(records))

        assert [score for _, score in pairs] == [4.0, 5.0]
        assert pairs[0][0] is records[0]


class TestGroupBy:
    """Tests for group_by."""

    def test_preserves_first_seen_order(self) -> None:
        """Test that groups and members keep input order."""
        groups = group_by(["b1", "a1", "b2", "c1", "a2"], lambda item: item[0])

        assert list(groups) == ["b", "a", "c"]
        assert groups["b"] == ["b1", "b2"]

    def test_tuple_keys_do_not_collide(self) -> None:
        """Test that tuple keys stay distinct where joined strings would not."""
        items = [("a_b", "c"), ("a", "b_c")]

        groups = group_by(items, lambda item: item)

        assert len(groups) == 2

    def test_empty_input(self) -> None:
        """Test that empty input yields no groups."""
        assert group_by([], lambda item: item) == {}


class TestScoreBucket:
    """Tests for ScoreBucket."""

    def test_mean_is_rounded(self) -> None:
        """Test that the mean is rounded to two decimals."""
        bucket = ScoreBucket([4.0, 4.0, 3.0])

        assert bucket.mean() == 3.67
        assert bucket.count == 3
        assert bucket.total == 11.0

    def test_mean_of_four_and_five(self) -> None:
        """Test a simple two-score mean."""
        assert ScoreBucket([4.0, 5.0]).mean() == 4.5

    def test_empty_bucket_uses_default(self) -> None:
        """Test that empty buckets return the requested default."""
        bucket = ScoreBucket()

        assert bucket.mean() == 0.0
        assert bucket.mean(default=None) is None
        assert bucket.count == 0


class TestSplitBucket:
    """Tests for SplitBucket."""

    def test_splits_by_lecture_type(self, make_record, lab_record) -> None:
        """Test that scores land in the bucket of their lecture type."""
        records = [
            lab_record(response_value="4"),
            lab_record(response_value="4"),
            make_record(response_value="3"),
        ]

        split = SplitBucket.of(scored(records))

        assert split.lab.mean() == 4.0
        assert split.lecture.mean() == 3.0
        assert split.combined.mean() == 3.67
        assert split.combined.count == 3

    def test_missing_subtype_is_none(self, make_record) -> None:
        """Test that a subtype without scores reports no rating."""
        split = SplitBucket.of(scored([make_record(response_value="5")]))

        assert split.lab.mean(default=None) is None
        assert split.lab.count == 0


class TestSortByRating:
    """Tests for sort_by_rating."""

    def test_orders_by_rating_then_identifier(self) -> None:
        """Test descending rating with ascending identifier tie-break."""
        items = [("c", 4.8), ("a", 4.2), ("b", 4.8)]

        ordered = sort_by_rating(items, rating=lambda i: i[1], identifier=lambda i: i[0])

        assert [i[0] for i in ordered] == ["b", "c", "a"]


class TestRankFaculty:
    """Tests for rank_faculty."""

    def test_ties_broken_by_faculty_id(self, make_record) -> None:
        """Test ranks 1..n with equal means ordered by faculty id."""
        records = [
            make_record(faculty_id="fac-c", response_value="4.8"),
            make_record(faculty_id="fac-a", response_value="4.2"),
            make_record(faculty_id="fac-b", response_value="4.8"),
        ]

        standings = rank_faculty(records)

        assert [(s.faculty_id, s.rank) for s in standings] == [
            ("fac-b", 1),
            ("fac-c", 2),
            ("fac-a", 3),
        ]
        assert len(standings) == 3

    def test_faculty_without_counted_scores_not_ranked(self, make_record) -> None:
        """Test that faculty with only zero scores are left out."""
        records = [
            make_record(faculty_id="fac-a", response_value="4"),
            make_record(faculty_id="fac-z", response_value="0"),
        ]

        standings = rank_faculty(records)

        assert [s.faculty_id for s in standings] == ["fac-a"]

    def test_ranks_on_unrounded_mean(self, make_record) -> None:
        """Test that means equal after rounding still rank by their true value."""
        records = [
            make_record(faculty_id="fac-a", response_value="4.001"),
            make_record(faculty_id="fac-b", response_value="4.004"),
        ]

        standings = rank_faculty(records)

        assert [s.faculty_id for s in standings] == ["fac-b", "fac-a"]
        assert [s.average_rating for s in standings] == [4.0, 4.0]

    def test_ranks_are_reproducible(self, make_record) -> None:
        """Test that ranking the same records twice gives equal results."""
        records = [
            make_record(faculty_id="fac-b", response_value="3"),
            make_record(faculty_id="fac-a", response_value="3"),
        ]

        assert rank_faculty(records) == rank_faculty(list(reversed(records)))

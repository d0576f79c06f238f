# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grouping and reduction helpers shared by all analytics builders.

Builders follow the same pattern: keep only records with a counted
score, partition them by a tuple key, then reduce each partition into
a typed row. The helpers here cover that common ground:

- scored(): pairs each record with its counted score, dropping the rest
- group_by(): insertion-ordered partitioning by a hashable key
- ScoreBucket / SplitBucket: score accumulators with rounded means
- sort_by_rating() / rank_faculty(): deterministic rating order
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TypeVar

from src.domains.analytics.records import FeedbackRecord, LectureType
from src.domains.analytics.scoring import classify_lecture_type, counted_score, round_rating

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

ScoredRecord = tuple[FeedbackRecord, float]


def scored(records: Iterable[FeedbackRecord]) -> Iterator[ScoredRecord]:
    """Yield ``(record, score)`` for every record whose score counts."""
    for record in records:
        score = counted_score(record.response_value)
        if score is not None:
            yield record, score


def group_by(items: Iterable[T], key_fn: Callable[[T], K]) -> dict[K, list[T]]:
    """Partition *items* by ``key_fn``.

    Groups appear in the order their first member was seen, and members
    keep their input order. Keys are compared by value, so tuple keys
    never collide the way delimiter-joined strings can.

    Args:
        items: Items to partition.
        key_fn: Function returning the grouping key of an item.

    Returns:
        Mapping from key to the ordered list of items sharing it.
    """
    groups: dict[K, list[T]] = {}
    for item in items:
        groups.setdefault(key_fn(item), []).append(item)
    return groups


@dataclass
class ScoreBucket:
    """Accumulates scores for one group."""

    scores: list[float] = field(default_factory=list)

    def add(self, score: float) -> None:
        self.scores.append(score)

    @property
    def count(self) -> int:
        return len(self.scores)

    @property
    def total(self) -> float:
        return sum(self.scores)

    def raw_mean(self) -> float:
        """Return the unrounded mean, 0.0 for an empty bucket."""
        return self.total / self.count if self.scores else 0.0

    def mean(self, default: float | None = 0.0) -> float | None:
        """Return the rounded mean, or *default* if the bucket is empty."""
        if not self.scores:
            return default
        return round_rating(self.total / self.count)

    @classmethod
    def of(cls, pairs: Iterable[ScoredRecord]) -> ScoreBucket:
        """Build a bucket from ``(record, score)`` pairs."""
        return cls([score for _, score in pairs])


@dataclass
class SplitBucket:
    """Scores split by lecture type, with a combined view."""

    lecture: ScoreBucket = field(default_factory=ScoreBucket)
    lab: ScoreBucket = field(default_factory=ScoreBucket)

    def add(self, record: FeedbackRecord, score: float) -> None:
        if classify_lecture_type(record) is LectureType.LECTURE:
            self.lecture.add(score)
        else:
            self.lab.add(score)

    @property
    def combined(self) -> ScoreBucket:
        return ScoreBucket(self.lecture.scores + self.lab.scores)

    @classmethod
    def of(cls, pairs: Iterable[ScoredRecord]) -> SplitBucket:
        bucket = cls()
        for record, score in pairs:
            bucket.add(record, score)
        return bucket


def sort_by_rating(
    items: Iterable[T],
    rating: Callable[[T], float],
    identifier: Callable[[T], str],
) -> list[T]:
    """Sort by rating descending, breaking ties on identifier ascending."""
    return sorted(items, key=lambda item: (-rating(item), identifier(item)))


@dataclass(frozen=True)
class FacultyStanding:
    """Position of one faculty member in a rating ranking."""

    faculty_id: str
    average_rating: float
    total_responses: int
    rank: int


def rank_faculty(records: Iterable[FeedbackRecord]) -> list[FacultyStanding]:
    """Rank faculty by mean counted score.

    Rank is the 1-based position after sorting by unrounded mean rating
    (descending) with faculty id as tie-break, so equal means still get
    distinct, reproducible ranks. Only the reported average is rounded.

    Args:
        records: Records to rank over.

    Returns:
        Standings ordered from rank 1 downwards.
    """
    groups = group_by(scored(records), lambda pair: pair[0].faculty_id)
    buckets = {faculty_id: ScoreBucket.of(pairs) for faculty_id, pairs in groups.items()}
    ordered = sort_by_rating(
        buckets.items(),
        rating=lambda item: item[1].raw_mean(),
        identifier=lambda item: item[0],
    )
    return [
        FacultyStanding(
            faculty_id=faculty_id,
            average_rating=bucket.mean(),
            total_responses=bucket.count,
            rank=position,
        )
        for position, (faculty_id, bucket) in enumerate(ordered, start=1)
    ]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Score parsing and lecture-type classification.

Feedback response values arrive in inconsistent shapes: bare numbers,
numeric strings, JSON strings, or mappings carrying a ``score`` field.
This module normalizes them into a numeric score and classifies each
record as lecture or lab feedback.

Both functions are total: malformed input yields ``None`` (for scores)
or a deterministic category, never an exception.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from src.domains.analytics.records import FeedbackRecord, LectureType

_LAB_MARKERS = ("laboratory", "lab")
_NO_BATCH = "none"
_RATING_QUANTUM = Decimal("0.01")
_PLAIN_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _as_number(value: Any) -> float | None:
    """Return *value* as a finite float if it is a real number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def _score_field(value: Any) -> float | None:
    """Return the numeric ``score`` field of a mapping, if any."""
    if isinstance(value, Mapping):
        return _as_number(value.get("score"))
    return None


def parse_score(raw: Any) -> float | None:
    """Normalize a raw response value into a numeric score.

    Rules, first match wins:
        1. Real numbers are returned as-is (even if <= 0).
        2. Strings holding a plain decimal number ("4", "4.5", "5e0") are
           parsed. Python-only forms such as "1_0" or "inf" are not.
        3. Other strings are parsed as JSON; a JSON object with a numeric
           ``score`` or a bare JSON number is accepted.
        4. Mappings with a numeric ``score`` field yield that field.
        5. Anything else is not a score.

    Args:
        raw: Response value of unspecified shape.

    Returns:
        The finite score, or None when no score can be extracted.

    Example:
        >>> parse_score('{"score": 4}')
        4.0
        >>> parse_score("n/a") is None
        True
    """
    number = _as_number(raw)
    if number is not None:
        return number

    if isinstance(raw, str):
        text = raw.strip()
        if _PLAIN_NUMBER.fullmatch(text):
            return _as_number(float(text))
        try:
            decoded = json.loads(text)
        except (ValueError, RecursionError):
            return None
        return _as_number(decoded) if not isinstance(decoded, Mapping) else _score_field(decoded)

    return _score_field(raw)


def counted_score(raw: Any) -> float | None:
    """Return the score of *raw* only if it counts towards aggregates.

    Zero and negative scores are treated as "not a rating" and are
    excluded from every mean and count.
    """
    score = parse_score(raw)
    if score is None or score <= 0:
        return None
    return score


def classify_lecture_type(record: FeedbackRecord) -> LectureType:
    """Infer whether *record* is lecture or lab feedback.

    A record is LAB when its question category name mentions a lab, or
    when it carries a question batch other than "none". Everything else
    is LECTURE. Every builder must classify through this function so that
    rollups and drill-downs agree.

    Args:
        record: Feedback record to classify.

    Returns:
        The derived lecture type.
    """
    category = (record.question_category_name or "").lower()
    if any(marker in category for marker in _LAB_MARKERS):
        return LectureType.LAB

    batch = record.question_batch
    if batch and batch.lower() != _NO_BATCH:
        return LectureType.LAB

    return LectureType.LECTURE


def round_rating(value: float) -> float:
    """Round a mean rating to two decimals, halves rounded up.

    Uses the shortest decimal representation of *value* so that
    ``round_rating(2.675) == 2.68`` instead of the binary-float result.
    """
    return float(Decimal(repr(value)).quantize(_RATING_QUANTUM, rounding=ROUND_HALF_UP))

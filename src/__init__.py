"""Feedback Analytics Engine.

Aggregates student feedback responses into rollups, per-entity
drill-downs and insight reports for faculty, subjects, divisions and
academic years.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"

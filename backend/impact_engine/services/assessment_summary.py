"""
Assessment summary statistics.

The headline numbers are computed once here and shared by the PDF tiles and
the JSON API, so the two can never disagree.
"""

from __future__ import annotations

from typing import Sequence

from impact_engine.models.enums import ImpactLevel, TileColor
from impact_engine.models.impact import AssessmentSummary, DepartmentImpact
from impact_engine.models.variance import Variance
from impact_engine.services.variance_calculator import average_variance_days, max_delay_days

# Max-delay tile thresholds, in days.
DELAY_RED_THRESHOLD = 10
DELAY_AMBER_THRESHOLD = 5


def variance_tile_color(delayed_count: int) -> TileColor:
    return TileColor.RED if delayed_count > 0 else TileColor.GREEN


def department_tile_color(critical_count: int, high_count: int) -> TileColor:
    if critical_count > 0:
        return TileColor.RED
    if high_count > 0:
        return TileColor.AMBER
    return TileColor.BLUE


def delay_tile_color(max_delay: int) -> TileColor:
    if max_delay > DELAY_RED_THRESHOLD:
        return TileColor.RED
    if max_delay > DELAY_AMBER_THRESHOLD:
        return TileColor.AMBER
    return TileColor.GREEN


def summarize_assessment(
    variances: Sequence[Variance],
    impacts: Sequence[DepartmentImpact],
) -> AssessmentSummary:
    """Counts, extremes and tile colors for one assessment."""
    delayed = sum(1 for v in variances if v.is_delayed)
    critical = sum(1 for i in impacts if i.impact_level == ImpactLevel.CRITICAL)
    high = sum(1 for i in impacts if i.impact_level == ImpactLevel.HIGH)
    max_delay = max_delay_days(variances)

    return AssessmentSummary(
        variance_count=len(variances),
        delayed_count=delayed,
        advanced_count=len(variances) - delayed,
        department_count=len(impacts),
        critical_department_count=critical,
        high_department_count=high,
        max_delay_days=max_delay,
        average_variance_days=average_variance_days(variances),
        variance_tile=variance_tile_color(delayed),
        department_tile=department_tile_color(critical, high),
        delay_tile=delay_tile_color(max_delay),
    )

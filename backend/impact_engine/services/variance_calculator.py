"""
Schedule variance calculation.

Compares each milestone's original plan date with its current date and
reports the signed day difference. Pure functions over a project snapshot.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from impact_engine.core.logger import logger
from impact_engine.models.project import ProjectRecord
from impact_engine.models.schedule import SCHEDULE_FIELD_PAIRS, ScheduleFieldPair
from impact_engine.models.variance import Variance
from impact_engine.utils.datetime_utils import parse_calendar_date


def compute_variances(
    project: ProjectRecord,
    field_pairs: Sequence[ScheduleFieldPair] = SCHEDULE_FIELD_PAIRS,
) -> list[Variance]:
    """
    Compute schedule variances for a project.

    A pair is skipped when either date is absent or a sentinel. A malformed
    date is logged and only that pair is dropped. Output keeps ``field_pairs``
    order; pairs without drift produce nothing.
    """
    variances: list[Variance] = []
    for pair in field_pairs:
        baseline_raw = project.schedule_value(pair.baseline_key)
        current_raw = project.schedule_value(pair.current_key)
        if baseline_raw is None or current_raw is None:
            continue

        try:
            baseline = parse_calendar_date(baseline_raw)
            current = parse_calendar_date(current_raw)
        except ValueError as exc:
            logger.warning(
                f"Skipping variance for {pair.current_key} on project {project.id}: {exc}"
            )
            continue

        days = (current - baseline).days
        if days == 0:
            continue

        variances.append(
            Variance(
                field=pair.current_key,
                display_name=pair.display_name,
                baseline_date=baseline,
                current_date=current,
                days_difference=days,
                is_delayed=days > 0,
            )
        )
    return variances


def critical_path(variances: Iterable[Variance]) -> list[Variance]:
    """Variances ordered by magnitude, largest first (ties keep input order)."""
    return sorted(variances, key=lambda v: v.magnitude, reverse=True)


def max_delay_days(variances: Iterable[Variance]) -> int:
    """Largest absolute variance in days, 0 for no variances."""
    return max((v.magnitude for v in variances), default=0)


def average_variance_days(variances: Sequence[Variance]) -> int:
    """Mean absolute variance rounded to whole days, 0 for no variances."""
    if not variances:
        return 0
    return round(sum(v.magnitude for v in variances) / len(variances))

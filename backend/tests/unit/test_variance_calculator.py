"""
Unit tests for the schedule variance calculator.
"""

import logging
from datetime import date

import pytest

from impact_engine.models.project import SCHEDULE_ATTRIBUTES, ProjectRecord
from impact_engine.models.schedule import SCHEDULE_FIELD_PAIRS, normalize_schedule_value
from impact_engine.models.variance import Variance
from impact_engine.services.variance_calculator import (
    average_variance_days,
    compute_variances,
    critical_path,
    max_delay_days,
)


def make_project(**fields) -> ProjectRecord:
    """Create a project from upstream (camelCase) fields."""
    return ProjectRecord.model_validate({"id": 1, "projectNumber": "P-100", **fields})


def make_variance(field: str, days: int) -> Variance:
    return Variance(
        field=field,
        display_name=field,
        baseline_date=date(2024, 3, 1),
        current_date=date.fromordinal(date(2024, 3, 1).toordinal() + days),
        days_difference=days,
        is_delayed=days > 0,
    )


class TestScheduleFields:
    """Tests for the field pair table and normalization."""

    def test_every_schedule_key_maps_to_an_attribute(self):
        assert len(SCHEDULE_FIELD_PAIRS) == 13
        assert len(SCHEDULE_ATTRIBUTES) == 26
        for pair in SCHEDULE_FIELD_PAIRS:
            assert pair.baseline_key in SCHEDULE_ATTRIBUTES
            assert pair.current_key in SCHEDULE_ATTRIBUTES

    @pytest.mark.parametrize("value", [None, "", "   ", "N/A", "PENDING", "TBD", "tbd", " n/a "])
    def test_sentinels_normalize_to_none(self, value):
        assert normalize_schedule_value(value) is None

    def test_real_value_is_stripped(self):
        assert normalize_schedule_value(" 2024-03-01 ") == "2024-03-01"

    def test_unknown_schedule_key_raises(self):
        project = make_project()
        with pytest.raises(KeyError):
            project.schedule_value("notAField")


class TestComputeVariances:
    """Tests for compute_variances."""

    def test_fabrication_delay_scenario(self):
        """fabricationStart nine days after its plan is a 9-day delay."""
        project = make_project(opFabricationStart="2024-03-01", fabricationStart="2024-03-10")

        variances = compute_variances(project)

        assert len(variances) == 1
        variance = variances[0]
        assert variance.field == "fabricationStart"
        assert variance.display_name == "Fabrication Start"
        assert variance.days_difference == 9
        assert variance.is_delayed is True
        assert variance.signed_label == "+9 days"
        assert variance.status_label == "Delayed"

    def test_advance_has_negative_difference(self):
        project = make_project(opShipDate="2024-06-10", shipDate="2024-06-07")

        [variance] = compute_variances(project)

        assert variance.days_difference == -3
        assert variance.is_delayed is False
        assert variance.signed_label == "-3 days"
        assert variance.status_label == "Advanced"

    @pytest.mark.parametrize("sentinel", [None, "N/A", "PENDING", "TBD"])
    def test_sentinel_on_either_side_emits_nothing(self, sentinel):
        baseline_missing = make_project(opPaintStart=sentinel, paintStart="2024-03-10")
        current_missing = make_project(opPaintStart="2024-03-01", paintStart=sentinel)

        assert compute_variances(baseline_missing) == []
        assert compute_variances(current_missing) == []

    def test_equal_dates_emit_nothing(self):
        fields = {}
        for pair in SCHEDULE_FIELD_PAIRS:
            fields[pair.baseline_key] = "2024-05-01"
            fields[pair.current_key] = "2024-05-01"

        assert compute_variances(make_project(**fields)) == []

    def test_sign_matches_delay_flag_for_all_pairs(self):
        fields = {}
        for index, pair in enumerate(SCHEDULE_FIELD_PAIRS):
            fields[pair.baseline_key] = "2024-05-15"
            fields[pair.current_key] = f"2024-05-{index + 2:02d}"

        variances = compute_variances(make_project(**fields))

        assert variances
        for variance in variances:
            assert variance.days_difference != 0
            assert variance.is_delayed == (variance.days_difference > 0)

    def test_datetime_values_use_their_calendar_date(self):
        """A late-evening timestamp stays on its written date."""
        project = make_project(
            opQcStartDate="2024-03-01T23:30:00-08:00",
            qcStartDate="2024-03-02T00:15:00Z",
        )

        [variance] = compute_variances(project)

        assert variance.baseline_date == date(2024, 3, 1)
        assert variance.current_date == date(2024, 3, 2)
        assert variance.days_difference == 1

    def test_calendar_math_across_dst_change(self):
        project = make_project(opItStart="2024-03-09", itStart="2024-03-11")

        [variance] = compute_variances(project)

        assert variance.days_difference == 2

    def test_malformed_date_only_drops_its_field(self, caplog):
        project = make_project(
            opChassisETA="2024-13-45",
            chassisETA="2024-03-10",
            opFabricationStart="2024-03-01",
            fabricationStart="2024-03-10",
            opShipDate="2024-06-10",
            shipDate="2024-06-20",
        )

        with caplog.at_level(logging.WARNING, logger="impact_engine"):
            variances = compute_variances(project)

        assert [v.field for v in variances] == ["fabricationStart", "shipDate"]
        assert "chassisETA" in caplog.text

    def test_output_follows_declaration_order(self):
        project = make_project(
            opDeliveryDate="2024-07-01",
            deliveryDate="2024-07-30",
            opContractDate="2024-01-01",
            contractDate="2024-01-02",
            opPaintStart="2024-04-01",
            paintStart="2024-04-11",
        )

        variances = compute_variances(project)

        assert [v.field for v in variances] == ["contractDate", "paintStart", "deliveryDate"]


class TestVarianceHelpers:
    """Tests for critical_path and the timeline statistics."""

    def test_critical_path_sorts_by_magnitude(self):
        variances = [
            make_variance("contractDate", 1),
            make_variance("paintStart", -12),
            make_variance("shipDate", 5),
            make_variance("itStart", 12),
        ]

        ordered = critical_path(variances)

        assert [v.field for v in ordered] == ["paintStart", "itStart", "shipDate", "contractDate"]
        # Input untouched
        assert variances[0].field == "contractDate"

    def test_statistics(self):
        variances = [make_variance("a", 4), make_variance("b", -9), make_variance("c", 2)]

        assert max_delay_days(variances) == 9
        assert average_variance_days(variances) == 5

    def test_statistics_empty(self):
        assert max_delay_days([]) == 0
        assert average_variance_days([]) == 0

    def test_zero_variance_is_rejected(self):
        with pytest.raises(ValueError):
            Variance(
                field="shipDate",
                display_name="Ship Date",
                baseline_date=date(2024, 1, 1),
                current_date=date(2024, 1, 1),
                days_difference=0,
                is_delayed=False,
            )
